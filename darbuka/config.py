"""YAML configuration for the command line tool.

```yaml
time_signature: "7/8"
beat_grouping: "2+2+3"
bpm: 100
ghost_measures: 1
playback:
  measure_accent_volume: 90
  emphasize_simple_rhythms: true
```
"""

import logging
import os
import typing

import yaml

import darbuka.schedule
import darbuka.time_signature


logger = logging.getLogger(__name__)

DEFAULTS: typing.Dict[str, typing.Any] = {
	"time_signature": "4/4",
	"beat_grouping": None,
	"bpm": 120,
	"ghost_measures": 1,
	"playback": {},
}


def load_config (config_path: str = "darbuka.yaml") -> typing.Dict[str, typing.Any]:

	"""
	Load configuration from a YAML file, filling in defaults.

	A missing file is not an error: a warning is logged and the defaults are
	returned.
	"""

	config = dict(DEFAULTS)

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return config

	with open(config_path, "r") as f:
		loaded = yaml.safe_load(f) or {}

	if not isinstance(loaded, dict):
		raise ValueError(f"Config file {config_path} must contain a mapping")

	unknown = set(loaded) - set(DEFAULTS)

	if unknown:
		logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")

	config.update({key: value for key, value in loaded.items() if key in DEFAULTS})

	return config


def time_signature_from_config (config: typing.Dict[str, typing.Any]) -> darbuka.time_signature.TimeSignature:

	"""Build the configured time signature."""

	grouping = config.get("beat_grouping")

	return darbuka.time_signature.TimeSignature.parse(str(config["time_signature"]), None if grouping is None else str(grouping))


def playback_from_config (config: typing.Dict[str, typing.Any]) -> darbuka.schedule.PlaybackSettings:

	return darbuka.schedule.PlaybackSettings.from_dict(config.get("playback"))
