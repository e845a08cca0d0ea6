import pathlib

import pytest

import darbuka.config
import darbuka.time_signature


def test_missing_file_uses_defaults (tmp_path: pathlib.Path, caplog: pytest.LogCaptureFixture) -> None:

	"""No config file is a warning, not an error."""

	with caplog.at_level("WARNING"):
		config = darbuka.config.load_config(str(tmp_path / "missing.yaml"))

	assert config == darbuka.config.DEFAULTS
	assert "not found" in caplog.text


def test_values_override_defaults (write_config) -> None:

	"""Keys in the file replace the defaults; the rest stay."""

	path = write_config('time_signature: "7/8"\nbeat_grouping: "2+2+3"\nbpm: 90\n')
	config = darbuka.config.load_config(path)

	assert config["bpm"] == 90
	assert config["ghost_measures"] == 1
	assert darbuka.config.time_signature_from_config(config) == darbuka.time_signature.TimeSignature(7, 8, (2, 2, 3))


def test_empty_file_is_defaults (write_config) -> None:

	"""An empty YAML document means no overrides."""

	assert darbuka.config.load_config(write_config("")) == darbuka.config.DEFAULTS


def test_unknown_keys_ignored (write_config, caplog: pytest.LogCaptureFixture) -> None:

	"""Unrecognised keys are dropped with a warning."""

	with caplog.at_level("WARNING"):
		config = darbuka.config.load_config(write_config("tempo: 100\n"))

	assert "tempo" not in config
	assert "tempo" in caplog.text


def test_non_mapping_is_error (write_config) -> None:

	"""A config file must hold key-value pairs."""

	with pytest.raises(ValueError):
		darbuka.config.load_config(write_config("- 4/4\n- 7/8\n"))


def test_playback_settings_from_config (write_config) -> None:

	"""The playback section feeds PlaybackSettings."""

	config = darbuka.config.load_config(write_config("playback:\n  emphasize_simple_rhythms: true\n  metronome_volume: 20\n"))
	settings = darbuka.config.playback_from_config(config)

	assert settings.emphasize_simple_rhythms is True
	assert settings.metronome_volume == 20
	assert settings.non_accent_volume == 40
