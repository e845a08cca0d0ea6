import pathlib
import typing

import pytest

import darbuka.constants.sounds
import darbuka.grid
import darbuka.time_signature


@pytest.fixture
def common_time () -> darbuka.time_signature.TimeSignature:

	"""4/4, sixteen ticks per measure."""

	return darbuka.time_signature.TimeSignature(4, 4)


@pytest.fixture
def one_beat () -> darbuka.time_signature.TimeSignature:

	"""1/4, four ticks per measure, so short notation fills whole measures."""

	return darbuka.time_signature.TimeSignature(1, 4)


def _tick_sounds (grid: darbuka.grid.SequencerGrid) -> typing.List[typing.Tuple[str, bool]]:

	"""The sound heard on each content tick, and whether a drum is struck there."""

	return [
		(darbuka.grid.sound_at(grid, tick), grid.cells[tick] not in (None, darbuka.constants.sounds.REST))
		for tick in range(grid.actual_length)
	]


@pytest.fixture
def tick_sounds () -> typing.Callable[[darbuka.grid.SequencerGrid], typing.List[typing.Tuple[str, bool]]]:

	"""Compare grids by what is heard, ignoring how rests are split."""

	return _tick_sounds


@pytest.fixture
def write_config (tmp_path: pathlib.Path) -> typing.Callable[[str], str]:

	"""Write YAML text to a temporary config file and return its path."""

	def _write (text: str) -> str:
		path = tmp_path / "darbuka.yaml"
		path.write_text(text)
		return str(path)

	return _write
