import pathlib

import mido
import pytest

import darbuka.__main__


def _run (tmp_path: pathlib.Path, *args: str) -> int:

	return darbuka.__main__.main([*args, "--config", str(tmp_path / "none.yaml")])


def test_prints_expanded_measures (tmp_path: pathlib.Path, capsys: pytest.CaptureFixture) -> None:

	"""Each expanded measure is listed, ghosts marked with their source."""

	status = _run(tmp_path, "D-T- |: K-K- :|x2")
	out = capsys.readouterr().out

	assert status == 0
	assert "4/4, 3 measures" in out
	assert "1: dum 2, tak 2" in out
	assert "3: ka 2, ka 2  (copy of 2)" in out


def test_invalid_notation_exits_with_error (tmp_path: pathlib.Path, caplog: pytest.LogCaptureFixture) -> None:

	"""Bad notation returns status 1 and logs the reason."""

	status = _run(tmp_path, "D-T-?")

	assert status == 1
	assert "Invalid notation" in caplog.text


def test_invalid_time_signature_exits_with_error (tmp_path: pathlib.Path) -> None:

	"""An impossible meter is rejected."""

	assert _run(tmp_path, "D-T-", "--time-signature", "4/3") == 1


def test_time_signature_option (tmp_path: pathlib.Path, capsys: pytest.CaptureFixture) -> None:

	"""The meter changes how notes fall into measures."""

	status = _run(tmp_path, "D-T-K-T-", "--time-signature", "2/4")

	assert status == 0
	assert "2/4, 1 measures" in capsys.readouterr().out


def test_grid_option (tmp_path: pathlib.Path, capsys: pytest.CaptureFixture) -> None:

	"""--grid prints the sequencer view."""

	_run(tmp_path, "D---T-", "--grid")
	out = capsys.readouterr().out

	assert "  dum" in out
	assert "|X - - -" in out


def test_midi_option (tmp_path: pathlib.Path) -> None:

	"""--midi writes a playable file."""

	filename = tmp_path / "out.mid"
	status = _run(tmp_path, "D-T-__T-", "--midi", str(filename), "--bpm", "90")

	assert status == 0

	loaded = mido.MidiFile(str(filename))
	tempo = [m for m in loaded.tracks[0] if m.type == "set_tempo"][0]

	assert tempo.tempo == mido.bpm2tempo(90)
	assert len([m for m in loaded.tracks[0] if m.type == "note_on"]) == 3


def test_config_file_sets_meter (write_config, capsys: pytest.CaptureFixture) -> None:

	"""Settings come from the YAML file when no option overrides them."""

	path = write_config('time_signature: "6/8"\n')
	status = darbuka.__main__.main(["D-T-K-T-D-T-", "--config", path])

	assert status == 0
	assert "6/8, 1 measures" in capsys.readouterr().out
