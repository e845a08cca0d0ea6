import pathlib

import mido
import pytest

import darbuka.constants.sounds
import darbuka.midi_export
import darbuka.rhythm
import darbuka.schedule
import darbuka.time_signature


def _schedule (text: str, time_signature: darbuka.time_signature.TimeSignature, bpm: float = 120) -> darbuka.schedule.Schedule:

	return darbuka.schedule.schedule_rhythm(darbuka.rhythm.parse_rhythm(text, time_signature), bpm)


def _absolute (track: mido.MidiTrack):

	"""Yield (absolute tick, message) pairs."""

	now = 0

	for message in track:
		now += message.time
		yield now, message


def test_midi_file_structure (common_time: darbuka.time_signature.TimeSignature) -> None:

	"""One track at 480 ticks per beat, starting with the tempo."""

	mid = darbuka.midi_export.schedule_to_midi(_schedule("D-T-__T-", common_time, bpm=100))

	assert mid.ticks_per_beat == 480
	assert len(mid.tracks) == 1

	first = mid.tracks[0][0]

	assert first.type == "set_tempo"
	assert first.tempo == mido.bpm2tempo(100)


def test_notes_on_drum_channel (common_time: darbuka.time_signature.TimeSignature) -> None:

	"""Each struck note becomes a note_on on channel 10 with its GM note."""

	mid = darbuka.midi_export.schedule_to_midi(_schedule("D-T-__T-", common_time))
	note_ons = [(tick, m) for tick, m in _absolute(mid.tracks[0]) if m.type == "note_on"]

	assert [tick for tick, _ in note_ons] == [0, 240, 720]
	assert [m.note for _, m in note_ons] == [
		darbuka.constants.sounds.GM_DRUM_MAP["dum"],
		darbuka.constants.sounds.GM_DRUM_MAP["tak"],
		darbuka.constants.sounds.GM_DRUM_MAP["tak"],
	]
	assert all(m.channel == 9 for _, m in note_ons)
	assert [m.velocity for _, m in note_ons] == [114, 51, 51]


def test_tied_note_written_once (common_time: darbuka.time_signature.TimeSignature) -> None:

	"""A note tied over the barline is one long MIDI note."""

	mid = darbuka.midi_export.schedule_to_midi(_schedule("_______________D---", common_time))
	events = [(tick, m.type) for tick, m in _absolute(mid.tracks[0]) if m.type in ("note_on", "note_off")]

	assert events == [(1800, "note_on"), (2280, "note_off")]


def test_track_lasts_whole_rhythm (common_time: darbuka.time_signature.TimeSignature) -> None:

	"""The end of track marker sits at the end of the last measure."""

	mid = darbuka.midi_export.schedule_to_midi(_schedule("D-T- %", common_time))
	end_tick, end = list(_absolute(mid.tracks[0]))[-1]

	assert end.type == "end_of_track"
	assert end_tick == 32 * 120


def test_custom_note_map (common_time: darbuka.time_signature.TimeSignature) -> None:

	"""Sounds missing from the map are skipped."""

	mid = darbuka.midi_export.schedule_to_midi(_schedule("D-T-", common_time), note_map={"dum": 36})
	notes = [m.note for m in mid.tracks[0] if m.type == "note_on"]

	assert notes == [36]


def test_save_midi (tmp_path: pathlib.Path, common_time: darbuka.time_signature.TimeSignature) -> None:

	"""The saved file loads back with the same notes."""

	filename = str(tmp_path / "rhythm.mid")
	darbuka.midi_export.save_midi(_schedule("D-T-K-S-", common_time), filename)

	loaded = mido.MidiFile(filename)

	assert len([m for m in loaded.tracks[0] if m.type == "note_on"]) == 4
