"""Standard MIDI File export of a playback schedule.

Each sound is written to the General MIDI percussion channel using
:data:`darbuka.constants.sounds.GM_DRUM_MAP`, so the file plays on any GM
synth or drum plugin.  A note tied over a barline is written as one long
note.

```python
rhythm = parse_rhythm("D-T-__T-D---T---", TimeSignature(4, 4))
save_midi(schedule_rhythm(rhythm, bpm=100), "maqsum.mid")
```
"""

import logging
import typing

import mido

import darbuka.constants.sounds
import darbuka.schedule


logger = logging.getLogger(__name__)

TICKS_PER_BEAT = 480
TICKS_PER_SIXTEENTH = TICKS_PER_BEAT // 4


def schedule_to_midi (
	schedule: darbuka.schedule.Schedule,
	note_map: typing.Optional[typing.Dict[str, int]] = None,
	channel: int = darbuka.constants.sounds.GM_DRUM_CHANNEL
) -> mido.MidiFile:

	"""
	Build a single-track MIDI file from a schedule.

	Parameters:
		schedule: The schedule to write; its BPM becomes the file tempo.
		note_map: Sound name -> MIDI note, defaulting to the GM drum map.
		channel: 0-indexed MIDI channel (9 is GM percussion).

	Returns:
		A type 1 :class:`mido.MidiFile` at 480 ticks per beat.
	"""

	note_map = note_map if note_map is not None else darbuka.constants.sounds.GM_DRUM_MAP

	# (absolute tick, order, message); note_off sorts before note_on on the same tick.
	events: typing.List[typing.Tuple[int, int, mido.Message]] = []
	attack: typing.Optional[darbuka.schedule.ScheduledHit] = None
	length = 0

	def close () -> None:
		if attack is None or attack.sound not in note_map:
			return
		start = attack.tick * TICKS_PER_SIXTEENTH
		note = note_map[attack.sound]
		velocity = max(1, min(127, round(attack.volume * 127)))
		events.append((start, 1, mido.Message("note_on", channel=channel, note=note, velocity=velocity)))
		events.append((start + length * TICKS_PER_SIXTEENTH, 0, mido.Message("note_off", channel=channel, note=note, velocity=0)))

	for hit in schedule.hits:

		if hit.is_tied_from and attack is not None and hit.sound == attack.sound:
			length += hit.duration_in_sixteenths
			continue

		close()

		if hit.sound not in note_map:
			logger.warning(f"No MIDI note for sound {hit.sound!r}; skipping")

		attack = hit
		length = hit.duration_in_sixteenths

	close()

	mid = mido.MidiFile(type=1)
	mid.ticks_per_beat = TICKS_PER_BEAT
	track = mido.MidiTrack()
	mid.tracks.append(track)

	track.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(schedule.bpm), time=0))

	events.sort(key=lambda event: (event[0], event[1]))
	last_tick = 0

	for tick, _, message in events:
		message.time = tick - last_tick
		track.append(message)
		last_tick = tick

	track.append(mido.MetaMessage("end_of_track", time=max(0, schedule.total_ticks * TICKS_PER_SIXTEENTH - last_tick)))

	return mid


def save_midi (
	schedule: darbuka.schedule.Schedule,
	filename: str,
	note_map: typing.Optional[typing.Dict[str, int]] = None
) -> None:

	"""Write a schedule to a Standard MIDI File."""

	mid = schedule_to_midi(schedule, note_map)

	logger.info(f"Saving MIDI file ({len(schedule.attacks())} notes) to {filename}...")

	mid.save(filename)

	logger.info(f"Saved {filename}")
