"""Plan the playback of a rhythm as timed hits and metronome clicks.

The schedule is pure data: an audio engine (or :mod:`darbuka.midi_export`)
walks it and makes the sounds.  Times are given both in ticks and in seconds
at the requested tempo, where the BPM counts quarter notes.

Accents follow the meter.  The first note of a measure is loudest, the first
note of each beat group is accented next, everything else is played softly.
In simple /4 time every beat is its own group, so beat-group accents are only
applied there when ``emphasize_simple_rhythms`` is set.
"""

import dataclasses
import logging
import typing

import darbuka.rhythm
import darbuka.time_signature
import darbuka.units


logger = logging.getLogger(__name__)

_DOWNBEAT_CLICK = 0.8
_BEAT_CLICK = 0.5


@dataclasses.dataclass
class PlaybackSettings:

	"""
	Volume and accent settings, each volume on a 0-100 scale.

	Attributes:
		measure_accent_volume: First note of each measure.
		beat_group_accent_volume: First note of each beat group.
		non_accent_volume: Every other note.
		emphasize_simple_rhythms: Apply beat-group accents in /4 time too.
		metronome_volume: Scales the metronome clicks.
	"""

	measure_accent_volume: int = 90
	beat_group_accent_volume: int = 70
	non_accent_volume: int = 40
	emphasize_simple_rhythms: bool = False
	metronome_volume: int = 50

	def __post_init__ (self) -> None:

		for field in dataclasses.fields(self):
			value = getattr(self, field.name)
			if field.name.endswith("_volume") and not 0 <= value <= 100:
				raise ValueError(f"{field.name} must be between 0 and 100, got {value}")

	@classmethod
	def from_dict (cls, values: typing.Optional[typing.Dict[str, typing.Any]]) -> "PlaybackSettings":

		"""Build settings from a config mapping, ignoring unknown keys."""

		if not values:
			return cls()

		known = {field.name for field in dataclasses.fields(cls)}
		unknown = set(values) - known

		if unknown:
			logger.warning(f"Ignoring unknown playback settings: {', '.join(sorted(unknown))}")

		return cls(**{key: value for key, value in values.items() if key in known})


@dataclasses.dataclass(frozen=True)
class ScheduledHit:

	"""One note to play."""

	tick: darbuka.units.Tick
	time: float
	measure_index: int
	note_index: int
	sound: str
	duration_in_sixteenths: int
	duration_seconds: float
	volume: float
	is_tied_from: bool = False


@dataclasses.dataclass(frozen=True)
class MetronomeClick:

	"""One metronome click, on a downbeat or the start of a beat group."""

	tick: darbuka.units.Tick
	time: float
	measure_index: int
	position_in_measure: int
	is_downbeat: bool
	volume: float


@dataclasses.dataclass(frozen=True)
class Schedule:

	"""Everything needed to play one pass of a rhythm."""

	bpm: float
	hits: typing.Tuple[ScheduledHit, ...]
	clicks: typing.Tuple[MetronomeClick, ...]
	total_ticks: int
	duration: float

	def attacks (self) -> typing.List[ScheduledHit]:

		"""Hits that start a sound; tied continuations are left out."""

		return [hit for hit in self.hits if not hit.is_tied_from]


def seconds_per_sixteenth (bpm: float) -> float:

	"""Length of one tick at a tempo counted in quarter notes."""

	if bpm <= 0:
		raise ValueError(f"BPM must be positive, got {bpm}")

	return 60.0 / bpm / 4


def note_volume (
	position_in_measure: int,
	time_signature: darbuka.time_signature.TimeSignature,
	settings: PlaybackSettings
) -> float:

	"""Return the 0-1 volume for a note starting ``position_in_measure`` ticks into a measure."""

	if position_in_measure == 0:
		return settings.measure_accent_volume / 100

	grouping = time_signature.beat_grouping_in_sixteenths()
	info = darbuka.time_signature.beat_group_info(position_in_measure, grouping)
	is_simple = time_signature.denominator == 4

	if info.is_first_of_group and (not is_simple or settings.emphasize_simple_rhythms):
		return settings.beat_group_accent_volume / 100

	return settings.non_accent_volume / 100


def schedule_rhythm (
	rhythm: darbuka.rhythm.ParsedRhythm,
	bpm: float,
	settings: typing.Optional[PlaybackSettings] = None
) -> Schedule:

	"""
	Lay out one pass of a rhythm in time.

	Rests produce no hits.  A note tied over a barline produces a hit for
	each part, and every part after the first is flagged ``is_tied_from``
	so a player does not strike it again.

	Raises:
		ValueError: If the rhythm is invalid or the BPM is not positive.

	Example:
		```python
		rhythm = parse_rhythm("D-T-K-T-", TimeSignature(2, 4))
		schedule = schedule_rhythm(rhythm, bpm=120)
		[hit.volume for hit in schedule.hits]    # [0.9, 0.4, 0.4, 0.4]
		```
	"""

	if not rhythm.is_valid:
		raise ValueError(f"Cannot schedule an invalid rhythm: {rhythm.error}")

	settings = settings or PlaybackSettings()
	step = seconds_per_sixteenth(bpm)
	time_signature = rhythm.time_signature
	spm = time_signature.sixteenths_per_measure

	hits: typing.List[ScheduledHit] = []
	clicks: typing.List[MetronomeClick] = []

	for measure_index, measure in enumerate(rhythm.measures):

		measure_tick = measure_index * spm
		clicks.extend(_clicks(measure_index, measure_tick, time_signature, settings, step))

		for note_index, (offset, note) in enumerate(measure.ticks()):

			if note.is_rest:
				continue

			tick = measure_tick + offset

			hits.append(ScheduledHit(
				tick = darbuka.units.Tick(tick),
				time = tick * step,
				measure_index = measure_index,
				note_index = note_index,
				sound = note.sound,
				duration_in_sixteenths = note.duration_in_sixteenths,
				duration_seconds = note.duration_in_sixteenths * step,
				volume = note_volume(offset, time_signature, settings),
				is_tied_from = note.is_tied_from
			))

	total_ticks = rhythm.total_ticks

	logger.debug(f"Scheduled {len(hits)} hits and {len(clicks)} clicks over {total_ticks} ticks at {bpm} BPM")

	return Schedule(
		bpm = bpm,
		hits = tuple(hits),
		clicks = tuple(clicks),
		total_ticks = total_ticks,
		duration = total_ticks * step
	)


def _clicks (
	measure_index: int,
	measure_tick: int,
	time_signature: darbuka.time_signature.TimeSignature,
	settings: PlaybackSettings,
	step: float
) -> typing.List[MetronomeClick]:

	"""Clicks for one measure: the downbeat, then the start of each later beat group."""

	spm = time_signature.sixteenths_per_measure
	scale = settings.metronome_volume / 100
	positions = [0]
	cumulative = 0

	for group in time_signature.beat_grouping_in_sixteenths():
		cumulative += group
		if cumulative < spm:
			positions.append(cumulative)

	return [
		MetronomeClick(
			tick = darbuka.units.Tick(measure_tick + position),
			time = (measure_tick + position) * step,
			measure_index = measure_index,
			position_in_measure = position,
			is_downbeat = position == 0,
			volume = (_DOWNBEAT_CLICK if position == 0 else _BEAT_CLICK) * scale
		)
		for position in positions
	]
