import dataclasses
import typing

import darbuka.constants.durations
import darbuka.constants.sounds
import darbuka.units


class RhythmError (Exception):

	"""Base class for errors that make a rhythm unusable."""


class NotationError (RhythmError):

	"""
	The notation text is malformed: an unknown character, a sustain with
	nothing to sustain, or a broken repeat marker.
	"""

	def __init__ (self, message: str, offset: typing.Optional[int] = None) -> None:

		super().__init__(message)
		self.offset = None if offset is None else darbuka.units.CharOffset(offset)


class StructuralError (RhythmError):

	"""A repeat or simile refers to measures that do not exist."""


def duration_category (sixteenths: int) -> typing.Tuple[str, bool]:

	"""
	Map a length in sixteenths to its nearest display category and dot flag.

	Lengths between standard values round down to the category below
	(5 sixteenths displays as a quarter); a strict renderer must split them.
	"""

	dur = darbuka.constants.durations

	if sixteenths >= dur.WHOLE:
		return dur.CATEGORY_WHOLE, False

	if sixteenths >= dur.HALF:
		return dur.CATEGORY_HALF, sixteenths == dur.DOTTED_HALF

	if sixteenths >= dur.QUARTER:
		return dur.CATEGORY_QUARTER, sixteenths == dur.DOTTED_QUARTER

	if sixteenths >= dur.EIGHTH:
		return dur.CATEGORY_EIGHTH, sixteenths == dur.DOTTED_EIGHTH

	return dur.CATEGORY_SIXTEENTH, False


@dataclasses.dataclass(frozen=True)
class Note:

	"""
	One timed sound or rest.

	Attributes:
		sound: ``"dum"``, ``"tak"``, ``"ka"``, ``"slap"`` or ``"rest"``.
		duration_in_sixteenths: Length in ticks, at least 1.
		is_dotted: The length is a standard dotted value (3, 6 or 12).
		is_tied_from: This note continues a note from the previous measure.
		is_tied_to: This note continues into the next measure.
		is_padding: A rest added to complete the final measure; not written
			by the user.
	"""

	sound: str
	duration_in_sixteenths: int
	is_dotted: bool = False
	is_tied_from: bool = False
	is_tied_to: bool = False
	is_padding: bool = False

	def __post_init__ (self) -> None:

		if self.duration_in_sixteenths < 1:
			raise ValueError(f"Note duration must be at least one sixteenth, got {self.duration_in_sixteenths}")

	@property
	def duration (self) -> str:

		"""Display category: sixteenth, eighth, quarter, half or whole."""

		return duration_category(self.duration_in_sixteenths)[0]

	@property
	def is_rest (self) -> bool:

		return self.sound == darbuka.constants.sounds.REST


def make_note (sound: str, duration: int, **flags: bool) -> Note:

	"""Build a note with ``is_dotted`` derived from its length."""

	return Note(
		sound = sound,
		duration_in_sixteenths = duration,
		is_dotted = duration in darbuka.constants.durations.DOTTED_VALUES,
		**flags
	)


def parse_notation (text: str, start: int = 0) -> typing.List[Note]:

	"""
	Parse a run of notation characters into a flat list of notes.

	The text must contain only note characters; measure and repeat syntax is
	split off beforehand by :func:`darbuka.repeats.tokenize_structure`.

	**Syntax** (case-insensitive):
	- ``D`` ``T`` ``K`` ``S``: start a dum, tak, ka or slap.
	- ``_``: start a rest; a run of ``_`` is one rest.
	- ``-``: extend the preceding note by one sixteenth.
	- whitespace is ignored.

	Every onset starts a new note, so ``DD`` is two sixteenths, never one
	eighth.

	Parameters:
		text: The notation to parse.
		start: Offset of ``text`` within the full notation, used in error
			positions.

	Returns:
		The notes in order.

	Raises:
		NotationError: On an unknown character, or a ``-`` with no note
			before it.

	Example:
		```python
		parse_notation("D-T-__T-D---T---")
		# dum 2, tak 2, rest 2, tak 2, dum 4, tak 4
		```
	"""

	sounds = darbuka.constants.sounds

	# [sound, duration] pairs, frozen into Notes at the end.
	pending: typing.List[typing.List[typing.Any]] = []
	last_char = ""

	for offset, char in enumerate(text, start):

		if char.isspace():
			continue

		upper = char.upper()

		if upper in sounds.NOTATION_MAP:
			sound = sounds.NOTATION_MAP[upper]

			if upper == sounds.REST_CHAR and last_char == sounds.REST_CHAR:
				pending[-1][1] += 1
			else:
				pending.append([sound, 1])

		elif char == sounds.SUSTAIN_CHAR:
			if not pending:
				raise NotationError(f"Sustain '-' at position {offset} has no note to extend", offset)
			pending[-1][1] += 1

		else:
			raise NotationError(f"Unexpected character {char!r} at position {offset}", offset)

		last_char = upper

	return [make_note(sound, duration) for sound, duration in pending]
