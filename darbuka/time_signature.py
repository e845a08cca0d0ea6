"""Time signatures and beat grouping.

A :class:`TimeSignature` fixes how many ticks (sixteenth notes) make up one
measure, and how those ticks are grouped into beats for accenting and
metronome clicks.  Groupings are always counted in the denominator's unit:
eighth notes for ``/8`` signatures, quarter notes for ``/4``.
"""

import dataclasses
import typing


_VALID_DENOMINATORS = (1, 2, 4, 8, 16)

_ASYMMETRIC_GROUPINGS: typing.Dict[int, typing.Tuple[int, ...]] = {
	5: (3, 2),
	7: (3, 2, 2),
	8: (3, 3, 2),
	10: (3, 3, 2, 2),
	11: (3, 3, 3, 2),
	13: (3, 3, 3, 2, 2),
}


@dataclasses.dataclass(frozen=True)
class TimeSignature:

	"""
	A meter such as 4/4, 6/8 or 7/8.

	Attributes:
		numerator: Beats per measure.
		denominator: Note value of one beat (4 = quarter, 8 = eighth).
		beat_grouping: Optional explicit grouping of the numerator, e.g.
			``(2, 2, 3)`` for a 7/8 felt as 2+2+3.  Must sum to the numerator.

	Example:
		```python
		ts = TimeSignature(7, 8, beat_grouping=(2, 2, 3))
		ts.sixteenths_per_measure      # 14
		ts.beat_grouping_in_sixteenths()  # [4, 4, 6]
		```
	"""

	numerator: int
	denominator: int
	beat_grouping: typing.Optional[typing.Tuple[int, ...]] = None

	def __post_init__ (self) -> None:

		"""Validate the meter and normalise the grouping to a tuple."""

		if self.numerator <= 0:
			raise ValueError(f"Time signature numerator must be positive, got {self.numerator}")

		if self.denominator not in _VALID_DENOMINATORS:
			raise ValueError(f"Time signature denominator must be one of {_VALID_DENOMINATORS}, got {self.denominator}")

		if self.beat_grouping is not None:
			grouping = tuple(self.beat_grouping)
			object.__setattr__(self, "beat_grouping", grouping or None)

			if grouping and not validate_beat_grouping(grouping, self):
				raise ValueError(f"Beat grouping {format_beat_grouping(grouping)} does not sum to {self.numerator}")

	@classmethod
	def parse (cls, text: str, beat_grouping: typing.Optional[str] = None) -> "TimeSignature":

		"""Build a time signature from ``"7/8"`` and an optional ``"3+2+2"`` grouping."""

		parts = text.strip().split("/")

		if len(parts) != 2:
			raise ValueError(f"Time signature must look like '4/4', got {text!r}")

		try:
			numerator, denominator = int(parts[0]), int(parts[1])
		except ValueError:
			raise ValueError(f"Time signature must look like '4/4', got {text!r}") from None

		grouping = parse_beat_grouping(beat_grouping) if beat_grouping else None

		if beat_grouping and grouping is None:
			raise ValueError(f"Invalid beat grouping {beat_grouping!r}")

		return cls(numerator, denominator, grouping)

	def __str__ (self) -> str:

		return f"{self.numerator}/{self.denominator}"

	@property
	def sixteenths_per_measure (self) -> int:

		"""Number of ticks in one measure."""

		return self.numerator * 16 // self.denominator

	@property
	def is_compound (self) -> bool:

		"""True for /8 meters whose numerator divides by three (6/8, 9/8, 12/8)."""

		return self.denominator == 8 and self.numerator % 3 == 0

	@property
	def is_asymmetric (self) -> bool:

		"""True for /8 meters whose numerator does not divide by three (5/8, 7/8)."""

		return self.denominator == 8 and self.numerator % 3 != 0

	def default_beat_grouping (self) -> typing.List[int]:

		"""
		Return the beat grouping in the denominator's unit.

		An explicit ``beat_grouping`` wins.  Otherwise compound meters group in
		threes, asymmetric meters use the common additive groupings (7/8 =
		3+2+2), /4 meters give one group per beat, and
		anything else is a single group.
		"""

		if self.beat_grouping:
			return list(self.beat_grouping)

		if self.is_compound:
			return [3] * (self.numerator // 3)

		if self.is_asymmetric:
			return _asymmetric_grouping(self.numerator)

		if self.denominator == 4:
			return [1] * self.numerator

		return [self.numerator]

	def beat_grouping_in_sixteenths (self) -> typing.List[int]:

		"""Return the beat grouping converted to ticks."""

		grouping = self.default_beat_grouping()

		ticks_per_unit = 16 // self.denominator
		return [group * ticks_per_unit for group in grouping]


def _asymmetric_grouping (numerator: int) -> typing.List[int]:

	if numerator in _ASYMMETRIC_GROUPINGS:
		return list(_ASYMMETRIC_GROUPINGS[numerator])

	groups: typing.List[int] = []
	remaining = numerator

	while remaining >= 3:
		groups.append(3)
		remaining -= 3

	if remaining > 0:
		groups.append(remaining)

	return groups


def validate_beat_grouping (grouping: typing.Sequence[int], time_signature: TimeSignature) -> bool:

	"""Check that a grouping sums to the meter's numerator."""

	return all(group > 0 for group in grouping) and sum(grouping) == time_signature.numerator


def parse_beat_grouping (text: str) -> typing.Optional[typing.Tuple[int, ...]]:

	"""Parse ``"3+3+2"`` into ``(3, 3, 2)``.  Returns ``None`` for blank or malformed input."""

	trimmed = text.strip()

	if not trimmed:
		return None

	numbers: typing.List[int] = []

	for part in trimmed.split("+"):
		try:
			number = int(part.strip())
		except ValueError:
			return None
		if number <= 0:
			return None
		numbers.append(number)

	return tuple(numbers)


def format_beat_grouping (grouping: typing.Sequence[int]) -> str:

	"""Format ``(3, 3, 2)`` as ``"3+3+2"``."""

	return "+".join(str(group) for group in grouping)


@dataclasses.dataclass(frozen=True)
class BeatGroupInfo:

	"""Where a position falls within the beat groups of a measure."""

	group_index: int
	position_in_group: int
	is_first_of_group: bool


def beat_group_info (position_in_measure: int, grouping: typing.Sequence[int]) -> BeatGroupInfo:

	"""
	Locate a position (in the grouping's unit) within a list of beat groups.

	Positions past the end of the measure fall into the last group.
	"""

	current = 0

	for group_index, group_size in enumerate(grouping):

		if position_in_measure < current + group_size:
			position_in_group = position_in_measure - current
			return BeatGroupInfo(group_index, position_in_group, position_in_group == 0)

		current += group_size

	return BeatGroupInfo(max(len(grouping) - 1, 0), 0, False)


COMMON_TIME = TimeSignature(4, 4)
