import pytest

import darbuka.time_signature


@pytest.mark.parametrize("numerator, denominator, expected", [
	(4, 4, 16),
	(2, 4, 8),
	(3, 4, 12),
	(6, 8, 12),
	(7, 8, 14),
	(9, 8, 18),
	(5, 16, 5),
	(2, 2, 16),
])
def test_sixteenths_per_measure (numerator: int, denominator: int, expected: int) -> None:

	"""Measure length is numerator * 16 / denominator ticks."""

	assert darbuka.time_signature.TimeSignature(numerator, denominator).sixteenths_per_measure == expected


def test_invalid_time_signatures () -> None:

	"""Bad numerators, denominators and groupings are rejected on construction."""

	with pytest.raises(ValueError):
		darbuka.time_signature.TimeSignature(0, 4)

	with pytest.raises(ValueError):
		darbuka.time_signature.TimeSignature(4, 3)

	with pytest.raises(ValueError):
		darbuka.time_signature.TimeSignature(7, 8, beat_grouping=(3, 3))


def test_grouping_normalised_to_tuple () -> None:

	"""A list grouping is stored as a tuple so the value stays hashable."""

	ts = darbuka.time_signature.TimeSignature(7, 8, beat_grouping=[2, 2, 3])

	assert ts.beat_grouping == (2, 2, 3)
	assert hash(ts) == hash(darbuka.time_signature.TimeSignature(7, 8, (2, 2, 3)))


def test_parse_and_str () -> None:

	"""Text round trip of a meter."""

	ts = darbuka.time_signature.TimeSignature.parse("7/8", "2+2+3")

	assert ts == darbuka.time_signature.TimeSignature(7, 8, (2, 2, 3))
	assert str(ts) == "7/8"

	with pytest.raises(ValueError):
		darbuka.time_signature.TimeSignature.parse("seven/8")

	with pytest.raises(ValueError):
		darbuka.time_signature.TimeSignature.parse("7/8", "2+x")


def test_compound_and_asymmetric () -> None:

	"""/8 meters are compound when divisible by three, asymmetric otherwise."""

	six_eight = darbuka.time_signature.TimeSignature(6, 8)
	seven_eight = darbuka.time_signature.TimeSignature(7, 8)
	four_four = darbuka.time_signature.TimeSignature(4, 4)

	assert six_eight.is_compound and not six_eight.is_asymmetric
	assert seven_eight.is_asymmetric and not seven_eight.is_compound
	assert not four_four.is_compound and not four_four.is_asymmetric


@pytest.mark.parametrize("numerator, denominator, expected", [
	(4, 4, [1, 1, 1, 1]),
	(6, 8, [3, 3]),
	(12, 8, [3, 3, 3, 3]),
	(5, 8, [3, 2]),
	(7, 8, [3, 2, 2]),
	(8, 8, [3, 3, 2]),
	(13, 8, [3, 3, 3, 2, 2]),
	(14, 8, [3, 3, 3, 3, 2]),
	(4, 2, [4]),
])
def test_default_beat_grouping (numerator: int, denominator: int, expected: list) -> None:

	"""Default groupings follow the meter family."""

	assert darbuka.time_signature.TimeSignature(numerator, denominator).default_beat_grouping() == expected


def test_beat_grouping_in_sixteenths () -> None:

	"""Groupings convert from the denominator unit to ticks."""

	assert darbuka.time_signature.TimeSignature(4, 4).beat_grouping_in_sixteenths() == [4, 4, 4, 4]
	assert darbuka.time_signature.TimeSignature(7, 8, (2, 2, 3)).beat_grouping_in_sixteenths() == [4, 4, 6]


def test_parse_beat_grouping () -> None:

	"""Malformed groupings parse to None."""

	assert darbuka.time_signature.parse_beat_grouping("3+3+2") == (3, 3, 2)
	assert darbuka.time_signature.parse_beat_grouping(" 2 + 3 ") == (2, 3)
	assert darbuka.time_signature.parse_beat_grouping("") is None
	assert darbuka.time_signature.parse_beat_grouping("3+0") is None
	assert darbuka.time_signature.format_beat_grouping((3, 3, 2)) == "3+3+2"


def test_beat_group_info () -> None:

	"""Positions are located within their beat group."""

	grouping = [6, 4, 4]

	assert darbuka.time_signature.beat_group_info(0, grouping) == darbuka.time_signature.BeatGroupInfo(0, 0, True)
	assert darbuka.time_signature.beat_group_info(6, grouping) == darbuka.time_signature.BeatGroupInfo(1, 0, True)
	assert darbuka.time_signature.beat_group_info(7, grouping) == darbuka.time_signature.BeatGroupInfo(1, 1, False)
	assert darbuka.time_signature.beat_group_info(20, grouping).is_first_of_group is False
