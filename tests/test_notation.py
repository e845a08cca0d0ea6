import pytest

import darbuka.notation


def _summary (notes):

	return [(note.sound, note.duration_in_sixteenths) for note in notes]


def test_parse_basic_rhythm () -> None:

	"""Onsets, sustains and rests give one note each."""

	notes = darbuka.notation.parse_notation("D-T-__T-D---T---")

	assert _summary(notes) == [
		("dum", 2), ("tak", 2), ("rest", 2), ("tak", 2), ("dum", 4), ("tak", 4)
	]


def test_adjacent_onsets_are_separate_notes () -> None:

	"""DD is two sixteenths, never one eighth."""

	notes = darbuka.notation.parse_notation("DD")

	assert _summary(notes) == [("dum", 1), ("dum", 1)]


def test_consecutive_rests_merge () -> None:

	"""A run of underscores is one rest, even across whitespace."""

	notes = darbuka.notation.parse_notation("D ___ __")

	assert _summary(notes) == [("dum", 1), ("rest", 5)]


def test_sustained_rest () -> None:

	"""A dash after a rest lengthens the rest."""

	notes = darbuka.notation.parse_notation("_--D")

	assert _summary(notes) == [("rest", 3), ("dum", 1)]


def test_case_insensitive () -> None:

	"""Lower-case letters are the same sounds."""

	notes = darbuka.notation.parse_notation("d-t-k-s-")

	assert [note.sound for note in notes] == ["dum", "tak", "ka", "slap"]


def test_whitespace_ignored () -> None:

	"""Spaces and newlines do not change the result."""

	assert _summary(darbuka.notation.parse_notation("D - T\n-")) == _summary(darbuka.notation.parse_notation("D-T-"))


def test_empty_text () -> None:

	"""No characters, no notes."""

	assert darbuka.notation.parse_notation("") == []
	assert darbuka.notation.parse_notation("   ") == []


def test_dotted_flag () -> None:

	"""Three, six and twelve sixteenths are dotted values."""

	notes = darbuka.notation.parse_notation("D--T-----K-----------S---")

	assert [note.is_dotted for note in notes] == [True, True, True, False]
	assert [note.duration for note in notes] == ["eighth", "quarter", "half", "quarter"]


def test_leading_sustain_is_error () -> None:

	"""A dash with nothing before it has nothing to extend."""

	with pytest.raises(darbuka.notation.NotationError) as info:
		darbuka.notation.parse_notation("-D")

	assert info.value.offset == 0


def test_unknown_character_reports_offset () -> None:

	"""The error carries the position of the bad character."""

	with pytest.raises(darbuka.notation.NotationError) as info:
		darbuka.notation.parse_notation("D-T-X-")

	assert info.value.offset == 4
	assert "'X'" in str(info.value)


def test_start_offset_shifts_error_position () -> None:

	"""Offsets are reported relative to the whole notation."""

	with pytest.raises(darbuka.notation.NotationError) as info:
		darbuka.notation.parse_notation("D?", start=10)

	assert info.value.offset == 11


def test_notation_error_is_rhythm_error () -> None:

	"""Both error kinds share one base class."""

	assert issubclass(darbuka.notation.NotationError, darbuka.notation.RhythmError)
	assert issubclass(darbuka.notation.StructuralError, darbuka.notation.RhythmError)


def test_note_rejects_zero_duration () -> None:

	"""Every note lasts at least one tick."""

	with pytest.raises(ValueError):
		darbuka.notation.Note("dum", 0)


@pytest.mark.parametrize("sixteenths, category, dotted", [
	(1, "sixteenth", False),
	(2, "eighth", False),
	(3, "eighth", True),
	(4, "quarter", False),
	(5, "quarter", False),
	(6, "quarter", True),
	(8, "half", False),
	(12, "half", True),
	(16, "whole", False),
	(24, "whole", False),
])
def test_duration_category (sixteenths: int, category: str, dotted: bool) -> None:

	"""Lengths map to the nearest standard value at or below them."""

	assert darbuka.notation.duration_category(sixteenths) == (category, dotted)
