import darbuka.display
import darbuka.grid
import darbuka.rhythm
import darbuka.time_signature


def test_one_row_per_sound (common_time: darbuka.time_signature.TimeSignature) -> None:

	"""Only sounds that occur get a row; rests have none."""

	grid = darbuka.grid.notation_to_grid("D---T-", common_time)
	display = darbuka.display.GridDisplay(grid, width=80)
	display.build()

	assert display.line_count == 3
	assert display.lines[1].startswith("  dum")
	assert display.lines[2].startswith("  tak")


def test_onsets_and_sustains (common_time: darbuka.time_signature.TimeSignature) -> None:

	"""X marks a stroke, - a held note, . another sound's time."""

	grid = darbuka.grid.notation_to_grid("D---T-", common_time)
	lines = darbuka.display.GridDisplay(grid, width=80).render().splitlines()

	assert "|X - - - . . " in lines[1]
	assert "|. . . . X - " in lines[2]


def test_ghost_measures_numbered_in_brackets (one_beat: darbuka.time_signature.TimeSignature) -> None:

	"""Copies are marked in the header."""

	rhythm = darbuka.rhythm.parse_rhythm("D-T- |: K-K- :|", one_beat)
	grid = darbuka.grid.rhythm_to_grid(rhythm)
	header = darbuka.display.GridDisplay(grid, rhythm.repeats, width=80).render().splitlines()[0]

	assert "1" in header
	assert "(3)" in header
	assert "(2)" not in header


def test_columns_fit_terminal (common_time: darbuka.time_signature.TimeSignature) -> None:

	"""Only whole measures that fit the width are drawn."""

	grid = darbuka.grid.notation_to_grid("D-T- % % %", common_time)
	lines = darbuka.display.GridDisplay(grid, width=80).render().splitlines()

	assert lines[1].count("|") == 3
	assert all(len(line) <= 80 for line in lines)


def test_narrow_terminal_renders_nothing (common_time: darbuka.time_signature.TimeSignature) -> None:

	"""Below the minimum width the grid is hidden."""

	grid = darbuka.grid.notation_to_grid("D-T-", common_time)

	assert darbuka.display.GridDisplay(grid, width=20).render() == ""
