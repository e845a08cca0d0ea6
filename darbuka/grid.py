"""Conversion between notation text and the step-sequencer grid.

The grid is the expanded timeline laid out one cell per tick.  A cell holds
the sound that starts on that tick, or ``None`` when the previous sound is
still sustaining.  A leading ``None`` is silence.

``actual_length`` separates the user's content from trailing space that only
exists for editing: the padding rest that completes the final measure, and
any empty ghost measures appended with :func:`pad_grid`.  Nothing past
``actual_length`` is ever written back to notation, and no sustain is
allowed to run across it.

Typical editor round trip::

	grid = notation_to_grid(text, time_signature)
	rhythm = parse_rhythm(text, time_signature)

	for tick in get_linked_positions(edited_tick, rhythm.repeats, time_signature.sixteenths_per_measure):
		grid = with_cells(grid, [tick], "ka")

	text = grid_to_notation(grid, rhythm.repeats)
"""

import dataclasses
import logging
import typing

import darbuka.constants.sounds
import darbuka.repeats
import darbuka.rhythm
import darbuka.time_signature


logger = logging.getLogger(__name__)

Cell = typing.Optional[str]

_VALID_CELLS = frozenset(darbuka.constants.sounds.SOUNDS + (darbuka.constants.sounds.REST,))


class GridError (ValueError):

	"""A grid cannot be built from, or turned into, notation."""


@dataclasses.dataclass(frozen=True)
class SequencerGrid:

	"""
	One cell per tick of the expanded timeline.

	Attributes:
		cells: Sound name at each onset, ``None`` while a sound sustains.
		actual_length: Ticks of genuine content, from the start.
		sixteenths_per_measure: Measure length, used to locate repeats.
	"""

	cells: typing.Tuple[Cell, ...]
	actual_length: int
	sixteenths_per_measure: int = 16

	def __post_init__ (self) -> None:

		if self.sixteenths_per_measure <= 0:
			raise ValueError("sixteenths_per_measure must be positive")

		if self.actual_length < 0:
			raise ValueError("actual_length must not be negative")

		for cell in self.cells:
			if cell is not None and cell not in _VALID_CELLS:
				raise GridError(f"Unknown sound {cell!r} in grid")

	@property
	def measure_count (self) -> int:

		"""Number of measures the cells span, counting a partial last measure."""

		return -(-len(self.cells) // self.sixteenths_per_measure)

	def measure_cells (self, measure: int) -> typing.Tuple[Cell, ...]:

		"""Cells of one measure, short at the end of the grid."""

		start = measure * self.sixteenths_per_measure
		return self.cells[start:start + self.sixteenths_per_measure]


def rhythm_to_grid (rhythm: darbuka.rhythm.ParsedRhythm) -> SequencerGrid:

	"""Lay out an already parsed rhythm as a grid."""

	if not rhythm.is_valid:
		raise GridError(rhythm.error or "Invalid rhythm")

	cells: typing.List[Cell] = []
	actual_length = 0

	for measure in rhythm.measures:
		for note in measure.notes:

			cells.append(None if note.is_tied_from else note.sound)
			cells.extend([None] * (note.duration_in_sixteenths - 1))

			if not note.is_padding:
				actual_length = len(cells)

	return SequencerGrid(tuple(cells), actual_length, rhythm.sixteenths_per_measure)


def notation_to_grid (text: str, time_signature: darbuka.time_signature.TimeSignature) -> SequencerGrid:

	"""
	Parse notation and lay it out one cell per tick, repeats unrolled.

	Raises:
		GridError: If the notation is invalid.

	Example:
		```python
		grid = notation_to_grid("D-T-", TimeSignature(4, 4))
		grid.cells[:4]        # ("dum", None, "tak", None)
		grid.actual_length    # 4
		len(grid.cells)       # 16, the padding rest fills the measure
		```
	"""

	return rhythm_to_grid(darbuka.rhythm.parse_rhythm(text, time_signature))


def sound_at (grid: SequencerGrid, tick: int) -> str:

	"""
	Return the sound heard at a tick, following sustains back to their onset.

	Ticks outside the content (before 0 or from ``actual_length`` on) are
	silent, so a sustain never bleeds into ghost space.
	"""

	if tick < 0 or tick >= min(grid.actual_length, len(grid.cells)):
		return darbuka.constants.sounds.REST

	return _sounding_at(grid.cells, tick)


def _sounding_at (cells: typing.Sequence[Cell], tick: int) -> str:

	for index in range(tick, -1, -1):
		cell = cells[index]
		if cell is not None:
			return cell

	return darbuka.constants.sounds.REST


def pad_grid (grid: SequencerGrid, measures: int = 1) -> SequencerGrid:

	"""
	Append empty ghost measures after the content, for painting new notes.

	The cells are first completed to a whole number of measures.
	``actual_length`` does not change.
	"""

	if measures < 0:
		raise ValueError("measures must not be negative")

	spm = grid.sixteenths_per_measure
	whole = -(-max(len(grid.cells), grid.actual_length) // spm)
	target = (whole + measures) * spm

	return dataclasses.replace(grid, cells=grid.cells + (None,) * (target - len(grid.cells)))


def with_cells (grid: SequencerGrid, ticks: typing.Iterable[int], cell: Cell) -> SequencerGrid:

	"""
	Return a copy of the grid with ``cell`` written at each tick.

	Writing past ``actual_length`` extends the content to cover the edit.
	The first tick of the newly claimed space becomes a rest onset, unless
	it was itself edited, so the old last note does not sustain into it.

	Raises:
		GridError: For an unknown sound.
		ValueError: For a negative tick.
	"""

	if cell is not None and cell not in _VALID_CELLS:
		raise GridError(f"Unknown sound {cell!r}")

	targets = sorted(set(ticks))

	if not targets:
		return grid

	if targets[0] < 0:
		raise ValueError(f"Tick must not be negative, got {targets[0]}")

	cells = list(grid.cells)

	if targets[-1] >= len(cells):
		cells.extend([None] * (targets[-1] + 1 - len(cells)))

	actual_length = grid.actual_length

	if targets[-1] >= actual_length:
		boundary = actual_length

		if boundary not in targets and cells[boundary] is None and boundary > 0:
			cells[boundary] = darbuka.constants.sounds.REST

		actual_length = targets[-1] + 1

	for tick in targets:
		cells[tick] = cell

	return dataclasses.replace(grid, cells=tuple(cells), actual_length=actual_length)


# ----------------------------------------------------------------------
# Grid -> notation
# ----------------------------------------------------------------------

@dataclasses.dataclass
class _Emission:

	"""One step of the output plan."""

	kind: str
	measures: typing.List[int]
	count: int = 0


def grid_to_notation (
	grid: SequencerGrid,
	repeats: typing.Optional[typing.Sequence[darbuka.repeats.RepeatMarker]] = None,
	collapse: bool = False
) -> str:

	"""
	Write a grid back as notation text, up to ``actual_length``.

	Without ``repeats`` the timeline is written out literally.  With the
	repeat markers of the rhythm the grid came from, each section whose
	copies still match its source is written once as ``|: ... :|xN``, and
	each simile measure that still matches the measure before it as ``%``.  When a copy no longer
	matches (a ghost was edited on its own), the repeat is unrolled from that
	copy onward so the edit survives: the passes that still match stay
	compressed and the rest are written out literally.

	The result re-parses to the same sound on every tick; it is not
	necessarily the same text.

	Parameters:
		grid: The grid to serialise.
		repeats: Markers in expanded measure indices, as on
			:attr:`ParsedRhythm.repeats`.
		collapse: Also compress runs of identical literal measures with
			``|xN`` or ``|: ... :|xN``.

	Example:
		```python
		grid = notation_to_grid("|: D-T- :|x3", TimeSignature(1, 4))
		grid_to_notation(grid)              # "D-T- | D-T- | D-T-"
		grid_to_notation(grid, repeats)     # "|: D-T- :|x3"
		```
	"""

	spm = grid.sixteenths_per_measure
	end = min(grid.actual_length, len(grid.cells))

	if end <= 0:
		return ""

	measure_count = -(-end // spm)
	plan = _plan(grid, repeats or (), measure_count)

	parts: typing.List[str] = []

	for position, emission in enumerate(plan):

		follows_structure = position > 0 and plan[position - 1].kind != "literal"
		precedes_structure = position + 1 < len(plan)

		if emission.kind == "section":
			# End of content as seen from the first pass.
			section_end = end - (emission.count - 1) * len(emission.measures) * spm
			body = _render_run(grid, emission.measures, section_end, needs_onset=True, strip_last=precedes_structure)
			parts.append(f"|: {body} :|x{emission.count}")

		elif emission.kind == "simile":
			parts.append("%")

		elif collapse:
			parts.append(_render_collapsed(grid, emission.measures, end, follows_structure or position == 0, precedes_structure))

		else:
			parts.append(_render_run(grid, emission.measures, end, needs_onset=follows_structure, strip_last=precedes_structure))

	return " ".join(part for part in parts if part)


def _plan (grid: SequencerGrid, repeats: typing.Sequence[darbuka.repeats.RepeatMarker], measure_count: int) -> typing.List[_Emission]:

	"""Decide, measure by measure, what is written literally and what compressed."""

	available = len(grid.cells) // grid.sixteenths_per_measure
	sections = {r.start_measure: r for r in repeats if isinstance(r, darbuka.repeats.SectionRepeat)}
	simile_measures = {
		index
		for r in repeats if isinstance(r, darbuka.repeats.MeasureSimile)
		for index in r.repeat_measures
	}

	plan: typing.List[_Emission] = []

	def literal (measure: int) -> None:
		if plan and plan[-1].kind == "literal":
			plan[-1].measures.append(measure)
		else:
			plan.append(_Emission("literal", [measure]))

	m = 0

	while m < measure_count:

		section = sections.get(m)

		if section is not None and section.end_measure < available:
			passes = [p for p in section.passes() if p[0] < measure_count and p[-1] < available]
			source = [grid.measure_cells(i) for i in passes[0]]

			intact = 1
			while intact < len(passes) and [grid.measure_cells(i) for i in passes[intact]] == source:
				intact += 1

			if intact >= 2:
				plan.append(_Emission("section", passes[0], intact))
			else:
				for index in passes[0]:
					literal(index)

			if intact < len(passes):
				logger.debug(f"Repeat at measure {m + 1} diverges at pass {intact + 1}; writing remaining passes out")

			for unrolled in passes[intact:]:
				for index in unrolled:
					literal(index)

			m = passes[-1][-1] + 1
			continue

		# '%' re-parses as a copy of the previous measure, not of the marker's source.
		if (
			m in simile_measures
			and 0 < m < available
			and grid.measure_cells(m) == grid.measure_cells(m - 1)
		):
			plan.append(_Emission("simile", [m]))
			m += 1
			continue

		literal(m)
		m += 1

	return plan


def _note_runs (grid: SequencerGrid, start: int, stop: int) -> typing.List[typing.Tuple[str, int, bool]]:

	"""Split ``cells[start:stop]`` into ``(sound, length, is_continuation)`` runs."""

	runs: typing.List[typing.Tuple[str, int, bool]] = []

	for tick in range(start, stop):
		cell = grid.cells[tick]

		if cell is not None:
			runs.append((cell, 1, False))
		elif not runs:
			if tick == 0:
				runs.append((darbuka.constants.sounds.REST, 1, False))
			else:
				runs.append((_sounding_at(grid.cells, tick), 1, True))
		else:
			sound, length, continuation = runs[-1]
			runs[-1] = (sound, length + 1, continuation)

	return runs


def _render_runs (runs: typing.Sequence[typing.Tuple[str, int, bool]], needs_onset: bool) -> str:

	sounds = darbuka.constants.sounds
	out: typing.List[str] = []

	for position, (sound, length, continuation) in enumerate(runs):

		sustain = sounds.REST_CHAR if sound == sounds.REST else sounds.SUSTAIN_CHAR

		if continuation and not (needs_onset and position == 0):
			out.append(sustain * length)
		else:
			out.append(sounds.SOUND_TO_CHAR[sound] + sustain * (length - 1))

	return "".join(out)


def _strip_trailing_rest (runs: typing.List[typing.Tuple[str, int, bool]]) -> bool:

	"""Drop a final rest that a following barline would restore.  Returns True if dropped."""

	if len(runs) > 1 and runs[-1][0] == darbuka.constants.sounds.REST and not runs[-1][2]:
		runs.pop()
		return True

	return False


def _render_run (grid: SequencerGrid, measures: typing.Sequence[int], end: int, needs_onset: bool, strip_last: bool) -> str:

	"""
	Write consecutive measures literally.

	Measures are separated by ``|`` where the next one starts on an onset; a
	tied-over note is continued across a plain space instead.  A trailing
	rest is left out wherever a barline or repeat mark follows to pad it.
	"""

	spm = grid.sixteenths_per_measure
	out: typing.List[str] = []

	for position, measure in enumerate(measures):

		start = measure * spm
		stop = min(start + spm, end) if position == len(measures) - 1 and not strip_last else start + spm
		runs = _note_runs(grid, start, min(stop, len(grid.cells)))

		is_last = position == len(measures) - 1
		next_onset = not is_last and grid.cells[measures[position + 1] * spm] is not None

		if (is_last and strip_last) or next_onset:
			_strip_trailing_rest(runs)

		out.append(_render_runs(runs, needs_onset and position == 0))

		if not is_last:
			out.append(" | " if next_onset else " ")

	return "".join(out)


def _render_collapsed (grid: SequencerGrid, measures: typing.Sequence[int], end: int, needs_onset: bool, strip_last: bool) -> str:

	"""Write literal measures, compressing runs of identical measures."""

	spm = grid.sixteenths_per_measure

	# Measures joined by a tie must stay together.
	units: typing.List[typing.List[int]] = []

	for position, measure in enumerate(measures):
		starts_tied = grid.cells[measure * spm] is None and not (position == 0 and needs_onset)
		if units and starts_tied:
			units[-1].append(measure)
		else:
			units.append([measure])

	texts: typing.List[str] = []

	for position, unit in enumerate(units):
		is_last = position == len(units) - 1
		texts.append(_render_run(grid, unit, end, needs_onset=position == 0 and needs_onset, strip_last=strip_last if is_last else True))

	return collapse_repeats(texts, [len(unit) for unit in units])


def collapse_repeats (slices: typing.Sequence[str], measure_counts: typing.Optional[typing.Sequence[int]] = None) -> str:

	"""
	Join measure texts, compressing adjacent repetitions.

	A single measure repeated is written ``A |xN``; a longer block is
	written ``|: A | B :|xN``.  Each slice must start on an onset.

	Parameters:
		slices: Notation text of each unit, in order.
		measure_counts: Measures spanned by each slice (1 each by default).

	Example:
		```python
		collapse_repeats(["A", "A"])             # "A |x2"
		collapse_repeats(["A", "B", "A", "B"])   # "|: A | B :|x2"
		```
	"""

	counts = list(measure_counts) if measure_counts is not None else [1] * len(slices)
	parts: typing.List[str] = []
	i = 0

	while i < len(slices):

		best_length, best_times = 1, 1

		for length in range(1, (len(slices) - i) // 2 + 1):
			block = list(slices[i:i + length])
			times = 1
			while list(slices[i + times * length:i + (times + 1) * length]) == block:
				times += 1
			if times >= 2 and length * times > best_length * best_times:
				best_length, best_times = length, times

		if best_times < 2:
			parts.append(slices[i])
			i += 1
			continue

		block = list(slices[i:i + best_length])

		if best_length == 1 and counts[i] == 1:
			parts.append(f"{block[0]} |x{best_times}")
		else:
			parts.append(f"|: {' | '.join(block)} :|x{best_times}")

		i += best_length * best_times

	return " | ".join(parts)
