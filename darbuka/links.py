"""Linked editing across repeats.

A source measure and the ghosts that copy it are one musical idea, so an
edit to a source tick is applied to the same position in every copy.  An
edit to a ghost tick stays local: it is how a single pass of a repeat is
varied, and :func:`darbuka.grid.grid_to_notation` will then unroll that
pass.

Example:
	```python
	rhythm = parse_rhythm("D-D-|: T-T- :|x3", TimeSignature(1, 4))

	get_linked_positions(4, rhythm.repeats, 4)     # [4, 8, 12]  source tick
	get_linked_positions(12, rhythm.repeats, 4)    # [12]        ghost tick
	```
"""

import typing

import darbuka.repeats
import darbuka.units


def _check (tick: int, sixteenths_per_measure: int) -> None:

	if sixteenths_per_measure <= 0:
		raise ValueError(f"sixteenths_per_measure must be positive, got {sixteenths_per_measure}")

	if tick < 0:
		raise ValueError(f"Tick must not be negative, got {tick}")


def ghost_measures (repeats: typing.Iterable[darbuka.repeats.RepeatMarker]) -> typing.Set[int]:

	"""Return every expanded measure index that exists only as a copy."""

	return set(darbuka.repeats.source_mapping(repeats))


def is_ghost_tick (
	tick: int,
	repeats: typing.Iterable[darbuka.repeats.RepeatMarker],
	sixteenths_per_measure: int
) -> bool:

	"""True if the tick falls in a section copy or a simile measure."""

	_check(tick, sixteenths_per_measure)

	return darbuka.units.measure_of(tick, sixteenths_per_measure) in ghost_measures(repeats)


def get_linked_positions (
	tick: int,
	repeats: typing.Iterable[darbuka.repeats.RepeatMarker],
	sixteenths_per_measure: int
) -> typing.List[darbuka.units.Tick]:

	"""
	Return every tick an edit at ``tick`` should be written to.

	Parameters:
		tick: The edited tick on the expanded timeline.
		repeats: Markers in expanded measure indices, as on
			:attr:`ParsedRhythm.repeats`.
		sixteenths_per_measure: Measure length of the rhythm.

	Returns:
		Sorted ticks, always including ``tick``.  A tick in a ghost measure,
		or outside any repeat, returns only itself.  A tick in a source
		measure also returns the same offset in each of its ghosts.

	Raises:
		ValueError: For a negative tick or a non-positive measure length.
	"""

	_check(tick, sixteenths_per_measure)

	mapping = darbuka.repeats.source_mapping(repeats)
	measure = darbuka.units.measure_of(tick, sixteenths_per_measure)

	if measure in mapping:
		return [darbuka.units.Tick(tick)]

	offset = tick - darbuka.units.measure_start(measure, sixteenths_per_measure)
	positions = {tick}

	for ghost, source in mapping.items():
		if source == measure:
			positions.add(darbuka.units.measure_start(ghost, sixteenths_per_measure) + offset)

	return [darbuka.units.Tick(position) for position in sorted(positions)]
