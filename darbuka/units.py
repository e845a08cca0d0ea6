"""Distinct integer types for the three coordinate spaces.

``Tick`` counts sixteenth notes along the expanded timeline, ``MeasureIndex``
counts measures along the expanded timeline and ``CharOffset`` is a position
in the notation text.  They are plain ``int`` at runtime; the separate names
keep a type checker from mixing them up.
"""

import typing


Tick = typing.NewType("Tick", int)
MeasureIndex = typing.NewType("MeasureIndex", int)
CharOffset = typing.NewType("CharOffset", int)


def measure_of (tick: int, sixteenths_per_measure: int) -> MeasureIndex:

	"""Return the expanded measure containing a tick."""

	return MeasureIndex(tick // sixteenths_per_measure)


def measure_start (measure: int, sixteenths_per_measure: int) -> Tick:

	"""Return the first tick of an expanded measure."""

	return Tick(measure * sixteenths_per_measure)
