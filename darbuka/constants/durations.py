"""Duration constants counted in **sixteenth notes** (ticks).

One tick is one sixteenth note, the smallest addressable step of the expanded
timeline.  Multiply by a count for longer spans::

	import darbuka.constants.durations as dur

	# "3 quarter notes"
	length = 3 * dur.QUARTER       # 12 ticks
"""

SIXTEENTH = 1
EIGHTH = 2
DOTTED_EIGHTH = 3
QUARTER = 4
DOTTED_QUARTER = 6
HALF = 8
DOTTED_HALF = 12
WHOLE = 16
DOTTED_WHOLE = 24

# Display categories, smallest first.
CATEGORY_SIXTEENTH = "sixteenth"
CATEGORY_EIGHTH = "eighth"
CATEGORY_QUARTER = "quarter"
CATEGORY_HALF = "half"
CATEGORY_WHOLE = "whole"

DOTTED_VALUES = frozenset({DOTTED_EIGHTH, DOTTED_QUARTER, DOTTED_HALF})
