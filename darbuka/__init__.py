
"""
Darbuka - percussion rhythm notation for Python.

A rhythm is written as a compact line of text, one character per sixteenth
note::

	D-T-__T-D---T---|: D-D- :|x3

``darbuka`` turns that text into a fully expanded, tick-addressable
timeline, and turns edits made on a step-sequencer grid back into compact
text.  The same expanded rhythm feeds a renderer, a grid editor and a
playback scheduler.

Notation:

- ``D`` ``T`` ``K`` ``S`` - dum, tak, ka and slap; ``_`` - rest.
- ``-`` - hold the previous note one more sixteenth.
- ``|`` - barline; the measure is completed with rest.
- ``|: ... :|x3`` - play a section three times (``:|`` alone means twice).
- ``%`` - repeat the previous measure; ``|x3`` - play it three times.

What it provides:

- **Parsing and measures.** Notes are split across barlines with ties,
  and short final measures are padded, for any meter from 2/4 to 13/8.
- **Repeats that stay linked.** Repeated sections and similes are unrolled
  into *ghost* measures that remember their source, so an edit to the
  source reaches every copy while an edit to one copy stays local.
- **Grid round trips.** ``notation_to_grid()`` and ``grid_to_notation()``
  convert between text and a one-cell-per-tick grid, re-compressing
  repeats that are still intact.
- **Playback.** Accented schedules with a metronome, MIDI file export and
  an ASCII grid view for the terminal.

Minimal example:

	```python
	import darbuka

	ts = darbuka.TimeSignature(4, 4)
	rhythm = darbuka.parse_rhythm("D-T-__T-D---T--- %", ts)

	grid = darbuka.notation_to_grid("D-T-__T-D---T--- %", ts)
	ticks = darbuka.get_linked_positions(2, rhythm.repeats, ts.sixteenths_per_measure)   # [2, 18]
	```

Package-level exports: ``parse_rhythm``, ``ParsedRhythm``, ``TimeSignature``,
``notation_to_grid``, ``grid_to_notation``, ``SequencerGrid``,
``get_linked_positions``, ``RhythmError``, ``NotationError``, ``StructuralError``.
"""

import darbuka.grid
import darbuka.links
import darbuka.notation
import darbuka.rhythm
import darbuka.time_signature


ParsedRhythm = darbuka.rhythm.ParsedRhythm
parse_rhythm = darbuka.rhythm.parse_rhythm
TimeSignature = darbuka.time_signature.TimeSignature
SequencerGrid = darbuka.grid.SequencerGrid
notation_to_grid = darbuka.grid.notation_to_grid
grid_to_notation = darbuka.grid.grid_to_notation
get_linked_positions = darbuka.links.get_linked_positions
RhythmError = darbuka.notation.RhythmError
NotationError = darbuka.notation.NotationError
StructuralError = darbuka.notation.StructuralError
