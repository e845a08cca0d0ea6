"""ASCII rendering of a sequencer grid for the terminal.

One row per sound that occurs in the rhythm, one column per tick, with a
barline between measures.  Ghost measures (copies made by a repeat or a
simile) are numbered in brackets in the header so it is clear which
measures edit together.

```
          1               (2)
  dum     |X - - - . . . . |X - - - . . . . |
  tak     |. . . . X - . . |. . . . X - . . |
```

Cells past the content are drawn blank.
"""

import shutil
import typing

import darbuka.constants.sounds
import darbuka.grid
import darbuka.links
import darbuka.repeats


_LABEL_WIDTH = 8
_MIN_TERMINAL_WIDTH = 40

_ONSET = "X"
_SUSTAIN = "-"
_EMPTY = "."
_BEYOND = " "


class GridDisplay:

	"""Multi-line ASCII view of a :class:`darbuka.grid.SequencerGrid`."""

	def __init__ (
		self,
		grid: darbuka.grid.SequencerGrid,
		repeats: typing.Sequence[darbuka.repeats.RepeatMarker] = (),
		width: typing.Optional[int] = None
	) -> None:

		"""
		Parameters:
			grid: The grid to draw.
			repeats: Markers used to label ghost measures.
			width: Terminal width; detected when omitted.
		"""

		self._grid = grid
		self._repeats = tuple(repeats)
		self._width = width
		self._lines: typing.List[str] = []

	@property
	def lines (self) -> typing.List[str]:

		return list(self._lines)

	@property
	def line_count (self) -> int:

		"""Number of terminal lines the grid currently occupies."""

		return len(self._lines)

	def build (self) -> None:

		"""Rebuild the lines from the grid."""

		term_width = self._width if self._width is not None else shutil.get_terminal_size(fallback=(80, 24)).columns

		if term_width < _MIN_TERMINAL_WIDTH or not self._grid.cells:
			self._lines = []
			return

		spm = self._grid.sixteenths_per_measure
		measures = self._fit_measures(self._grid.measure_count, spm, term_width)
		ghosts = darbuka.links.ghost_measures(self._repeats)

		header = " " * (_LABEL_WIDTH + 2)
		for measure in range(measures):
			number = f"({measure + 1})" if measure in ghosts else f"{measure + 1}"
			header += " " + number.ljust(spm * 2)
		lines = [header.rstrip()]

		for sound in self._sounds():
			label = f"  {sound[:_LABEL_WIDTH].ljust(_LABEL_WIDTH)}"
			row = "".join(f"|{self._render_measure(sound, measure)}" for measure in range(measures))
			lines.append(f"{label}{row}|")

		self._lines = lines

	def render (self) -> str:

		"""Build and return the grid as one string."""

		self.build()
		return "\n".join(self._lines)

	def _sounds (self) -> typing.List[str]:

		present = set(self._grid.cells)
		return [sound for sound in darbuka.constants.sounds.SOUNDS if sound in present]

	def _render_measure (self, sound: str, measure: int) -> str:

		spm = self._grid.sixteenths_per_measure
		start = measure * spm
		chars: typing.List[str] = []

		for tick in range(start, start + spm):

			if tick >= min(self._grid.actual_length, len(self._grid.cells)):
				chars.append(_BEYOND)
			elif self._grid.cells[tick] == sound:
				chars.append(_ONSET)
			elif self._grid.cells[tick] is None and darbuka.grid.sound_at(self._grid, tick) == sound:
				chars.append(_SUSTAIN)
			else:
				chars.append(_EMPTY)

		return " ".join(chars) + " "

	@staticmethod
	def _fit_measures (measure_count: int, spm: int, term_width: int) -> int:

		"""Determine how many whole measures fit in the terminal, at least one."""

		# "  " + label + one "|" per measure + 2 chars per tick + closing "|"
		overhead = 2 + _LABEL_WIDTH + 1
		per_measure = 1 + spm * 2

		return max(1, min(measure_count, (term_width - overhead) // per_measure))
