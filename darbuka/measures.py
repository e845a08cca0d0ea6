import dataclasses
import logging
import typing

import darbuka.constants.sounds
import darbuka.notation
import darbuka.time_signature


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Measure:

	"""
	One bar of notes, in order.
	"""

	notes: typing.Tuple[darbuka.notation.Note, ...] = ()

	@property
	def total_duration (self) -> int:

		"""Sum of the note lengths in ticks."""

		return sum(note.duration_in_sixteenths for note in self.notes)

	@property
	def content_duration (self) -> int:

		"""Ticks covered by notes other than trailing padding."""

		return sum(note.duration_in_sixteenths for note in self.notes if not note.is_padding)

	def ticks (self) -> typing.Iterator[typing.Tuple[int, darbuka.notation.Note]]:

		"""Yield ``(offset, note)`` for each note, offset measured from the measure start."""

		offset = 0

		for note in self.notes:
			yield offset, note
			offset += note.duration_in_sixteenths


def segment (notes: typing.Sequence[darbuka.notation.Note], time_signature: darbuka.time_signature.TimeSignature) -> typing.List[Measure]:

	"""
	Group a flat note list into full measures.

	A note that does not fit in the current measure is split at the barline:
	the part closing the measure is marked ``is_tied_to`` and the part opening
	the next one ``is_tied_from``.  A note longer than a whole measure is
	split as many times as needed.  The final measure, if short, is completed
	with one rest marked ``is_padding``.

	Parameters:
		notes: Notes from :func:`darbuka.notation.parse_notation`.
		time_signature: Fixes the measure length.

	Returns:
		Measures that each last exactly ``sixteenths_per_measure`` ticks, or
		an empty list for empty input.
	"""

	sixteenths_per_measure = time_signature.sixteenths_per_measure

	measures: typing.List[Measure] = []
	current: typing.List[darbuka.notation.Note] = []
	filled = 0

	for note in notes:

		remaining = note.duration_in_sixteenths
		tied_from = note.is_tied_from

		while remaining > 0:

			space = sixteenths_per_measure - filled
			part = min(remaining, space)
			remaining -= part
			tied_to = remaining > 0 or note.is_tied_to

			current.append(darbuka.notation.make_note(
				note.sound,
				part,
				is_tied_from = tied_from,
				is_tied_to = tied_to,
				is_padding = note.is_padding
			))

			filled += part
			tied_from = True

			if filled == sixteenths_per_measure:
				measures.append(Measure(tuple(current)))
				current = []
				filled = 0

	if current:
		missing = sixteenths_per_measure - filled
		current.append(darbuka.notation.make_note(darbuka.constants.sounds.REST, missing, is_padding=True))
		measures.append(Measure(tuple(current)))
		logger.debug(f"Padded final measure with a {missing}-tick rest")

	return measures
