import dataclasses
import logging
import types
import typing

import darbuka.measures
import darbuka.notation
import darbuka.repeats
import darbuka.time_signature
import darbuka.units


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class ParsedRhythm:

	"""
	A fully expanded rhythm, ready to render, play or edit.

	A ``ParsedRhythm`` is never changed after it is built; any edit to the
	notation or the time signature produces a new one through
	:func:`parse_rhythm`.

	Attributes:
		is_valid: False when the notation could not be parsed.  Collaborators
			must not render, play or export an invalid rhythm.
		time_signature: The meter used to segment the notation.
		measures: The expanded measures, ghosts included.
		repeats: Repeat markers in expanded measure indices.
		measure_source_mapping: Ghost measure index -> source measure index.
			Source measures are absent.
		error: Human-readable reason when ``is_valid`` is False.
		warnings: Non-fatal problems, such as a simile overridden by a
			section repeat.
	"""

	is_valid: bool
	time_signature: darbuka.time_signature.TimeSignature
	measures: typing.Tuple[darbuka.measures.Measure, ...] = ()
	repeats: typing.Tuple[darbuka.repeats.RepeatMarker, ...] = ()
	measure_source_mapping: typing.Mapping[int, int] = dataclasses.field(default_factory=lambda: types.MappingProxyType({}))
	error: typing.Optional[str] = None
	warnings: typing.Tuple[str, ...] = ()

	@property
	def sixteenths_per_measure (self) -> int:

		return self.time_signature.sixteenths_per_measure

	@property
	def total_ticks (self) -> int:

		"""Length of the expanded timeline in ticks."""

		return len(self.measures) * self.sixteenths_per_measure

	def is_ghost (self, index: int) -> bool:

		"""True if the measure exists only because a repeat was unrolled."""

		source = self.measure_source_mapping.get(index)
		return source is not None and source != index

	def source_of (self, index: int) -> int:

		"""Return the source measure a measure copies (itself for a source measure)."""

		return self.measure_source_mapping.get(index, index)

	def measure_at_tick (self, tick: int) -> darbuka.units.MeasureIndex:

		"""
		Return the expanded measure index containing ``tick``.

		Ticks past the end return ``len(measures)``, the index at which a new
		measure would be appended.
		"""

		if tick < 0:
			raise ValueError(f"Tick must not be negative, got {tick}")

		return darbuka.units.MeasureIndex(min(tick // self.sixteenths_per_measure, len(self.measures)))


def parse_rhythm (
	text: str,
	time_signature: darbuka.time_signature.TimeSignature,
	detect_similes: bool = False
) -> ParsedRhythm:

	"""
	Parse notation text into an expanded, tick-addressable rhythm.

	Runs the whole pipeline: structural tokens are split off, each note run is
	parsed and segmented into measures, and repeats are unrolled.  This
	function never raises for bad notation; the result is marked invalid
	instead, so an editor can keep showing the last good state while the
	user types.

	Parameters:
		text: Notation such as ``"D-T-__T-D---T---|: D-D- :|x3"``.
		time_signature: The meter to segment by.
		detect_similes: Also mark runs of identical consecutive measures as
			similes of the first, linking them for editing.

	Returns:
		A :class:`ParsedRhythm`.  Empty or blank text is a valid rhythm with
		no measures.

	Example:
		```python
		rhythm = parse_rhythm("D---T-", TimeSignature(4, 4))
		rhythm.measures[0].total_duration    # 16
		```
	"""

	if not text.strip():
		return ParsedRhythm(is_valid=True, time_signature=time_signature)

	try:
		tokens = darbuka.repeats.tokenize_structure(text)
		written, markers = darbuka.repeats.build_source_measures(tokens, time_signature)
		resolution = darbuka.repeats.resolve_repeats(written, markers)

	except darbuka.notation.RhythmError as exc:
		logger.debug(f"Invalid notation {text!r}: {exc}")
		return ParsedRhythm(is_valid=False, time_signature=time_signature, error=str(exc))

	repeats = list(resolution.repeats)
	mapping = resolution.measure_source_mapping

	if detect_similes:
		repeats = darbuka.repeats.detect_identical_measures(resolution.measures, repeats)
		mapping = types.MappingProxyType(darbuka.repeats.source_mapping(repeats))

	return ParsedRhythm(
		is_valid = True,
		time_signature = time_signature,
		measures = resolution.measures,
		repeats = tuple(repeats),
		measure_source_mapping = mapping,
		warnings = resolution.warnings
	)
