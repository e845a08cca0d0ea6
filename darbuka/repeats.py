"""Repeat syntax and repeat expansion.

Notation text is compressed: a repeated section or a repeated measure is
written once.  This module splits the structural tokens out of the text,
builds the measures as written (the *pre-expansion* list) and then unrolls
every repeat into the playable, tick-addressable *expanded* list.

Structural syntax:

- ``|`` - barline; closes the current measure, padding it with rest.
- ``|: ... :|`` - section repeat, played twice.
- ``|: ... :|x4`` - section repeat, played four times in total.
- ``%`` - simile; one measure that plays like the measure before it.
- ``|x3`` - the measure before plays three times in total (a shorthand for
  ``% %``).

Every structural token starts a fresh measure.

Two marker types describe the result, always in expanded measure indices:
:class:`SectionRepeat` and :class:`MeasureSimile`.  Measures created by
expansion are *ghosts*; :func:`source_mapping` maps each ghost to the
source measure it copies.
"""

import dataclasses
import logging
import re
import types
import typing

import darbuka.measures
import darbuka.notation
import darbuka.time_signature


logger = logging.getLogger(__name__)

_COUNT_PATTERN = re.compile(r"\s*[xX](\d+)")
_DANGLING_COUNT_PATTERN = re.compile(r"\s*[xX]")

NOTES = "notes"
BARLINE = "barline"
SECTION_START = "section_start"
SECTION_END = "section_end"
SIMILE = "simile"
MEASURE_REPEAT = "measure_repeat"


@dataclasses.dataclass(frozen=True)
class SectionRepeat:

	"""
	Measures ``start_measure`` to ``end_measure`` (inclusive) play
	``repeat_count + 1`` times.  The copies follow ``end_measure`` directly.
	"""

	start_measure: int
	end_measure: int
	repeat_count: int

	@property
	def length (self) -> int:

		"""Measures in one pass of the block."""

		return self.end_measure - self.start_measure + 1

	@property
	def last_measure (self) -> int:

		"""Index of the final measure of the final copy."""

		return self.end_measure + self.length * self.repeat_count

	def ghost_measures (self) -> typing.List[int]:

		"""Indices of every measure created by unrolling this repeat."""

		return list(range(self.end_measure + 1, self.last_measure + 1))

	def passes (self) -> typing.List[typing.List[int]]:

		"""Measure indices of each pass, the source block first."""

		return [
			list(range(self.start_measure + n * self.length, self.start_measure + (n + 1) * self.length))
			for n in range(self.repeat_count + 1)
		]


@dataclasses.dataclass(frozen=True)
class MeasureSimile:

	"""
	Each measure in ``repeat_measures`` plays exactly like ``source_measure``.
	"""

	source_measure: int
	repeat_measures: typing.Tuple[int, ...]

	def ghost_measures (self) -> typing.List[int]:

		return list(self.repeat_measures)


RepeatMarker = typing.Union[SectionRepeat, MeasureSimile]


@dataclasses.dataclass(frozen=True)
class Token:

	"""
	A piece of notation text: a run of note characters or one structural mark.

	Attributes:
		kind: One of ``notes``, ``barline``, ``section_start``,
			``section_end``, ``simile`` or ``measure_repeat``.
		offset: Position of the token in the text.
		text: The note characters (``notes`` tokens only).
		count: The ``xN`` total play count, if one was written.
	"""

	kind: str
	offset: int
	text: str = ""
	count: typing.Optional[int] = None


@dataclasses.dataclass(frozen=True)
class Resolution:

	"""The expanded measure list produced by :func:`resolve_repeats`."""

	measures: typing.Tuple[darbuka.measures.Measure, ...]
	repeats: typing.Tuple[RepeatMarker, ...]
	measure_source_mapping: typing.Mapping[int, int]
	warnings: typing.Tuple[str, ...] = ()


def tokenize_structure (text: str) -> typing.List[Token]:

	"""
	Split notation text into note runs and structural tokens.

	Raises:
		NotationError: On a ``:`` that is not part of ``:|``, or an ``x`` with
			no count after a repeat mark.

	Example:
		```python
		tokenize_structure("D-T- |: K-K- :|x3")
		# notes 'D-T- ', section_start, notes ' K-K- ', section_end (count 3)
		```
	"""

	tokens: typing.List[Token] = []
	buffer: typing.List[str] = []
	buffer_start = 0
	i = 0

	def flush () -> None:
		if buffer and "".join(buffer).strip():
			tokens.append(Token(NOTES, buffer_start, "".join(buffer)))
		buffer.clear()

	while i < len(text):

		char = text[i]

		if char == "|":
			flush()

			if text.startswith("|:", i):
				tokens.append(Token(SECTION_START, i))
				i += 2

			else:
				count, i_after = _read_count(text, i + 1)
				if count is not None:
					tokens.append(Token(MEASURE_REPEAT, i, count=count))
					i = i_after
				else:
					tokens.append(Token(BARLINE, i))
					i += 1

			buffer_start = i
			continue

		if char == ":":
			flush()

			if not text.startswith(":|", i):
				raise darbuka.notation.NotationError(f"Expected ':|' at position {i}", i)

			count, i_after = _read_count(text, i + 2)
			tokens.append(Token(SECTION_END, i, count=count))
			i = i_after if count is not None else i + 2
			buffer_start = i
			continue

		if char == "%":
			flush()
			tokens.append(Token(SIMILE, i))
			i += 1
			buffer_start = i
			continue

		if not buffer:
			buffer_start = i

		buffer.append(char)
		i += 1

	flush()

	return tokens


def _read_count (text: str, position: int) -> typing.Tuple[typing.Optional[int], int]:

	"""Read an ``xN`` repeat count starting at ``position``, if there is one."""

	match = _COUNT_PATTERN.match(text, position)

	if match:
		count = int(match.group(1))
		if count < 1:
			raise darbuka.notation.NotationError(f"Repeat count at position {match.start(1)} must be at least 1", match.start(1))
		return count, match.end()

	dangling = _DANGLING_COUNT_PATTERN.match(text, position)

	if dangling:
		raise darbuka.notation.NotationError(f"Repeat mark 'x' at position {dangling.end() - 1} has no count", dangling.end() - 1)

	return None, position


def build_source_measures (
	tokens: typing.Sequence[Token],
	time_signature: darbuka.time_signature.TimeSignature
) -> typing.Tuple[typing.List[darbuka.measures.Measure], typing.List[RepeatMarker]]:

	"""
	Build the measures as written, before any repeat is unrolled.

	Each note run is segmented on its own, so every structural token closes
	the measure before it.  Simile slots are empty placeholder measures; the
	markers returned refer to pre-expansion indices.

	Raises:
		NotationError: On malformed notes, nested or unterminated sections,
			or ``:|`` without ``|:``.
		StructuralError: On an empty section, or a simile with nothing
			before it.
	"""

	measures: typing.List[darbuka.measures.Measure] = []
	markers: typing.List[RepeatMarker] = []
	open_section: typing.Optional[Token] = None
	open_index = 0

	for token in tokens:

		if token.kind == NOTES:
			notes = darbuka.notation.parse_notation(token.text, start=token.offset)
			measures.extend(darbuka.measures.segment(notes, time_signature))

		elif token.kind == SECTION_START:
			if open_section is not None:
				raise darbuka.notation.NotationError(f"Repeat section at position {token.offset} opens inside the section at position {open_section.offset}", token.offset)
			open_section = token
			open_index = len(measures)

		elif token.kind == SECTION_END:
			if open_section is None:
				raise darbuka.notation.NotationError(f"':|' at position {token.offset} has no matching '|:'", token.offset)
			if len(measures) == open_index:
				raise darbuka.notation.StructuralError(f"Repeat section at position {open_section.offset} contains no measures")
			total = token.count if token.count is not None else 2
			markers.append(SectionRepeat(open_index, len(measures) - 1, total - 1))
			open_section = None

		elif token.kind in (SIMILE, MEASURE_REPEAT):
			if not measures:
				raise darbuka.notation.StructuralError(f"Repeat mark at position {token.offset} has no measure before it to repeat")

			source = len(measures) - 1
			copies = 1 if token.kind == SIMILE else (token.count or 1) - 1

			if copies > 0:
				placeholders = tuple(range(len(measures), len(measures) + copies))
				measures.extend(darbuka.measures.Measure() for _ in placeholders)
				markers.append(MeasureSimile(source, placeholders))

	if open_section is not None:
		raise darbuka.notation.NotationError(f"Repeat section at position {open_section.offset} is never closed with ':|'", open_section.offset)

	return measures, markers


def resolve_repeats (
	measures: typing.Sequence[darbuka.measures.Measure],
	markers: typing.Sequence[RepeatMarker]
) -> Resolution:

	"""
	Unroll repeats into the expanded, playable measure list.

	Simile placeholders keep their index and take the notes of their source;
	chains such as ``A % %`` all point at ``A``.  Each section gains
	``repeat_count`` verbatim copies straight after its last measure, and
	every marker is rewritten to expanded indices.

	A simile placeholder that sits inside a repeated section is ambiguous
	(its copies would be ghosts of both).  The section wins: the simile
	marker is dropped with a warning and the placeholder becomes an
	ordinary measure holding the source's notes.

	Parameters:
		measures: Pre-expansion measures from :func:`build_source_measures`.
		markers: Markers in pre-expansion indices.

	Raises:
		StructuralError: If a marker refers to a measure that does not
			exist, or two sections overlap.
	"""

	_validate_markers(measures, markers)

	sections = sorted((m for m in markers if isinstance(m, SectionRepeat)), key=lambda m: m.start_measure)
	similes = [m for m in markers if isinstance(m, MeasureSimile)]
	warnings: typing.List[str] = []

	# Placeholder index -> the pre-expansion measure it plays like.
	placeholder_source: typing.Dict[int, int] = {}
	kept_placeholders: typing.Set[int] = set()

	for simile in similes:
		for index in simile.repeat_measures:
			placeholder_source[index] = simile.source_measure
			section = _section_containing(sections, index)

			if section is not None:
				message = f"Simile in measure {index + 1} lies inside the repeat section of measures {section.start_measure + 1}-{section.end_measure + 1}; the section repeat takes precedence"
				logger.warning(message)
				warnings.append(message)
			else:
				kept_placeholders.add(index)

	filled: typing.List[darbuka.measures.Measure] = []
	ultimate: typing.Dict[int, int] = {}

	for index, measure in enumerate(measures):

		if index in placeholder_source:
			source = placeholder_source[index]
			filled.append(filled[source])
			if index in kept_placeholders:
				ultimate[index] = ultimate.get(source, source)
		else:
			filled.append(measure)

	expanded: typing.List[darbuka.measures.Measure] = []
	new_index: typing.Dict[int, int] = {}
	section_ends = {section.end_measure: section for section in sections}

	for index, measure in enumerate(filled):

		new_index[index] = len(expanded)
		expanded.append(measure)

		section = section_ends.get(index)

		if section is not None:
			block = expanded[new_index[section.start_measure]:]
			for _ in range(section.repeat_count):
				expanded.extend(block)

	repeats: typing.List[RepeatMarker] = [
		SectionRepeat(new_index[s.start_measure], new_index[s.end_measure], s.repeat_count)
		for s in sections
	]

	by_source: typing.Dict[int, typing.List[int]] = {}

	for index in sorted(ultimate):
		by_source.setdefault(ultimate[index], []).append(new_index[index])

	for source, placeholders in by_source.items():
		repeats.append(MeasureSimile(new_index[source], tuple(placeholders)))

	repeats.sort(key=_marker_start)

	logger.debug(f"Expanded {len(measures)} written measures to {len(expanded)}")

	return Resolution(
		measures = tuple(expanded),
		repeats = tuple(repeats),
		measure_source_mapping = types.MappingProxyType(source_mapping(repeats)),
		warnings = tuple(warnings)
	)


def _validate_markers (measures: typing.Sequence[darbuka.measures.Measure], markers: typing.Sequence[RepeatMarker]) -> None:

	count = len(measures)
	sections: typing.List[SectionRepeat] = []

	for marker in markers:

		if isinstance(marker, SectionRepeat):
			if not 0 <= marker.start_measure <= marker.end_measure < count:
				raise darbuka.notation.StructuralError(f"Repeat section covers measures {marker.start_measure + 1}-{marker.end_measure + 1}, but the rhythm has {count}")
			if marker.repeat_count < 0:
				raise darbuka.notation.StructuralError(f"Repeat count must not be negative, got {marker.repeat_count}")
			for other in sections:
				if marker.start_measure <= other.end_measure and other.start_measure <= marker.end_measure:
					raise darbuka.notation.StructuralError(f"Repeat sections at measures {other.start_measure + 1} and {marker.start_measure + 1} overlap")
			sections.append(marker)

		elif isinstance(marker, MeasureSimile):
			if not 0 <= marker.source_measure < count:
				raise darbuka.notation.StructuralError(f"Simile repeats measure {marker.source_measure + 1}, but the rhythm has {count}")
			for index in marker.repeat_measures:
				if not marker.source_measure < index < count:
					raise darbuka.notation.StructuralError(f"Simile in measure {index + 1} must follow its source measure {marker.source_measure + 1} within {count} measures")

		else:
			raise TypeError(f"Unknown repeat marker {marker!r}")


def _section_containing (sections: typing.Sequence[SectionRepeat], index: int) -> typing.Optional[SectionRepeat]:

	for section in sections:
		if section.start_measure <= index <= section.end_measure:
			return section

	return None


def _marker_start (marker: RepeatMarker) -> int:

	if isinstance(marker, SectionRepeat):
		return marker.start_measure

	return marker.source_measure


def source_mapping (repeats: typing.Iterable[RepeatMarker]) -> typing.Dict[int, int]:

	"""
	Map every ghost measure to the source measure it copies.

	Source measures are absent from the result.  Markers must use expanded
	indices, as returned by :func:`resolve_repeats`.
	"""

	mapping: typing.Dict[int, int] = {}

	for marker in repeats:

		if isinstance(marker, SectionRepeat):
			for ghost in marker.ghost_measures():
				mapping[ghost] = marker.start_measure + (ghost - marker.start_measure) % marker.length

		elif isinstance(marker, MeasureSimile):
			for ghost in marker.repeat_measures:
				mapping[ghost] = marker.source_measure

	return mapping


def _canonical (measure: darbuka.measures.Measure) -> typing.Tuple[typing.Tuple[str, int], ...]:

	return tuple((note.sound, note.duration_in_sixteenths) for note in measure.notes)


def detect_identical_measures (
	measures: typing.Sequence[darbuka.measures.Measure],
	existing: typing.Sequence[RepeatMarker] = ()
) -> typing.List[RepeatMarker]:

	"""
	Add simile markers for runs of identical consecutive measures.

	Measures already covered by a marker (as source or ghost) are left
	alone.  Returns the existing markers followed by the new ones.

	Example:
		```python
		# measures: A A A B B
		detect_identical_measures(measures)
		# [MeasureSimile(0, (1, 2)), MeasureSimile(3, (4,))]
		```
	"""

	repeats = list(existing)

	if len(measures) < 2:
		return repeats

	covered: typing.Set[int] = set()

	for marker in existing:
		if isinstance(marker, SectionRepeat):
			covered.update(range(marker.start_measure, marker.last_measure + 1))
		else:
			covered.add(marker.source_measure)
			covered.update(marker.repeat_measures)

	i = 0

	while i < len(measures):

		if i in covered:
			i += 1
			continue

		source = _canonical(measures[i])
		j = i + 1

		while j < len(measures) and j not in covered and _canonical(measures[j]) == source:
			j += 1

		if j > i + 1:
			repeats.append(MeasureSimile(i, tuple(range(i + 1, j))))

		i = max(j, i + 1)

	return repeats
