"""Command line entry point: ``python -m darbuka "D-T-__T-D---T---"``."""

import argparse
import logging
import sys
import typing

import darbuka.config
import darbuka.display
import darbuka.grid
import darbuka.midi_export
import darbuka.rhythm
import darbuka.schedule


logger = logging.getLogger(__name__)


def _build_parser () -> argparse.ArgumentParser:

	parser = argparse.ArgumentParser(prog="darbuka", description="Parse and expand darbuka rhythm notation")
	parser.add_argument("notation", help="Rhythm notation, e.g. 'D-T-__T-D---T---'")
	parser.add_argument("--time-signature", help="Meter such as 4/4 or 7/8 (default: from config, else 4/4)")
	parser.add_argument("--beat-grouping", help="Beat grouping such as 3+2+2")
	parser.add_argument("--config", default="darbuka.yaml", help="YAML config file (default: darbuka.yaml)")
	parser.add_argument("--grid", action="store_true", help="Print the sequencer grid")
	parser.add_argument("--midi", metavar="FILE", help="Export a Standard MIDI File")
	parser.add_argument("--bpm", type=float, help="Tempo for export, in quarter notes per minute")
	parser.add_argument("--verbose", action="store_true", help="Log pipeline detail")

	return parser


def format_measures (rhythm: darbuka.rhythm.ParsedRhythm) -> typing.List[str]:

	"""One line per expanded measure, marking ghosts with the measure they copy."""

	lines: typing.List[str] = []

	for index, measure in enumerate(rhythm.measures):

		notes = ", ".join(f"{note.sound} {note.duration_in_sixteenths}" for note in measure.notes if not note.is_padding)
		suffix = f"  (copy of {rhythm.source_of(index) + 1})" if rhythm.is_ghost(index) else ""
		lines.append(f"{index + 1:>3}: {notes or 'empty'}{suffix}")

	return lines


def main (argv: typing.Optional[typing.Sequence[str]] = None) -> int:

	"""
	Parse the notation and print its expanded measures.

	Returns the process exit status: 0 on success, 1 for invalid notation or
	arguments.
	"""

	args = _build_parser().parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

	config = darbuka.config.load_config(args.config)

	if args.time_signature:
		config["time_signature"] = args.time_signature
	if args.beat_grouping:
		config["beat_grouping"] = args.beat_grouping
	if args.bpm is not None:
		config["bpm"] = args.bpm

	try:
		time_signature = darbuka.config.time_signature_from_config(config)
		settings = darbuka.config.playback_from_config(config)
	except (ValueError, TypeError) as e:
		logger.error(f"Invalid settings: {e}")
		return 1

	rhythm = darbuka.rhythm.parse_rhythm(args.notation, time_signature)

	if not rhythm.is_valid:
		logger.error(f"Invalid notation: {rhythm.error}")
		return 1

	print(f"{time_signature}, {len(rhythm.measures)} measures")

	for line in format_measures(rhythm):
		print(line)

	if args.grid:
		grid = darbuka.grid.rhythm_to_grid(rhythm)
		grid = darbuka.grid.pad_grid(grid, int(config["ghost_measures"]))
		print(darbuka.display.GridDisplay(grid, rhythm.repeats).render())

	if args.midi:
		try:
			schedule = darbuka.schedule.schedule_rhythm(rhythm, float(config["bpm"]), settings)
		except ValueError as e:
			logger.error(f"Cannot export: {e}")
			return 1
		darbuka.midi_export.save_midi(schedule, args.midi)

	return 0


if __name__ == "__main__":
	sys.exit(main())
