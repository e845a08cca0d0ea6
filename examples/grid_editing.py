
import logging

import darbuka
import darbuka.display
import darbuka.grid
import darbuka.links
import darbuka.midi_export
import darbuka.schedule

logging.basicConfig(level=logging.INFO)

# Maqsum, then a fill played three times
NOTATION = "D-T-__T-D---T--- |: D-D-T-K-T-K-T-K- :|x3"

time_signature = darbuka.TimeSignature(4, 4)
rhythm = darbuka.parse_rhythm(NOTATION, time_signature)
spm = time_signature.sixteenths_per_measure

grid = darbuka.grid.pad_grid(darbuka.grid.rhythm_to_grid(rhythm))
print(darbuka.display.GridDisplay(grid, rhythm.repeats).render())

# Editing the written fill changes every pass
ticks = darbuka.links.get_linked_positions(spm + 2, rhythm.repeats, spm)
grid = darbuka.grid.with_cells(grid, ticks, "slap")
print(darbuka.grid.grid_to_notation(grid, rhythm.repeats))

# Editing the last pass on its own unrolls it
grid = darbuka.grid.with_cells(grid, [3 * spm + 14], "dum")
print(darbuka.grid.grid_to_notation(grid, rhythm.repeats))

if __name__ == "__main__":
	edited = darbuka.parse_rhythm(darbuka.grid.grid_to_notation(grid, rhythm.repeats), time_signature)
	darbuka.midi_export.save_midi(darbuka.schedule.schedule_rhythm(edited, bpm=110), "maqsum.mid")
