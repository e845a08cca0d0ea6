"""Constants for darbuka.

- ``darbuka.constants.durations`` - Durations counted in sixteenth notes and their display categories
- ``darbuka.constants.sounds`` - Sound names, notation characters and a General MIDI drum map
"""
