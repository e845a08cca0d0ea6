"""Sound names, notation characters and a General MIDI mapping.

Four struck sounds are modelled, plus rest:

- ``dum`` - the deep centre stroke (``D``)
- ``tak`` - the sharp rim stroke (``T``)
- ``ka`` - the rim stroke of the weaker hand (``K``)
- ``slap`` - the open slap (``S``)
- ``rest`` - silence (``_``)

``GM_DRUM_MAP`` maps each sound onto General MIDI percussion notes (channel 10,
0-indexed channel 9) so a schedule can be exported to any GM instrument::

	import darbuka.constants.sounds

	note = darbuka.constants.sounds.GM_DRUM_MAP["dum"]    # 64, low conga
"""

import typing


DUM = "dum"
TAK = "tak"
KA = "ka"
SLAP = "slap"
REST = "rest"

SOUNDS = (DUM, TAK, KA, SLAP)

NOTATION_MAP: typing.Dict[str, str] = {
	"D": DUM,
	"T": TAK,
	"K": KA,
	"S": SLAP,
	"_": REST,
}

SOUND_TO_CHAR: typing.Dict[str, str] = {sound: char for char, sound in NOTATION_MAP.items()}

SUSTAIN_CHAR = "-"
REST_CHAR = "_"


# ─── General MIDI ────────────────────────────────────────────────────

GM_DRUM_CHANNEL = 9

LOW_CONGA = 64
OPEN_HIGH_CONGA = 63
MUTE_HIGH_CONGA = 62
HIGH_BONGO = 60

GM_DRUM_MAP: typing.Dict[str, int] = {
	DUM: LOW_CONGA,
	TAK: OPEN_HIGH_CONGA,
	KA: MUTE_HIGH_CONGA,
	SLAP: HIGH_BONGO,
}
