"""
Chord model: qualities, interval sets and pitch-class helpers.

Everything here is pure and total. Unknown qualities degrade to a major
triad instead of raising, so callers fed by a keyboard decoder never have
to guard against a stale or misspelled quality value.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, FrozenSet, List, Tuple, Union

from .errors import ParseError

logger = logging.getLogger(__name__)


# ----------------------------
# Enumerations
# ----------------------------

class Quality(str, Enum):
    MAJOR = "major"
    MINOR = "minor"
    DOMINANT7 = "dominant7"
    DIMINISHED = "diminished"
    DIMINISHED7 = "diminished7"
    HALF_DIMINISHED7 = "halfdiminished7"
    MINOR7 = "minor7"
    MAJOR7 = "major7"
    MIN_MAJ7 = "minmaj7"
    DOM_SUS = "domsus"
    SUS = "sus"
    SUS2 = "sus2"
    AUG = "aug"
    ADD9 = "add9"
    MIN_ADD9 = "minadd9"


class Extension(str, Enum):
    NONE = "none"
    ADD9 = "add9"
    ADD11 = "add11"
    ADD13 = "add13"
    SHARP11 = "sharp11"


class Position(str, Enum):
    """Which chord member sounds in the bass."""
    ROOT = "root"
    FIRST = "first"
    SECOND = "second"
    THIRD = "third"


QualityLike = Union[Quality, str]

QUALITY_INTERVALS: Dict[Quality, Tuple[int, ...]] = {
    Quality.MAJOR:            (0, 4, 7),
    Quality.MINOR:            (0, 3, 7),
    Quality.DOMINANT7:        (0, 4, 7, 10),
    Quality.DIMINISHED:       (0, 3, 6),
    Quality.DIMINISHED7:      (0, 3, 6, 9),
    Quality.HALF_DIMINISHED7: (0, 3, 6, 10),
    Quality.MINOR7:           (0, 3, 7, 10),
    Quality.MAJOR7:           (0, 4, 7, 11),
    Quality.MIN_MAJ7:         (0, 3, 7, 11),
    Quality.DOM_SUS:          (0, 5, 7, 10),
    Quality.SUS:              (0, 5, 7),
    Quality.SUS2:             (0, 2, 7),
    Quality.AUG:              (0, 4, 8),
    Quality.ADD9:             (0, 2, 4, 7),
    Quality.MIN_ADD9:         (0, 2, 3, 7),
}

DEFAULT_INTERVALS: Tuple[int, ...] = QUALITY_INTERVALS[Quality.MAJOR]

_POSITION_INDEX: Dict[Position, int] = {
    Position.ROOT: 0,
    Position.FIRST: 1,
    Position.SECOND: 2,
    Position.THIRD: 3,
}

# Default quality per bass degree (0..11 above C) for each inversion row of
# the chord keyboard. Degrees are absolute pitch classes of the pressed key.
_M, _m = Quality.MAJOR, Quality.MINOR
DEFAULT_QUALITIES: Dict[Position, Tuple[Quality, ...]] = {
    Position.ROOT: (_M, _M, _m, _M, _m, _M, Quality.DIMINISHED7, _M, _M, _m, _M, Quality.HALF_DIMINISHED7),
    Position.FIRST: (_m, _M, _M, _m, _M, _m, _M, _m, _m, _M, _m, _M),
    Position.SECOND: (_M, _M, _M, _M, _m, _M, _M, _M, _M, _m, _M, _m),
    Position.THIRD: (
        Quality.MINOR7, Quality.MAJOR7, Quality.MINOR7, Quality.MAJOR7,
        Quality.MAJOR7, Quality.DOMINANT7, Quality.MAJOR7, Quality.MINOR7,
        Quality.MAJOR7, Quality.MINOR7, Quality.DOMINANT7, Quality.MAJOR7,
    ),
}
del _M, _m


# ----------------------------
# Interval / pitch-class helpers
# ----------------------------

def _coerce_quality(quality: QualityLike) -> Quality:
    if isinstance(quality, Quality):
        return quality
    try:
        return Quality(str(quality).strip().lower())
    except ValueError:
        logger.debug("unknown chord quality %r, using major", quality)
        return Quality.MAJOR


def intervals(quality: QualityLike) -> Tuple[int, ...]:
    """Ordered, deduplicated semitone offsets from the root (major if unknown)."""
    ivs = QUALITY_INTERVALS.get(_coerce_quality(quality), DEFAULT_INTERVALS)
    out: List[int] = []
    for iv in ivs:
        pc = iv % 12
        if pc not in out:
            out.append(pc)
    return tuple(out)


def chord_tones(root: int, quality: QualityLike) -> Tuple[int, ...]:
    """Absolute pitch classes in chord-degree order: root, third, fifth, seventh."""
    out: List[int] = []
    for iv in intervals(quality):
        pc = (root + iv) % 12
        if pc not in out:
            out.append(pc)
    return tuple(out)


def pitch_classes(root: int, quality: QualityLike) -> FrozenSet[int]:
    return frozenset(chord_tones(root, quality))


def inversion_bass(root: int, quality: QualityLike, position: Position, *, base: int = 48) -> int:
    """
    Bass pitch for an inversion, placed in the octave starting at `base`.

    A third inversion of a triad has no fourth member and falls back to
    the root.
    """
    tones = chord_tones(root, quality)
    idx = _POSITION_INDEX[Position(position)]
    pc = tones[idx] if idx < len(tones) else tones[0]
    return base + (pc - base) % 12


def default_quality(position: Position, degree: int) -> Quality:
    row = DEFAULT_QUALITIES.get(Position(position))
    if row is None:
        return Quality.MAJOR
    return row[degree % 12]


# ----------------------------
# Note names
# ----------------------------

NOTE_NAMES: Tuple[str, ...] = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")

NOTE_BASE_PC: Dict[str, int] = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}


def parse_pitch_class(note: str) -> int:
    """Parse a pitch-class note name like 'C', 'F#', 'Bb'."""
    n = note.strip()
    if not n:
        raise ParseError("Empty note name.")
    letter = n[0].upper()
    if letter not in NOTE_BASE_PC:
        raise ParseError(f"Invalid note letter '{n[0]}'. Expected A-G.")
    accidental = n[1:]
    if accidental not in ("", "#", "b"):
        raise ParseError(f"Invalid accidental in note '{note}'. Only '#' and 'b' are supported.")
    pc = NOTE_BASE_PC[letter]
    if accidental == "#":
        pc = (pc + 1) % 12
    elif accidental == "b":
        pc = (pc - 1) % 12
    return pc


def note_name(pitch: int) -> str:
    """MIDI number to scientific pitch name (60 -> 'C4')."""
    return f"{NOTE_NAMES[pitch % 12]}{pitch // 12 - 1}"


def note_number(name: str) -> int:
    """Scientific pitch name to MIDI number ('C4' -> 60, 'Bb-1' -> 10)."""
    s = name.strip()
    if not s:
        raise ParseError("Empty note name.")
    split =2 if len(s) > 1 and s[1] in ("#", "b") else 1
    pitch_part, octave_part = s[:split], s[split:]
    try:
        octave = int(octave_part)
    except ValueError as e:
        raise ParseError(f"Invalid note name '{name}'. Expected e.g. C4, F#3, Bb2.") from e
    # Cb/B# wrap across the octave boundary.
    letter_pc = NOTE_BASE_PC.get(pitch_part[0].upper())
    if letter_pc is None:
        raise ParseError(f"Invalid note letter '{pitch_part[0]}'. Expected A-G.")
    offset = {"": 0, "#": 1, "b": -1}[pitch_part[1:]]
    return (octave + 1) * 12 + letter_pc + offset
