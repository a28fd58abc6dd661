"""
Chord-symbol and progression parsing.

Progression text: chord symbols separated by whitespace or '|'.
    - Blank lines are ignored
    - Lines starting with '#' are ignored (as is anything after a '#')
    - NC / N.C. is a rest

Chord symbols:
    Root: A B C D E F G with optional '#' or 'b' (e.g., F#, Bb)
    Quality suffix: see QUALITY_ALIASES
    Optional extension in parentheses: C(9), Cmaj7(#11)
    Optional slash bass: C/E, Dm/F, G7/B
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .chords import NOTE_BASE_PC, Extension, Quality, chord_tones, parse_pitch_class
from .config import DEFAULT_CONFIG, VoicingConfig
from .errors import ParseError
from .voicing import ChordIntent

QUALITY_ALIASES: Dict[str, Quality] = {
    "": Quality.MAJOR,
    "maj": Quality.MAJOR,
    "m": Quality.MINOR,
    "min": Quality.MINOR,
    "-": Quality.MINOR,
    "7": Quality.DOMINANT7,
    "dom7": Quality.DOMINANT7,
    "maj7": Quality.MAJOR7,
    "m7": Quality.MINOR7,
    "min7": Quality.MINOR7,
    "mmaj7": Quality.MIN_MAJ7,
    "minmaj7": Quality.MIN_MAJ7,
    "dim": Quality.DIMINISHED,
    "dim7": Quality.DIMINISHED7,
    "m7b5": Quality.HALF_DIMINISHED7,
    "min7b5": Quality.HALF_DIMINISHED7,
    "ø": Quality.HALF_DIMINISHED7,
    "aug": Quality.AUG,
    "+": Quality.AUG,
    "sus": Quality.SUS,
    "sus4": Quality.SUS,
    "sus2": Quality.SUS2,
    "7sus": Quality.DOM_SUS,
    "7sus4": Quality.DOM_SUS,
    "add9": Quality.ADD9,
    "madd9": Quality.MIN_ADD9,
    "minadd9": Quality.MIN_ADD9,
}

EXTENSION_ALIASES: Dict[str, Extension] = {
    "9": Extension.ADD9,
    "add9": Extension.ADD9,
    "11": Extension.ADD11,
    "add11": Extension.ADD11,
    "13": Extension.ADD13,
    "add13": Extension.ADD13,
    "#11": Extension.SHARP11,
}

_EXTENSION_RE = re.compile(r"\(([^()]*)\)$")


@dataclass(frozen=True)
class ParsedChord:
    """A chord as parsed from a symbol."""
    symbol: str
    is_rest: bool
    root_pc: Optional[int]                 # 0..11, None for rest
    quality: Optional[Quality]
    extension: Extension
    slash_bass_pc: Optional[int]           # explicit bass pitch class if provided (e.g. C/E -> E)

    @property
    def pitch_classes(self) -> Tuple[int, ...]:
        if self.is_rest or self.root_pc is None or self.quality is None:
            return ()
        return chord_tones(self.root_pc, self.quality)

    def intent(self, config: VoicingConfig = DEFAULT_CONFIG) -> Optional[ChordIntent]:
        """ChordIntent with the bass at its lowest in-register pitch; None for a rest."""
        if self.is_rest or self.root_pc is None or self.quality is None:
            return None
        bass_pc = self.slash_bass_pc if self.slash_bass_pc is not None else self.root_pc
        return ChordIntent(
            root=self.root_pc,
            bass=config.min_note + (bass_pc - config.min_note) % 12,
            quality=self.quality,
            extension=self.extension,
        )


def parse_chord_symbol(symbol: str) -> ParsedChord:
    """
    Parse a chord symbol into root, quality, extension, optional slash bass,
    or rest (NC/N.C.).
    """
    s = symbol.strip()

    rest_norm = s.replace(".", "").replace(" ", "").upper()
    if rest_norm == "NC":
        return ParsedChord(
            symbol=s,
            is_rest=True,
            root_pc=None,
            quality=None,
            extension=Extension.NONE,
            slash_bass_pc=None,
        )

    if "/" in s:
        left, right = s.split("/", 1)
        chord_part = left.strip()
        bass_part = right.strip()
        if not bass_part:
            raise ParseError(f"Invalid slash chord '{symbol}': missing bass note after '/'.")
        slash_bass_pc = parse_pitch_class(bass_part)
    else:
        chord_part = s
        slash_bass_pc = None

    if not chord_part:
        raise ParseError(f"Invalid chord symbol '{symbol}'. Missing chord before slash.")

    extension = Extension.NONE
    m = _EXTENSION_RE.search(chord_part)
    if m:
        ext_key = m.group(1).strip().lower()
        if ext_key not in EXTENSION_ALIASES:
            raise ParseError(f"Unsupported extension '({m.group(1)})' in '{symbol}'.")
        extension = EXTENSION_ALIASES[ext_key]
        chord_part = chord_part[: m.start()].strip()
        if not chord_part:
            raise ParseError(f"Invalid chord symbol '{symbol}'. Missing chord before extension.")

    # Root: letter + optional accidental; everything after that is quality.
    root_letter = chord_part[0].upper()
    if root_letter not in NOTE_BASE_PC:
        raise ParseError(f"Unsupported chord '{symbol}': invalid root '{chord_part[0]}'.")
    if len(chord_part) >= 2 and chord_part[1] in ("#", "b"):
        root_name, quality_part = chord_part[:2], chord_part[2:]
    else:
        root_name, quality_part = chord_part[:1], chord_part[1:]

    q = quality_part.strip()
    # "M7"/"Maj7" mean major seventh; lowercase everything else.
    if q in ("M", "M7"):
        q = "maj" if q == "M" else "maj7"
    q = q.lower()
    if q not in QUALITY_ALIASES:
        raise ParseError(f"Unsupported chord quality '{quality_part}' in '{symbol}'. Supported: "
                         + ", ".join(repr(k) for k in QUALITY_ALIASES if k) + ".")

    return ParsedChord(
        symbol=s,
        is_rest=False,
        root_pc=parse_pitch_class(root_name),
        quality=QUALITY_ALIASES[q],
        extension=extension,
        slash_bass_pc=slash_bass_pc,
    )


def parse_progression(text: str) -> List[ParsedChord]:
    """Parse progression text into chords, reporting the line of any error."""
    chords: List[ParsedChord] = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        raw = line.rstrip("\n")
        stripped = raw.strip()
        if not stripped or stripped.startswith("#"):
            continue
        # '#' also spells a sharp, so an inline comment needs whitespace before it.
        body = re.split(r"\s#", stripped, maxsplit=1)[0]
        for token in re.split(r"[\s|]+", body):
            if not token:
                continue
            try:
                chords.append(parse_chord_symbol(token))
            except ParseError as e:
                raise ParseError(str(e), line_no=line_no, raw_line=raw) from e
    return chords


def parse_intents(text: str, config: VoicingConfig = DEFAULT_CONFIG) -> List[Optional[ChordIntent]]:
    return [chord.intent(config) for chord in parse_progression(text)]
