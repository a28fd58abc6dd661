"""
Voice-leading engine.

Turns a ChordIntent plus the previously sounding Voicing into a new Voicing
that realizes the chord inside the register and moves the voices as little
as possible. Every function here is pure; the caller owns the "previous"
value and passes it back in on the next chord change.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import AbstractSet, Iterable, List, Optional, Sequence, Tuple, Union

from .chords import Extension, Position, QualityLike, chord_tones, inversion_bass, note_name
from .config import DEFAULT_CONFIG, VoicingConfig

logger = logging.getLogger(__name__)

# Spacing target between adjacent voices of the default spread (a major third).
SPREAD_STEP = 4

# Weight for notes left over when two voicings have different voice counts.
UNMATCHED_WEIGHT = 0.5

PitchClasses = Union[Sequence[int], AbstractSet[int]]


# ----------------------------
# Data model
# ----------------------------

@dataclass(frozen=True)
class ChordIntent:
    """What the player asked for: root pitch class, bass pitch, quality."""
    root: int
    bass: int
    quality: QualityLike
    extension: Extension = Extension.NONE

    @classmethod
    def inversion(
        cls,
        root: int,
        quality: QualityLike,
        position: Position = Position.ROOT,
        *,
        extension: Extension = Extension.NONE,
        base: int = DEFAULT_CONFIG.min_note,
    ) -> "ChordIntent":
        return cls(
            root=root % 12,
            bass=inversion_bass(root, quality, position, base=base),
            quality=quality,
            extension=extension,
        )


@dataclass(frozen=True)
class Voicing:
    notes: Tuple[int, ...]          # voice 0 is the bass; upper voices may cross
    bass: int
    root: int
    quality: QualityLike
    extension: Extension = Extension.NONE

    @property
    def pitch_classes(self) -> frozenset:
        return frozenset(n % 12 for n in self.notes)

    def note_names(self) -> List[str]:
        return [note_name(n) for n in self.notes]


# ----------------------------
# Register helpers
# ----------------------------

def resolve_bass(bass: int, config: VoicingConfig = DEFAULT_CONFIG) -> int:
    """
    Keep an in-register bass as is; otherwise move it by octaves to the
    nearest in-register pitch of the same pitch class.
    """
    if config.contains(bass):
        return bass
    pc = bass % 12
    if bass < config.min_note:
        return config.min_note + (pc - config.min_note) % 12
    return config.max_note - (config.max_note - pc) % 12


def _fold_into_register(pitch: int, config: VoicingConfig) -> int:
    while pitch > config.max_note:
        pitch -= 12
    while pitch < config.min_note:
        pitch += 12
    return pitch


def _nearest_with_pc(pc: int, target: int) -> int:
    """Pitch of class `pc` closest to `target`, searching -5..+6 semitones."""
    delta = (pc - target) % 12
    if delta > 6:
        delta -= 12
    return target + delta


def _ordered(pitch_classes: PitchClasses) -> List[int]:
    if isinstance(pitch_classes, (list, tuple)):
        ordered: List[int] = []
        for pc in pitch_classes:
            if pc % 12 not in ordered:
                ordered.append(pc % 12)
        return ordered
    return sorted({pc % 12 for pc in pitch_classes})


# ----------------------------
# Default spread
# ----------------------------

def first_voicing(
    bass: int,
    pitch_classes: PitchClasses,
    config: VoicingConfig = DEFAULT_CONFIG,
) -> Tuple[int, ...]:
    """
    Deterministic spread used when there is nothing to lead from.

    Each upper voice aims a major third above the voice below it and snaps
    to the nearest pitch of its assigned pitch class. Assignments cycle
    through the chord tones by voice index, with the bass's own pitch class
    moved to the end of the cycle so the uppers cover the other tones first.
    """
    b = resolve_bass(bass, config)
    cycle = _ordered(pitch_classes)
    if b % 12 in cycle:
        cycle.remove(b % 12)
        cycle.append(b % 12)
    if not cycle:
        cycle = [b % 12]

    notes = [b]
    prev = b
    for i in range(1, config.voice_count):
        pc = cycle[(i - 1) % len(cycle)]
        n = _fold_into_register(_nearest_with_pc(pc, prev + SPREAD_STEP), config)
        notes.append(n)
        prev = n
    return tuple(notes)


# ----------------------------
# Candidate enumeration
# ----------------------------

def candidate_voicings(
    bass: int,
    pitch_classes: PitchClasses,
    config: VoicingConfig = DEFAULT_CONFIG,
) -> List[Tuple[int, ...]]:
    """
    Every voicing with the bass fixed and the upper voices strictly rising
    through chord tones inside the register, covering every chord pitch class.

    Depth-first with an explicit stack; results come out in ascending
    lexicographic order. Branches are cut when the pitches left below the
    ceiling are too few, or when the voices left cannot cover the missing
    pitch classes.
    """
    b = resolve_bass(bass, config)
    required = {pc % 12 for pc in pitch_classes}
    pool = [n for n in range(b + 1, config.max_note + 1) if n % 12 in required]
    upper_count = config.voice_count - 1

    results: List[Tuple[int, ...]] = []
    stack: List[Tuple[int, Tuple[int, ...]]] = [(0, ())]
    while stack:
        start, chosen = stack.pop()
        remaining = upper_count - len(chosen)
        missing = required - {b % 12} - {n % 12 for n in chosen}
        if len(missing) > remaining:
            continue
        if remaining == 0:
            results.append((b,) + chosen)
            continue
        # Push in reverse so the lowest pitch is explored first.
        for idx in reversed(range(start, len(pool) - remaining + 1)):
            stack.append((idx + 1, chosen + (pool[idx],)))
    return results


# ----------------------------
# Cost
# ----------------------------

def _assignment_cost(a: Sequence[int], b: Sequence[int]) -> float:
    """
    Minimum total distance over one-to-one assignments between two note sets.

    For equal sizes, pairing the sorted lists is optimal (points on a line
    with absolute-distance cost), so no permutation search is needed. For
    unequal sizes the smaller set is matched into the larger by brute force
    and each leftover note pays part of its distance to the nearest note of
    the smaller set.
    """
    if not a or not b:
        return 0.0
    a_s = sorted(a)
    b_s = sorted(b)
    if len(a_s) == len(b_s):
        return float(sum(abs(x - y) for x, y in zip(a_s, b_s)))

    smaller, larger = (a_s, b_s) if len(a_s) < len(b_s) else (b_s, a_s)
    k = len(smaller)
    best = float("inf")
    for idxs in itertools.combinations(range(len(larger)), k):
        leftover = [larger[j] for j in range(len(larger)) if j not in idxs]
        unmatched = UNMATCHED_WEIGHT * sum(min(abs(x - s) for s in smaller) for x in leftover)
        for perm in itertools.permutations(idxs):
            cost = unmatched + sum(abs(smaller[i] - larger[perm[i]]) for i in range(k))
            if cost < best:
                best = cost
    return best


def movement_cost(prev: Sequence[int], next_notes: Sequence[int]) -> float:
    """
    Total voice motion from `prev` to `next_notes`.

    The bass (index 0) is compared positionally; upper voices are free to
    trade places, so their cost is the best assignment between the two sets.
    """
    if not prev or not next_notes:
        return 0.0
    return abs(prev[0] - next_notes[0]) + _assignment_cost(prev[1:], next_notes[1:])


# ----------------------------
# Selection
# ----------------------------

def select_voicing(
    target: ChordIntent,
    previous: Optional[Union[Voicing, Sequence[int]]] = None,
    config: VoicingConfig = DEFAULT_CONFIG,
) -> Voicing:
    """
    Voice `target`, leading smoothly from `previous` when there is one.

    Never raises for a well-formed intent: without a previous voicing, or
    when the register leaves no candidates, the default spread is used.
    Ties go to the first candidate in enumeration order.
    """
    tones = chord_tones(target.root, target.quality)
    prev_notes: Sequence[int] = ()
    if isinstance(previous, Voicing):
        prev_notes = previous.notes
    elif previous is not None:
        prev_notes = tuple(previous)

    if not prev_notes:
        notes = first_voicing(target.bass, tones, config)
    else:
        candidates = candidate_voicings(target.bass, tones, config)
        if not candidates:
            logger.debug(
                "no candidates for bass %s in %s..%s, using spread voicing",
                target.bass, config.min_note, config.max_note,
            )
            notes = first_voicing(target.bass, tones, config)
        else:
            notes = min(candidates, key=lambda c: movement_cost(prev_notes, c))
            logger.debug(
                "picked %s from %d candidates (cost %g)",
                notes, len(candidates), movement_cost(prev_notes, notes),
            )

    return Voicing(
        notes=tuple(notes),
        bass=notes[0],
        root=target.root % 12,
        quality=target.quality,
        extension=target.extension,
    )


def voice_progression(
    intents: Iterable[Optional[ChordIntent]],
    previous: Optional[Voicing] = None,
    config: VoicingConfig = DEFAULT_CONFIG,
) -> List[Optional[Voicing]]:
    """Voice a sequence of chords; a None entry is a rest and resets the lead."""
    out: List[Optional[Voicing]] = []
    prev = previous
    for intent in intents:
        if intent is None:
            out.append(None)
            prev = None
            continue
        prev = select_voicing(intent, prev, config)
        out.append(prev)
    return out
