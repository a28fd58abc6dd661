"""Tests for the voice-leading engine."""

from __future__ import annotations

import dataclasses
import itertools
import logging

import pytest

from voiceleader.chords import Extension, Position, Quality, chord_tones, pitch_classes
from voiceleader.config import DEFAULT_CONFIG, VoicingConfig
from voiceleader.voicing import (
    ChordIntent,
    Voicing,
    candidate_voicings,
    first_voicing,
    movement_cost,
    resolve_bass,
    select_voicing,
    voice_progression,
)

C_MAJOR = ChordIntent(root=0, bass=48, quality=Quality.MAJOR)
A_MINOR_LOW = ChordIntent(root=9, bass=45, quality=Quality.MINOR)
C_MAJOR_PREV = Voicing(notes=(48, 64, 67, 72, 76), bass=48, root=0, quality=Quality.MAJOR)


def _brute_cost(prev, nxt):
    """Reference cost: positional bass plus the best permutation of uppers."""
    uppers = min(
        sum(abs(a - b) for a, b in zip(prev[1:], perm))
        for perm in itertools.permutations(nxt[1:])
    )
    return abs(prev[0] - nxt[0]) + uppers


def _all_intents():
    for root in range(12):
        for quality in Quality:
            for position in (Position.ROOT, Position.FIRST, Position.SECOND):
                yield ChordIntent.inversion(root, quality, position)


# =========================================================================
# Bass resolution
# =========================================================================

class TestResolveBass:
    def test_in_register_kept(self):
        assert resolve_bass(48) == 48
        assert resolve_bass(60) == 60
        assert resolve_bass(84) == 84

    def test_below_register_rises(self):
        assert resolve_bass(45) == 57

    def test_above_register_drops(self):
        assert resolve_bass(90) == 78


# =========================================================================
# Default spread
# =========================================================================

class TestFirstVoicing:
    def test_c_major(self):
        assert first_voicing(48, (0, 4, 7)) == (48, 52, 55, 60, 64)

    def test_a_minor_from_low_bass(self):
        assert first_voicing(45, (9, 0, 4)) == (57, 60, 64, 69, 72)

    def test_set_input_is_deterministic(self):
        assert first_voicing(48, {7, 0, 4}) == first_voicing(48, frozenset({0, 4, 7}))

    def test_ceiling_clipping(self):
        notes = first_voicing(84, (0, 4, 7))
        assert notes[0] == 84
        assert all(48 <= n <= 84 for n in notes)
        assert {n % 12 for n in notes} == {0, 4, 7}

    def test_inversion_covers_all_tones(self):
        # C/E: the bass already sounds E, the uppers take C and G first
        notes = first_voicing(52, (0, 4, 7))
        assert notes[0] == 52
        assert {n % 12 for n in notes[1:3]} == {0, 7}

    def test_voice_count(self):
        cfg = VoicingConfig(voice_count=3)
        assert len(first_voicing(48, (0, 4, 7), cfg)) == 3


# =========================================================================
# Candidate enumeration
# =========================================================================

class TestCandidateVoicings:
    def test_c_major_count_and_order(self):
        cands = candidate_voicings(48, (0, 4, 7))
        # 9 chord-tone pitches above the bass, minus choices missing E or G
        assert len(cands) == 96
        assert cands[0] == (48, 52, 55, 60, 64)
        assert cands == sorted(cands)

    def test_shape(self):
        for cand in candidate_voicings(48, (0, 4, 7, 10)):
            assert len(cand) == 5
            assert cand[0] == 48
            assert all(a < b for a, b in zip(cand[1:], cand[2:]))
            assert cand[1] > cand[0]
            assert all(48 <= n <= 84 for n in cand)
            assert {n % 12 for n in cand} >= {0, 4, 7, 10}

    def test_bass_at_ceiling_is_empty(self):
        assert candidate_voicings(84, (0, 4, 7)) == []

    def test_narrow_register_is_empty(self):
        cfg = VoicingConfig(min_note=60, max_note=71)
        assert candidate_voicings(60, (0, 4, 7), cfg) == []

    def test_high_bass_leaves_no_room(self):
        # only G5 and C6 lie above E5 inside the register
        assert candidate_voicings(76, (0, 4, 7)) == []

    def test_slash_bass_outside_chord(self):
        cands = candidate_voicings(50, (0, 4, 7))
        assert cands
        assert all({n % 12 for n in c[1:]} == {0, 4, 7} for c in cands)


# =========================================================================
# Movement cost
# =========================================================================

class TestMovementCost:
    def test_identical(self):
        assert movement_cost([48, 64, 67, 72, 76], [48, 64, 67, 72, 76]) == 0

    def test_bass_is_positional(self):
        assert movement_cost([48, 60, 64, 67, 72], [50, 60, 64, 67, 72]) == 2

    def test_upper_voices_are_free(self):
        assert movement_cost([48, 60, 64, 67, 72], [48, 72, 67, 64, 60]) == 0

    def test_bass_not_swapped_with_upper(self):
        # swapping bass with an upper voice costs the full bass move
        assert movement_cost([48, 60, 64, 67, 72], [60, 48, 64, 67, 72]) == 24

    def test_matches_permutation_search(self):
        prev = (48, 64, 67, 72, 76)
        for cand in candidate_voicings(57, (9, 0, 4)):
            assert movement_cost(prev, cand) == _brute_cost(prev, cand)

    def test_unequal_voice_counts(self):
        assert movement_cost([48, 60, 64], [48, 60, 64, 67]) == 1.5

    def test_empty(self):
        assert movement_cost([], [48, 52]) == 0
        assert movement_cost([48], []) == 0

    def test_non_negative(self):
        prev = (50, 62, 65, 69, 74)
        assert all(movement_cost(prev, c) >= 0 for c in candidate_voicings(48, (0, 4, 7)))


# =========================================================================
# Selection
# =========================================================================

class TestSelectVoicing:
    def test_c_major_without_previous(self):
        v = select_voicing(C_MAJOR, None)
        assert v.notes[0] == 48
        assert v.bass == 48
        assert {0, 4, 7} <= {n % 12 for n in v.notes}
        assert v.notes == (48, 52, 55, 60, 64)
        assert (v.root, v.quality, v.extension) == (0, Quality.MAJOR, Extension.NONE)

    def test_empty_previous_counts_as_absent(self):
        empty = Voicing(notes=(), bass=48, root=0, quality=Quality.MAJOR)
        assert select_voicing(C_MAJOR, empty) == select_voicing(C_MAJOR, None)

    def test_c_major_to_a_minor(self):
        v = select_voicing(A_MINOR_LOW, C_MAJOR_PREV)
        assert v.notes == (57, 64, 69, 72, 76)
        spread = first_voicing(A_MINOR_LOW.bass, chord_tones(9, Quality.MINOR))
        assert movement_cost(C_MAJOR_PREV.notes, v.notes) <= movement_cost(C_MAJOR_PREV.notes, spread)

    def test_previous_as_plain_notes(self):
        assert select_voicing(A_MINOR_LOW, list(C_MAJOR_PREV.notes)) == select_voicing(A_MINOR_LOW, C_MAJOR_PREV)

    def test_minimal_among_candidates(self):
        target = ChordIntent(root=5, bass=53, quality=Quality.MAJOR7)
        v = select_voicing(target, C_MAJOR_PREV)
        cands = candidate_voicings(target.bass, pitch_classes(5, Quality.MAJOR7))
        best = movement_cost(C_MAJOR_PREV.notes, v.notes)
        assert all(best <= movement_cost(C_MAJOR_PREV.notes, c) for c in cands)

    def test_ties_go_to_first_candidate(self):
        target = ChordIntent(root=0, bass=48, quality=Quality.AUG)
        prev = (48, 62, 66, 70, 74)
        v = select_voicing(target, prev)
        cands = candidate_voicings(48, chord_tones(0, Quality.AUG))
        costs = [movement_cost(prev, c) for c in cands]
        assert cands.index(v.notes) == costs.index(min(costs))

    def test_repeat_is_free(self):
        v = select_voicing(A_MINOR_LOW, C_MAJOR_PREV)
        again = select_voicing(A_MINOR_LOW, v)
        assert movement_cost(v.notes, again.notes) == 0
        assert again.notes == v.notes

    def test_falls_back_when_no_candidates(self):
        high = ChordIntent(root=0, bass=84, quality=Quality.MAJOR)
        v = select_voicing(high, C_MAJOR_PREV)
        assert v.notes == first_voicing(84, (0, 4, 7))

    def test_narrow_register_fallback(self):
        cfg = VoicingConfig(min_note=60, max_note=71)
        target = ChordIntent(root=0, bass=60, quality=Quality.MAJOR)
        v = select_voicing(target, (60, 64, 67, 60, 64), cfg)
        assert v.notes == (60, 64, 67, 60, 64)

    def test_unknown_quality_voices_as_major(self):
        odd = ChordIntent(root=0, bass=48, quality="bogus")
        v = select_voicing(odd, None)
        assert v.notes == select_voicing(C_MAJOR, None).notes
        assert v.quality == "bogus"

    def test_extension_is_carried(self):
        target = ChordIntent(root=0, bass=48, quality=Quality.MAJOR7, extension=Extension.SHARP11)
        assert select_voicing(target, None).extension == Extension.SHARP11

    def test_single_voice(self):
        cfg = VoicingConfig(voice_count=1)
        assert select_voicing(C_MAJOR, None, cfg).notes == (48,)
        assert select_voicing(C_MAJOR, (48,), cfg).notes == (48,)

    def test_voicing_is_immutable(self):
        v = select_voicing(C_MAJOR, None)
        with pytest.raises(dataclasses.FrozenInstanceError):
            v.notes = (1,)  # type: ignore[misc]


class TestSelectVoicingProperties:
    """Invariants over every root, quality and inversion."""

    def test_without_previous(self):
        for target in _all_intents():
            v = select_voicing(target, None)
            assert v.notes[0] == target.bass
            assert len(v.notes) == DEFAULT_CONFIG.voice_count
            assert pitch_classes(target.root, target.quality) <= {n % 12 for n in v.notes}
            assert all(48 <= n <= 84 for n in v.notes)

    def test_with_previous(self):
        prev = None
        for target in _all_intents():
            v = select_voicing(target, prev)
            assert v.notes[0] == target.bass
            assert pitch_classes(target.root, target.quality) <= {n % 12 for n in v.notes}
            assert all(48 <= n <= 84 for n in v.notes)
            prev = v


# =========================================================================
# Progressions
# =========================================================================

class TestVoiceProgression:
    def test_leads_from_each_chord(self):
        intents = [C_MAJOR, A_MINOR_LOW]
        first, second = voice_progression(intents)
        assert first == select_voicing(C_MAJOR, None)
        assert second == select_voicing(A_MINOR_LOW, first)

    def test_rest_resets_previous(self):
        out = voice_progression([C_MAJOR, None, A_MINOR_LOW])
        assert out[1] is None
        assert out[2] == select_voicing(A_MINOR_LOW, None)

    def test_starting_previous(self):
        out = voice_progression([A_MINOR_LOW], previous=C_MAJOR_PREV)
        assert out[0].notes == (57, 64, 69, 72, 76)

    def test_inversion_intent(self):
        intent = ChordIntent.inversion(0, Quality.MAJOR, Position.FIRST)
        assert intent == ChordIntent(root=0, bass=52, quality=Quality.MAJOR)


class TestLogging:
    def test_fallback_is_logged(self, caplog):
        caplog.set_level(logging.DEBUG, logger="voiceleader.voicing")
        select_voicing(ChordIntent(root=0, bass=84, quality=Quality.MAJOR), C_MAJOR_PREV)
        assert "using spread voicing" in caplog.text

    def test_choice_is_logged(self, caplog):
        caplog.set_level(logging.DEBUG, logger="voiceleader.voicing")
        select_voicing(A_MINOR_LOW, C_MAJOR_PREV)
        assert "cost 11" in caplog.text
