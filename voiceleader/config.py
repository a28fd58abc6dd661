"""Register and voice-count configuration for the voicing engine."""

from __future__ import annotations

import argparse
from dataclasses import dataclass

from .errors import ConfigError

MIN_NOTE = 48      # C3
MAX_NOTE = 84      # C6
VOICE_COUNT = 5    # bass + 4 upper voices


@dataclass(frozen=True)
class VoicingConfig:
    """
    min_note / max_note: closed playable register.
    voice_count: voices per chord, bass included.
    """
    min_note: int = MIN_NOTE
    max_note: int = MAX_NOTE
    voice_count: int = VOICE_COUNT

    def __post_init__(self) -> None:
        if not (0 <= self.min_note <= 127) or not (0 <= self.max_note <= 127):
            raise ConfigError(f"Register bounds must be MIDI notes 0..127 (got {self.min_note}..{self.max_note}).")
        # Every pitch class needs an in-register representative.
        if self.max_note - self.min_note < 11:
            raise ConfigError(
                f"Register {self.min_note}..{self.max_note} is narrower than an octave."
            )
        if self.voice_count < 1:
            raise ConfigError(f"voice_count must be >= 1 (got {self.voice_count}).")

    def contains(self, pitch: int) -> bool:
        return self.min_note <= pitch <= self.max_note

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "VoicingConfig":
        return cls(
            min_note=args.min_note if args.min_note is not None else MIN_NOTE,
            max_note=args.max_note if args.max_note is not None else MAX_NOTE,
            voice_count=args.voices if args.voices is not None else VOICE_COUNT,
        )


DEFAULT_CONFIG = VoicingConfig()
