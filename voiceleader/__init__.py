"""Voice-leading engine for keyboard chord intents."""

from .chords import (
    Extension,
    Position,
    Quality,
    chord_tones,
    default_quality,
    intervals,
    inversion_bass,
    note_name,
    note_number,
    pitch_classes,
)
from .config import DEFAULT_CONFIG, VoicingConfig
from .errors import ConfigError, ParseError, VoiceLeaderError
from .voicing import (
    ChordIntent,
    Voicing,
    candidate_voicings,
    first_voicing,
    movement_cost,
    resolve_bass,
    select_voicing,
    voice_progression,
)

__version__ = "0.1.0"
