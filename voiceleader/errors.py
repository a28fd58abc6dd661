"""Exception hierarchy for voiceleader."""

from __future__ import annotations

from typing import Optional


class VoiceLeaderError(Exception):
    """Base exception for all voiceleader errors."""


class ParseError(VoiceLeaderError, ValueError):
    def __init__(self, message: str, *, line_no: Optional[int] = None, raw_line: Optional[str] = None) -> None:
        super().__init__(message)
        self.line_no = line_no
        self.raw_line = raw_line


class ConfigError(VoiceLeaderError, ValueError):
    """Invalid register or voice-count configuration."""
