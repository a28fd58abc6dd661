"""
Command line: voice a chord progression and print the result.

Usage:
    voiceleader C Am F G7
    voiceleader --input progression.txt --voices 4 --min-note 40 --max-note 76
    python -m voiceleader "Dm7 G7/B Cmaj7" --midi-numbers
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .config import MAX_NOTE, MIN_NOTE, VOICE_COUNT, VoicingConfig
from .errors import ConfigError, ParseError
from .parser import ParsedChord, parse_progression
from .voicing import Voicing, movement_cost, voice_progression

logger = logging.getLogger(__name__)


def format_line(chord: ParsedChord, voicing: Optional[Voicing], previous: Optional[Voicing], *, midi_numbers: bool) -> str:
    if voicing is None:
        return f"{chord.symbol:<10} (rest)"
    if midi_numbers:
        notes = " ".join(f"{n:>3}" for n in voicing.notes)
    else:
        notes = " ".join(f"{name:<4}" for name in voicing.note_names())
    if previous is None:
        return f"{chord.symbol:<10} {notes}"
    cost = movement_cost(previous.notes, voicing.notes)
    return f"{chord.symbol:<10} {notes}  moved {cost:g}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="voiceleader",
        description="Voice a chord progression with minimal voice movement between chords.",
    )
    parser.add_argument("symbols", nargs="*", help="Chord symbols (e.g. C Am7 G7/B). Quoted groups are split on spaces.")
    parser.add_argument("--input", required=False, help="Path to a progression text file.")

    parser.add_argument("--min-note", type=int, default=None, help=f"Lowest playable MIDI note (default: {MIN_NOTE}).")
    parser.add_argument("--max-note", type=int, default=None, help=f"Highest playable MIDI note (default: {MAX_NOTE}).")
    parser.add_argument("--voices", type=int, default=None, help=f"Voices per chord, bass included (default: {VOICE_COUNT}).")

    parser.add_argument("--midi-numbers", action="store_true", help="Print MIDI note numbers instead of note names.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log engine decisions to stderr.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.input and not args.symbols:
        parser.error("give chord symbols or --input.")

    try:
        config = VoicingConfig.from_args(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    text_parts: List[str] = []
    if args.input:
        input_path = Path(args.input)
        if not input_path.exists():
            print(f"Error: input file not found: {input_path}", file=sys.stderr)
            return 2
        if input_path.is_dir():
            print(f"Error: input path is a directory: {input_path}", file=sys.stderr)
            return 2
        text_parts.append(input_path.read_text(encoding="utf-8-sig"))
    text_parts.extend(args.symbols)

    try:
        chords = parse_progression("\n".join(text_parts))
    except ParseError as e:
        where = f" on line {e.line_no}" if e.line_no is not None else ""
        print(f"Parse error{where}: {e}", file=sys.stderr)
        if e.raw_line is not None:
            print(f"  >> {e.raw_line}", file=sys.stderr)
        return 2

    if not chords:
        print("Error: no chords found (input only contained blanks/comments).", file=sys.stderr)
        return 2

    voicings = voice_progression((c.intent(config) for c in chords), config=config)
    logger.debug("voiced %d chords in %d..%d with %d voices",
                 len(chords), config.min_note, config.max_note, config.voice_count)

    previous: Optional[Voicing] = None
    for chord, voicing in zip(chords, voicings):
        print(format_line(chord, voicing, previous, midi_numbers=args.midi_numbers))
        previous = voicing
    return 0
