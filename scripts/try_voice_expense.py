#!/usr/bin/env python3
"""
Run the voice expense pipeline on an audio file.

Transcribes the file, extracts a draft (falling back to the offline parser
if the model is unavailable) and prints the result. With --save the draft
is stored in the configured database.

Usage:
    python scripts/try_voice_expense.py note.m4a --language es
    python scripts/try_voice_expense.py note.webm --save --user-id demo
    python scripts/try_voice_expense.py --text "Lunch at Chipotle twenty five fifty"

Requirements:
    - OPENAI_API_KEY for transcription (and extraction with the openai provider)
"""

import argparse
import asyncio
import json
import mimetypes
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from saypay.agents.voice_agent import PipelineStage, build_voice_pipeline
from saypay.database import init_db
from saypay.integrations.audio import PrerecordedAudioRecorder
from saypay.logging_config import configure_logging
from saypay.tools.extraction import ExpenseExtractor


def _print_json(data: dict) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


async def run_audio(args: argparse.Namespace) -> int:
    path = Path(args.audio)
    mime_type = args.mime_type or mimetypes.guess_type(path.name)[0] or "audio/webm"
    recorder = PrerecordedAudioRecorder(path, mime_type=mime_type)

    if args.save:
        init_db()
    pipeline = build_voice_pipeline(recorder=recorder)

    if not pipeline.voice_enabled:
        print("Voice capture is disabled: set OPENAI_API_KEY", file=sys.stderr)
        return 1

    stop_signal = asyncio.Event()
    stop_signal.set()
    session = await pipeline.capture(stop_signal=stop_signal, language_hint=args.language)

    if session.stage is PipelineStage.ERRORED:
        print(f"Error: {session.user_message}", file=sys.stderr)
        return 1

    _print_json(
        {
            "transcript": session.transcription.text,
            "transcript_confidence": session.transcription.confidence,
            "provenance": session.outcome.provenance.value,
            "draft": session.draft.model_dump(),
            "warnings": [w.message for w in session.warnings],
        }
    )

    if args.save:
        record = pipeline.save(args.user_id)
        if record is None:
            print(f"Not saved: {session.validation_errors or session.user_message}", file=sys.stderr)
            return 1
        print(f"Saved expense {record.id}")
    return 0


async def run_text(args: argparse.Namespace) -> int:
    outcome = await ExpenseExtractor().extract(args.text, language_hint=args.language)
    _print_json(
        {
            "provenance": outcome.provenance.value,
            "failure_reason": outcome.failure_reason,
            "draft": outcome.draft.model_dump(),
        }
    )
    return 0


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Try the voice expense pipeline on an audio file or transcript"
    )
    parser.add_argument("audio", nargs="?", help="Path to an audio file")
    parser.add_argument("--text", help="Skip transcription and extract from this text")
    parser.add_argument("--language", default=None, help="Language code (en, hi, es, fr)")
    parser.add_argument("--mime-type", default=None, help="Override the audio MIME type")
    parser.add_argument("--save", action="store_true", help="Store the draft in the database")
    parser.add_argument("--user-id", default="local-user", help="User ID for --save")

    args = parser.parse_args()
    if not args.audio and not args.text:
        parser.error("either an audio file or --text is required")

    configure_logging()

    if args.text:
        return asyncio.run(run_text(args))
    return asyncio.run(run_audio(args))


if __name__ == "__main__":
    sys.exit(main())
