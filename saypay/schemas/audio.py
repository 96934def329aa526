"""
Audio-side data model: finished recordings and their transcriptions.
"""

import hashlib
from dataclasses import dataclass, field
from pathlib import Path

# Upload filenames by MIME type (the transcription API infers format from it)
AUDIO_EXTENSIONS = {
    "audio/webm": "webm",
    "audio/m4a": "m4a",
    "audio/mp4": "m4a",
    "audio/x-m4a": "m4a",
    "audio/mpeg": "mp3",
    "audio/ogg": "ogg",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
}

_HASH_CHUNK_SIZE = 64 * 1024


@dataclass
class RecordedAudio:
    """
    Opaque handle to a finished recording.

    The byte source is either a filesystem path or an in-memory buffer.
    Created when recording stops; released once transcription completes
    or fails.
    """

    source: Path | bytes
    duration_ms: int
    mime_type: str = "audio/webm"
    # Delete the backing file on release (temporary recordings)
    owns_file: bool = False
    released: bool = field(default=False, init=False)

    @property
    def filename(self) -> str:
        """Upload filename derived from the MIME type."""
        extension = AUDIO_EXTENSIONS.get(self.mime_type.lower(), "webm")
        return f"audio.{extension}"

    @property
    def size(self) -> int:
        """Size of the recording in bytes."""
        if isinstance(self.source, bytes):
            return len(self.source)
        return self.source.stat().st_size

    def read_bytes(self) -> bytes:
        """Return the full audio payload."""
        if self.released:
            raise ValueError("Recording has already been released")
        if isinstance(self.source, bytes):
            return self.source
        return self.source.read_bytes()

    def fingerprint(self) -> str:
        """SHA-256 hex digest of the audio bytes, streamed for files."""
        if self.released:
            raise ValueError("Recording has already been released")
        digest = hashlib.sha256()
        if isinstance(self.source, bytes):
            digest.update(self.source)
        else:
            with open(self.source, "rb") as handle:
                for chunk in iter(lambda: handle.read(_HASH_CHUNK_SIZE), b""):
                    digest.update(chunk)
        return digest.hexdigest()

    def release(self) -> None:
        """Drop the buffer and remove temporary files. Safe to call twice."""
        if self.released:
            return
        if isinstance(self.source, bytes):
            self.source = b""
        elif self.owns_file:
            self.source.unlink(missing_ok=True)
        self.released = True


@dataclass(frozen=True)
class TranscriptionResult:
    """Speech-to-text output. Immutable; may be served from cache."""

    text: str
    confidence: float
    language: str | None = None
