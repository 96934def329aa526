"""
Unit tests for schemas/audio.py.

Tests:
- Upload filenames by MIME type
- Fingerprints for bytes and files
- Release semantics
"""

import hashlib
from pathlib import Path

import pytest

from saypay.schemas.audio import RecordedAudio


class TestRecordedAudio:
    """Tests for the recording handle."""

    @pytest.mark.parametrize(
        "mime_type,filename",
        [("audio/webm", "audio.webm"), ("audio/m4a", "audio.m4a"), ("audio/mpeg", "audio.mp3"), ("audio/unknown", "audio.webm")],
    )
    def test_filename(self, mime_type, filename):
        assert RecordedAudio(source=b"x", duration_ms=1, mime_type=mime_type).filename == filename

    def test_fingerprint_matches_for_file_and_bytes(self, tmp_path: Path):
        """Should hash the same content to the same key regardless of source."""
        payload = b"audio" * 50_000
        path = tmp_path / "note.webm"
        path.write_bytes(payload)

        from_file = RecordedAudio(source=path, duration_ms=1).fingerprint()
        from_bytes = RecordedAudio(source=payload, duration_ms=1).fingerprint()

        assert from_file == from_bytes == hashlib.sha256(payload).hexdigest()

    def test_release_bytes(self):
        audio = RecordedAudio(source=b"abc", duration_ms=1)

        audio.release()
        audio.release()

        assert audio.released
        with pytest.raises(ValueError):
            audio.read_bytes()

    def test_release_deletes_owned_file(self, tmp_path: Path):
        path = tmp_path / "tmp.webm"
        path.write_bytes(b"abc")

        RecordedAudio(source=path, duration_ms=1, owns_file=True).release()

        assert not path.exists()

    def test_release_keeps_borrowed_file(self, tmp_path: Path):
        path = tmp_path / "upload.webm"
        path.write_bytes(b"abc")

        RecordedAudio(source=path, duration_ms=1).release()

        assert path.exists()
