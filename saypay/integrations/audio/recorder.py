"""
Audio capture contract.

Platform audio stacks (microphone permissions, codecs, streaming) live
outside this package. The orchestrator only needs something that can
start a recording and later hand back a finished RecordedAudio.
"""

import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

from saypay.errors import DeviceError, PermissionDeniedError
from saypay.logging_config import get_logger
from saypay.schemas.audio import RecordedAudio
from saypay.storage.result_cache import epoch_ms

logger = get_logger(__name__)


@dataclass(frozen=True)
class RecordingHandle:
    """An in-progress recording."""

    recording_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    started_at: int = field(default_factory=epoch_ms)  # epoch ms


@runtime_checkable
class AudioRecorder(Protocol):
    """
    Microphone adapter.

    Both methods may raise PermissionDeniedError (microphone access refused)
    or DeviceError (hardware or stream failure).
    """

    async def start_recording(self) -> RecordingHandle:
        ...

    async def stop_recording(self, handle: RecordingHandle) -> RecordedAudio:
        ...


class PrerecordedAudioRecorder:
    """
    Serves an existing file or buffer through the recorder contract.

    Used for uploaded voice notes, manual scripts and tests.

    Example:
        >>> recorder = PrerecordedAudioRecorder(Path("note.m4a"), mime_type="audio/m4a")
        >>> handle = await recorder.start_recording()
        >>> audio = await recorder.stop_recording(handle)
    """

    def __init__(
        self,
        source: Path | bytes,
        duration_ms: int = 0,
        mime_type: str = "audio/webm",
        permission_granted: bool = True,
    ):
        self.source = source
        self.duration_ms = duration_ms
        self.mime_type = mime_type
        self.permission_granted = permission_granted
        self._active: RecordingHandle | None = None

    @property
    def is_recording(self) -> bool:
        return self._active is not None

    async def start_recording(self) -> RecordingHandle:
        if not self.permission_granted:
            raise PermissionDeniedError("Microphone permission not granted")
        if isinstance(self.source, Path) and not self.source.is_file():
            raise DeviceError(f"Audio file not found: {self.source}")

        self._active = RecordingHandle()
        logger.debug("recording_started", recording_id=self._active.recording_id)
        return self._active

    async def stop_recording(self, handle: RecordingHandle) -> RecordedAudio:
        if self._active is None or handle.recording_id != self._active.recording_id:
            raise DeviceError("No active recording for this handle")

        self._active = None
        duration_ms = self.duration_ms or max(epoch_ms() - handle.started_at, 0)
        logger.debug(
            "recording_stopped",
            recording_id=handle.recording_id,
            duration_ms=duration_ms,
        )
        return RecordedAudio(
            source=self.source,
            duration_ms=duration_ms,
            mime_type=self.mime_type,
        )
