"""Audio capture adapters."""

from saypay.integrations.audio.recorder import (
    AudioRecorder,
    PrerecordedAudioRecorder,
    RecordingHandle,
)

__all__ = [
    "AudioRecorder",
    "PrerecordedAudioRecorder",
    "RecordingHandle",
]
