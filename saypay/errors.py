"""
Error taxonomy for the voice expense pipeline.

Every error carries a short user-facing message so the orchestrator can
surface it without inspecting the exception type.
"""


class VoicePipelineError(Exception):
    """Base exception for voice pipeline errors."""

    default_user_message = "Something went wrong. Please try again."

    def __init__(self, message: str, user_message: str | None = None):
        super().__init__(message)
        self.user_message = user_message or self.default_user_message


class PermissionDeniedError(VoicePipelineError):
    """Raised when microphone access is refused."""

    default_user_message = "Microphone access was denied. Allow it and try again."


class DeviceError(VoicePipelineError):
    """Raised when the recording hardware or stream fails."""

    default_user_message = "The recording could not be completed. Please try again."


class VoiceUnavailableError(VoicePipelineError):
    """Raised when voice capture is disabled (no transcription credential)."""

    default_user_message = "Voice entry is not available. Add the expense manually."


class TranscriptionError(VoicePipelineError):
    """Raised when the speech-to-text call fails."""

    default_user_message = "Failed to transcribe audio. Please try again."


class LowConfidenceTranscriptError(VoicePipelineError):
    """Raised under the blocking policy when a transcript is not trusted."""

    default_user_message = "We could not hear that clearly. Please speak more clearly and try again."

    def __init__(self, confidence: float, threshold: float):
        super().__init__(
            f"Transcript confidence {confidence:.2f} below threshold {threshold:.2f}",
            user_message=(
                f"Low confidence transcription ({confidence * 100:.0f}%). "
                "Please speak more clearly and try again."
            ),
        )
        self.confidence = confidence
        self.threshold = threshold


class ExtractionServiceError(VoicePipelineError):
    """
    Raised inside the extraction client when the model step fails.

    Never escapes the client: it is absorbed by the fallback parser.
    """


class ExpenseValidationError(VoicePipelineError):
    """Raised when a draft fails the pre-save sanity checks."""

    default_user_message = "Please check the amount and description."

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors), user_message=errors[0] if errors else None)
        self.errors = errors


class StorageError(VoicePipelineError):
    """Raised when the storage collaborator fails to persist an expense."""

    default_user_message = "Failed to save expense. Please try again."
