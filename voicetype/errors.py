"""Error taxonomy for the transcription core.

Every error carries a message that is safe to show to the user as-is.
"""
from voicetype.constants import (
    MSG_NETWORK_ERROR,
    MSG_NO_CREDENTIAL,
    MSG_NO_SPEECH,
    MSG_TIMEOUT,
)


class VoiceTypeError(Exception):
    """Base class for failures surfaced to the caller."""

    @property
    def message(self) -> str:
        return str(self)


class NoCredentialError(VoiceTypeError):
    """No API key is configured for the active provider."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(MSG_NO_CREDENTIAL % provider)


class PayloadError(VoiceTypeError):
    """The audio resource could not be turned into a request body."""


class OperationTimeoutError(VoiceTypeError, TimeoutError):
    """A network operation exceeded its wall-clock budget."""

    def __init__(self, label: str, timeout_ms: int) -> None:
        self.label = label
        self.timeout_ms = timeout_ms
        super().__init__(MSG_TIMEOUT % (label, timeout_ms / 1000))


class UpstreamError(VoiceTypeError):
    """Non-2xx reply from the provider or the relay."""

    def __init__(self, status: int, detail: str, message: str) -> None:
        self.status = status
        self.detail = detail
        super().__init__(message)


class NoSpeechError(VoiceTypeError):
    """The provider answered successfully but returned no text."""

    def __init__(self) -> None:
        super().__init__(MSG_NO_SPEECH)


class TransportError(VoiceTypeError):
    """The HTTP exchange itself failed: connection, protocol, or body decoding."""

    def __init__(self, cause: Exception | None = None) -> None:
        self.cause = cause
        super().__init__(MSG_NETWORK_ERROR)
