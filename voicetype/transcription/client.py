"""TranscriptionClient — abstract base for speech-to-text + polish backends."""
from abc import ABC, abstractmethod

from voicetype.models import Credential, TranscriptionRequest


class TranscriptionClient(ABC):
    @abstractmethod
    async def transcribe(self, request: TranscriptionRequest) -> str:
        """Convert the recorded clip to non-empty text. Raises VoiceTypeError on failure."""
        ...

    @abstractmethod
    async def polish(self, text: str, credential: Credential) -> str:
        """Refine transcribed text. Raises on failure; callers decide whether that matters."""
        ...
