"""HttpTranscriptionClient — OpenAI-compatible speech-to-text and polish over httpx."""
import logging
import time
from typing import Callable

import httpx

from voicetype.constants import (
    LABEL_POLISH,
    LABEL_TRANSCRIPTION,
    LOG_POLISHING,
    LOG_TRANSCRIBED,
    LOG_TRANSCRIBING,
    POLISH_TIMEOUT_MS,
    TRANSCRIBE_TIMEOUT_MS,
)
from voicetype.errors import NoSpeechError, TransportError
from voicetype.models import AudioResource, Credential, TranscriptionRequest
from voicetype.transcription.classifier import upstream_error
from voicetype.transcription.client import TranscriptionClient
from voicetype.transcription.payload import read_audio
from voicetype.transcription.resilience import with_timeout
from voicetype.transcription.transport import TransportEnvironment

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], httpx.AsyncClient]


def _default_client() -> httpx.AsyncClient:
    # Deadlines are enforced by with_timeout, not by httpx.
    return httpx.AsyncClient(timeout=None)


class HttpTranscriptionClient(TranscriptionClient):

    def __init__(
        self,
        transport: TransportEnvironment,
        transcribe_timeout_ms: int = TRANSCRIBE_TIMEOUT_MS,
        polish_timeout_ms: int = POLISH_TIMEOUT_MS,
        client_factory: ClientFactory = _default_client,
    ) -> None:
        self._transport = transport
        self._transcribe_timeout_ms = transcribe_timeout_ms
        self._polish_timeout_ms = polish_timeout_ms
        self._client_factory = client_factory

    @property
    def transport(self) -> TransportEnvironment:
        return self._transport

    async def transcribe(self, request: TranscriptionRequest) -> str:
        audio = await read_audio(request.audio)
        return await self.transcribe_audio(audio, request.audio, request.credential)

    async def transcribe_audio(
        self, audio: bytes, resource: AudioResource, credential: Credential
    ) -> str:
        """Send already-loaded audio. Used directly by the relay."""
        http_request = self._transport.transcription_request(audio, resource, credential)
        target = self._transport.transcription_target(credential.provider)
        logger.info(LOG_TRANSCRIBING, resource.extension, len(audio), target.url)

        start = time.monotonic()
        response = await with_timeout(
            self._send(http_request), LABEL_TRANSCRIPTION, self._transcribe_timeout_ms
        )
        match response.is_success:
            case False:
                raise upstream_error(response.status_code, response.text, self._transport.read_error_detail)
            case True:
                pass

        text = self._transport.read_transcription(response).strip()
        match text:
            case "":
                raise NoSpeechError()
            case _:
                logger.info(LOG_TRANSCRIBED, len(text), time.monotonic() - start)
                return text

    async def polish(self, text: str, credential: Credential) -> str:
        http_request = self._transport.polish_request(text, credential)
        logger.info(LOG_POLISHING, len(text), self._transport.polish_target(credential.provider).url)

        response = await with_timeout(
            self._send(http_request), LABEL_POLISH, self._polish_timeout_ms
        )
        match response.is_success:
            case False:
                raise upstream_error(response.status_code, response.text, self._transport.read_error_detail)
            case True:
                return self._transport.read_polish(response) or text

    async def _send(self, request: httpx.Request) -> httpx.Response:
        try:
            async with self._client_factory() as client:
                return await client.send(request)
        except httpx.RequestError as exc:
            raise TransportError(exc) from exc
