"""TranscriptionPipeline — credential → transcribe → best-effort polish.

States: idle → acquiring_credential → transcribing → polishing → complete.
``failed`` is reachable from acquiring_credential and transcribing only: a
polish failure of any kind falls back to the raw transcription.
"""
import logging
from typing import Awaitable, Callable, Optional

from voicetype.constants import (
    LABEL_CREDENTIAL,
    LABEL_POLISH,
    LABEL_TRANSCRIPTION,
    LOG_STATE,
    LOG_STEP_FAILED,
    MIN_RECORDING_SECONDS,
    MSG_RECORDING_TOO_SHORT,
)
from voicetype.credentials import CredentialSource
from voicetype.errors import NoCredentialError, PayloadError
from voicetype.models import (
    AudioResource,
    Credential,
    FlowState,
    TranscriptionOutcome,
    TranscriptionRequest,
)
from voicetype.transcription.client import TranscriptionClient
from voicetype.transcription.resilience import best_effort

logger = logging.getLogger(__name__)

OnState = Callable[[FlowState], None]
OnComplete = Callable[[TranscriptionOutcome], None]


async def polish_transcript(client: TranscriptionClient, text: str, credential: Credential) -> str:
    """Refined text, or ``text`` unchanged if refinement fails for any reason."""
    return await best_effort(client.polish(text, credential), text, LABEL_POLISH)


class TranscriptionPipeline:

    def __init__(
        self,
        credentials: CredentialSource,
        client: TranscriptionClient,
        polish_enabled: bool = True,
        on_state: Optional[OnState] = None,
        on_complete: Optional[OnComplete] = None,
    ) -> None:
        self._credentials = credentials
        self._client = client
        self._polish_enabled = polish_enabled
        self._on_state = on_state
        self._on_complete = on_complete

    def _enter(self, state: FlowState) -> None:
        # Runs keep no state on the pipeline; observers get every transition.
        logger.debug(LOG_STATE, state.value)
        match self._on_state:
            case None:
                pass
            case callback:
                callback(state)

    async def run(self, audio: AudioResource, duration: Optional[float] = None) -> TranscriptionOutcome:
        self._enter(FlowState.IDLE)
        credential = await self._step(LABEL_CREDENTIAL, self._acquire_credential())
        raw_text = await self._step(LABEL_TRANSCRIPTION, self._transcribe(audio, credential, duration))

        self._enter(FlowState.POLISHING)
        polished = await self._polish(raw_text, credential)

        outcome = TranscriptionOutcome(
            raw_text=raw_text,
            polished_text=polished,
            provider=credential.provider,
            duration=duration or 0.0,
        )
        self._enter(FlowState.COMPLETE)
        match self._on_complete:
            case None:
                pass
            case callback:
                callback(outcome)
        return outcome

    async def _step(self, label: str, step: Awaitable):
        try:
            return await step
        except Exception as exc:
            logger.warning(LOG_STEP_FAILED, label, exc)
            self._enter(FlowState.FAILED)
            raise

    async def _acquire_credential(self) -> Credential:
        self._enter(FlowState.ACQUIRING_CREDENTIAL)
        match await self._credentials.get_active():
            case None:
                provider = await self._credentials.active_provider()
                raise NoCredentialError(provider.value)
            case credential:
                return credential

    async def _transcribe(
        self, audio: AudioResource, credential: Credential, duration: Optional[float]
    ) -> str:
        self._enter(FlowState.TRANSCRIBING)
        match duration:
            case float() | int() as d if d < MIN_RECORDING_SECONDS:
                raise PayloadError(MSG_RECORDING_TOO_SHORT)
            case _:
                pass
        return await self._client.transcribe(TranscriptionRequest(audio=audio, credential=credential))

    async def _polish(self, raw_text: str, credential: Credential) -> Optional[str]:
        match self._polish_enabled:
            case False:
                return None
            case True:
                return await polish_transcript(self._client, raw_text, credential)
