"""Relay routes — stateless pass-through for browser-restricted callers.

The caller supplies its own provider key in every request body; the relay
forwards it upstream and neither stores nor logs it.
"""
import base64
import binascii
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from voicetype.constants import (
    DEFAULT_PROVIDER,
    LOG_RELAY_ERROR,
    LOG_RELAY_UPSTREAM_ERROR,
    MSG_RELAY_BAD_AUDIO,
    MSG_RELAY_INTERNAL,
    MSG_RELAY_MISSING_FIELDS,
    MSG_RELAY_UNKNOWN_PROVIDER,
    RELAY_HEALTH_PATH,
    RELAY_POLISH_PATH,
    RELAY_TRANSCRIBE_PATH,
)
from voicetype.errors import (
    NoSpeechError,
    OperationTimeoutError,
    PayloadError,
    TransportError,
    UpstreamError,
)
from voicetype.models import (
    AudioResource,
    Credential,
    Provider,
    base_mime_type,
    extension_for_mime_type,
    resolve_mime_type,
)
from voicetype.transcription.http import HttpTranscriptionClient
from voicetype.transcription.payload import check_audio

logger = logging.getLogger(__name__)

router = APIRouter(tags=["relay"])


class TranscribeBody(BaseModel):
    apiKey: Optional[str] = None
    provider: Optional[str] = None
    audioBase64: Optional[str] = None
    mimeType: Optional[str] = None


class PolishBody(BaseModel):
    apiKey: Optional[str] = None
    provider: Optional[str] = None
    text: Optional[str] = None


def get_upstream(request: Request) -> HttpTranscriptionClient:
    return request.app.state.upstream


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": message})


def _failure_response(label: str, exc: Exception) -> JSONResponse:
    match exc:
        case UpstreamError(status=status, detail=detail):
            logger.warning(LOG_RELAY_UPSTREAM_ERROR, label, status)
            return _error(status, detail)
        case OperationTimeoutError():
            logger.warning(LOG_RELAY_ERROR, label, exc)
            return _error(504, str(exc))
        case TransportError():
            logger.warning(LOG_RELAY_ERROR, label, exc.cause)
            return _error(502, str(exc))
        case _:
            logger.exception(LOG_RELAY_ERROR, label, type(exc).__name__)
            return _error(500, MSG_RELAY_INTERNAL)


def _parse_provider(raw: str) -> Provider | None:
    try:
        return Provider.parse(raw)
    except ValueError:
        return None


@router.post(RELAY_TRANSCRIBE_PATH)
async def transcribe(
    body: TranscribeBody,
    upstream: HttpTranscriptionClient = Depends(get_upstream),
):
    match (body.apiKey, body.provider, body.audioBase64):
        case (str() as api_key, str() as raw_provider, str() as audio_b64) if api_key and raw_provider and audio_b64:
            pass
        case _:
            return _error(400, MSG_RELAY_MISSING_FIELDS)

    provider = _parse_provider(raw_provider)
    match provider:
        case None:
            return _error(400, MSG_RELAY_UNKNOWN_PROVIDER % raw_provider)
        case _:
            pass

    try:
        audio = check_audio(base64.b64decode(audio_b64, validate=True))
    except (binascii.Error, ValueError):
        return _error(400, MSG_RELAY_BAD_AUDIO)
    except PayloadError as exc:
        return _error(400, str(exc))

    extension = extension_for_mime_type(body.mimeType)
    resource = AudioResource(
        location=f"relay-upload.{extension}",
        extension=extension,
        mime_type=base_mime_type(body.mimeType) or resolve_mime_type(extension),
    )
    credential = Credential(provider=provider, api_key=api_key)

    try:
        text = await upstream.transcribe_audio(audio, resource, credential)
    except NoSpeechError:
        # The client applies its own empty-result guard.
        return {"text": ""}
    except Exception as exc:
        return _failure_response("Transcription", exc)
    return {"text": text}


@router.post(RELAY_POLISH_PATH)
async def polish(
    body: PolishBody,
    upstream: HttpTranscriptionClient = Depends(get_upstream),
):
    match (body.apiKey, body.text):
        case (str() as api_key, str() as text) if api_key and text:
            pass
        case _:
            return _error(400, MSG_RELAY_MISSING_FIELDS)

    provider = _parse_provider(body.provider or DEFAULT_PROVIDER)
    match provider:
        case None:
            return _error(400, MSG_RELAY_UNKNOWN_PROVIDER % body.provider)
        case _:
            pass

    try:
        polished = await upstream.polish(text, Credential(provider=provider, api_key=api_key))
    except Exception as exc:
        return _failure_response("Polish", exc)
    return {"text": polished}


@router.get(RELAY_HEALTH_PATH)
async def health() -> dict[str, str]:
    return {"status": "ok"}
