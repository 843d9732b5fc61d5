"""Payload builder — turns a recorded clip into a speech-to-text request body.

Two shapes are produced:

* a multipart form (``file``, ``model``, ``response_format`` in that order) for
  direct provider calls, encoded by httpx's multipart encoder;
* a JSON envelope carrying the clip as base64 for the relay, which rebuilds the
  multipart form server-side.

Audio is read and sanity-checked before anything touches the network.
"""
import asyncio
import base64
import binascii
import logging
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlparse

from voicetype.constants import (
    DATA_URI_PREFIX,
    FILE_URI_PREFIX,
    MIN_AUDIO_BYTES,
    MSG_AUDIO_TOO_SMALL,
    MSG_AUDIO_UNREADABLE,
    RECORDING_FILENAME,
    RESPONSE_FORMAT_TEXT,
    TRANSCRIPTION_MODELS,
)
from voicetype.errors import PayloadError
from voicetype.models import AudioResource, Credential, Provider

logger = logging.getLogger(__name__)

# (field name, (filename or None, content, content type or None))
MultipartPart = tuple[str, tuple[str | None, bytes | str, str | None]]


@dataclass(frozen=True)
class MultipartPayload:
    parts: list[MultipartPart]

    @property
    def field_names(self) -> list[str]:
        return [name for name, _ in self.parts]


def _path_from_location(location: str) -> Path:
    match location.startswith(FILE_URI_PREFIX):
        case True:
            return Path(unquote(urlparse(location).path))
        case False:
            return Path(location)


def _decode_data_uri(location: str) -> bytes:
    header, _, data = location[len(DATA_URI_PREFIX):].partition(",")
    match header.endswith(";base64"):
        case True:
            return base64.b64decode(data, validate=True)
        case False:
            return unquote(data).encode()


def _read_bytes(location: str) -> bytes:
    match location.startswith(DATA_URI_PREFIX):
        case True:
            return _decode_data_uri(location)
        case False:
            return _path_from_location(location).read_bytes()


async def read_audio(resource: AudioResource) -> bytes:
    """Load the clip's bytes off the event loop. Raises PayloadError when unusable."""
    try:
        audio = await asyncio.to_thread(_read_bytes, resource.location)
    except (OSError, ValueError, binascii.Error) as exc:
        raise PayloadError(MSG_AUDIO_UNREADABLE % exc) from exc
    return check_audio(audio)


def check_audio(audio: bytes) -> bytes:
    match len(audio):
        case n if n < MIN_AUDIO_BYTES:
            logger.debug("Rejected %d-byte audio body", n)
            raise PayloadError(MSG_AUDIO_TOO_SMALL)
        case _:
            return audio


def build_multipart(audio: bytes, resource: AudioResource, provider: Provider) -> MultipartPayload:
    return MultipartPayload(parts=[
        ("file", (RECORDING_FILENAME % resource.extension, audio, resource.mime_type)),
        ("model", (None, TRANSCRIPTION_MODELS[provider.value], None)),
        ("response_format", (None, RESPONSE_FORMAT_TEXT, None)),
    ])


def build_relay_envelope(audio: bytes, resource: AudioResource, credential: Credential) -> dict[str, str]:
    return {
        "apiKey": credential.api_key,
        "provider": credential.provider.value,
        "audioBase64": base64.b64encode(audio).decode("ascii"),
        "mimeType": resource.mime_type,
    }
