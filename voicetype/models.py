from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from voicetype.constants import (
    DATA_URI_PREFIX,
    DEFAULT_EXTENSION,
    DEFAULT_MIME_TYPE,
    MIME_TYPES,
    PROVIDER_GROQ,
    PROVIDER_OPENAI,
)


class Provider(str, Enum):
    OPENAI = PROVIDER_OPENAI
    GROQ = PROVIDER_GROQ

    @classmethod
    def parse(cls, value: str) -> "Provider":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown provider: {value!r}") from None


class FlowState(str, Enum):
    IDLE = "idle"
    ACQUIRING_CREDENTIAL = "acquiring_credential"
    TRANSCRIBING = "transcribing"
    POLISHING = "polishing"
    COMPLETE = "complete"
    FAILED = "failed"


def resolve_extension(location: str) -> str:
    """Container extension from the text after the last '.', ignoring any ?query or #fragment."""
    tail = location.split("?", 1)[0].split("#", 1)[0]
    name = tail.rsplit("/", 1)[-1]
    match name.rpartition("."):
        case (_, "", _):
            return DEFAULT_EXTENSION
        case (_, _, ext) if ext.lower() in MIME_TYPES:
            return ext.lower()
        case _:
            return DEFAULT_EXTENSION


def resolve_mime_type(extension: str) -> str:
    return MIME_TYPES.get(extension.lower(), DEFAULT_MIME_TYPE)


def base_mime_type(mime_type: str | None) -> str:
    return (mime_type or "").split(";", 1)[0].strip().lower()


def extension_for_mime_type(mime_type: str | None) -> str:
    """Container named anywhere in the base type, so "video/webm" and
    "audio/webm;codecs=opus" both map to webm.
    """
    base = base_mime_type(mime_type)
    return next(
        (ext for ext in MIME_TYPES if ext in base),
        DEFAULT_EXTENSION,
    )


@dataclass(frozen=True)
class AudioResource:
    location: str
    extension: str
    mime_type: str

    @classmethod
    def from_location(cls, location: str) -> "AudioResource":
        match location.startswith(DATA_URI_PREFIX):
            case True:
                header = location[len(DATA_URI_PREFIX):].split(",", 1)[0]
                extension = extension_for_mime_type(header)
            case False:
                extension = resolve_extension(location)
        return cls(location=location, extension=extension, mime_type=resolve_mime_type(extension))


@dataclass(frozen=True)
class Credential:
    provider: Provider
    api_key: str = field(repr=False)

    def __repr__(self) -> str:
        return f"Credential(provider={self.provider.value!r}, api_key='***')"


@dataclass(frozen=True)
class TranscriptionRequest:
    audio: AudioResource
    credential: Credential

    @property
    def provider(self) -> Provider:
        return self.credential.provider


@dataclass(frozen=True)
class EndpointTarget:
    url: str
    via_relay: bool


@dataclass(frozen=True)
class TranscriptionOutcome:
    raw_text: str
    polished_text: Optional[str]
    provider: Provider
    duration: float = 0.0

    @property
    def text(self) -> str:
        return self.polished_text or self.raw_text
