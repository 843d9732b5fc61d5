"""Transport environments — where requests go and how replies are read.

DirectTransport talks to the provider's OpenAI-compatible API with the
caller's bearer token. RelayTransport targets this application's own backend
(``/api/transcribe``, ``/api/polish``) for browser-restricted callers; the
credential travels in the JSON body and the relay forwards it upstream.
"""
from abc import ABC, abstractmethod

import httpx

from voicetype.constants import (
    COMPLETION_MODELS,
    COMPLETIONS_PATH,
    ENV_NATIVE,
    ENV_WEB,
    POLISH_MAX_TOKENS,
    POLISH_SYSTEM_PROMPT,
    POLISH_TEMPERATURE,
    PROVIDER_BASE_URLS,
    RELAY_POLISH_PATH,
    RELAY_TRANSCRIBE_PATH,
    TRANSCRIPTIONS_PATH,
)
from voicetype.models import AudioResource, Credential, EndpointTarget, Provider
from voicetype.transcription.classifier import extract_error_detail, relay_error_detail
from voicetype.transcription.payload import build_multipart, build_relay_envelope


def _bearer(credential: Credential) -> dict[str, str]:
    return {"Authorization": f"Bearer {credential.api_key}"}


def polish_messages(text: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": POLISH_SYSTEM_PROMPT},
        {"role": "user", "content": text},
    ]


def completion_body(text: str, provider: Provider) -> dict:
    return {
        "model": COMPLETION_MODELS[provider.value],
        "messages": polish_messages(text),
        "temperature": POLISH_TEMPERATURE,
        "max_tokens": POLISH_MAX_TOKENS,
    }


def read_completion_content(response: httpx.Response) -> str | None:
    """``choices[0].message.content`` stripped, or None when the payload lacks it."""
    try:
        data = response.json()
    except ValueError:
        return None
    match data:
        case {"choices": [{"message": {"content": str() as content}}, *_]}:
            return content.strip() or None
        case _:
            return None


class TransportEnvironment(ABC):
    via_relay: bool

    def read_error_detail(self, status: int, raw: str) -> str:
        return extract_error_detail(status, raw)

    @abstractmethod
    def transcription_target(self, provider: Provider) -> EndpointTarget: ...

    @abstractmethod
    def polish_target(self, provider: Provider) -> EndpointTarget: ...

    @abstractmethod
    def transcription_request(
        self, audio: bytes, resource: AudioResource, credential: Credential
    ) -> httpx.Request: ...

    @abstractmethod
    def polish_request(self, text: str, credential: Credential) -> httpx.Request: ...

    @abstractmethod
    def read_transcription(self, response: httpx.Response) -> str:
        """Unstripped transcription text from a 2xx reply."""
        ...

    @abstractmethod
    def read_polish(self, response: httpx.Response) -> str | None:
        """Refined text from a 2xx reply, or None when the payload lacks it."""
        ...


class DirectTransport(TransportEnvironment):
    via_relay = False

    def transcription_target(self, provider: Provider) -> EndpointTarget:
        return EndpointTarget(PROVIDER_BASE_URLS[provider.value] + TRANSCRIPTIONS_PATH, via_relay=False)

    def polish_target(self, provider: Provider) -> EndpointTarget:
        return EndpointTarget(PROVIDER_BASE_URLS[provider.value] + COMPLETIONS_PATH, via_relay=False)

    def transcription_request(
        self, audio: bytes, resource: AudioResource, credential: Credential
    ) -> httpx.Request:
        payload = build_multipart(audio, resource, credential.provider)
        return httpx.Request(
            "POST",
            self.transcription_target(credential.provider).url,
            headers=_bearer(credential),
            files=payload.parts,
        )

    def polish_request(self, text: str, credential: Credential) -> httpx.Request:
        return httpx.Request(
            "POST",
            self.polish_target(credential.provider).url,
            headers=_bearer(credential),
            json=completion_body(text, credential.provider),
        )

    def read_transcription(self, response: httpx.Response) -> str:
        return response.text

    def read_polish(self, response: httpx.Response) -> str | None:
        return read_completion_content(response)


class RelayTransport(TransportEnvironment):
    via_relay = True

    def __init__(self, relay_base_url: str) -> None:
        self._base_url = relay_base_url.rstrip("/")

    def transcription_target(self, provider: Provider) -> EndpointTarget:
        return EndpointTarget(self._base_url + RELAY_TRANSCRIBE_PATH, via_relay=True)

    def polish_target(self, provider: Provider) -> EndpointTarget:
        return EndpointTarget(self._base_url + RELAY_POLISH_PATH, via_relay=True)

    def transcription_request(
        self, audio: bytes, resource: AudioResource, credential: Credential
    ) -> httpx.Request:
        return httpx.Request(
            "POST",
            self.transcription_target(credential.provider).url,
            json=build_relay_envelope(audio, resource, credential),
        )

    def polish_request(self, text: str, credential: Credential) -> httpx.Request:
        return httpx.Request(
            "POST",
            self.polish_target(credential.provider).url,
            json={"apiKey": credential.api_key, "provider": credential.provider.value, "text": text},
        )

    def read_transcription(self, response: httpx.Response) -> str:
        return _relay_text(response) or ""

    def read_polish(self, response: httpx.Response) -> str | None:
        return (_relay_text(response) or "").strip() or None

    def read_error_detail(self, status: int, raw: str) -> str:
        return relay_error_detail(status, raw)


def _relay_text(response: httpx.Response) -> str | None:
    try:
        data = response.json()
    except ValueError:
        return None
    match data:
        case {"text": str() as text}:
            return text
        case _:
            return None


def relay_base_url_from_domain(domain: str) -> str:
    """``https://<domain>`` unless a scheme is given. Ports are never added."""
    cleaned = domain.strip().rstrip("/")
    match cleaned:
        case "":
            raise ValueError("Relay domain must not be empty")
        case d if "://" in d:
            return d
        case d:
            return f"https://{d}"


def select_transport(environment: str, relay_domain: str | None = None) -> TransportEnvironment:
    match (environment, relay_domain):
        case (env, _) if env == ENV_NATIVE:
            return DirectTransport()
        case (env, str() as domain) if env == ENV_WEB:
            return RelayTransport(relay_base_url_from_domain(domain))
        case (env, None) if env == ENV_WEB:
            raise ValueError("A relay domain is required in the web environment")
        case (env, _):
            raise ValueError(f"Unknown environment: {env!r}")
