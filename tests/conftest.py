from typing import Callable

import httpx
import pytest

from voicetype.models import AudioResource, Credential, Provider

AUDIO_BYTES = b"\x00\x00\x00\x20ftypM4A " + b"\x01" * 4096


@pytest.fixture(autouse=True)
def _no_dotenv(monkeypatch):
    """Keep a developer's .env out of the tests."""
    monkeypatch.setattr("voicetype.config.load_dotenv", lambda *a, **k: None)


@pytest.fixture
def audio_resource(tmp_path) -> AudioResource:
    path = tmp_path / "recording.m4a"
    path.write_bytes(AUDIO_BYTES)
    return AudioResource.from_location(str(path))


@pytest.fixture
def credential() -> Credential:
    return Credential(provider=Provider.OPENAI, api_key="sk-test")


@pytest.fixture
def mock_factory() -> Callable[[Callable], Callable[[], httpx.AsyncClient]]:
    """Builds httpx client factories whose requests are answered by a handler."""
    def _factory(handler: Callable) -> Callable[[], httpx.AsyncClient]:
        return lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return _factory
