"""Credential sources — where the active provider's API key comes from."""
from abc import ABC, abstractmethod

from voicetype.config import Config
from voicetype.models import Credential, Provider


class CredentialSource(ABC):
    @abstractmethod
    async def active_provider(self) -> Provider: ...

    @abstractmethod
    async def get_active(self) -> Credential | None:
        """Credential for the active provider, or None when no key is configured."""
        ...


class EnvCredentialSource(CredentialSource):
    """Reads keys from Config (OPENAI_API_KEY / GROQ_API_KEY)."""

    def __init__(self, config: Config) -> None:
        self._config = config

    async def active_provider(self) -> Provider:
        return self._config.provider

    async def get_active(self) -> Credential | None:
        provider = self._config.provider
        match self._config.api_key_for(provider):
            case str() as key if key.strip():
                return Credential(provider=provider, api_key=key.strip())
            case _:
                return None


class StaticCredentialSource(CredentialSource):
    """Fixed provider/key pair, handy for embedding and tests."""

    def __init__(self, provider: Provider, api_key: str | None) -> None:
        self._provider = provider
        self._api_key = api_key

    async def active_provider(self) -> Provider:
        return self._provider

    async def get_active(self) -> Credential | None:
        match self._api_key:
            case str() as key if key.strip():
                return Credential(provider=self._provider, api_key=key.strip())
            case _:
                return None
