from dataclasses import dataclass
from typing import Optional
import os
from dotenv import load_dotenv

from voicetype.constants import (
    DEFAULT_PROVIDER,
    ENV_NATIVE,
    ENV_WEB,
    POLISH_TIMEOUT_MS,
    TRANSCRIBE_TIMEOUT_MS,
)
from voicetype.models import Provider

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


@dataclass(frozen=True)
class Config:
    provider: Provider
    openai_api_key: Optional[str]
    groq_api_key: Optional[str]
    environment: str
    relay_domain: Optional[str]
    transcribe_timeout_ms: int
    polish_timeout_ms: int
    polish_enabled: bool
    history_path: str
    relay_host: str
    relay_port: int
    log_level: str

    @classmethod
    def from_env(cls) -> "Config":
        load_dotenv()

        provider = os.getenv("VOICETYPE_PROVIDER", DEFAULT_PROVIDER)
        openai_api_key = os.getenv("OPENAI_API_KEY") or None
        groq_api_key = os.getenv("GROQ_API_KEY") or None
        environment = os.getenv("VOICETYPE_ENVIRONMENT", ENV_NATIVE)
        relay_domain = os.getenv("VOICETYPE_RELAY_DOMAIN") or None
        transcribe_timeout = os.getenv("TRANSCRIBE_TIMEOUT_MS", str(TRANSCRIBE_TIMEOUT_MS))
        polish_timeout = os.getenv("POLISH_TIMEOUT_MS", str(POLISH_TIMEOUT_MS))
        polish = os.getenv("VOICETYPE_POLISH", "true")
        history_path = os.getenv("VOICETYPE_HISTORY_PATH", ".voicetype_history.json")
        relay_host = os.getenv("RELAY_HOST", "127.0.0.1")
        relay_port = os.getenv("RELAY_PORT", "5000")
        log_level = os.getenv("LOG_LEVEL", "INFO")

        return cls._validate(
            provider=provider,
            openai_api_key=openai_api_key,
            groq_api_key=groq_api_key,
            environment=environment.strip().lower(),
            relay_domain=relay_domain,
            transcribe_timeout=transcribe_timeout,
            polish_timeout=polish_timeout,
            polish=polish.strip().lower(),
            history_path=history_path,
            relay_host=relay_host,
            relay_port=relay_port,
            log_level=log_level,
        )

    def api_key_for(self, provider: Provider) -> Optional[str]:
        match provider:
            case Provider.GROQ:
                return self.groq_api_key
            case _:
                return self.openai_api_key

    @staticmethod
    def _validate(
        provider: str,
        openai_api_key: Optional[str],
        groq_api_key: Optional[str],
        environment: str,
        relay_domain: Optional[str],
        transcribe_timeout: str,
        polish_timeout: str,
        polish: str,
        history_path: str,
        relay_host: str,
        relay_port: str,
        log_level: str,
    ) -> "Config":
        try:
            parsed_provider = Provider.parse(provider)
        except ValueError:
            raise ValueError("VOICETYPE_PROVIDER must be 'openai' or 'groq'") from None

        match environment:
            case "native" | "web":
                pass
            case _:
                raise ValueError(f"VOICETYPE_ENVIRONMENT must be '{ENV_NATIVE}' or '{ENV_WEB}'")

        match (environment, relay_domain):
            case ("web", None):
                raise ValueError("VOICETYPE_RELAY_DOMAIN must be set when VOICETYPE_ENVIRONMENT=web")
            case _:
                pass

        match polish:
            case p if p in _TRUTHY:
                polish_enabled = True
            case p if p in _FALSY:
                polish_enabled = False
            case _:
                raise ValueError("VOICETYPE_POLISH must be true or false")

        return Config(
            provider=parsed_provider,
            openai_api_key=openai_api_key,
            groq_api_key=groq_api_key,
            environment=environment,
            relay_domain=relay_domain,
            transcribe_timeout_ms=_positive_int("TRANSCRIBE_TIMEOUT_MS", transcribe_timeout),
            polish_timeout_ms=_positive_int("POLISH_TIMEOUT_MS", polish_timeout),
            polish_enabled=polish_enabled,
            history_path=history_path,
            relay_host=relay_host,
            relay_port=_positive_int("RELAY_PORT", relay_port),
            log_level=log_level,
        )


def _positive_int(name: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer") from None
    match value:
        case v if v > 0:
            return v
        case _:
            raise ValueError(f"{name} must be positive")
