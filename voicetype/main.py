"""Entry points — wires Config → credentials → transport → pipeline, and serves the relay."""
import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
import uvicorn

from voicetype.config import Config
from voicetype.constants import ENV_NATIVE, LOG_RELAY_STARTING
from voicetype.credentials import EnvCredentialSource
from voicetype.errors import VoiceTypeError
from voicetype.history import HistoryStore
from voicetype.models import AudioResource, TranscriptionOutcome
from voicetype.pipeline import TranscriptionPipeline
from voicetype.relay.app import create_app
from voicetype.transcription.http import HttpTranscriptionClient
from voicetype.transcription.transport import select_transport


def _setup_logging(level: str) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    list(map(root.removeHandler, root.handlers[:]))
    root.addHandler(RichHandler(rich_tracebacks=True))


def build_pipeline(config: Config, history: HistoryStore | None = None) -> TranscriptionPipeline:
    transport = select_transport(config.environment, config.relay_domain)
    client = HttpTranscriptionClient(
        transport,
        transcribe_timeout_ms=config.transcribe_timeout_ms,
        polish_timeout_ms=config.polish_timeout_ms,
    )
    return TranscriptionPipeline(
        credentials=EnvCredentialSource(config),
        client=client,
        polish_enabled=config.polish_enabled,
        on_complete=history.record if history is not None else None,
    )


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="voicetype", description="Transcribe and polish a recording.")
    parser.add_argument("audio", help="path, file:// URI or data: URI of the recording")
    parser.add_argument("--duration", type=float, default=None, help="recording length in seconds")
    parser.add_argument("--no-polish", action="store_true", help="skip the polish step")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    config = Config.from_env()
    _setup_logging(config.log_level)

    if args.no_polish:
        config = replace(config, polish_enabled=False)

    console = Console()
    history = HistoryStore(path=Path(config.history_path))
    pipeline = build_pipeline(config, history)

    try:
        outcome: TranscriptionOutcome = asyncio.run(
            pipeline.run(AudioResource.from_location(args.audio), duration=args.duration)
        )
    except VoiceTypeError as exc:
        console.print(exc.message, style="red", markup=False)
        return 1

    console.print(outcome.text, markup=False)
    return 0


def relay() -> None:
    config = Config.from_env()
    _setup_logging(config.log_level)
    logging.getLogger(__name__).info(LOG_RELAY_STARTING, config.relay_host, config.relay_port)

    client = HttpTranscriptionClient(
        select_transport(ENV_NATIVE),
        transcribe_timeout_ms=config.transcribe_timeout_ms,
        polish_timeout_ms=config.polish_timeout_ms,
    )
    uvicorn.run(create_app(client), host=config.relay_host, port=config.relay_port)


if __name__ == "__main__":
    sys.exit(main())
