"""TDD: TranscriptionPipeline tests written FIRST"""
import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from voicetype.credentials import StaticCredentialSource
from voicetype.errors import NoCredentialError, OperationTimeoutError, PayloadError, UpstreamError
from voicetype.models import FlowState, Provider, TranscriptionOutcome
from voicetype.pipeline import TranscriptionPipeline, polish_transcript
from voicetype.transcription.client import TranscriptionClient
from voicetype.transcription.http import HttpTranscriptionClient
from voicetype.transcription.transport import DirectTransport

POLISHED = {"choices": [{"message": {"content": "Hello, this is a test."}}]}


def make_router(transcribe: httpx.Response, polish: httpx.Response, calls: list):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        match request.url.path.endswith("/audio/transcriptions"):
            case True:
                return transcribe
            case False:
                return polish
    return handler


def make_pipeline(mock_factory, handler, api_key="sk-test", **kwargs) -> TranscriptionPipeline:
    client = HttpTranscriptionClient(DirectTransport(), client_factory=mock_factory(handler))
    return TranscriptionPipeline(
        credentials=StaticCredentialSource(Provider.OPENAI, api_key),
        client=client,
        **kwargs,
    )


# ── end-to-end scenarios ──────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_valid_key_transcribes_then_polishes(audio_resource, mock_factory):
    """Scenario 1: final result is the polished text."""
    calls = []
    handler = make_router(
        httpx.Response(200, text="hello this is a test"),
        httpx.Response(200, json=POLISHED),
        calls,
    )
    states = []
    pipeline = make_pipeline(mock_factory, handler, on_state=states.append)

    outcome = await pipeline.run(audio_resource, duration=3.0)

    assert outcome.raw_text == "hello this is a test"
    assert outcome.text == "Hello, this is a test."
    assert outcome.provider == Provider.OPENAI
    assert calls == ["/v1/audio/transcriptions", "/v1/chat/completions"]
    assert states == [
        FlowState.IDLE,
        FlowState.ACQUIRING_CREDENTIAL,
        FlowState.TRANSCRIBING,
        FlowState.POLISHING,
        FlowState.COMPLETE,
    ]


@pytest.mark.asyncio
async def test_invalid_key_fails_without_polish(audio_resource, mock_factory):
    """Scenario 2: 401 surfaces the invalid-key message and polish is never attempted."""
    calls = []
    handler = make_router(
        httpx.Response(401, json={"error": {"message": "Incorrect API key"}}),
        httpx.Response(200, json=POLISHED),
        calls,
    )
    states = []
    pipeline = make_pipeline(mock_factory, handler, on_state=states.append)

    with pytest.raises(UpstreamError) as exc_info:
        await pipeline.run(audio_resource, duration=3.0)

    assert str(exc_info.value) == "Invalid API key. Please check your key in Settings."
    assert calls == ["/v1/audio/transcriptions"]
    assert states[-1] == FlowState.FAILED
    assert FlowState.POLISHING not in states


@pytest.mark.asyncio
async def test_polish_500_returns_raw_text(audio_resource, mock_factory):
    """Scenario 3: refinement failure degrades to the raw transcription."""
    calls = []
    handler = make_router(
        httpx.Response(200, text="raw words here"),
        httpx.Response(500, text="internal error"),
        calls,
    )
    states = []
    pipeline = make_pipeline(mock_factory, handler, on_state=states.append)

    outcome = await pipeline.run(audio_resource, duration=3.0)

    assert outcome.text == "raw words here"
    assert states[-1] == FlowState.COMPLETE


@pytest.mark.asyncio
async def test_no_credential_fails_before_any_network_call(audio_resource, mock_factory):
    """Scenario 4: zero requests when no key is configured."""
    calls = []
    handler = make_router(httpx.Response(200, text="x"), httpx.Response(200, json=POLISHED), calls)
    states = []
    pipeline = make_pipeline(mock_factory, handler, api_key=None, on_state=states.append)

    with pytest.raises(NoCredentialError, match="openai"):
        await pipeline.run(audio_resource, duration=3.0)

    assert len(calls) == 0
    assert states == [FlowState.IDLE, FlowState.ACQUIRING_CREDENTIAL, FlowState.FAILED]


@pytest.mark.asyncio
async def test_failure_log_names_the_failed_step(audio_resource, mock_factory, caplog):
    handler = make_router(httpx.Response(500, text="down"), httpx.Response(200, json=POLISHED), [])

    with caplog.at_level(logging.WARNING, logger="voicetype.pipeline"):
        with pytest.raises(NoCredentialError):
            await make_pipeline(mock_factory, handler, api_key=None).run(audio_resource, duration=3.0)
        with pytest.raises(UpstreamError):
            await make_pipeline(mock_factory, handler).run(audio_resource, duration=3.0)

    failures = [r.getMessage() for r in caplog.records if r.name == "voicetype.pipeline"]
    assert failures[0].startswith("✗ Credential lookup failed")
    assert failures[1].startswith("✗ Transcription failed")


# ── polishing is best-effort ──────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_polish_timeout_returns_raw_text(audio_resource, mock_factory):
    async def handler(request: httpx.Request) -> httpx.Response:
        match request.url.path.endswith("/audio/transcriptions"):
            case True:
                return httpx.Response(200, text="raw words")
            case False:
                await asyncio.sleep(0.3)
                return httpx.Response(200, json=POLISHED)

    client = HttpTranscriptionClient(
        DirectTransport(), polish_timeout_ms=30, client_factory=mock_factory(handler)
    )
    pipeline = TranscriptionPipeline(StaticCredentialSource(Provider.OPENAI, "sk-test"), client)

    outcome = await pipeline.run(audio_resource)

    assert outcome.text == "raw words"


@pytest.mark.asyncio
async def test_polish_network_error_returns_raw_text(audio_resource, mock_factory):
    def handler(request: httpx.Request) -> httpx.Response:
        match request.url.path.endswith("/audio/transcriptions"):
            case True:
                return httpx.Response(200, text="raw words")
            case False:
                raise httpx.ConnectError("connection reset", request=request)

    outcome = await make_pipeline(mock_factory, handler).run(audio_resource)

    assert outcome.text == "raw words"


@pytest.mark.asyncio
async def test_polish_transcript_is_identity_on_failure():
    client = MagicMock(spec=TranscriptionClient)
    client.polish = AsyncMock(side_effect=RuntimeError("unreachable"))

    assert await polish_transcript(client, "keep me", MagicMock()) == "keep me"


@pytest.mark.asyncio
async def test_polish_disabled_skips_polish_call(audio_resource, mock_factory):
    calls = []
    handler = make_router(httpx.Response(200, text="raw words"), httpx.Response(200, json=POLISHED), calls)

    outcome = await make_pipeline(mock_factory, handler, polish_enabled=False).run(audio_resource)

    assert outcome.text == "raw words"
    assert outcome.polished_text is None
    assert calls == ["/v1/audio/transcriptions"]


# ── transcription failures ────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_too_short_recording_fails_before_network(audio_resource, mock_factory):
    calls = []
    handler = make_router(httpx.Response(200, text="x"), httpx.Response(200, json=POLISHED), calls)

    with pytest.raises(PayloadError, match="too short"):
        await make_pipeline(mock_factory, handler).run(audio_resource, duration=0.2)

    assert calls == []


@pytest.mark.asyncio
async def test_transcription_timeout_fails_the_run(audio_resource, mock_factory):
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(0.3)
        return httpx.Response(200, text="late")

    client = HttpTranscriptionClient(
        DirectTransport(), transcribe_timeout_ms=30, client_factory=mock_factory(handler)
    )
    states = []
    pipeline = TranscriptionPipeline(
        StaticCredentialSource(Provider.OPENAI, "sk-test"), client, on_state=states.append
    )

    with pytest.raises(OperationTimeoutError):
        await pipeline.run(audio_resource)

    assert states[-1] == FlowState.FAILED


# ── completion hook ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_on_complete_receives_outcome(audio_resource, mock_factory):
    calls = []
    handler = make_router(httpx.Response(200, text="raw"), httpx.Response(200, json=POLISHED), calls)
    completed = []

    await make_pipeline(mock_factory, handler, on_complete=completed.append).run(audio_resource, duration=2.5)

    assert len(completed) == 1
    assert isinstance(completed[0], TranscriptionOutcome)
    assert completed[0].duration == 2.5


@pytest.mark.asyncio
async def test_on_complete_not_called_on_failure(audio_resource, mock_factory):
    calls = []
    handler = make_router(httpx.Response(401, text=""), httpx.Response(200, json=POLISHED), calls)
    completed = []

    with pytest.raises(UpstreamError):
        await make_pipeline(mock_factory, handler, on_complete=completed.append).run(audio_resource)

    assert completed == []
