"""Relay application factory."""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from voicetype.constants import MSG_RELAY_MISSING_FIELDS, POLISH_TIMEOUT_MS, TRANSCRIBE_TIMEOUT_MS
from voicetype.relay import routes
from voicetype.transcription.http import HttpTranscriptionClient
from voicetype.transcription.transport import DirectTransport


def create_app(upstream: HttpTranscriptionClient | None = None) -> FastAPI:
    """Build the relay. Upstream calls always use the direct transport."""
    app = FastAPI(title="voicetype-relay", version="0.1.0")
    app.state.upstream = upstream or HttpTranscriptionClient(
        DirectTransport(),
        transcribe_timeout_ms=TRANSCRIBE_TIMEOUT_MS,
        polish_timeout_ms=POLISH_TIMEOUT_MS,
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_request: Request, _exc: RequestValidationError) -> JSONResponse:
        # Malformed bodies get the same 400 envelope as missing fields.
        return JSONResponse(status_code=400, content={"error": MSG_RELAY_MISSING_FIELDS})

    app.include_router(routes.router)
    return app
