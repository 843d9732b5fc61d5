"""Maps failed HTTP replies to one fixed, user-facing message."""
import json
from typing import Callable

from voicetype.constants import (
    MSG_BAD_AUDIO_FORMAT,
    MSG_BAD_REQUEST,
    MSG_HTTP_STATUS,
    MSG_INVALID_API_KEY,
    MSG_RATE_LIMITED,
    MSG_SERVER_ERROR,
    MSG_TOO_LONG,
    MSG_UPSTREAM_FAILED,
)
from voicetype.errors import UpstreamError


def extract_error_detail(status: int, raw: str) -> str:
    """Prefer the JSON ``error.message`` (provider) or ``error`` string (relay), else the raw body."""
    try:
        parsed = json.loads(raw)
    except ValueError:
        parsed = None

    match parsed:
        case {"error": {"message": str() as message}} if message:
            return message
        case {"error": str() as message} if message:
            return message
        case _ if raw.strip():
            return raw
        case _:
            return MSG_HTTP_STATUS % status


def relay_error_detail(status: int, raw: str) -> str:
    """The relay always answers errors as JSON ``{"error": ...}``; anything else came from a proxy."""
    try:
        parsed = json.loads(raw)
    except ValueError:
        parsed = None

    match parsed:
        case {"error": str() as message} if message:
            return message
        case _:
            return MSG_SERVER_ERROR % status


def classify_http_error(status: int, detail: str) -> str:
    match status:
        case 401:
            return MSG_INVALID_API_KEY
        case 429:
            return MSG_RATE_LIMITED
        case 413:
            return MSG_TOO_LONG
        case 400 if "audio" in detail.lower():
            return MSG_BAD_AUDIO_FORMAT
        case 400:
            return MSG_BAD_REQUEST % detail
        case _:
            return MSG_UPSTREAM_FAILED % (status, detail)


def upstream_error(
    status: int, raw: str, read_detail: Callable[[int, str], str] = extract_error_detail
) -> UpstreamError:
    detail = read_detail(status, raw)
    return UpstreamError(status=status, detail=detail, message=classify_http_error(status, detail))
