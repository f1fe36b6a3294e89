"""Shared utilities for FastAPI routes."""

from collections.abc import Mapping

from fastapi import HTTPException, status
from fastapi.responses import JSONResponse

from server.schemas.responses import ErrorDTO

SENSITIVE_HEADERS = {"x-payment", "authorization", "x-subscription-token"}


def require_param(value: str | None, message: str) -> str:
    """Reject the request with 400 when a required query parameter is missing."""
    if not value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)
    return value


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorDTO(error=message).model_dump())


def redact_sensitive_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """
    Redact auth- and payment-bearing headers before logging.
    """
    redacted: dict[str, str] = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS and value:
            redacted[key] = "[REDACTED]"
        else:
            redacted[key] = value
    return redacted
