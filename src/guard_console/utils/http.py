"""Shared HTTP utilities."""

from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import urlparse

_BASE_URL_ALLOWED_SCHEMES = frozenset({"http", "https"})


def normalize_base_url(value: str) -> str:
    """Normalize and validate the console API base URL."""
    candidate = value.strip()
    if not candidate:
        raise ValueError("api base_url must not be empty")

    parsed = urlparse(candidate)
    if parsed.scheme.lower() not in _BASE_URL_ALLOWED_SCHEMES:
        raise ValueError("api base_url must use http or https")
    if not parsed.netloc:
        raise ValueError("api base_url must include host")
    if parsed.query or parsed.fragment:
        raise ValueError("api base_url must not include query or fragment")

    normalized_path = parsed.path.rstrip("/")
    return f"{parsed.scheme.lower()}://{parsed.netloc}{normalized_path}"


def extract_error_message(payload: object, default: str) -> str:
    """Pull a human readable message out of an API error body.

    The API reports errors either as ``{"errors": {"message": ...}}`` or as a
    top-level ``{"message": ...}``.
    """
    if not isinstance(payload, Mapping):
        return default
    errors = payload.get("errors")
    if isinstance(errors, Mapping):
        message = errors.get("message")
        if isinstance(message, str) and message.strip():
            return message
    message = payload.get("message")
    if isinstance(message, str) and message.strip():
        return message
    return default


def bool_param(value: bool, *, numeric: bool) -> Any:
    if numeric:
        return 1 if value else 0
    return value
