"""
Normalization of arbitrary upstream failures into the gateway taxonomy.

Upstream exceptions (tweepy, requests, or anything else) are treated as an
opaque bag of optional fields: a status, a code, nested error entries and a
``data`` mapping. Classification only ever looks at those fields, never at the
exception's identity.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from x_gateway.exceptions import (
    GatewayError,
    InternalError,
    InvalidRequest,
    NotFound,
    PermissionDenied,
    RateLimitExceeded,
    UpstreamError,
)
from x_gateway.rate_limit import RateLimitInfo

logger = logging.getLogger(__name__)

RATE_LIMIT_CODES = {"toomanyrequests", "rate_limit_exceeded", "88"}
PERMISSION_CODES = {"forbidden", "unauthorized"}
NOT_FOUND_CODES = {"notfound", "not_found", "user_not_found"}
INVALID_REQUEST_CODES = {"badrequest", "bad_request", "invalid_request"}


def normalize_error(raw: BaseException) -> GatewayError:
    """
    Classify ``raw`` into a ``GatewayError``. Never raises.

    An error that is already a ``GatewayError`` is returned unchanged.
    """
    if isinstance(raw, GatewayError):
        return raw

    try:
        return _classify(raw)
    except Exception:  # pragma: no cover - classification must stay total
        logger.exception("Failed to classify upstream error %r", raw)
        error = InternalError("An unexpected error occurred")
        error.__cause__ = raw
        return error


def _classify(raw: BaseException) -> GatewayError:
    status = _extract_status(raw)
    code = _extract_code(raw)
    message = _build_message(raw)

    if status is None and code is None:
        logger.error("Unexpected error without upstream status: %r", raw)
        error: GatewayError = InternalError(f"Unexpected error: {message}")
        error.__cause__ = raw
        return error

    code_key = str(code).lower() if code is not None else ""
    logger.warning(
        "Upstream failure status=%s code=%s: %s",
        status,
        code,
        message,
    )

    if status == 429 or code_key in RATE_LIMIT_CODES:
        info = RateLimitInfo.from_headers(_extract_headers(raw))
        error = RateLimitExceeded(
            message,
            retry_after=info.seconds_until_reset(),
            upstream_code=code,
            upstream_status=status if status is not None else 429,
        )
    elif status in (401, 403) or code_key in PERMISSION_CODES:
        error = PermissionDenied(message, upstream_code=code, upstream_status=status)
    elif status == 404 or code_key in NOT_FOUND_CODES:
        error = NotFound(message, upstream_code=code, upstream_status=status)
    elif status == 400 or code_key in INVALID_REQUEST_CODES:
        error = InvalidRequest(message, upstream_code=code, upstream_status=status)
    else:
        error = UpstreamError(message, upstream_code=code, upstream_status=status)

    error.__cause__ = raw
    return error


def _extract_status(raw: BaseException) -> int | None:
    response = getattr(raw, "response", None)
    candidates = (
        getattr(response, "status_code", None),
        getattr(response, "status", None),
        getattr(raw, "status_code", None),
        getattr(raw, "status", None),
    )
    data = _data_mapping(raw)
    for value in (*candidates, data.get("status")):
        status = _as_int(value)
        if status is not None:
            return status
    return None


def _extract_code(raw: BaseException) -> Any:
    api_codes = getattr(raw, "api_codes", None)
    if isinstance(api_codes, (list, tuple)) and api_codes:
        return api_codes[0]
    code = getattr(raw, "code", None)
    if code not in (None, ""):
        return code
    title = _data_mapping(raw).get("title")
    if title:
        return title
    if type(raw).__name__ == "TooManyRequests":
        return "TooManyRequests"
    return None


def _extract_headers(raw: BaseException) -> Mapping[str, str] | None:
    response = getattr(raw, "response", None)
    headers = getattr(response, "headers", None)
    if headers is None:
        return None
    try:
        return dict(headers)
    except (TypeError, ValueError):
        return None


def _data_mapping(raw: BaseException) -> Mapping[str, Any]:
    data = getattr(raw, "data", None)
    return data if isinstance(data, Mapping) else {}


def _build_message(raw: BaseException) -> str:
    data = _data_mapping(raw)
    message = str(raw).strip() or data.get("detail") or data.get("title") or "Twitter API error"
    message = str(message)

    details = [
        text
        for text in (_describe_entry(entry) for entry in _nested_errors(raw))
        if text and text not in message
    ]
    if details:
        message = f"{message} - {'; '.join(details)}"

    detail = data.get("detail")
    if detail and str(detail) not in message:
        message = f"{message} | Detail: {detail}"
    title = data.get("title")
    if title and str(title) not in message:
        message = f"{message} | Title: {title}"
    error_type = data.get("type")
    if error_type and str(error_type) not in message:
        message = f"{message} | Type: {error_type}"
    return message


def _nested_errors(raw: BaseException) -> list[Any]:
    for attribute in ("api_errors", "errors"):
        entries = getattr(raw, attribute, None)
        if isinstance(entries, (list, tuple)) and entries:
            return list(entries)
    entries = _data_mapping(raw).get("errors")
    return list(entries) if isinstance(entries, (list, tuple)) else []


def _describe_entry(entry: Any) -> str:
    if isinstance(entry, Mapping):
        for key in ("message", "detail", "code"):
            value = entry.get(key)
            if value not in (None, ""):
                return str(value)
        return ""
    return str(entry)


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None
