"""
Domain specific exception hierarchy for the x_gateway package.

Every failure a command can surface is one of the ``GatewayError`` kinds below.
``ConfigurationError`` is the only exception outside that closed set; it is
raised while wiring the gateway and never reaches a command caller.
"""

from __future__ import annotations

from typing import Any, Iterable


class ConfigurationError(Exception):
    """Raised when required configuration or credentials are missing."""


class GatewayError(Exception):
    """Base exception for all normalized command failures."""

    kind: str = "GatewayError"

    def __init__(
        self,
        message: str,
        *,
        upstream_code: Any = None,
        upstream_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.upstream_code = upstream_code
        self.upstream_status = upstream_status

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.upstream_code is not None:
            data["upstream_code"] = self.upstream_code
        if self.upstream_status is not None:
            data["upstream_status"] = self.upstream_status
        return data


class ValidationError(GatewayError):
    """Raised when a command payload violates one or more constraints."""

    kind = "ValidationError"

    def __init__(self, command: str, violations: Iterable[str]) -> None:
        self.command = command
        self.violations = list(violations)
        summary = "; ".join(self.violations) or "invalid payload"
        super().__init__(f"Invalid parameters for '{command}': {summary}")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["violations"] = list(self.violations)
        return data


class UnknownCommand(GatewayError):
    """Raised when a command name is not registered."""

    kind = "UnknownCommand"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class RateLimitExceeded(GatewayError):
    """Raised when the local budget or the X API refuses a call."""

    kind = "RateLimitExceeded"

    def __init__(
        self,
        message: str,
        *,
        retry_after: float | None = None,
        upstream_code: Any = None,
        upstream_status: int | None = 429,
    ) -> None:
        super().__init__(
            message,
            upstream_code=upstream_code,
            upstream_status=upstream_status,
        )
        self.retry_after = retry_after

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.retry_after is not None:
            data["retry_after"] = self.retry_after
        return data


class PermissionDenied(GatewayError):
    """Raised when the credentials are not allowed to perform the action."""

    kind = "PermissionDenied"


class NotFound(GatewayError):
    """Raised when the referenced post or user does not exist."""

    kind = "NotFound"


class InvalidRequest(GatewayError):
    """Raised when the X API rejects a request or media input is malformed."""

    kind = "InvalidRequest"


class SourceNotFound(GatewayError):
    """Raised when a local media file does not exist."""

    kind = "SourceNotFound"


class DownloadFailed(GatewayError):
    """Raised when remote media cannot be fetched."""

    kind = "DownloadFailed"


class UpstreamError(GatewayError):
    """Raised for X API failures that carry an unrecognised status or code."""

    kind = "UpstreamError"


class InternalError(GatewayError):
    """Raised for failures without any upstream status or code."""

    kind = "InternalError"
