"""
Application-level exceptions.

Every gateway failure maps onto one of these; the API layer renders them as
JSON bodies with at least a `message` field plus any context fields given at
construction (hash, sequence, provided, suggestions, ...).
"""

from __future__ import annotations

from typing import Any


class ExplorerError(Exception):
    """Base error with an HTTP status and JSON-serializable context."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: int | None = None, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.context: dict[str, Any] = context

    def to_payload(self) -> dict[str, Any]:
        return {"message": self.message, **self.context}


class InvalidIdentifierError(ExplorerError):
    """Malformed caller input, rejected before any network call."""

    status_code = 400


class NotFoundError(ExplorerError):
    """Upstream explicitly reported the resource as absent."""

    status_code = 404


class UpstreamError(ExplorerError):
    """Upstream answered with a server error (or unexpected client error)."""

    status_code = 500


class RpcError(UpstreamError):
    """Soroban JSON-RPC returned an error envelope."""

    def __init__(self, message: str, *, code: int | None = None, **context: Any) -> None:
        super().__init__(message, **context)
        self.code = code


class UpstreamUnavailableError(ExplorerError):
    """Upstream could not be reached (DNS, refused connection, timeout)."""

    status_code = 503
