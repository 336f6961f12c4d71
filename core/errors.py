"""Error types surfaced by the relay.

Each relay error carries the HTTP status the API answers with, a message
that is safe to show to users, and optional ``details`` from upstream.
"""

from __future__ import annotations

from typing import Any


class RelayError(Exception):
    status_code = 500
    kind = "upstream"

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> dict:
        body: dict = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(RelayError):
    status_code = 400
    kind = "validation"


class ConnectivityError(RelayError):
    kind = "connectivity"


class TransientUnavailable(RelayError):
    status_code = 503
    kind = "loading"

    def __init__(self, message: str, details: Any = None, estimated_time: float | None = None):
        super().__init__(message, details)
        self.estimated_time = estimated_time

    def to_body(self) -> dict:
        body = super().to_body()
        if self.estimated_time is not None:
            body["retry_after"] = self.estimated_time
        return body


class RateLimited(RelayError):
    status_code = 429
    kind = "rate_limited"


class UpstreamError(RelayError):
    kind = "upstream"


class CatalogError(Exception):
    """Raised when the movie dataset cannot be loaded."""
