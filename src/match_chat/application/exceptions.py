from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    code = "error"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    code = "not_found"


class UnauthorizedError(AppError):
    """Caller is not one of the match participants."""

    code = "unauthorized"


class ValidationError(AppError):
    code = "invalid_data"


class InvalidContentError(ValidationError):
    code = "invalid_content"


class RateLimitedError(AppError):
    """Upstream throttling (HTTP 429)."""

    code = "rate_limited"

    def __init__(self, detail: str = "", retry_after: float | None = None) -> None:
        super().__init__(detail)
        self.retry_after = retry_after


class ConnectionLostError(AppError):
    """Realtime transport dropped; resync instead of retrying."""

    code = "connection_lost"
