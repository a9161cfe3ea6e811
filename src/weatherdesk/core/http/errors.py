from __future__ import annotations


class WeatherdeskHTTPError(RuntimeError):
    """Base error for shared HTTP client operations."""


class WeatherdeskHTTPStatusError(WeatherdeskHTTPError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class WeatherdeskHTTPNetworkError(WeatherdeskHTTPError):
    """Raised when request retries are exhausted for transport errors."""
