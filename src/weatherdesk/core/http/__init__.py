from .client import get_http_client, request_with_retry
from .errors import WeatherdeskHTTPError, WeatherdeskHTTPNetworkError, WeatherdeskHTTPStatusError

__all__ = [
    "get_http_client",
    "request_with_retry",
    "WeatherdeskHTTPError",
    "WeatherdeskHTTPNetworkError",
    "WeatherdeskHTTPStatusError",
]
