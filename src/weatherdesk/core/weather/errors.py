from __future__ import annotations


class WeatherApiError(RuntimeError):
    """Base error for weather provider failures.

    ``message`` is user facing (it is shown to the chat model and API
    callers); ``code`` is a stable machine-readable tag.
    """

    def __init__(self, message: str, code: str = "API_ERROR", status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class CityNotFoundError(WeatherApiError):
    def __init__(self, city: str) -> None:
        super().__init__(f'Город "{city}" не найден', "CITY_NOT_FOUND", 404)
        self.city = city


class WeatherAuthError(WeatherApiError):
    def __init__(self) -> None:
        super().__init__("Недействительный API ключ", "AUTH_ERROR", 403)


class RateLimitError(WeatherApiError):
    def __init__(self) -> None:
        super().__init__("Превышен лимит запросов к API", "RATE_LIMIT", 429)


class ApiUnavailableError(WeatherApiError):
    def __init__(self, message: str = "API временно недоступен") -> None:
        super().__init__(message, "API_UNAVAILABLE", 503)


class WeatherConfigError(WeatherApiError):
    def __init__(self, message: str = "API ключ не настроен") -> None:
        super().__init__(message, "CONFIG_ERROR", 500)
