"""Error taxonomy shared by providers and the router.

Providers raise these after exhausting their own retry budget; the router
only ever raises NoProvidersAvailableError or AllProvidersFailedError.
"""

from __future__ import annotations


class AIError(Exception):
    """Base class for every routing/provider failure."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidEndpointError(AIError):
    def __init__(self, url: str):
        super().__init__(f"Invalid API URL: {url}")
        self.url = url


class InvalidResponseError(AIError):
    """HTTP success, but the body is missing the expected completion."""

    def __init__(self, detail: str = ""):
        message = "Invalid response from AI service"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ApiError(AIError):
    """Non-2xx response, after the vendor's error body was captured."""

    def __init__(self, detail: str, status_code: int | None = None):
        super().__init__(f"AI service error: {detail}")
        self.detail = detail
        self.status_code = status_code


class DecodingError(AIError):
    def __init__(self, detail: str):
        super().__init__(f"Failed to decode response: {detail}")
        self.detail = detail


class NetworkError(AIError):
    """Transport-level fault with no HTTP response."""

    def __init__(self, cause: BaseException):
        super().__init__(f"Network error: {cause or type(cause).__name__}")
        self.cause = cause


class NoProvidersAvailableError(AIError):
    def __init__(self):
        super().__init__("No AI providers available")


class AllProvidersFailedError(AIError):
    """Every registered tier in the chain failed; errors kept in chain order."""

    def __init__(self, errors: list[Exception]):
        joined = "; ".join(str(e) for e in errors)
        super().__init__(f"All AI providers failed: {joined}")
        self.errors = list(errors)


class StreamingNotSupportedError(AIError):
    def __init__(self, provider_name: str = ""):
        suffix = f" ({provider_name})" if provider_name else ""
        super().__init__(f"Streaming is not supported by this provider{suffix}")
        self.provider_name = provider_name
