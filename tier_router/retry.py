"""Shared retry policy for HTTP providers.

Two independent budgets share one attempt counter per logical request:
429/5xx responses back off linearly (or by Retry-After, where the vendor
honours it), allow-listed transport faults back off exponentially.
"""

import asyncio
import math
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import httpx
from loguru import logger

MAX_RETRIES = 3

# Transport faults worth retrying: timeouts, unreachable host / DNS,
# connection reset or lost mid-response.
TRANSIENT_TRANSPORT_ERRORS: tuple[type[httpx.TransportError], ...] = (
    httpx.TimeoutException,
    httpx.ConnectError,
    httpx.ReadError,
    httpx.WriteError,
    httpx.RemoteProtocolError,
)


def is_retryable_status(status_code: int) -> bool:
    """Rate limiting and server errors are retried; everything else is final."""
    return status_code == 429 or 500 <= status_code <= 599


def is_transient_transport_error(error: BaseException) -> bool:
    return isinstance(error, TRANSIENT_TRANSPORT_ERRORS)


def parse_retry_after(value: str | None) -> float | None:
    """Parse a numeric Retry-After value in seconds.

    Returns None when the header is missing, non-numeric, negative or
    not finite.
    """
    if value is None:
        return None
    try:
        seconds = float(value.strip())
    except ValueError:
        return None
    if not math.isfinite(seconds) or seconds < 0:
        return None
    return seconds


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry settings for one provider."""

    max_retries: int = MAX_RETRIES
    honor_retry_after: bool = False
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep

    def can_retry(self, attempt: int) -> bool:
        return attempt < self.max_retries

    def status_delay(self, attempt: int, response: httpx.Response | None = None) -> float:
        fallback = float((attempt + 1) * 2)
        if not self.honor_retry_after or response is None:
            return fallback

        raw = response.headers.get("retry-after")
        delay = parse_retry_after(raw)
        if delay is None:
            if raw is not None:
                logger.debug(f"Ignoring unusable retry-after header {raw!r}, using {fallback}s")
            return fallback
        return delay

    def transport_delay(self, attempt: int) -> float:
        return float(2 ** (attempt + 1))


def log_retry(
    provider_name: str,
    attempt: int,
    max_retries: int,
    wait_time: float,
    status_code: int | None = None,
    error: BaseException | None = None,
) -> None:
    """Log a retry with consistent format (attempt is 0-indexed)."""
    cause = f"HTTP {status_code}" if status_code is not None else f"network error ({type(error).__name__})"
    logger.warning(
        f"{provider_name}: {cause}, retry {attempt + 1}/{max_retries} in {wait_time:g}s"
    )
