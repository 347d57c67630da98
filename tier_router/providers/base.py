"""HTTPProvider: shared transport, retry loop and error decoding for vendors."""

from __future__ import annotations

import json
from abc import abstractmethod
from contextlib import aclosing
from typing import Any, AsyncIterator

import httpx
from loguru import logger

from tier_router.errors import (
    ApiError,
    DecodingError,
    InvalidEndpointError,
    NetworkError,
    StreamingNotSupportedError,
)
from tier_router.models import AIProvider
from tier_router.retry import RetryPolicy, is_retryable_status, is_transient_transport_error, log_retry
from tier_router.sse import SSEDialect, decode_stream


class HTTPProvider(AIProvider):
    """An AIProvider bound to one vendor's REST API.

    Subclasses describe the vendor: endpoint path, auth headers, request
    body, success schema and structured error schema. The retry loop, the
    error-message fallbacks and the streaming transport live here.

    The httpx client is shared by concurrent calls; no per-call state is
    kept on the instance.
    """

    endpoint_path: str = ""
    stream_dialect: SSEDialect | None = None
    default_max_tokens: int | None = 4096

    def __init__(
        self,
        api_key: str,
        base_url: str,
        model: str,
        *,
        timeout: float = 60.0,
        stream_timeout: float = 120.0,
        retry_policy: RetryPolicy | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.stream_timeout = stream_timeout
        self.retry_policy = retry_policy or RetryPolicy()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model!r}, base_url={self.base_url!r}, api_key='***REDACTED***')"

    # --- vendor hooks ---

    @abstractmethod
    def _headers(self) -> dict[str, str]:
        ...

    @abstractmethod
    def _build_body(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int | None,
        require_json: bool,
        stream: bool = False,
    ) -> dict[str, Any]:
        ...

    @abstractmethod
    def _extract_text(self, data: dict[str, Any]) -> str:
        """Pull the completion text out of a decoded success body."""
        ...

    def _structured_error(self, data: Any) -> str | None:
        """Message from the vendor's error schema, or None if it doesn't match."""
        return None

    def _log_usage(self, data: dict[str, Any]) -> None:
        usage = data.get("usage")
        if isinstance(usage, dict):
            logger.debug(f"{self.name} usage: {usage}")

    # --- transport ---

    def _endpoint(self) -> str:
        url = f"{self.base_url}{self.endpoint_path}"
        try:
            parsed = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as e:
            raise InvalidEndpointError(url) from e
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise InvalidEndpointError(url)
        return url

    async def _post(self, body: dict[str, Any]) -> httpx.Response:
        """POST with bounded retries. Returns a 200 response or raises AIError."""
        url = self._endpoint()
        policy = self.retry_policy
        attempt = 0

        while True:
            logger.debug(f"{self.name}: request attempt {attempt + 1}")
            try:
                response = await self._client.post(url, json=body, headers=self._headers())
            except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
                raise InvalidEndpointError(url) from e
            except httpx.TransportError as e:
                if is_transient_transport_error(e) and policy.can_retry(attempt):
                    delay = policy.transport_delay(attempt)
                    log_retry(self.name, attempt, policy.max_retries, delay, error=e)
                    await policy.sleep(delay)
                    attempt += 1
                    continue
                raise NetworkError(e) from e

            status = response.status_code
            if status == 200:
                return response

            if is_retryable_status(status) and policy.can_retry(attempt):
                delay = policy.status_delay(attempt, response)
                log_retry(self.name, attempt, policy.max_retries, delay, status_code=status)
                await policy.sleep(delay)
                attempt += 1
                continue

            raise self._api_error(response)

    def _api_error(self, response: httpx.Response) -> ApiError:
        status = response.status_code
        try:
            text = response.content.decode("utf-8")
        except UnicodeDecodeError:
            return ApiError(f"Status code: {status}", status_code=status)

        try:
            message = self._structured_error(json.loads(text))
        except ValueError:
            message = None
        if message:
            return ApiError(message, status_code=status)
        return ApiError(f"Status {status}: {text}", status_code=status)

    def _decode(self, response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise DecodingError(str(e)) from e
        if not isinstance(data, dict):
            raise DecodingError(f"expected a JSON object, got {type(data).__name__}")
        return data

    # --- AIProvider ---

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        require_json: bool = False,
    ) -> str:
        if max_tokens is None:
            max_tokens = self.default_max_tokens
        body = self._build_body(system_prompt, user_prompt, temperature, max_tokens, require_json)

        response = await self._post(body)
        data = self._decode(response)
        text = self._extract_text(data)
        self._log_usage(data)
        logger.info(f"{self.name}: received response ({len(text)} characters)")
        return text

    async def stream(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 4096,
    ) -> AsyncIterator[str]:
        if self.stream_dialect is None or not self.supports_streaming:
            raise StreamingNotSupportedError(self.name)

        body = self._build_body(system_prompt, user_prompt, temperature, max_tokens, False, stream=True)
        async with aclosing(decode_stream(self._stream_lines(body), self.stream_dialect)) as fragments:
            async for fragment in fragments:
                yield fragment
        logger.debug(f"{self.name}: stream complete")

    async def _stream_lines(self, body: dict[str, Any]) -> AsyncIterator[str]:
        url = self._endpoint()
        logger.info(f"{self.name}: starting streaming request")
        try:
            async with self._client.stream(
                "POST", url, json=body, headers=self._headers(),
                timeout=httpx.Timeout(self.stream_timeout),
            ) as response:
                if response.status_code != 200:
                    raise ApiError(
                        f"Streaming failed with status {response.status_code}",
                        status_code=response.status_code,
                    )
                async for line in response.aiter_lines():
                    yield line
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise InvalidEndpointError(url) from e
        except httpx.TransportError as e:
            raise NetworkError(e) from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

