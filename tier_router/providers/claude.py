"""Anthropic Claude provider for the premium tier (Messages API, streaming)."""

from typing import Any

from loguru import logger

from tier_router.errors import DecodingError, InvalidResponseError
from tier_router.models import CostTier
from tier_router.providers.base import HTTPProvider
from tier_router.retry import RetryPolicy
from tier_router.sse import MESSAGES_DIALECT

DEFAULT_BASE_URL = "https://api.anthropic.com/v1"
DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_API_VERSION = "2023-06-01"

# The Messages API has no JSON mode; the instruction rides on the system prompt.
JSON_INSTRUCTION = (
    "\n\nIMPORTANT: You MUST respond with ONLY valid JSON. "
    "No markdown, no explanation, just the JSON object."
)


class ClaudeProvider(HTTPProvider):
    """Anthropic Messages API.

    Auth uses ``x-api-key`` plus a versioned ``anthropic-version`` header.
    The system prompt is a top-level ``system`` field, and streaming uses
    named ``event:`` / ``data:`` pairs ended by ``message_stop``.
    """

    name = "Claude"
    cost_tier = CostTier.PREMIUM
    supports_streaming = True
    endpoint_path = "/messages"
    stream_dialect = MESSAGES_DIALECT

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        api_version: str = DEFAULT_API_VERSION,
        **kwargs: Any,
    ):
        kwargs.setdefault("retry_policy", RetryPolicy(honor_retry_after=True))
        super().__init__(api_key, base_url, model, **kwargs)
        self.api_version = api_version

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
            "Content-Type": "application/json",
        }

    def _build_body(self, system_prompt, user_prompt, temperature, max_tokens, require_json, stream=False):
        system = system_prompt + JSON_INSTRUCTION if require_json else system_prompt
        body: dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens or self.default_max_tokens,
            "system": system,
            "messages": [{"role": "user", "content": user_prompt}],
            "temperature": temperature,
        }
        if stream:
            body["stream"] = True
        return body

    def _extract_text(self, data: dict[str, Any]) -> str:
        content = data.get("content")
        if not isinstance(content, list):
            raise DecodingError("missing 'content' array")
        for block in content:
            if isinstance(block, dict) and block.get("type") == "text":
                text = block.get("text")
                if isinstance(text, str):
                    return text
                break
        raise InvalidResponseError("no text content block")

    def _log_usage(self, data: dict[str, Any]) -> None:
        usage = data.get("usage")
        if isinstance(usage, dict):
            logger.debug(
                f"{self.name} tokens: in={usage.get('input_tokens', 0)} "
                f"out={usage.get('output_tokens', 0)}"
            )

    def _structured_error(self, data: Any) -> str | None:
        # {"type": "error", "error": {"type": ..., "message": ...}}
        if not isinstance(data, dict):
            return None
        error = data.get("error")
        if not isinstance(error, dict):
            return None
        if not isinstance(error.get("type"), str) or not isinstance(error.get("message"), str):
            return None
        return f"{error['type']}: {error['message']}"
