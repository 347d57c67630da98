"""Groq provider for the fast tier (OpenAI-compatible chat completions)."""

from typing import Any

from tier_router.errors import DecodingError, InvalidResponseError
from tier_router.models import CostTier
from tier_router.providers.base import HTTPProvider
from tier_router.retry import RetryPolicy

DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_MODEL = "llama-3.3-70b-versatile"


class GroqProvider(HTTPProvider):
    """Cheapest and fastest provider. Always registered for the fast tier.

    Rate limits and server errors back off linearly without consulting
    Retry-After; error bodies are reported raw. No streaming.
    """

    name = "Groq"
    cost_tier = CostTier.FAST
    supports_streaming = False
    endpoint_path = "/chat/completions"
    default_max_tokens = None

    def __init__(
        self,
        api_key: str = "",
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        **kwargs: Any,
    ):
        kwargs.setdefault("timeout", 30.0)
        kwargs.setdefault("stream_timeout", 60.0)
        kwargs.setdefault("retry_policy", RetryPolicy(honor_retry_after=False))
        super().__init__(api_key, base_url, model, **kwargs)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _build_body(self, system_prompt, user_prompt, temperature, max_tokens, require_json, stream=False):
        body: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
        }
        if max_tokens is not None:
            body["max_tokens"] = max_tokens
        if require_json:
            body["response_format"] = {"type": "json_object"}
        return body

    def _extract_text(self, data: dict[str, Any]) -> str:
        choices = data.get("choices")
        if not isinstance(choices, list):
            raise DecodingError("missing 'choices' array")
        if not choices:
            raise InvalidResponseError("no choices returned")
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise InvalidResponseError("first choice has no message content")
        return content
