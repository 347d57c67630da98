"""OpenAI provider for the standard tier (chat completions, streaming)."""

from typing import Any

from tier_router.errors import DecodingError, InvalidResponseError
from tier_router.models import CostTier
from tier_router.providers.base import HTTPProvider
from tier_router.retry import RetryPolicy
from tier_router.sse import CHAT_COMPLETIONS_DIALECT

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"


class OpenAIProvider(HTTPProvider):
    """OpenAI Chat Completions API.

    Supports JSON mode via ``response_format`` and streaming via
    ``data: {json}`` lines terminated by ``data: [DONE]``. Honours a numeric
    Retry-After header on 429/5xx.
    """

    name = "OpenAI"
    cost_tier = CostTier.STANDARD
    supports_streaming = True
    endpoint_path = "/chat/completions"
    stream_dialect = CHAT_COMPLETIONS_DIALECT

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        organization: str | None = None,
        **kwargs: Any,
    ):
        kwargs.setdefault("retry_policy", RetryPolicy(honor_retry_after=True))
        super().__init__(api_key, base_url, model, **kwargs)
        self.organization = organization

    def _headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self.organization:
            headers["OpenAI-Organization"] = self.organization
        return headers

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
        if require_json and not stream:
            body["response_format"] = {"type": "json_object"}
        if stream:
            body["stream"] = True
        return body

    def _extract_text(self, data: dict[str, Any]) -> str:
        choices = data.get("choices")
        if not isinstance(choices, list):
            raise DecodingError("missing 'choices' array")
        first = choices[0] if choices else None
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise InvalidResponseError("no message content in first choice")
        return content

    def _structured_error(self, data: Any) -> str | None:
        # {"error": {"message": ..., "type": ..., "code": ...}}
        if not isinstance(data, dict):
            return None
        error = data.get("error")
        if not isinstance(error, dict) or not isinstance(error.get("message"), str):
            return None
        return f"{error.get('type') or 'error'}: {error['message']}"
