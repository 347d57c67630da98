"""Vendor providers over mocked HTTP: request shape, retries, error decoding."""

import json

import httpx
import pytest
import pytest_asyncio

from tier_router import (
    ApiError,
    CostTier,
    DecodingError,
    InvalidEndpointError,
    InvalidResponseError,
    NetworkError,
)
from tier_router.providers import ClaudeProvider, GroqProvider, OpenAIProvider

GROQ_URL = "https://groq.test/v1/chat/completions"
OPENAI_URL = "https://openai.test/v1/chat/completions"
CLAUDE_URL = "https://anthropic.test/v1/messages"


def chat_body(content="hello"):
    return {
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": 5, "completion_tokens": 1, "total_tokens": 6},
    }


def messages_body(*blocks):
    return {
        "id": "msg_1",
        "type": "message",
        "role": "assistant",
        "model": "claude-test",
        "content": list(blocks),
        "usage": {"input_tokens": 5, "output_tokens": 1},
    }


def sent_json(route):
    return json.loads(route.calls.last.request.content)


@pytest_asyncio.fixture
async def groq(policy):
    provider = GroqProvider("gsk-test", "https://groq.test/v1", "llama-test", retry_policy=policy)
    yield provider
    await provider.aclose()


@pytest_asyncio.fixture
async def openai(retry_after_policy):
    provider = OpenAIProvider("sk-test", "https://openai.test/v1", "gpt-test", retry_policy=retry_after_policy)
    yield provider
    await provider.aclose()


@pytest_asyncio.fixture
async def claude(retry_after_policy):
    provider = ClaudeProvider("sk-ant-test", "https://anthropic.test/v1", "claude-test", retry_policy=retry_after_policy)
    yield provider
    await provider.aclose()


# --- success and request shape ---

@pytest.mark.asyncio
async def test_groq_request_shape(groq, respx_mock):
    route = respx_mock.post(GROQ_URL).mock(return_value=httpx.Response(200, json=chat_body("hi")))

    assert await groq.complete("be brief", "say hi", temperature=0.3) == "hi"

    request = route.calls.last.request
    assert request.headers["authorization"] == "Bearer gsk-test"
    assert sent_json(route) == {
        "model": "llama-test",
        "messages": [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "say hi"},
        ],
        "temperature": 0.3,
    }


@pytest.mark.asyncio
async def test_groq_json_mode_and_max_tokens(groq, respx_mock):
    route = respx_mock.post(GROQ_URL).mock(return_value=httpx.Response(200, json=chat_body("{}")))

    await groq.complete("sys", "hi", max_tokens=200, require_json=True)

    body = sent_json(route)
    assert body["max_tokens"] == 200
    assert body["response_format"] == {"type": "json_object"}


@pytest.mark.asyncio
async def test_openai_defaults_max_tokens(openai, respx_mock):
    route = respx_mock.post(OPENAI_URL).mock(return_value=httpx.Response(200, json=chat_body()))

    await openai.complete("sys", "hi")

    body = sent_json(route)
    assert body["max_tokens"] == 4096
    assert "response_format" not in body
    assert "stream" not in body


@pytest.mark.asyncio
async def test_claude_request_shape(claude, respx_mock):
    route = respx_mock.post(CLAUDE_URL).mock(
        return_value=httpx.Response(200, json=messages_body({"type": "text", "text": "{\"ok\": true}"}))
    )

    assert await claude.complete("be brief", "json please", require_json=True) == "{\"ok\": true}"

    request = route.calls.last.request
    assert request.headers["x-api-key"] == "sk-ant-test"
    assert request.headers["anthropic-version"] == "2023-06-01"
    assert "authorization" not in request.headers
    body = sent_json(route)
    assert body["system"].startswith("be brief\n\nIMPORTANT: You MUST respond with ONLY valid JSON.")
    assert body["messages"] == [{"role": "user", "content": "json please"}]
    assert body["max_tokens"] == 4096
    assert "response_format" not in body


@pytest.mark.asyncio
async def test_claude_uses_first_text_block(claude, respx_mock):
    respx_mock.post(CLAUDE_URL).mock(return_value=httpx.Response(200, json=messages_body(
        {"type": "tool_use", "id": "t1"},
        {"type": "text", "text": "first"},
        {"type": "text", "text": "second"},
    )))
    assert await claude.complete("sys", "hi") == "first"


def test_capabilities():
    assert GroqProvider.cost_tier is CostTier.FAST and not GroqProvider.supports_streaming
    assert OpenAIProvider.supports_streaming
    assert ClaudeProvider.cost_tier is CostTier.PREMIUM and ClaudeProvider.supports_streaming


def test_repr_redacts_key():
    provider = GroqProvider("gsk-secret", "https://groq.test/v1", client=httpx.AsyncClient())
    assert "gsk-secret" not in repr(provider)


# --- retries on HTTP status ---

@pytest.mark.asyncio
async def test_server_error_then_success(groq, respx_mock, sleep):
    route = respx_mock.post(GROQ_URL).mock(side_effect=[
        httpx.Response(500, text="oops"),
        httpx.Response(200, json=chat_body("hello")),
    ])

    assert await groq.complete("sys", "hi") == "hello"
    assert route.call_count == 2
    assert sleep.delays == [2.0]


@pytest.mark.asyncio
async def test_retry_budget_exhausted(groq, respx_mock, sleep):
    route = respx_mock.post(GROQ_URL).mock(return_value=httpx.Response(503, text="unavailable"))

    with pytest.raises(ApiError) as exc_info:
        await groq.complete("sys", "hi")

    assert route.call_count == 4
    assert sleep.delays == [2.0, 4.0, 6.0]
    assert exc_info.value.status_code == 503
    assert exc_info.value.detail == "Status 503: unavailable"


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [400, 401, 403, 404])
async def test_client_errors_are_not_retried(groq, respx_mock, sleep, status):
    route = respx_mock.post(GROQ_URL).mock(return_value=httpx.Response(status, text="nope"))

    with pytest.raises(ApiError):
        await groq.complete("sys", "hi")

    assert route.call_count == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_groq_ignores_retry_after(groq, respx_mock, sleep):
    respx_mock.post(GROQ_URL).mock(side_effect=[
        httpx.Response(429, headers={"retry-after": "0.5"}),
        httpx.Response(200, json=chat_body()),
    ])
    await groq.complete("sys", "hi")
    assert sleep.delays == [2.0]


@pytest.mark.asyncio
async def test_openai_honours_retry_after(openai, respx_mock, sleep):
    respx_mock.post(OPENAI_URL).mock(side_effect=[
        httpx.Response(429, headers={"retry-after": "0.5"}),
        httpx.Response(429, headers={"retry-after": "whenever"}),
        httpx.Response(200, json=chat_body()),
    ])
    await openai.complete("sys", "hi")
    assert sleep.delays == [0.5, 4.0]


# --- error bodies ---

@pytest.mark.asyncio
async def test_openai_structured_error(openai, respx_mock):
    respx_mock.post(OPENAI_URL).mock(return_value=httpx.Response(
        401, json={"error": {"message": "Incorrect API key", "type": "invalid_request_error", "code": "invalid_api_key"}},
    ))
    with pytest.raises(ApiError, match="invalid_request_error: Incorrect API key"):
        await openai.complete("sys", "hi")


@pytest.mark.asyncio
async def test_claude_structured_error(claude, respx_mock):
    respx_mock.post(CLAUDE_URL).mock(return_value=httpx.Response(
        400, json={"type": "error", "error": {"type": "invalid_request_error", "message": "max_tokens too large"}},
    ))
    with pytest.raises(ApiError) as exc_info:
        await claude.complete("sys", "hi")
    assert exc_info.value.detail == "invalid_request_error: max_tokens too large"


@pytest.mark.asyncio
async def test_unstructured_error_body_is_raw(claude, respx_mock):
    respx_mock.post(CLAUDE_URL).mock(return_value=httpx.Response(404, text="<html>not found</html>"))
    with pytest.raises(ApiError) as exc_info:
        await claude.complete("sys", "hi")
    assert exc_info.value.detail == "Status 404: <html>not found</html>"


@pytest.mark.asyncio
async def test_undecodable_error_body(openai, respx_mock):
    respx_mock.post(OPENAI_URL).mock(return_value=httpx.Response(418, content=b"\xff\xfe\xfa"))
    with pytest.raises(ApiError) as exc_info:
        await openai.complete("sys", "hi")
    assert exc_info.value.detail == "Status code: 418"


# --- transport faults ---

@pytest.mark.asyncio
async def test_transient_transport_error_then_success(openai, respx_mock, sleep):
    route = respx_mock.post(OPENAI_URL).mock(side_effect=[
        httpx.ConnectTimeout("timed out"),
        httpx.ConnectError("host unreachable"),
        httpx.Response(200, json=chat_body("made it")),
    ])

    assert await openai.complete("sys", "hi") == "made it"
    assert route.call_count == 3
    assert sleep.delays == [2.0, 4.0]


@pytest.mark.asyncio
async def test_transient_transport_errors_exhaust_budget(groq, respx_mock, sleep):
    route = respx_mock.post(GROQ_URL).mock(side_effect=httpx.ReadTimeout("slow"))

    with pytest.raises(NetworkError) as exc_info:
        await groq.complete("sys", "hi")

    assert route.call_count == 4
    assert sleep.delays == [2.0, 4.0, 8.0]
    assert isinstance(exc_info.value.cause, httpx.ReadTimeout)


@pytest.mark.asyncio
async def test_other_transport_error_fails_immediately(groq, respx_mock, sleep):
    route = respx_mock.post(GROQ_URL).mock(side_effect=httpx.ProxyError("proxy refused"))

    with pytest.raises(NetworkError):
        await groq.complete("sys", "hi")

    assert route.call_count == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_status_and_transport_retries_share_budget(groq, respx_mock, sleep):
    route = respx_mock.post(GROQ_URL).mock(side_effect=[
        httpx.Response(502),
        httpx.ConnectError("reset"),
        httpx.Response(500),
        httpx.Response(500, text="still down"),
    ])

    with pytest.raises(ApiError):
        await groq.complete("sys", "hi")

    assert route.call_count == 4
    assert sleep.delays == [2.0, 4.0, 6.0]


# --- contract violations ---

@pytest.mark.asyncio
async def test_empty_choices_is_invalid_response(openai, respx_mock, sleep):
    route = respx_mock.post(OPENAI_URL).mock(return_value=httpx.Response(200, json={"choices": []}))
    with pytest.raises(InvalidResponseError):
        await openai.complete("sys", "hi")
    assert route.call_count == 1


@pytest.mark.asyncio
async def test_null_content_is_invalid_response(openai, respx_mock):
    respx_mock.post(OPENAI_URL).mock(return_value=httpx.Response(
        200, json={"choices": [{"message": {"role": "assistant", "content": None}}]},
    ))
    with pytest.raises(InvalidResponseError):
        await openai.complete("sys", "hi")


@pytest.mark.asyncio
async def test_claude_without_text_block_is_invalid_response(claude, respx_mock):
    respx_mock.post(CLAUDE_URL).mock(return_value=httpx.Response(
        200, json=messages_body({"type": "tool_use", "id": "t1"}),
    ))
    with pytest.raises(InvalidResponseError):
        await claude.complete("sys", "hi")


@pytest.mark.asyncio
async def test_non_json_success_is_decoding_error(groq, respx_mock):
    route = respx_mock.post(GROQ_URL).mock(return_value=httpx.Response(200, text="<html>"))
    with pytest.raises(DecodingError):
        await groq.complete("sys", "hi")
    assert route.call_count == 1


@pytest.mark.asyncio
async def test_wrong_schema_is_decoding_error(groq, respx_mock):
    respx_mock.post(GROQ_URL).mock(return_value=httpx.Response(200, json={"result": "hi"}))
    with pytest.raises(DecodingError):
        await groq.complete("sys", "hi")


@pytest.mark.asyncio
@pytest.mark.parametrize("base_url", ["ftp://example.com/v1", "not a url", ""])
async def test_invalid_endpoint(base_url):
    async with httpx.AsyncClient() as client:
        provider = GroqProvider("gsk-test", base_url, client=client)
        with pytest.raises(InvalidEndpointError):
            await provider.complete("sys", "hi")
