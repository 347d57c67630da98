"""Shared test doubles."""

import pytest

from tier_router.models import AIProvider, CostTier
from tier_router.retry import RetryPolicy


class FakeProvider(AIProvider):
    """In-memory provider that records calls and returns or raises on demand."""

    def __init__(self, name="Fake", tier=CostTier.FAST, result="ok", error=None, streaming=False):
        self.name = name
        self.cost_tier = tier
        self.supports_streaming = streaming
        self.result = result
        self.error = error
        self.calls = []
        self.closed = 0

    async def complete(self, system_prompt, user_prompt, temperature=0.7, max_tokens=None, require_json=False):
        self.calls.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "require_json": require_json,
        })
        if self.error is not None:
            raise self.error
        return self.result

    async def aclose(self):
        self.closed += 1


class RecordingSleep:
    """Stand-in for asyncio.sleep that records delays instead of waiting."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def policy(sleep):
    return RetryPolicy(sleep=sleep)


@pytest.fixture
def retry_after_policy(sleep):
    return RetryPolicy(honor_retry_after=True, sleep=sleep)
