"""Core data models for tier-router."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator

from tier_router.errors import StreamingNotSupportedError


class CostTier(str, Enum):
    """Capability/price bucket. Ordered fast < standard < premium."""

    FAST = "fast"          # cheapest, tried first among fallbacks
    STANDARD = "standard"
    PREMIUM = "premium"

    @classmethod
    def priority_order(cls) -> list[CostTier]:
        return [cls.FAST, cls.STANDARD, cls.PREMIUM]

    @property
    def rank(self) -> int:
        return CostTier.priority_order().index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CostTier):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, CostTier):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, CostTier):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, CostTier):
            return NotImplemented
        return self.rank >= other.rank


@dataclass(frozen=True)
class ProviderInfo:
    """Capability record, fixed for the life of a provider."""
    name: str
    cost_tier: CostTier
    supports_streaming: bool


@dataclass(frozen=True)
class CompletionRequest:
    """One caller request. Never mutated while walking the chain."""
    system_prompt: str
    user_prompt: str
    temperature: float = 0.7
    max_tokens: int | None = None
    require_json: bool = False
    preferred_tier: CostTier = CostTier.FAST

    def __post_init__(self) -> None:
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError(f"temperature must be within 0.0-2.0, got {self.temperature}")
        if self.max_tokens is not None and self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")


class AIProvider(ABC):
    """Abstract base class for LLM providers."""

    name: str = ""
    cost_tier: CostTier = CostTier.FAST
    supports_streaming: bool = False

    @property
    def info(self) -> ProviderInfo:
        return ProviderInfo(self.name, self.cost_tier, self.supports_streaming)

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        require_json: bool = False,
    ) -> str:
        """Send a completion request and return the first completion's text."""
        ...

    async def stream(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 4096,
    ) -> AsyncIterator[str]:
        """Yield text fragments of a streamed completion."""
        raise StreamingNotSupportedError(self.name)
        yield  # pragma: no cover

    async def aclose(self) -> None:
        """Release transport resources. No-op by default."""
