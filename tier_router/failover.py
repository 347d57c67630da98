"""Failover chain across cost tiers."""

import time
from dataclasses import dataclass

from loguru import logger

from tier_router.errors import AllProvidersFailedError, NoProvidersAvailableError
from tier_router.models import AIProvider, CompletionRequest, CostTier
from tier_router.registry import ProviderRegistry


def build_fallback_chain(preferred: CostTier) -> list[CostTier]:
    """Preferred tier first, then the rest in priority order (cheapest first)."""
    chain = [preferred]
    for tier in CostTier.priority_order():
        if tier != preferred:
            chain.append(tier)
    return chain


@dataclass
class ProviderTier:
    """A single hop in the failover chain."""

    tier: CostTier
    provider: AIProvider

    @property
    def name(self) -> str:
        return f"{self.provider.name} ({self.tier.value})"


class FailoverChain:
    """Try providers in chain order until one succeeds.

    Providers own their retries; this only advances to the next tier.
    """

    def __init__(self, registry: ProviderRegistry) -> None:
        self._registry = registry

    def resolve(self, preferred: CostTier) -> list[ProviderTier]:
        """Chain hops with a registered provider; unregistered tiers are dropped."""
        hops: list[ProviderTier] = []
        seen: set[int] = set()
        for tier in build_fallback_chain(preferred):
            provider = self._registry.get(tier)
            if provider is None:
                continue
            if id(provider) in seen:
                # Same instance under two tiers is attempted once per tier.
                logger.debug(f"{provider.name} appears again in chain under {tier.value}")
            seen.add(id(provider))
            hops.append(ProviderTier(tier, provider))
        return hops

    async def try_providers(
        self, request: CompletionRequest,
    ) -> tuple[str, ProviderTier, int]:
        """Attempt each registered tier in sequence.

        Returns:
            Tuple of (text, tier_that_succeeded, latency_ms).

        Raises:
            NoProvidersAvailableError: If no tier in the chain has a provider.
            AllProvidersFailedError: If every attempted provider failed.
        """
        errors: list[Exception] = []

        for hop in self.resolve(request.preferred_tier):
            start = time.monotonic()
            try:
                text = await hop.provider.complete(
                    system_prompt=request.system_prompt,
                    user_prompt=request.user_prompt,
                    temperature=request.temperature,
                    max_tokens=request.max_tokens,
                    require_json=request.require_json,
                )
            except Exception as e:
                latency_ms = int((time.monotonic() - start) * 1000)
                errors.append(e)
                logger.warning(f"Provider {hop.name} failed in {latency_ms}ms: {e}")
                continue

            latency_ms = int((time.monotonic() - start) * 1000)
            return text, hop, latency_ms

        if not errors:
            raise NoProvidersAvailableError()
        raise AllProvidersFailedError(errors)
