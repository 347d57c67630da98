"""Provider registry: cost tier → provider."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterator, Mapping

from loguru import logger

from tier_router.models import AIProvider, CostTier


class ProviderRegistry:
    """Tier → provider mapping, built once and then only read.

    ``register`` exists for test doubles and dynamic provider addition.
    The same provider instance may be registered under more than one tier.
    """

    def __init__(self, providers: Mapping[CostTier, AIProvider] | None = None):
        self._providers: dict[CostTier, AIProvider] = dict(providers or {})

    @property
    def providers(self) -> Mapping[CostTier, AIProvider]:
        return MappingProxyType(self._providers)

    def register(self, provider: AIProvider, tier: CostTier) -> None:
        self._providers[tier] = provider
        logger.info(f"Registered {provider.name} for {tier.value} tier")

    def get(self, tier: CostTier) -> AIProvider | None:
        return self._providers.get(tier)

    def available_tiers(self) -> list[CostTier]:
        return [t for t in CostTier.priority_order() if t in self._providers]

    def unique_providers(self) -> list[AIProvider]:
        """Distinct provider instances, in tier priority order."""
        seen: list[AIProvider] = []
        for tier in self.available_tiers():
            provider = self._providers[tier]
            if not any(p is provider for p in seen):
                seen.append(provider)
        return seen

    def __contains__(self, tier: object) -> bool:
        return tier in self._providers

    def __iter__(self) -> Iterator[CostTier]:
        return iter(self.available_tiers())

    def __len__(self) -> int:
        return len(self._providers)
