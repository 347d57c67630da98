"""AIServiceRouter: cost-tier routing with cross-tier fallback."""

from __future__ import annotations

from loguru import logger

from tier_router.aliases import resolve_tier
from tier_router.config import RouterConfig
from tier_router.failover import FailoverChain
from tier_router.models import AIProvider, CompletionRequest, CostTier
from tier_router.providers import ClaudeProvider, GroqProvider, OpenAIProvider
from tier_router.registry import ProviderRegistry


class AIServiceRouter:
    """Routes each completion to a provider by cost tier.

    Routing for one request:
      1. Build the chain: preferred tier, then the others cheapest first
      2. Skip tiers with no registered provider (not an error)
      3. First success wins; failures are collected and the next tier tried
      4. Nothing registered → NoProvidersAvailableError,
         everything failed → AllProvidersFailedError with every error

    The router never retries a provider itself. Each request keeps its own
    chain and error list, so concurrent callers need no coordination.
    """

    def __init__(
        self,
        registry: ProviderRegistry | None = None,
        *,
        default_tier: CostTier = CostTier.FAST,
    ):
        self._registry = registry if registry is not None else ProviderRegistry()
        self._failover = FailoverChain(self._registry)
        self._default_tier = default_tier

        tiers = [t.value for t in self._registry.available_tiers()]
        logger.info(f"AIServiceRouter initialized with providers: {tiers}")

    @classmethod
    def from_config(cls, config: RouterConfig | None = None) -> AIServiceRouter:
        """Build the standard registry from configured credentials.

        Groq always serves the fast tier. OpenAI serves standard when its key
        is configured. Premium goes to Claude when configured, otherwise to the
        same OpenAI instance.
        """
        if config is None:
            config = RouterConfig.from_env()

        registry = ProviderRegistry()
        registry.register(
            GroqProvider(config.groq_api_key, config.groq_base_url, config.groq_model),
            CostTier.FAST,
        )

        openai_provider = None
        if config.has_openai:
            openai_provider = OpenAIProvider(
                config.openai_api_key, config.openai_base_url, config.openai_model,
            )
            registry.register(openai_provider, CostTier.STANDARD)

        if config.has_anthropic:
            registry.register(
                ClaudeProvider(
                    config.anthropic_api_key,
                    config.anthropic_base_url,
                    config.anthropic_model,
                    api_version=config.anthropic_api_version,
                ),
                CostTier.PREMIUM,
            )
        elif openai_provider is not None:
            registry.register(openai_provider, CostTier.PREMIUM)

        return cls(registry, default_tier=config.default_tier)

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        require_json: bool = False,
        preferred_tier: CostTier | str | None = None,
    ) -> str:
        """Complete a prompt on the preferred tier, falling back across tiers."""
        tier = resolve_tier(preferred_tier) if preferred_tier is not None else self._default_tier
        request = CompletionRequest(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            temperature=temperature,
            max_tokens=max_tokens,
            require_json=require_json,
            preferred_tier=tier,
        )

        text, hop, latency_ms = await self._failover.try_providers(request)
        if hop.tier != tier:
            logger.info(f"Route: {tier.value} → fell back to {hop.name} ({latency_ms}ms)")
        else:
            logger.debug(f"Route: {hop.name} ({latency_ms}ms)")
        return text

    def streaming_provider(self) -> AIProvider | None:
        """The standard (else premium) provider if it streams. No fallback."""
        for tier in (CostTier.STANDARD, CostTier.PREMIUM):
            provider = self._registry.get(tier)
            if provider is not None and provider.supports_streaming:
                return provider
        return None

    def register_provider(self, provider: AIProvider, tier: CostTier) -> None:
        self._registry.register(provider, tier)

    def available_tiers(self) -> list[CostTier]:
        return self._registry.available_tiers()

    async def aclose(self) -> None:
        """Close each distinct provider's transport once."""
        for provider in self._registry.unique_providers():
            await provider.aclose()

    async def __aenter__(self) -> AIServiceRouter:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
