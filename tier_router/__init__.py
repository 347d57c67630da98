"""tier-router: LLM cost-tier routing with bounded retry, cross-tier fallback and SSE streaming."""

from tier_router.errors import (
    AIError,
    AllProvidersFailedError,
    ApiError,
    DecodingError,
    InvalidEndpointError,
    InvalidResponseError,
    NetworkError,
    NoProvidersAvailableError,
    StreamingNotSupportedError,
)
from tier_router.models import AIProvider, CompletionRequest, CostTier, ProviderInfo
from tier_router.failover import FailoverChain, ProviderTier, build_fallback_chain
from tier_router.registry import ProviderRegistry
from tier_router.config import RouterConfig
from tier_router.router import AIServiceRouter

__all__ = [
    "AIError",
    "AIProvider",
    "AIServiceRouter",
    "AllProvidersFailedError",
    "ApiError",
    "CompletionRequest",
    "CostTier",
    "DecodingError",
    "FailoverChain",
    "InvalidEndpointError",
    "InvalidResponseError",
    "NetworkError",
    "NoProvidersAvailableError",
    "ProviderInfo",
    "ProviderRegistry",
    "ProviderTier",
    "RouterConfig",
    "StreamingNotSupportedError",
    "build_fallback_chain",
]
