"""Router configuration loaded from the environment."""

import os
import re
from dataclasses import dataclass

from tier_router.aliases import resolve_tier
from tier_router.models import CostTier
from tier_router.providers import claude, groq, openai

# Keys left at their template value, e.g. "YOUR_OPENAI_API_KEY_HERE".
_PLACEHOLDER_KEY = re.compile(r"^YOUR_[A-Z0-9_]*_HERE$")


def is_configured_key(key: str | None) -> bool:
    """True when a credential is present and not an unfilled placeholder."""
    if key is None:
        return False
    key = key.strip()
    return bool(key) and not _PLACEHOLDER_KEY.match(key)


@dataclass
class RouterConfig:
    """Credentials, endpoints and models for each vendor."""

    groq_api_key: str = ""
    groq_base_url: str = groq.DEFAULT_BASE_URL
    groq_model: str = groq.DEFAULT_MODEL

    openai_api_key: str = ""
    openai_base_url: str = openai.DEFAULT_BASE_URL
    openai_model: str = openai.DEFAULT_MODEL

    anthropic_api_key: str = ""
    anthropic_base_url: str = claude.DEFAULT_BASE_URL
    anthropic_model: str = claude.DEFAULT_MODEL
    anthropic_api_version: str = claude.DEFAULT_API_VERSION

    # Tier used when a caller doesn't name one
    default_tier: CostTier = CostTier.FAST

    @classmethod
    def from_env(cls) -> "RouterConfig":
        """Create config from environment variables."""
        default_tier = os.getenv("TIER_ROUTER_DEFAULT_TIER")
        return cls(
            groq_api_key=os.getenv("GROQ_API_KEY", ""),
            groq_base_url=os.getenv("GROQ_API_BASE_URL", groq.DEFAULT_BASE_URL),
            groq_model=os.getenv("GROQ_MODEL", groq.DEFAULT_MODEL),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            openai_base_url=os.getenv("OPENAI_API_BASE_URL", openai.DEFAULT_BASE_URL),
            openai_model=os.getenv("OPENAI_MODEL", openai.DEFAULT_MODEL),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
            anthropic_base_url=os.getenv("ANTHROPIC_API_BASE_URL", claude.DEFAULT_BASE_URL),
            anthropic_model=os.getenv("ANTHROPIC_MODEL", claude.DEFAULT_MODEL),
            anthropic_api_version=os.getenv("ANTHROPIC_API_VERSION", claude.DEFAULT_API_VERSION),
            default_tier=resolve_tier(default_tier) if default_tier else CostTier.FAST,
        )

    @property
    def has_openai(self) -> bool:
        return is_configured_key(self.openai_api_key)

    @property
    def has_anthropic(self) -> bool:
        return is_configured_key(self.anthropic_api_key)
