"""Tier alias resolution: the single source of truth for tier names typed by
callers or set in configuration.
"""

from __future__ import annotations

import difflib

from tier_router.models import CostTier

# Short name → tier. Keep sorted by short name for readability.
TIER_ALIASES: dict[str, CostTier] = {
    "balanced": CostTier.STANDARD,
    "best": CostTier.PREMIUM,
    "cheap": CostTier.FAST,
    "claude": CostTier.PREMIUM,
    "complex": CostTier.PREMIUM,
    "default": CostTier.STANDARD,
    "fast": CostTier.FAST,
    "gpt": CostTier.STANDARD,
    "groq": CostTier.FAST,
    "premium": CostTier.PREMIUM,
    "quick": CostTier.FAST,
    "smart": CostTier.PREMIUM,
    "standard": CostTier.STANDARD,
}

# Normalized key → canonical alias key.
# Built once at import time for fast lookup.
_NORMALIZED: dict[str, str] = {}


def _normalize(s: str) -> str:
    """Strip hyphens, underscores, spaces, dots and lowercase."""
    return s.lower().replace("-", "").replace("_", "").replace(" ", "").replace(".", "")


def _build_normalized() -> None:
    """Populate the normalized lookup table."""
    _NORMALIZED.clear()
    for key in TIER_ALIASES:
        _NORMALIZED[_normalize(key)] = key


_build_normalized()


def resolve_tier(raw: str | CostTier) -> CostTier:
    """Resolve a tier name or alias to a CostTier.

    Raises ValueError with a suggestion message when the name is unknown
    or ambiguous.
    """
    if isinstance(raw, CostTier):
        return raw
    if not raw or not raw.strip():
        raise ValueError("Empty tier name")

    lowered = raw.strip().lower()

    # 1. Exact match
    if lowered in TIER_ALIASES:
        return TIER_ALIASES[lowered]

    # 2. Normalized match (strips hyphens, spaces, etc.)
    normed = _normalize(raw)
    if normed in _NORMALIZED:
        return TIER_ALIASES[_NORMALIZED[normed]]

    # 3. Fuzzy match via difflib; only unambiguous if all candidates agree
    candidates = difflib.get_close_matches(normed, _NORMALIZED.keys(), n=2, cutoff=0.75)
    tiers = {TIER_ALIASES[_NORMALIZED[c]] for c in candidates}
    if len(tiers) == 1:
        return tiers.pop()

    if len(tiers) > 1:
        suggestions = [_NORMALIZED[c] for c in candidates]
        raise ValueError(f"Ambiguous tier '{raw}'. Did you mean: {', '.join(suggestions)}?")

    # 4. No match
    valid = ", ".join(t.value for t in CostTier.priority_order())
    raise ValueError(f"Unknown tier '{raw}'. Tiers: {valid}")
