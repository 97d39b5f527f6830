from __future__ import annotations

from typing import Tuple

from .types import TierConfig

MAX_BITMAP_SIZE = 16384
DEFAULT_MARGIN = 40.0
DEFAULT_ICON_SIZE = 80.0

FULL_TIER = "full"
HALF_TIER = "half"


def default_tiers(
    max_size: int = MAX_BITMAP_SIZE,
    margin: float = DEFAULT_MARGIN,
    icon_size: float = DEFAULT_ICON_SIZE,
) -> Tuple[TierConfig, ...]:
    """Full-width overview tier first, then the half-width detail tier."""
    size = int(max_size)
    if size < 2:
        raise ValueError(f"max bitmap size too small: {max_size!r}")
    return (
        TierConfig(FULL_TIER, size, size, margin, icon_size),
        TierConfig(HALF_TIER, size // 2, size, margin, icon_size),
    )


def tier_by_name(tiers: Tuple[TierConfig, ...], name: str) -> TierConfig:
    for tier in tiers:
        if tier.name == name:
            return tier
    raise KeyError(name)
