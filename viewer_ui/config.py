# =============================================================================
# NAV INDEX (search these tags)
# [NAV-00] Imports / constants
# [NAV-10] Config loading (defaults/roaming)
# [NAV-20] Public getters
# [NAV-90] Helpers
# [NAV-99] End
# =============================================================================

# === [NAV-00] Imports / constants ============================================
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from viewport_core.gestures import DEFAULT_SCALE_EXTENT
from viewport_core.hit_test import DEFAULT_MAX_RADIUS, DEFAULT_TOLERANCES
from viewport_core.tiers import DEFAULT_ICON_SIZE, DEFAULT_MARGIN, MAX_BITMAP_SIZE, default_tiers
from viewport_core.types import TierConfig

logger = logging.getLogger(__name__)

CONFIG_PATH = Path("data/roaming/viewer_config.json")
MIN_BITMAP_SIZE = 256
MAX_THUMBNAIL_BATCH = 1000


@dataclass
class ViewerConfig:
    data_dir: str = "data/gallery"
    margin: float = DEFAULT_MARGIN
    icon_size: float = DEFAULT_ICON_SIZE
    max_bitmap_size: int = MAX_BITMAP_SIZE
    min_scale: float = DEFAULT_SCALE_EXTENT[0]
    max_scale: float = DEFAULT_SCALE_EXTENT[1]
    hit_tolerances: Tuple[float, ...] = DEFAULT_TOLERANCES
    hit_max_radius: float = DEFAULT_MAX_RADIUS
    thumbnail_batch: int = 200
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def scale_extent(self) -> Tuple[float, float]:
        return (self.min_scale, self.max_scale)


# === [NAV-10] Config loading (defaults/roaming) ==============================
def load_viewer_config(path: Optional[Path] = None) -> ViewerConfig:
    """Read the config file, creating it with defaults when missing.

    Invalid values fall back to defaults and numbers are clamped to usable
    ranges. Unknown keys are kept in ``extra`` so saving does not drop them.
    """
    path = path or CONFIG_PATH
    if not path.exists():
        config = ViewerConfig()
        save_viewer_config(config, path)
        return config
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("viewer config unreadable at %s: %s", path, exc)
        return ViewerConfig()
    if not isinstance(data, dict):
        return ViewerConfig()
    return config_from_dict(data)


def save_viewer_config(config: ViewerConfig, path: Optional[Path] = None) -> None:
    path = path or CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config_to_dict(config), indent=2), encoding="utf-8")


def config_from_dict(data: Dict[str, Any]) -> ViewerConfig:
    defaults = ViewerConfig()
    known = set(asdict(defaults).keys()) - {"extra"}
    min_scale = _as_float(data.get("min_scale"), defaults.min_scale, low=1e-4, high=1.0)
    max_scale = _as_float(data.get("max_scale"), defaults.max_scale, low=1.0, high=1000.0)
    return ViewerConfig(
        data_dir=_as_str(data.get("data_dir"), defaults.data_dir),
        margin=_as_float(data.get("margin"), defaults.margin, low=0.0, high=1000.0),
        icon_size=_as_float(data.get("icon_size"), defaults.icon_size, low=1.0, high=1024.0),
        max_bitmap_size=int(
            _as_float(data.get("max_bitmap_size"), defaults.max_bitmap_size, low=MIN_BITMAP_SIZE, high=MAX_BITMAP_SIZE)
        ),
        min_scale=min_scale,
        max_scale=max(min_scale, max_scale),
        hit_tolerances=_as_tolerances(data.get("hit_tolerances"), defaults.hit_tolerances),
        hit_max_radius=_as_float(data.get("hit_max_radius"), defaults.hit_max_radius, low=0.0, high=10000.0),
        thumbnail_batch=int(
            _as_float(data.get("thumbnail_batch"), defaults.thumbnail_batch, low=1, high=MAX_THUMBNAIL_BATCH)
        ),
        extra={key: value for key, value in data.items() if key not in known},
    )


def config_to_dict(config: ViewerConfig) -> Dict[str, Any]:
    data = asdict(config)
    extra = data.pop("extra", {}) or {}
    data["hit_tolerances"] = list(config.hit_tolerances)
    for key, value in extra.items():
        data.setdefault(key, value)
    return data


# === [NAV-20] Public getters ==================================================
def tier_configs(config: ViewerConfig) -> Tuple[TierConfig, ...]:
    return default_tiers(config.max_bitmap_size, config.margin, config.icon_size)


# === [NAV-90] Helpers =========================================================
def _as_float(value: Any, default: float, *, low: float, high: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    number = float(value)
    if number != number:
        return default
    return max(low, min(high, number))


def _as_str(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _as_tolerances(value: Any, default: Tuple[float, ...]) -> Tuple[float, ...]:
    if not isinstance(value, list) or not value:
        return default
    cleaned = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, (int, float)) or item < 0:
            return default
        cleaned.append(float(item))
    return tuple(sorted(cleaned))


# === [NAV-99] End =============================================================
__all__ = [
    "CONFIG_PATH",
    "ViewerConfig",
    "config_from_dict",
    "config_to_dict",
    "load_viewer_config",
    "save_viewer_config",
    "tier_configs",
]
