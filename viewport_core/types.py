from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Box:
    """Axis-aligned rectangle in a tier's pixel space."""

    x: float
    y: float
    width: float
    height: float

    def contains(self, px: float, py: float, tolerance: float = 0.0) -> bool:
        return (
            self.x - tolerance <= px <= self.x + self.width + tolerance
            and self.y - tolerance <= py <= self.y + self.height + tolerance
        )

    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    @classmethod
    def centered(cls, cx: float, cy: float, size: float) -> "Box":
        half = size / 2.0
        return cls(cx - half, cy - half, size, size)


@dataclass(frozen=True)
class Point:
    """One scatter point: identity, data-space position and per-tier bounds.

    ``thumb`` is the decoded thumbnail handle, ``None`` when loading failed.
    ``bounds`` maps a tier name to the point's box in that tier's bitmap; a
    tier is absent until its bitmap has been built with this point drawn.
    """

    filename: str
    artist: str
    x: float
    y: float
    thumb: Optional[Any] = field(default=None, compare=False, repr=False)
    bounds: Mapping[str, Box] = field(default_factory=dict, compare=False)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Point":
        """Build a point from a store record (``x``/``y`` or ``projection``)."""
        if not isinstance(record, Mapping):
            raise ValueError(f"point record must be a mapping, got {type(record).__name__}")
        filename = record.get("filename")
        if not isinstance(filename, str) or not filename.strip():
            raise ValueError("point record is missing a filename")
        artist = record.get("artist")
        if not isinstance(artist, str):
            artist = ""
        x = record.get("x")
        y = record.get("y")
        projection = record.get("projection")
        if (x is None or y is None) and isinstance(projection, (list, tuple)) and len(projection) >= 2:
            x, y = projection[0], projection[1]
        try:
            fx = float(x)
            fy = float(y)
        except (TypeError, ValueError):
            raise ValueError(f"point record {filename!r} has no usable coordinates") from None
        if not (math.isfinite(fx) and math.isfinite(fy)):
            raise ValueError(f"point record {filename!r} has non-finite coordinates")
        return cls(filename=filename.strip(), artist=artist, x=fx, y=fy)

    def with_thumb(self, thumb: Optional[Any]) -> "Point":
        return replace(self, thumb=thumb)

    def with_bounds(self, tier: str, box: Optional[Box]) -> "Point":
        """Return a copy whose bounds for ``tier`` are replaced (or dropped)."""
        bounds: Dict[str, Box] = {key: value for key, value in self.bounds.items() if key != tier}
        if box is not None:
            bounds[tier] = box
        return replace(self, bounds=bounds)

    def bounds_for(self, tier: str) -> Optional[Box]:
        return self.bounds.get(tier)


@dataclass(frozen=True)
class Transform:
    """Pan/zoom state: screen = data * k + (x, y)."""

    x: float = 0.0
    y: float = 0.0
    k: float = 1.0

    def scaled(self, k: float) -> "Transform":
        return Transform(self.x, self.y, self.k * k)

    def translated(self, dx: float, dy: float) -> "Transform":
        return Transform(self.x + dx, self.y + dy, self.k)

    def apply(self, px: float, py: float) -> Tuple[float, float]:
        return (px * self.k + self.x, py * self.k + self.y)

    def invert(self, sx: float, sy: float) -> Tuple[float, float]:
        return ((sx - self.x) / self.k, (sy - self.y) / self.k)


IDENTITY = Transform()


@dataclass(frozen=True)
class TierConfig:
    """Named raster size and margin used to pre-render one bitmap."""

    name: str
    width: int
    height: int
    margin: float = 40.0
    icon_size: float = 80.0


@dataclass(frozen=True)
class Rect:
    """Viewport rectangle in client coordinates."""

    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0


ARTIST_FIELDS = ("bio", "genre", "name", "nationality", "paintings", "wikipedia", "years")


@dataclass(frozen=True)
class Artist:
    name: str
    years: str = ""
    genre: str = ""
    nationality: str = ""
    bio: str = ""
    wikipedia: str = ""
    paintings: str = ""

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Artist":
        values: Dict[str, str] = {}
        for key in ARTIST_FIELDS:
            value = record.get(key)
            values[key] = "" if value is None else str(value)
        return cls(**values)

    def field_text(self, key: str) -> str:
        if key not in ARTIST_FIELDS:
            return ""
        return getattr(self, key) or ""


__all__ = [
    "ARTIST_FIELDS",
    "Artist",
    "Box",
    "IDENTITY",
    "Point",
    "Rect",
    "TierConfig",
    "Transform",
]
