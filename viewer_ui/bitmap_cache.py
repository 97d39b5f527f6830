from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from PyQt6 import QtCore, QtGui

from diagnostics.tracing import span
from viewport_core.errors import BitmapBuildError
from viewport_core.projection import ProjectionScale
from viewport_core.tiers import MAX_BITMAP_SIZE
from viewport_core.types import Box, Point, TierConfig

logger = logging.getLogger(__name__)

_RASTER_FORMAT = QtGui.QImage.Format.Format_ARGB32_Premultiplied


def _has_thumb(point: Point) -> bool:
    thumb = point.thumb
    return thumb is not None and not thumb.isNull()


class OffscreenSurface:
    """The single raster every tier is painted onto before being captured.

    Resizing reallocates the raster; the old contents are discarded. A
    snapshot hands the painted raster to the caller and leaves a blank one.
    """

    def __init__(self, max_size: int = MAX_BITMAP_SIZE) -> None:
        self.max_size = int(max_size)
        self.image = QtGui.QImage(1, 1, _RASTER_FORMAT)
        self.image.fill(0)

    @property
    def size(self) -> Tuple[int, int]:
        return (self.image.width(), self.image.height())

    def resize(self, width: int, height: int) -> None:
        width, height = int(width), int(height)
        if width <= 0 or height <= 0:
            raise BitmapBuildError(f"raster size must be positive, got {width}x{height}")
        if width > self.max_size or height > self.max_size:
            raise BitmapBuildError(
                f"raster {width}x{height} exceeds maximum dimension {self.max_size}"
            )
        image = QtGui.QImage(width, height, _RASTER_FORMAT)
        if image.isNull():
            raise BitmapBuildError(f"could not allocate a {width}x{height} raster")
        image.fill(0)
        self.image = image

    def snapshot(self) -> QtGui.QImage:
        """Hand the painted raster over and start from a blank 1x1 one.

        The caller keeps the only reference, so no second full-size copy is
        ever held.
        """
        bitmap = self.image
        if bitmap.isNull():
            raise BitmapBuildError("raster snapshot failed")
        self.image = QtGui.QImage(1, 1, _RASTER_FORMAT)
        self.image.fill(0)
        return bitmap


@dataclass(frozen=True)
class TierBitmap:
    """Captured raster for one tier plus the points carrying its bounds."""

    tier: TierConfig
    bitmap: QtGui.QImage
    scale: ProjectionScale
    points: Tuple[Point, ...]
    skipped: int = 0

    @property
    def size(self) -> Tuple[int, int]:
        return (self.bitmap.width(), self.bitmap.height())


class BitmapCache:
    """Pre-renders every point once per tier.

    Tiers share one off-screen raster, so builds must run one at a time and
    in order; ``build`` refuses to start while another build is in flight.
    The cache owns the captured bitmaps; renderers only read them.
    """

    def __init__(self, surface: Optional[OffscreenSurface] = None) -> None:
        self.surface = surface or OffscreenSurface()
        self._bitmaps: Dict[str, TierBitmap] = {}
        self._building: Optional[str] = None

    @property
    def building(self) -> bool:
        return self._building is not None

    def get(self, name: str) -> Optional[TierBitmap]:
        return self._bitmaps.get(name)

    def names(self) -> List[str]:
        return list(self._bitmaps.keys())

    def clear(self) -> None:
        self._bitmaps.clear()

    def build(self, points: Sequence[Point], tier: TierConfig) -> TierBitmap:
        if self._building is not None:
            raise BitmapBuildError(
                f"tier {tier.name!r} requested while tier {self._building!r} is still building"
            )
        if not points:
            raise BitmapBuildError(f"tier {tier.name!r}: no points to rasterize")
        self._building = tier.name
        try:
            with span("bitmap.build", tier=tier.name, width=tier.width, height=tier.height, points=len(points)):
                result = self._rasterize(points, tier)
        finally:
            self._building = None
        self._bitmaps[tier.name] = result
        logger.info(
            "tier built name=%s size=%dx%d drawn=%d skipped=%d",
            tier.name,
            tier.width,
            tier.height,
            len(points) - result.skipped,
            result.skipped,
        )
        return result

    def build_all(
        self,
        points: Sequence[Point],
        tiers: Sequence[TierConfig],
        viewport_size: Tuple[int, int],
    ) -> List[Point]:
        """Build ``tiers`` in order and return the points with every tier's bounds."""
        current: List[Point] = list(points)
        for tier in tiers:
            current = list(self.build(current, tier).points)
        self.release(viewport_size)
        return current

    def release(self, viewport_size: Tuple[int, int]) -> None:
        """Shrink the shared raster back to the on-screen viewport size."""
        width, height = viewport_size
        self.surface.resize(max(1, min(int(width), self.surface.max_size)), max(1, min(int(height), self.surface.max_size)))

    def _rasterize(self, points: Sequence[Point], tier: TierConfig) -> TierBitmap:
        self.surface.resize(tier.width, tier.height)
        scale = ProjectionScale.from_points(points, tier.width, tier.height, tier.margin)
        size = float(tier.icon_size)
        placed: List[Point] = []
        skipped = 0

        painter = QtGui.QPainter(self.surface.image)
        if not painter.isActive():
            raise BitmapBuildError(f"tier {tier.name!r}: could not paint on the raster")
        try:
            painter.setRenderHint(QtGui.QPainter.RenderHint.SmoothPixmapTransform)
            for point in points:
                if not _has_thumb(point):
                    skipped += 1
                    placed.append(point.with_bounds(tier.name, None))
                    continue
                cx, cy = scale.to_pixel(point.x, point.y)
                box = Box.centered(cx, cy, size)
                painter.drawImage(QtCore.QRectF(box.x, box.y, box.width, box.height), point.thumb)
                placed.append(point.with_bounds(tier.name, box))
        finally:
            painter.end()

        return TierBitmap(
            tier=tier,
            bitmap=self.surface.snapshot(),
            scale=scale,
            points=tuple(placed),
            skipped=skipped,
        )
