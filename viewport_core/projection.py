from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

from .types import Point


@dataclass(frozen=True)
class LinearScale:
    """Monotonic linear map from a data domain onto a pixel range.

    A zero-width domain collapses onto the range midpoint instead of dividing
    by zero, so every input maps to a finite pixel value.
    """

    d0: float
    d1: float
    r0: float
    r1: float

    @property
    def degenerate(self) -> bool:
        return self.d1 == self.d0

    def __call__(self, value: float) -> float:
        if self.degenerate:
            return (self.r0 + self.r1) / 2.0
        t = (value - self.d0) / (self.d1 - self.d0)
        return self.r0 + t * (self.r1 - self.r0)

    def invert(self, pixel: float) -> float:
        if self.degenerate or self.r1 == self.r0:
            return (self.d0 + self.d1) / 2.0
        t = (pixel - self.r0) / (self.r1 - self.r0)
        return self.d0 + t * (self.d1 - self.d0)


def extent(values: Iterable[float]) -> Tuple[float, float]:
    items = list(values)
    if not items:
        raise ValueError("cannot compute the extent of an empty sequence")
    return (min(items), max(items))


@dataclass(frozen=True)
class ProjectionScale:
    """Data-space to pixel-space mapping for one output size.

    Both axes share a single ``size = min(width, height) - 2 * margin`` and the
    data aspect ratio decides how much of it each axis spans. The y axis is
    flipped so larger data values land higher up the raster.
    """

    x: LinearScale
    y: LinearScale
    width: int
    height: int
    margin: float

    @classmethod
    def from_points(
        cls,
        points: Sequence[Point],
        width: int,
        height: int,
        margin: float = 40.0,
    ) -> "ProjectionScale":
        x_extent = extent(p.x for p in points)
        y_extent = extent(p.y for p in points)
        return cls.from_extents(x_extent, y_extent, width, height, margin)

    @classmethod
    def from_extents(
        cls,
        x_extent: Tuple[float, float],
        y_extent: Tuple[float, float],
        width: int,
        height: int,
        margin: float = 40.0,
    ) -> "ProjectionScale":
        size = max(0.0, min(width, height) - 2.0 * margin)
        data_w = x_extent[1] - x_extent[0]
        data_h = y_extent[1] - y_extent[0]
        if data_w > 0 and data_h > 0:
            aspect = data_w / data_h
        else:
            aspect = 1.0

        span_x = size * aspect
        span_y = size
        if span_x > size:
            # Wide data: fit the x axis into ``size`` and shrink y instead.
            span_x = size
            span_y = size / aspect

        x = LinearScale(x_extent[0], x_extent[1], margin, margin + span_x)
        y = LinearScale(y_extent[0], y_extent[1], margin + span_y, margin)
        return cls(x=x, y=y, width=int(width), height=int(height), margin=float(margin))

    def to_pixel(self, x: float, y: float) -> Tuple[float, float]:
        return (self.x(x), self.y(y))

    def to_data(self, px: float, py: float) -> Tuple[float, float]:
        return (self.x.invert(px), self.y.invert(py))

    def pixel_range(self) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        """Return ``((x_min_px, x_max_px), (y_top_px, y_bottom_px))``."""
        return (
            (min(self.x.r0, self.x.r1), max(self.x.r0, self.x.r1)),
            (min(self.y.r0, self.y.r1), max(self.y.r0, self.y.r1)),
        )
