from __future__ import annotations

from typing import Optional, Tuple

from runtime_bus import RuntimeBus, topics

from .types import IDENTITY, Transform

DEFAULT_SCALE_EXTENT: Tuple[float, float] = (0.01, 20.0)
WHEEL_ZOOM_BASE = 1.2
WHEEL_NOTCH = 120.0


class ZoomGestureRecognizer:
    """Turns raw wheel/drag input into candidate transforms.

    The recognizer is the only place the scale extent is enforced; every
    candidate it publishes on ``view.transform.candidate`` already has its
    scale inside ``scale_extent``.
    """

    def __init__(
        self,
        bus: RuntimeBus,
        scale_extent: Tuple[float, float] = DEFAULT_SCALE_EXTENT,
        *,
        source: str = "gesture",
    ) -> None:
        min_k, max_k = float(scale_extent[0]), float(scale_extent[1])
        if min_k <= 0 or max_k < min_k:
            raise ValueError(f"invalid scale extent {scale_extent!r}")
        self._bus = bus
        self._source = source
        self.scale_extent = (min_k, max_k)
        self._transform = self.constrain(IDENTITY)
        self._drag_origin: Optional[Tuple[float, float]] = None

    @property
    def transform(self) -> Transform:
        return self._transform

    @property
    def source(self) -> str:
        return self._source

    @property
    def dragging(self) -> bool:
        return self._drag_origin is not None

    def clamp_scale(self, k: float) -> float:
        min_k, max_k = self.scale_extent
        if k != k:  # NaN
            return min_k
        return max(min_k, min(max_k, k))

    def constrain(self, transform: Transform) -> Transform:
        k = self.clamp_scale(transform.k)
        if k == transform.k:
            return transform
        return Transform(transform.x, transform.y, k)

    def sync(self, transform: Transform) -> Transform:
        """Adopt ``transform`` as the current state without emitting it."""
        self._transform = self.constrain(transform)
        return self._transform

    def zoom_by(self, factor: float, anchor_x: float, anchor_y: float) -> Transform:
        """Scale around a screen-space anchor so the point under it stays put."""
        current = self._transform
        new_k = self.clamp_scale(current.k * factor)
        ratio = new_k / current.k
        x = anchor_x - (anchor_x - current.x) * ratio
        y = anchor_y - (anchor_y - current.y) * ratio
        return self._emit(Transform(x, y, new_k))

    def wheel(self, angle_delta: float, anchor_x: float, anchor_y: float) -> Optional[Transform]:
        if angle_delta == 0:
            return None
        factor = WHEEL_ZOOM_BASE ** (angle_delta / WHEEL_NOTCH)
        return self.zoom_by(factor, anchor_x, anchor_y)

    def drag_start(self, sx: float, sy: float) -> None:
        self._drag_origin = (sx, sy)

    def drag_move(self, sx: float, sy: float) -> Optional[Transform]:
        if self._drag_origin is None:
            return None
        ox, oy = self._drag_origin
        self._drag_origin = (sx, sy)
        return self._emit(self._transform.translated(sx - ox, sy - oy))

    def drag_end(self) -> None:
        self._drag_origin = None

    def emit(self, transform: Transform) -> Transform:
        """Publish an arbitrary candidate (programmatic pans, tests)."""
        return self._emit(transform)

    def _emit(self, transform: Transform) -> Transform:
        self._transform = self.constrain(transform)
        self._bus.publish(
            topics.VIEW_TRANSFORM_CANDIDATE,
            {"transform": self._transform},
            source=self._source,
        )
        return self._transform
