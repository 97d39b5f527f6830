from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from runtime_bus import MessageEnvelope, RuntimeBus, topics

from .gestures import ZoomGestureRecognizer
from .types import IDENTITY, Transform

logger = logging.getLogger(__name__)

MIN_PAN_DELTA_PX = 1.0
MIN_SCALE_DELTA = 0.01

TransformListener = Callable[[Transform], None]


def is_significant_change(previous: Transform, candidate: Transform) -> bool:
    return not (
        abs(candidate.x - previous.x) < MIN_PAN_DELTA_PX
        and abs(candidate.y - previous.y) < MIN_PAN_DELTA_PX
        and abs(candidate.k - previous.k) < MIN_SCALE_DELTA
    )


class TransformController:
    """Owns the live pan/zoom transform for one viewer.

    Candidates arrive from the gesture recognizer over the runtime bus. The
    first one always propagates; later ones are dropped when they move less
    than a pixel and change scale by less than 0.01. The last propagated
    transform is kept per instance so independent viewers never interfere.
    """

    def __init__(self, bus: RuntimeBus, recognizer: ZoomGestureRecognizer) -> None:
        self._bus = bus
        self._recognizer = recognizer
        self._current: Transform = recognizer.transform
        self._last_propagated: Optional[Transform] = None
        self._listeners: List[TransformListener] = []
        self._suppressed = 0
        self._sub_id: Optional[str] = bus.subscribe(
            topics.VIEW_TRANSFORM_CANDIDATE,
            self._on_candidate,
            source=recognizer.source,
        )

    @property
    def transform(self) -> Transform:
        return self._current

    @property
    def scale_extent(self) -> Tuple[float, float]:
        return self._recognizer.scale_extent

    @property
    def suppressed_count(self) -> int:
        return self._suppressed

    def add_listener(self, listener: TransformListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: TransformListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def propose(self, candidate: Transform) -> bool:
        """Accept or suppress a candidate; returns True when it propagated."""
        self._current = candidate
        if self._last_propagated is not None and not is_significant_change(self._last_propagated, candidate):
            self._suppressed += 1
            return False
        self._propagate(candidate)
        return True

    def reset_to_fit(
        self,
        bitmap_size: Tuple[float, float],
        viewport_size: Tuple[float, float],
    ) -> Transform:
        """Scale the bitmap so it fits the viewport, anchored at the origin."""
        bw, bh = bitmap_size
        vw, vh = viewport_size
        if bw <= 0 or bh <= 0:
            raise ValueError(f"bitmap size must be positive, got {bitmap_size!r}")
        k = min(vw / bw, vh / bh)
        if k <= 0:
            k = self._recognizer.scale_extent[0]
        transform = self._recognizer.sync(IDENTITY.scaled(k))
        self._current = transform
        self._propagate(transform)
        logger.info("transform reset to fit k=%.5f bitmap=%sx%s viewport=%sx%s", transform.k, bw, bh, vw, vh)
        return transform

    def dispose(self) -> None:
        if self._sub_id is not None:
            self._bus.unsubscribe(self._sub_id)
            self._sub_id = None
        self._listeners.clear()

    def _on_candidate(self, envelope: MessageEnvelope) -> None:
        candidate = envelope.get("transform")
        if isinstance(candidate, Transform):
            self.propose(candidate)

    def _propagate(self, transform: Transform) -> None:
        self._last_propagated = transform
        for listener in list(self._listeners):
            listener(transform)
        self._bus.publish(
            topics.VIEW_TRANSFORM_CHANGED,
            {"transform": transform},
            source="transform_controller",
        )
