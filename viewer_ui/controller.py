from __future__ import annotations

import functools
import logging
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

from PyQt6 import QtCore, QtGui

from diagnostics.crash_capture import write_crash_marker
from diagnostics.tracing import span
from gallery_store.base import ImageLoader, PointStore
from runtime_bus import RuntimeBus, topics
from viewport_core import state_machine as sm
from viewport_core.errors import ArtistLookupError, BitmapBuildError, DataFetchError, ImageLoadError
from viewport_core.gestures import ZoomGestureRecognizer
from viewport_core.hit_test import hit
from viewport_core.state_machine import ViewerState, ViewState
from viewport_core.tiers import tier_by_name
from viewport_core.transform import TransformController
from viewport_core.types import Artist, Point, Rect, TierConfig, Transform

from .bitmap_cache import BitmapCache, OffscreenSurface, TierBitmap
from .config import ViewerConfig, tier_configs
from .renderer import Renderer

logger = logging.getLogger(__name__)

Scheduler = Callable[[Callable[[], None]], None]

_PHASE_MESSAGES = {
    ViewState.LOADING: "Loading points...",
    ViewState.LOADING_IMAGES: "Loading thumbnails...",
    ViewState.BUILDING_BITMAPS: "Building bitmaps...",
}


class ViewHost(Protocol):
    def show_detail_panel(self, visible: bool) -> None:
        ...

    def set_overlay(self, message: Optional[str]) -> None:
        ...

    def set_pointer_enabled(self, enabled: bool) -> None:
        ...

    def request_repaint(self) -> None:
        ...


class DetailView(Protocol):
    def show_loading(self, point: Point) -> None:
        ...

    def set_image(self, image: QtGui.QImage) -> None:
        ...

    def populate(self, artist: Optional[Artist]) -> None:
        ...

    def show_error(self, message: str) -> None:
        ...

    def clear(self) -> None:
        ...


def qt_scheduler(step: Callable[[], None]) -> None:
    QtCore.QTimer.singleShot(0, step)


class ViewerController:
    """Runs the view state machine and executes its effects.

    Pipeline work (fetch, thumbnail batches, one tier per step) is handed to
    ``scheduler`` so the event loop keeps turning between steps. Every bitmap
    build carries a generation number; a newer build request or ``close``
    makes the steps of older builds exit without touching shared state.
    """

    def __init__(
        self,
        store: PointStore,
        loader: ImageLoader,
        *,
        config: Optional[ViewerConfig] = None,
        host: Optional[ViewHost] = None,
        detail: Optional[DetailView] = None,
        bus: Optional[RuntimeBus] = None,
        scheduler: Scheduler = qt_scheduler,
        viewport_size: Tuple[int, int] = (800, 600),
        crash_dir: Optional[Path] = None,
    ) -> None:
        self.store = store
        self.loader = loader
        self.config = config or ViewerConfig()
        self.host = host
        self.detail = detail
        self.bus = bus or RuntimeBus()
        self.scheduler = scheduler
        self.crash_dir = crash_dir

        self.tiers: Tuple[TierConfig, ...] = tier_configs(self.config)
        self.cache = BitmapCache(OffscreenSurface(self.config.max_bitmap_size))
        self.renderer = Renderer(*viewport_size)
        self.recognizer = ZoomGestureRecognizer(self.bus, self.config.scale_extent)
        self.transforms = TransformController(self.bus, self.recognizer)
        self.transforms.add_listener(self._on_transform)

        self.state = ViewerState()
        self.points: List[Point] = []
        self.thumbnail_failures = 0
        self._viewport: Tuple[int, int] = (max(1, int(viewport_size[0])), max(1, int(viewport_size[1])))
        self._build_generation = 0
        self._detail_token = 0
        self._applying_effects = False
        self._closed = False

    # -- public API -------------------------------------------------------
    @property
    def active_tier(self) -> str:
        return self.state.active_tier

    @property
    def viewport_size(self) -> Tuple[int, int]:
        return self._viewport

    def active_bitmap(self) -> Optional[TierBitmap]:
        return self.cache.get(self.state.active_tier)

    def start(self) -> None:
        self._announce_phase()
        self.scheduler(self._fetch_points)

    def close(self) -> None:
        self._closed = True
        self._build_generation += 1
        self._detail_token += 1
        self.transforms.dispose()
        self.cache.clear()

    def handle_click(self, client_x: float, client_y: float, viewport_rect: Optional[Rect] = None) -> Optional[Point]:
        if not self.state.accepts_clicks:
            return None
        rect = viewport_rect or Rect(0.0, 0.0, float(self._viewport[0]), float(self._viewport[1]))
        point = hit(
            self.points,
            self.transforms.transform,
            rect,
            client_x,
            client_y,
            self.state.active_tier,
            tolerances=self.config.hit_tolerances,
            max_radius=self.config.hit_max_radius,
        )
        self.dispatch(sm.PointClicked(point))
        return point

    def dismiss_detail(self) -> None:
        self.dispatch(sm.DismissDetail())

    def reset_view(self) -> None:
        self.dispatch(sm.ResetView())

    def request_rebuild(self) -> None:
        self.dispatch(sm.RebuildRequested())

    def resize(self, width: int, height: int) -> None:
        self.dispatch(sm.Resized(int(width), int(height)))

    def dispatch(self, event: sm.Event) -> sm.Transition:
        previous = self.state
        result = sm.transition(previous, event)
        self.state = result.state
        if result.state.phase is not previous.phase:
            logger.info("view state %s -> %s", previous.phase.value, result.state.phase.value)
            self._announce_phase()
        self._applying_effects = True
        try:
            for effect in result.effects:
                self._apply(effect)
        finally:
            self._applying_effects = False
        return result

    # -- pipeline steps ---------------------------------------------------
    def _fetch_points(self) -> None:
        if self._closed:
            return
        try:
            records = self.store.load_points()
        except (DataFetchError, OSError, ValueError) as exc:
            self._fatal(exc, sm.DataFetchFailed(f"Failed to load points: {exc}"), stage="fetch")
            return
        points: List[Point] = []
        for record in records:
            try:
                points.append(Point.from_record(record))
            except ValueError as exc:
                logger.warning("skipping point record: %s", exc)
        if not points:
            self._fatal(DataFetchError("no usable point records"), sm.DataFetchFailed("No points to display"), stage="fetch")
            return
        self.points = points
        self.dispatch(sm.DataFetched(len(points)))

    def _load_thumbnail_batch(self, start: int) -> None:
        if self._closed:
            return
        batch = max(1, int(self.config.thumbnail_batch))
        end = min(len(self.points), start + batch)
        with span("thumbnails.batch", start=start, end=end):
            for index in range(start, end):
                point = self.points[index]
                try:
                    thumb = self.loader.load(point.filename)
                except ImageLoadError as exc:
                    logger.warning("thumbnail unavailable: %s", exc)
                    self.thumbnail_failures += 1
                    thumb = None
                self.points[index] = point.with_thumb(thumb)
        if end < len(self.points):
            self.scheduler(functools.partial(self._load_thumbnail_batch, end))
            return
        if self.thumbnail_failures >= len(self.points):
            self._fatal(
                ImageLoadError("*", "every thumbnail failed to load"),
                sm.ThumbnailsFailed("No thumbnails could be loaded"),
                stage="thumbnails",
            )
            return
        logger.info("thumbnails ready total=%d failed=%d", len(self.points), self.thumbnail_failures)
        self.dispatch(sm.ThumbnailsReady(self.thumbnail_failures))

    def _build_tier(self, generation: int, index: int, points: Sequence[Point]) -> None:
        if generation != self._build_generation or self._closed:
            logger.info("dropping stale bitmap build generation=%d tier_index=%d", generation, index)
            return
        tier = self.tiers[index]
        try:
            result = self.cache.build(points, tier)
        except BitmapBuildError as exc:
            self._fatal(exc, sm.BitmapBuildFailed(f"Failed to build {tier.name} bitmap: {exc}"), stage="bitmaps")
            return
        if index + 1 < len(self.tiers):
            self.scheduler(functools.partial(self._build_tier, generation, index + 1, result.points))
            return
        try:
            self.cache.release(self._viewport)
        except BitmapBuildError as exc:
            self._fatal(exc, sm.BitmapBuildFailed(f"Failed to reset raster: {exc}"), stage="bitmaps")
            return
        # Bounds for every tier are swapped in at once, never tier by tier.
        self.points = list(result.points)
        self.dispatch(sm.BitmapsBuilt())

    def _populate_detail(self, point: Point, token: int) -> None:
        if token != self._detail_token or self.detail is None or self._closed:
            return
        try:
            image = self.loader.load(point.filename, resized=True)
        except ImageLoadError as exc:
            logger.warning("resized image unavailable: %s", exc)
            self.detail.show_error(f"Error loading {point.filename}: {exc.reason or exc}")
        else:
            self.detail.set_image(image)
        try:
            artist = self.store.get_artist(point.artist)
        except (ArtistLookupError, OSError) as exc:
            logger.warning("artist lookup failed for %r: %s", point.artist, exc)
            self.detail.show_error(f"Error loading {point.filename}: {exc}")
            return
        self.detail.populate(artist)

    # -- effects ----------------------------------------------------------
    def _apply(self, effect: sm.Effect) -> None:
        if isinstance(effect, sm.LoadThumbnails):
            self.thumbnail_failures = 0
            self.scheduler(functools.partial(self._load_thumbnail_batch, 0))
        elif isinstance(effect, sm.BuildBitmaps):
            self._build_generation += 1
            self.scheduler(functools.partial(self._build_tier, self._build_generation, 0, tuple(self.points)))
        elif isinstance(effect, sm.AttachPointer):
            if self.host is not None:
                self.host.set_pointer_enabled(True)
        elif isinstance(effect, sm.ShowDetail):
            self._detail_token += 1
            if self.host is not None:
                self.host.show_detail_panel(True)
            if self.detail is not None:
                self.detail.show_loading(effect.point)
            self.bus.publish(
                topics.VIEW_POINT_SELECTED,
                {"filename": effect.point.filename, "artist": effect.point.artist},
                source="viewer",
            )
            self.scheduler(functools.partial(self._populate_detail, effect.point, self._detail_token))
        elif isinstance(effect, sm.HideDetail):
            self._detail_token += 1
            if self.detail is not None:
                self.detail.clear()
            if self.host is not None:
                self.host.show_detail_panel(False)
        elif isinstance(effect, sm.SetActiveTier):
            self.bus.publish(topics.VIEW_TIER_CHANGED, {"tier": effect.name}, source="viewer")
        elif isinstance(effect, sm.ResetTransform):
            self._reset_transform(effect.tier)
        elif isinstance(effect, sm.Render):
            self.render()
        elif isinstance(effect, sm.ResizeSurface):
            self._viewport = (max(1, effect.width), max(1, effect.height))
            self.renderer.resize(*self._viewport)
        elif isinstance(effect, sm.ShowError):
            logger.error("viewer halted: %s", effect.message)
            if self.host is not None:
                self.host.set_overlay(effect.message)
                self.host.set_pointer_enabled(False)
            self.bus.publish(topics.VIEW_ERROR, {"message": effect.message}, source="viewer")

    def render(self) -> bool:
        if self.state.phase not in (ViewState.VIEWING, ViewState.DETAIL):
            return False
        tier_bitmap = self.active_bitmap()
        if tier_bitmap is None:
            return False
        self.renderer.render(self.transforms.transform, tier_bitmap.bitmap)
        if self.host is not None:
            self.host.request_repaint()
        return True

    def _reset_transform(self, tier_name: str) -> None:
        tier_bitmap = self.cache.get(tier_name)
        if tier_bitmap is not None:
            size = tier_bitmap.size
        else:
            tier = tier_by_name(self.tiers, tier_name)
            size = (tier.width, tier.height)
        self.transforms.reset_to_fit(size, self._viewport)

    def _on_transform(self, _transform: Transform) -> None:
        # Effects that change the transform are followed by their own Render.
        if self._applying_effects:
            return
        self.render()

    def _fatal(self, exc: BaseException, event: sm.Event, *, stage: str) -> None:
        logger.error("fatal %s failure: %s", stage, exc)
        try:
            write_crash_marker(exc, {"stage": stage, "phase": self.state.phase.value}, self.crash_dir)
        except OSError as marker_exc:
            logger.warning("could not write crash marker: %s", marker_exc)
        self.dispatch(event)

    def _announce_phase(self) -> None:
        phase = self.state.phase
        if self.host is not None and phase is not ViewState.FAILED:
            self.host.set_overlay(_PHASE_MESSAGES.get(phase))
        self.bus.publish(topics.VIEW_STATE_CHANGED, {"phase": phase.value}, source="viewer")
