from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple, Union

from .tiers import FULL_TIER, HALF_TIER
from .types import Point


class ViewState(str, Enum):
    LOADING = "loading"
    LOADING_IMAGES = "loading_images"
    BUILDING_BITMAPS = "building_bitmaps"
    VIEWING = "viewing"
    DETAIL = "detail"
    FAILED = "failed"


@dataclass(frozen=True)
class ViewerState:
    phase: ViewState = ViewState.LOADING
    active_tier: str = FULL_TIER
    selected: Optional[Point] = None
    pointer_attached: bool = False
    error: Optional[str] = None

    @property
    def accepts_clicks(self) -> bool:
        return self.pointer_attached and self.phase in (ViewState.VIEWING, ViewState.DETAIL)


# ---- Events -------------------------------------------------------------
@dataclass(frozen=True)
class DataFetched:
    count: int = 0


@dataclass(frozen=True)
class DataFetchFailed:
    message: str


@dataclass(frozen=True)
class ThumbnailsReady:
    failed: int = 0


@dataclass(frozen=True)
class ThumbnailsFailed:
    message: str


@dataclass(frozen=True)
class BitmapsBuilt:
    pass


@dataclass(frozen=True)
class BitmapBuildFailed:
    message: str


@dataclass(frozen=True)
class PointClicked:
    point: Optional[Point]


@dataclass(frozen=True)
class DismissDetail:
    pass


@dataclass(frozen=True)
class ResetView:
    pass


@dataclass(frozen=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True)
class RebuildRequested:
    pass


Event = Union[
    DataFetched,
    DataFetchFailed,
    ThumbnailsReady,
    ThumbnailsFailed,
    BitmapsBuilt,
    BitmapBuildFailed,
    PointClicked,
    DismissDetail,
    ResetView,
    Resized,
    RebuildRequested,
]


# ---- Effects ------------------------------------------------------------
@dataclass(frozen=True)
class LoadThumbnails:
    pass


@dataclass(frozen=True)
class BuildBitmaps:
    pass


@dataclass(frozen=True)
class AttachPointer:
    pass


@dataclass(frozen=True)
class ShowDetail:
    point: Point


@dataclass(frozen=True)
class HideDetail:
    pass


@dataclass(frozen=True)
class SetActiveTier:
    name: str


@dataclass(frozen=True)
class ResetTransform:
    tier: str


@dataclass(frozen=True)
class Render:
    pass


@dataclass(frozen=True)
class ResizeSurface:
    width: int
    height: int


@dataclass(frozen=True)
class ShowError:
    message: str


Effect = Union[
    LoadThumbnails,
    BuildBitmaps,
    AttachPointer,
    ShowDetail,
    HideDetail,
    SetActiveTier,
    ResetTransform,
    Render,
    ResizeSurface,
    ShowError,
]


@dataclass(frozen=True)
class Transition:
    state: ViewerState
    effects: Tuple[Effect, ...] = ()


_LOADING_PHASES = (ViewState.LOADING, ViewState.LOADING_IMAGES, ViewState.BUILDING_BITMAPS)


def _fail(state: ViewerState, message: str) -> Transition:
    failed = replace(state, phase=ViewState.FAILED, error=message)
    return Transition(failed, (ShowError(message),))


def _ignore(state: ViewerState) -> Transition:
    return Transition(state, ())


def transition(state: ViewerState, event: Event) -> Transition:
    """Pure transition function: ``(state, event) -> (new_state, effects)``.

    Events that make no sense in the current phase leave the state untouched
    and produce no effects. ``FAILED`` is terminal.
    """
    phase = state.phase
    if phase is ViewState.FAILED:
        return _ignore(state)

    if isinstance(event, (DataFetchFailed, ThumbnailsFailed, BitmapBuildFailed)):
        if phase in _LOADING_PHASES:
            return _fail(state, event.message)
        return _ignore(state)

    if isinstance(event, Resized):
        if phase in (ViewState.VIEWING, ViewState.DETAIL):
            return Transition(state, (ResizeSurface(event.width, event.height), Render()))
        return Transition(state, (ResizeSurface(event.width, event.height),))

    if phase is ViewState.LOADING:
        if isinstance(event, DataFetched):
            return Transition(replace(state, phase=ViewState.LOADING_IMAGES), (LoadThumbnails(),))
        return _ignore(state)

    if phase is ViewState.LOADING_IMAGES:
        if isinstance(event, ThumbnailsReady):
            return Transition(replace(state, phase=ViewState.BUILDING_BITMAPS), (BuildBitmaps(),))
        return _ignore(state)

    if phase is ViewState.BUILDING_BITMAPS:
        if isinstance(event, BitmapsBuilt):
            return _bitmaps_built(state)
        if isinstance(event, RebuildRequested):
            # Cancel-and-restart: the adapter drops the in-flight build.
            return Transition(state, (BuildBitmaps(),))
        return _ignore(state)

    if phase is ViewState.VIEWING:
        if isinstance(event, PointClicked):
            if event.point is None or not state.pointer_attached:
                return _ignore(state)
            detail = replace(state, phase=ViewState.DETAIL, selected=event.point, active_tier=HALF_TIER)
            return Transition(detail, (ShowDetail(event.point), SetActiveTier(HALF_TIER), Render()))
        if isinstance(event, ResetView):
            return Transition(state, (ResetTransform(state.active_tier), Render()))
        if isinstance(event, RebuildRequested):
            return Transition(replace(state, phase=ViewState.BUILDING_BITMAPS), (BuildBitmaps(),))
        return _ignore(state)

    if phase is ViewState.DETAIL:
        if isinstance(event, PointClicked):
            if event.point is None or not state.pointer_attached or event.point == state.selected:
                return _ignore(state)
            return Transition(replace(state, selected=event.point), (ShowDetail(event.point),))
        if isinstance(event, DismissDetail):
            viewing = replace(state, phase=ViewState.VIEWING, selected=None, active_tier=FULL_TIER)
            return Transition(viewing, (HideDetail(), SetActiveTier(FULL_TIER), Render()))
        if isinstance(event, ResetView):
            viewing = replace(state, phase=ViewState.VIEWING, selected=None, active_tier=FULL_TIER)
            return Transition(
                viewing,
                (HideDetail(), SetActiveTier(FULL_TIER), ResetTransform(FULL_TIER), Render()),
            )
        if isinstance(event, RebuildRequested):
            return Transition(replace(state, phase=ViewState.BUILDING_BITMAPS), (BuildBitmaps(),))
        return _ignore(state)

    return _ignore(state)


def _bitmaps_built(state: ViewerState) -> Transition:
    if state.pointer_attached:
        # Rebuild finished: keep the user's transform and any open detail view.
        if state.selected is not None:
            detail = replace(state, phase=ViewState.DETAIL, active_tier=HALF_TIER)
            return Transition(detail, (SetActiveTier(HALF_TIER), Render()))
        viewing = replace(state, phase=ViewState.VIEWING, active_tier=FULL_TIER)
        return Transition(viewing, (SetActiveTier(FULL_TIER), Render()))
    viewing = replace(state, phase=ViewState.VIEWING, active_tier=FULL_TIER, pointer_attached=True)
    return Transition(
        viewing,
        (SetActiveTier(FULL_TIER), ResetTransform(FULL_TIER), AttachPointer(), Render()),
    )
