"""Qt-free viewport engine: projection, transforms, hit testing and view states."""

from .errors import ArtistLookupError, BitmapBuildError, DataFetchError, ImageLoadError, ViewerError
from .gestures import ZoomGestureRecognizer
from .hit_test import hit
from .projection import LinearScale, ProjectionScale
from .state_machine import ViewerState, ViewState, transition
from .tiers import FULL_TIER, HALF_TIER, MAX_BITMAP_SIZE, default_tiers
from .transform import TransformController
from .types import IDENTITY, Artist, Box, Point, Rect, TierConfig, Transform

__all__ = [
    "Artist",
    "ArtistLookupError",
    "BitmapBuildError",
    "Box",
    "DataFetchError",
    "FULL_TIER",
    "HALF_TIER",
    "IDENTITY",
    "ImageLoadError",
    "LinearScale",
    "MAX_BITMAP_SIZE",
    "Point",
    "ProjectionScale",
    "Rect",
    "TierConfig",
    "Transform",
    "TransformController",
    "ViewState",
    "ViewerError",
    "ViewerState",
    "ZoomGestureRecognizer",
    "default_tiers",
    "hit",
    "transition",
]
