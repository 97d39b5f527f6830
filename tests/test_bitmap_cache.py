import pytest
from PyQt6 import QtGui

from diagnostics.tracing import clear_spans, get_recent_spans
from viewer_helpers import solid_image
from viewer_ui.bitmap_cache import BitmapCache, OffscreenSurface
from viewport_core.errors import BitmapBuildError
from viewport_core.tiers import default_tiers
from viewport_core.types import Box, Point, TierConfig

TIER = TierConfig("full", 800, 600, 40.0, 80.0)


def _points():
    return [
        Point("a.jpg", "Ann", 0.0, 0.0, thumb=solid_image("#ff0000")),
        Point("b.jpg", "Bo", 100.0, 50.0, thumb=solid_image("#0000ff")),
        Point("c.jpg", "Cy", 50.0, 25.0, thumb=None),
    ]


def test_build_places_thumbnails_and_records_bounds(qapp) -> None:
    cache = BitmapCache(OffscreenSurface(1024))
    result = cache.build(_points(), TIER)

    assert result.size == (800, 600)
    assert result.skipped == 1
    a, b, c = result.points
    assert a.bounds_for("full") == Box(0.0, 260.0, 80.0, 80.0)
    assert b.bounds_for("full") == Box(520.0, 0.0, 80.0, 80.0)
    assert c.bounds_for("full") is None
    assert cache.get("full") is result


def test_build_paints_each_thumbnail_at_its_box(qapp) -> None:
    result = BitmapCache(OffscreenSurface(1024)).build(_points(), TIER)
    bitmap = result.bitmap
    assert bitmap.pixelColor(40, 300).name() == "#ff0000"
    assert bitmap.pixelColor(560, 40).name() == "#0000ff"
    assert bitmap.pixelColor(300, 170).alpha() == 0
    assert bitmap.pixelColor(700, 500).alpha() == 0


def test_build_does_not_mutate_input_points(qapp) -> None:
    points = _points()
    BitmapCache(OffscreenSurface(1024)).build(points, TIER)
    assert all(point.bounds_for("full") is None for point in points)


def test_build_all_runs_tiers_in_order_and_releases_raster(qapp) -> None:
    clear_spans()
    cache = BitmapCache(OffscreenSurface(800))
    tiers = default_tiers(800, 40.0, 80.0)
    points = cache.build_all(_points(), tiers, (640, 480))

    assert cache.names() == ["full", "half"]
    assert cache.get("full").size == (800, 800)
    assert cache.get("half").size == (400, 800)
    assert cache.surface.size == (640, 480)
    assert points[0].bounds_for("full") is not None
    assert points[0].bounds_for("half") is not None
    assert points[2].bounds == {}
    assert [entry["attrs"]["tier"] for entry in get_recent_spans("bitmap.build")] == ["full", "half"]


def test_cached_bitmap_survives_later_raster_reuse(qapp) -> None:
    cache = BitmapCache(OffscreenSurface(1024))
    first = cache.build(_points(), TIER)
    cache.surface.resize(800, 600)
    cache.surface.image.fill(QtGui.QColor("#00ff00"))
    assert first.bitmap.pixelColor(40, 300).name() == "#ff0000"


def test_oversize_tier_fails_and_leaves_cache_idle(qapp) -> None:
    cache = BitmapCache(OffscreenSurface(512))
    with pytest.raises(BitmapBuildError):
        cache.build(_points(), TIER)
    assert cache.building is False
    assert cache.get("full") is None


def test_empty_points_and_reentry_are_rejected(qapp) -> None:
    cache = BitmapCache(OffscreenSurface(1024))
    with pytest.raises(BitmapBuildError):
        cache.build([], TIER)
    cache._building = "half"
    with pytest.raises(BitmapBuildError):
        cache.build(_points(), TIER)


def test_surface_resize_validation(qapp) -> None:
    surface = OffscreenSurface(256)
    with pytest.raises(BitmapBuildError):
        surface.resize(0, 10)
    surface.resize(256, 128)
    assert surface.size == (256, 128)
    painted = surface.image
    snapshot = surface.snapshot()
    assert snapshot is painted
    assert surface.image is not painted
    assert surface.size == (1, 1)
    surface.resize(10, 10)
    assert (snapshot.width(), snapshot.height()) == (256, 128)
