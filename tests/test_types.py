import pytest

from viewport_core.types import Artist, Box, Point, Transform


def test_point_from_record_coordinates() -> None:
    point = Point.from_record({"filename": " a.jpg ", "artist": "Ann", "x": "1.5", "y": 2})
    assert (point.filename, point.artist, point.x, point.y) == ("a.jpg", "Ann", 1.5, 2.0)

    projected = Point.from_record({"filename": "b.jpg", "projection": [3, -4, 9]})
    assert (projected.x, projected.y, projected.artist) == (3.0, -4.0, "")


@pytest.mark.parametrize(
    "record",
    [
        {"x": 1, "y": 2},
        {"filename": "a.jpg"},
        {"filename": "a.jpg", "x": None, "y": 2},
        {"filename": "a.jpg", "projection": [1]},
        {"filename": "a.jpg", "x": float("nan"), "y": 0},
    ],
)
def test_point_from_record_rejects_bad_records(record) -> None:
    with pytest.raises(ValueError):
        Point.from_record(record)


def test_with_bounds_replaces_wholesale() -> None:
    point = Point("a.jpg", "Ann", 0.0, 0.0)
    full = point.with_bounds("full", Box(0.0, 0.0, 80.0, 80.0))
    both = full.with_bounds("half", Box(10.0, 10.0, 80.0, 80.0))
    moved = both.with_bounds("full", Box(5.0, 5.0, 80.0, 80.0))
    dropped = moved.with_bounds("half", None)

    assert point.bounds == {}
    assert both.bounds_for("full") == Box(0.0, 0.0, 80.0, 80.0)
    assert moved.bounds_for("full") == Box(5.0, 5.0, 80.0, 80.0)
    assert dropped.bounds_for("half") is None
    assert dropped == point


def test_box_geometry() -> None:
    box = Box.centered(100.0, 100.0, 80.0)
    assert box == Box(60.0, 60.0, 80.0, 80.0)
    assert box.center() == (100.0, 100.0)
    assert box.contains(140.0, 60.0)
    assert not box.contains(150.0, 100.0)
    assert box.contains(150.0, 100.0, tolerance=10.0)


def test_transform_apply_and_invert() -> None:
    transform = Transform(10.0, -5.0, 2.0)
    assert transform.apply(3.0, 4.0) == (16.0, 3.0)
    assert transform.invert(16.0, 3.0) == (3.0, 4.0)
    assert transform.scaled(0.5) == Transform(10.0, -5.0, 1.0)
    assert transform.translated(1.0, 1.0) == Transform(11.0, -4.0, 2.0)


def test_artist_field_text() -> None:
    artist = Artist.from_record({"name": "Ann", "years": 1900, "unknown": "x"})
    assert artist.field_text("years") == "1900"
    assert artist.field_text("genre") == ""
    assert artist.field_text("unknown") == ""
