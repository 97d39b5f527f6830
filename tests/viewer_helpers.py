from __future__ import annotations

from typing import Callable, Dict, List, Optional

from PyQt6 import QtGui

from viewport_core.errors import ImageLoadError
from viewport_core.types import Artist, Point


def solid_image(color: str, width: int = 16, height: int = 16) -> QtGui.QImage:
    image = QtGui.QImage(width, height, QtGui.QImage.Format.Format_ARGB32_Premultiplied)
    image.fill(QtGui.QColor(color))
    return image


class StepQueue:
    """Stands in for the Qt event loop: collects scheduled steps, runs them in order."""

    def __init__(self) -> None:
        self.steps: List[Callable[[], None]] = []

    def __call__(self, step: Callable[[], None]) -> None:
        self.steps.append(step)

    def run(self, limit: int = 1000) -> int:
        count = 0
        while self.steps and count < limit:
            self.steps.pop(0)()
            count += 1
        return count


class FakeStore:
    def __init__(self, records: List[Dict], artists: Optional[Dict[str, Artist]] = None, error: Optional[Exception] = None) -> None:
        self.records = records
        self.artists = artists or {}
        self.error = error
        self.artist_error: Optional[Exception] = None

    def load_points(self) -> List[Dict]:
        if self.error is not None:
            raise self.error
        return [dict(record) for record in self.records]

    def get_artist(self, name: str) -> Optional[Artist]:
        if self.artist_error is not None:
            raise self.artist_error
        return self.artists.get(name)


class FakeLoader:
    def __init__(self, colors: Dict[str, str], missing_resized: bool = False) -> None:
        self.colors = colors
        self.missing_resized = missing_resized
        self.calls: List[tuple] = []

    def load(self, filename: str, resized: bool = False) -> QtGui.QImage:
        self.calls.append((filename, resized))
        color = self.colors.get(filename)
        if color is None or (resized and self.missing_resized):
            raise ImageLoadError(filename, "not found")
        return solid_image(color, 32 if resized else 16, 32 if resized else 16)


class FakeHost:
    def __init__(self) -> None:
        self.detail_visible = False
        self.overlay: Optional[str] = "unset"
        self.pointer_enabled = False
        self.repaints = 0

    def show_detail_panel(self, visible: bool) -> None:
        self.detail_visible = visible

    def set_overlay(self, message: Optional[str]) -> None:
        self.overlay = message

    def set_pointer_enabled(self, enabled: bool) -> None:
        self.pointer_enabled = enabled

    def request_repaint(self) -> None:
        self.repaints += 1


class FakeDetail:
    def __init__(self) -> None:
        self.loading: Optional[Point] = None
        self.image: Optional[QtGui.QImage] = None
        self.artist: Optional[Artist] = None
        self.populated = 0
        self.errors: List[str] = []
        self.cleared = 0

    def show_loading(self, point: Point) -> None:
        self.loading = point

    def set_image(self, image: QtGui.QImage) -> None:
        self.image = image

    def populate(self, artist: Optional[Artist]) -> None:
        self.artist = artist
        self.populated += 1

    def show_error(self, message: str) -> None:
        self.errors.append(message)

    def clear(self) -> None:
        self.cleared += 1
