from __future__ import annotations

from typing import Optional, Tuple

from PyQt6 import QtGui

from viewport_core.types import Transform

_SURFACE_FORMAT = QtGui.QImage.Format.Format_ARGB32_Premultiplied


class Renderer:
    """Composites the active tier bitmap onto the visible surface.

    The visible surface is a viewport-sized image the canvas widget blits in
    its paint event. Each call clears it, applies the transform as a single
    ``setTransform`` and leaves no painter state behind.
    """

    def __init__(self, width: int = 1, height: int = 1) -> None:
        self.surface = QtGui.QImage(max(1, int(width)), max(1, int(height)), _SURFACE_FORMAT)
        self.surface.fill(0)
        self.render_count = 0
        self.last_bitmap: Optional[QtGui.QImage] = None

    @property
    def size(self) -> Tuple[int, int]:
        return (self.surface.width(), self.surface.height())

    def resize(self, width: int, height: int) -> None:
        width, height = max(1, int(width)), max(1, int(height))
        if (width, height) == self.size:
            return
        self.surface = QtGui.QImage(width, height, _SURFACE_FORMAT)
        self.surface.fill(0)

    def render(self, transform: Transform, bitmap: QtGui.QImage) -> None:
        painter = QtGui.QPainter(self.surface)
        try:
            painter.setCompositionMode(QtGui.QPainter.CompositionMode.CompositionMode_Source)
            painter.fillRect(self.surface.rect(), QtGui.QColor(0, 0, 0, 0))
            painter.setCompositionMode(QtGui.QPainter.CompositionMode.CompositionMode_SourceOver)
            painter.save()
            painter.setRenderHint(QtGui.QPainter.RenderHint.SmoothPixmapTransform, transform.k != 1.0)
            painter.setTransform(QtGui.QTransform(transform.k, 0.0, 0.0, transform.k, transform.x, transform.y))
            painter.drawImage(0, 0, bitmap)
            painter.restore()
        finally:
            painter.end()
        self.render_count += 1
        self.last_bitmap = bitmap
