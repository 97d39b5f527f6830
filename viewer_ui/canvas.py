from __future__ import annotations

from typing import Callable, Optional

from PyQt6 import QtCore, QtGui, QtWidgets

from viewport_core.gestures import ZoomGestureRecognizer

from .renderer import Renderer

CLICK_SLOP_PX = 4.0
_OVERLAY_FLAGS = QtCore.Qt.AlignmentFlag.AlignCenter.value | QtCore.Qt.TextFlag.TextWordWrap.value


class ScatterCanvas(QtWidgets.QWidget):
    """Visible surface of the scatter plot.

    Left-drag pans and the wheel zooms at the cursor; both go through the
    gesture recognizer. A press/release without movement is a click. Input is
    ignored until the pointer is enabled, once the bitmaps exist.
    """

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self.renderer: Optional[Renderer] = None
        self.recognizer: Optional[ZoomGestureRecognizer] = None
        self.on_click: Optional[Callable[[float, float], None]] = None
        self.on_reset: Optional[Callable[[], None]] = None
        self.on_rebuild: Optional[Callable[[], None]] = None
        self.on_resized: Optional[Callable[[int, int], None]] = None
        self._pointer_enabled = False
        self._overlay: Optional[str] = None
        self._press_pos: Optional[QtCore.QPointF] = None
        self._dragged = False
        self.setMinimumSize(320, 240)
        self.setFocusPolicy(QtCore.Qt.FocusPolicy.StrongFocus)
        self.setSizePolicy(QtWidgets.QSizePolicy.Policy.Expanding, QtWidgets.QSizePolicy.Policy.Expanding)

    def attach(self, renderer: Renderer, recognizer: ZoomGestureRecognizer) -> None:
        self.renderer = renderer
        self.recognizer = recognizer
        renderer.resize(self.width(), self.height())

    def set_pointer_enabled(self, enabled: bool) -> None:
        self._pointer_enabled = bool(enabled)
        self.setCursor(
            QtCore.Qt.CursorShape.OpenHandCursor if enabled else QtCore.Qt.CursorShape.BusyCursor
        )

    def pointer_enabled(self) -> bool:
        return self._pointer_enabled

    def set_overlay(self, message: Optional[str]) -> None:
        self._overlay = message
        self.update()

    # -- input ------------------------------------------------------------
    def mousePressEvent(self, event: QtGui.QMouseEvent) -> None:
        if not self._pointer_enabled or event.button() != QtCore.Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        pos = event.position()
        self._press_pos = pos
        self._dragged = False
        if self.recognizer is not None:
            self.recognizer.drag_start(pos.x(), pos.y())
        event.accept()

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:
        if self._press_pos is None or self.recognizer is None:
            super().mouseMoveEvent(event)
            return
        pos = event.position()
        if not self._dragged:
            delta = pos - self._press_pos
            if abs(delta.x()) + abs(delta.y()) < CLICK_SLOP_PX:
                return
            self._dragged = True
            self.setCursor(QtCore.Qt.CursorShape.ClosedHandCursor)
        self.recognizer.drag_move(pos.x(), pos.y())
        event.accept()

    def mouseReleaseEvent(self, event: QtGui.QMouseEvent) -> None:
        if self._press_pos is None or event.button() != QtCore.Qt.MouseButton.LeftButton:
            super().mouseReleaseEvent(event)
            return
        pos = event.position()
        was_drag = self._dragged
        self._press_pos = None
        self._dragged = False
        if self.recognizer is not None:
            self.recognizer.drag_end()
        self.setCursor(QtCore.Qt.CursorShape.OpenHandCursor)
        if not was_drag and self.on_click is not None:
            self.on_click(pos.x(), pos.y())
        event.accept()

    def wheelEvent(self, event: QtGui.QWheelEvent) -> None:
        if not self._pointer_enabled or self.recognizer is None:
            event.ignore()
            return
        pos = event.position()
        self.recognizer.wheel(event.angleDelta().y(), pos.x(), pos.y())
        event.accept()

    def keyPressEvent(self, event: QtGui.QKeyEvent) -> None:
        key = event.key()
        if key == QtCore.Qt.Key.Key_Escape and self.on_reset is not None:
            self.on_reset()
            event.accept()
            return
        if key == QtCore.Qt.Key.Key_F5 and self.on_rebuild is not None:
            self.on_rebuild()
            event.accept()
            return
        super().keyPressEvent(event)

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:
        super().resizeEvent(event)
        if self.on_resized is not None:
            self.on_resized(self.width(), self.height())

    # -- paint ------------------------------------------------------------
    def paintEvent(self, _: QtGui.QPaintEvent) -> None:  # type: ignore[override]
        painter = QtGui.QPainter(self)
        try:
            painter.fillRect(self.rect(), self.palette().color(QtGui.QPalette.ColorRole.Base))
            if self.renderer is not None:
                painter.drawImage(0, 0, self.renderer.surface)
            if self._overlay:
                self._draw_overlay(painter, self._overlay)
        finally:
            painter.end()

    def _draw_overlay(self, painter: QtGui.QPainter, text: str) -> None:
        painter.save()
        metrics = painter.fontMetrics()
        rect = metrics.boundingRect(
            self.rect().adjusted(40, 40, -40, -40),
            _OVERLAY_FLAGS,
            text,
        )
        rect.adjust(-12, -8, 12, 8)
        painter.setBrush(QtGui.QColor(12, 14, 22, 200))
        painter.setPen(QtGui.QColor(230, 234, 246))
        painter.drawRoundedRect(rect, 6, 6)
        painter.drawText(
            rect,
            _OVERLAY_FLAGS,
            text,
        )
        painter.restore()
