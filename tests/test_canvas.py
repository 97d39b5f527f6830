import pytest
from PyQt6 import QtCore, QtGui

from runtime_bus import RuntimeBus
from viewer_ui.canvas import ScatterCanvas
from viewer_ui.renderer import Renderer
from viewport_core.gestures import ZoomGestureRecognizer
from viewport_core.types import Transform

LEFT = QtCore.Qt.MouseButton.LeftButton
NO_MODIFIER = QtCore.Qt.KeyboardModifier.NoModifier


def _mouse(kind: QtCore.QEvent.Type, x: float, y: float, button=LEFT) -> QtGui.QMouseEvent:
    pos = QtCore.QPointF(x, y)
    return QtGui.QMouseEvent(kind, pos, pos, button, button, NO_MODIFIER)


def _press(canvas, x, y, button=LEFT) -> None:
    canvas.mousePressEvent(_mouse(QtCore.QEvent.Type.MouseButtonPress, x, y, button))


def _move(canvas, x, y) -> None:
    canvas.mouseMoveEvent(_mouse(QtCore.QEvent.Type.MouseMove, x, y))


def _release(canvas, x, y) -> None:
    canvas.mouseReleaseEvent(_mouse(QtCore.QEvent.Type.MouseButtonRelease, x, y))


def _key(canvas, key) -> None:
    canvas.keyPressEvent(QtGui.QKeyEvent(QtCore.QEvent.Type.KeyPress, key, NO_MODIFIER))


def _canvas():
    canvas = ScatterCanvas()
    canvas.resize(400, 300)
    recognizer = ZoomGestureRecognizer(RuntimeBus())
    canvas.attach(Renderer(400, 300), recognizer)
    clicks = []
    canvas.on_click = lambda x, y: clicks.append((x, y))
    return canvas, recognizer, clicks


def test_input_ignored_until_pointer_enabled(qapp) -> None:
    canvas, recognizer, clicks = _canvas()
    _press(canvas, 50, 60)
    _release(canvas, 50, 60)
    assert clicks == []
    assert canvas.pointer_enabled() is False
    assert recognizer.transform == Transform(0.0, 0.0, 1.0)


def test_click_without_movement_reports_position(qapp) -> None:
    canvas, _recognizer, clicks = _canvas()
    canvas.set_pointer_enabled(True)
    _press(canvas, 50, 60)
    _move(canvas, 51, 61)
    _release(canvas, 51, 61)
    assert clicks == [(51.0, 61.0)]


def test_drag_pans_instead_of_clicking(qapp) -> None:
    canvas, recognizer, clicks = _canvas()
    canvas.set_pointer_enabled(True)
    _press(canvas, 50, 60)
    _move(canvas, 80, 70)
    _move(canvas, 90, 75)
    _release(canvas, 90, 75)
    assert clicks == []
    assert recognizer.transform == Transform(40.0, 15.0, 1.0)
    assert recognizer.dragging is False


def test_wheel_zooms_at_cursor(qapp) -> None:
    canvas, recognizer, _clicks = _canvas()
    canvas.set_pointer_enabled(True)
    event = QtGui.QWheelEvent(
        QtCore.QPointF(100.0, 100.0),
        QtCore.QPointF(100.0, 100.0),
        QtCore.QPoint(0, 0),
        QtCore.QPoint(0, 120),
        QtCore.Qt.MouseButton.NoButton,
        NO_MODIFIER,
        QtCore.Qt.ScrollPhase.NoScrollPhase,
        False,
    )
    canvas.wheelEvent(event)
    assert recognizer.transform.k == pytest.approx(1.2)
    assert recognizer.transform.invert(100.0, 100.0) == pytest.approx((100.0, 100.0))


def test_escape_and_f5_callbacks(qapp) -> None:
    canvas, _recognizer, _clicks = _canvas()
    calls = []
    canvas.on_reset = lambda: calls.append("reset")
    canvas.on_rebuild = lambda: calls.append("rebuild")
    _key(canvas, QtCore.Qt.Key.Key_Escape)
    _key(canvas, QtCore.Qt.Key.Key_F5)
    assert calls == ["reset", "rebuild"]


def test_resize_reports_new_size(qapp) -> None:
    canvas, _recognizer, _clicks = _canvas()
    sizes = []
    canvas.on_resized = lambda w, h: sizes.append((w, h))
    canvas.resize(640, 480)
    canvas.resizeEvent(QtGui.QResizeEvent(QtCore.QSize(640, 480), QtCore.QSize(400, 300)))
    assert sizes == [(640, 480)]
