from PyQt6 import QtCore, QtGui

from viewer_helpers import solid_image
from viewer_ui.detail_panel import DetailPanel
from viewport_core.types import Artist, Point


def _press(widget, button, pos=None) -> None:
    pos = pos or QtCore.QPointF(4.0, 4.0)
    event = QtGui.QMouseEvent(
        QtCore.QEvent.Type.MouseButtonPress, pos, pos, button, button, QtCore.Qt.KeyboardModifier.NoModifier
    )
    widget.mousePressEvent(event)


def test_loading_then_populate(qapp) -> None:
    panel = DetailPanel()
    panel.show_loading(Point("a.jpg", "Ann", 0.0, 0.0))
    assert panel.title_label.text() == "a.jpg"
    assert panel.message_text() == "Loading resized image..."

    panel.set_image(solid_image("#ff0000", 64, 48))
    assert panel.message_text() == ""
    panel.populate(Artist(name="Ann", years="1901 - 1950", wikipedia="https://example.org/ann"))
    assert panel.field_text("name") == "Ann"
    assert panel.field_text("years") == "1901 - 1950"
    assert panel.field_text("genre") == ""
    assert panel.field_text("wikipedia") == "https://example.org/ann"


def test_missing_artist_leaves_fields_blank(qapp) -> None:
    panel = DetailPanel()
    panel.populate(Artist(name="Ann", genre="Cubism"))
    panel.populate(None)
    assert all(panel.field_text(key) == "" for key in panel.field_labels)
    assert panel.field_text("unknown") == ""


def test_error_and_clear(qapp) -> None:
    panel = DetailPanel()
    panel.show_loading(Point("a.jpg", "Ann", 0.0, 0.0))
    panel.show_error("Error loading a.jpg: not found")
    assert panel.message_text() == ""
    assert panel.error_text() == "Error loading a.jpg: not found"
    assert not panel.error_label.isHidden()
    panel.clear()
    assert panel.title_label.text() == ""
    assert panel.message_text() == ""
    assert panel.error_text() == ""
    assert panel.error_label.isHidden()


def test_artist_error_keeps_loaded_image(qapp) -> None:
    panel = DetailPanel()
    panel.show_loading(Point("a.jpg", "Ann", 0.0, 0.0))
    panel.set_image(solid_image("#ff0000", 64, 48))
    panel.show_error("Error loading artist Ann: lookup failed")
    assert panel.has_image()
    assert panel.image_label.pixmap() is not None
    assert not panel.image_label.pixmap().isNull()
    assert panel.error_text() == "Error loading artist Ann: lookup failed"

    panel.show_error("second failure")
    assert panel.error_text() == "Error loading artist Ann: lookup failed\nsecond failure"

    panel.show_loading(Point("b.jpg", "Bo", 0.0, 0.0))
    assert not panel.has_image()
    assert panel.error_text() == ""


def test_background_click_and_close_button_dismiss(qapp) -> None:
    panel = DetailPanel()
    panel.resize(400, 600)
    panel.show()
    panel.layout().activate()
    dismissed = []
    panel.on_dismiss = lambda: dismissed.append(True)
    try:
        _press(panel, QtCore.Qt.MouseButton.LeftButton)
        assert len(dismissed) == 1

        on_image = QtCore.QPointF(panel.image_label.geometry().center())
        assert panel.childAt(on_image.toPoint()) is panel.image_label
        _press(panel, QtCore.Qt.MouseButton.LeftButton, on_image)
        assert len(dismissed) == 1

        panel.close_button.click()
        _press(panel, QtCore.Qt.MouseButton.RightButton)
        assert len(dismissed) == 2
    finally:
        panel.close()
