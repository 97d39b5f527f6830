from __future__ import annotations

from typing import Callable, Dict, Optional

from PyQt6 import QtCore, QtGui, QtWidgets

from viewport_core.types import ARTIST_FIELDS, Artist, Point

_FIELD_TITLES = {
    "name": "Artist",
    "years": "Years",
    "genre": "Genre",
    "nationality": "Nationality",
    "paintings": "Paintings",
    "wikipedia": "Wikipedia",
    "bio": "Biography",
}


class DetailPanel(QtWidgets.QWidget):
    """Right-hand pane showing the selected painting and its artist.

    Clicking the pane background (not its text) or the close button asks the
    owner to dismiss the detail view.
    """

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self.on_dismiss: Optional[Callable[[], None]] = None
        self._image: Optional[QtGui.QImage] = None

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(16, 12, 16, 12)

        header = QtWidgets.QHBoxLayout()
        self.title_label = QtWidgets.QLabel("")
        self.title_label.setStyleSheet("font-weight: 600;")
        header.addWidget(self.title_label, 1)
        self.close_button = QtWidgets.QPushButton("Close")
        self.close_button.clicked.connect(self._dismiss)
        header.addWidget(self.close_button)
        layout.addLayout(header)

        self.image_label = QtWidgets.QLabel()
        self.image_label.setAlignment(QtCore.Qt.AlignmentFlag.AlignCenter)
        self.image_label.setMinimumHeight(200)
        self.image_label.setSizePolicy(QtWidgets.QSizePolicy.Policy.Expanding, QtWidgets.QSizePolicy.Policy.Expanding)
        layout.addWidget(self.image_label, 3)

        self.error_label = QtWidgets.QLabel("")
        self.error_label.setWordWrap(True)
        self.error_label.setStyleSheet("color: #c0392b;")
        self.error_label.hide()
        layout.addWidget(self.error_label)

        form = QtWidgets.QFormLayout()
        self.field_labels: Dict[str, QtWidgets.QLabel] = {}
        for key in ("name", "years", "genre", "nationality", "paintings", "wikipedia", "bio"):
            label = QtWidgets.QLabel("")
            label.setObjectName(key)
            label.setWordWrap(True)
            label.setTextInteractionFlags(QtCore.Qt.TextInteractionFlag.TextSelectableByMouse)
            form.addRow(_FIELD_TITLES[key], label)
            self.field_labels[key] = label
        layout.addLayout(form, 2)

    # -- content ----------------------------------------------------------
    def show_loading(self, point: Point) -> None:
        self._image = None
        self._clear_error()
        self.title_label.setText(point.filename)
        self.image_label.setPixmap(QtGui.QPixmap())
        self.image_label.setText("Loading resized image...")
        self.populate(None)

    def set_image(self, image: QtGui.QImage) -> None:
        self._image = image
        self.image_label.setText("")
        self._update_pixmap()

    def populate(self, artist: Optional[Artist]) -> None:
        for key in ARTIST_FIELDS:
            text = artist.field_text(key) if artist is not None else ""
            self.field_labels[key].setText(text)

    def show_error(self, message: str) -> None:
        """Append ``message`` below the image; an image that already loaded stays."""
        current = self.error_label.text()
        self.error_label.setText(f"{current}\n{message}" if current else message)
        self.error_label.show()
        if self._image is None:
            self.image_label.setPixmap(QtGui.QPixmap())
            self.image_label.setText("")

    def clear(self) -> None:
        self._image = None
        self._clear_error()
        self.title_label.setText("")
        self.image_label.setPixmap(QtGui.QPixmap())
        self.image_label.setText("")
        self.populate(None)

    def field_text(self, key: str) -> str:
        label = self.field_labels.get(key)
        return label.text() if label is not None else ""

    def message_text(self) -> str:
        return self.image_label.text()

    def error_text(self) -> str:
        return self.error_label.text()

    def has_image(self) -> bool:
        return self._image is not None

    # -- events -----------------------------------------------------------
    def mousePressEvent(self, event: QtGui.QMouseEvent) -> None:
        # Only the pane background dismisses; presses on the image or text do not.
        if event.button() == QtCore.Qt.MouseButton.LeftButton and self.childAt(event.position().toPoint()) is None:
            self._dismiss()
            event.accept()
            return
        super().mousePressEvent(event)

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:
        super().resizeEvent(event)
        self._update_pixmap()

    def _update_pixmap(self) -> None:
        if self._image is None or self._image.isNull():
            return
        pixmap = QtGui.QPixmap.fromImage(self._image)
        target = self.image_label.size()
        if target.width() > 1 and target.height() > 1:
            pixmap = pixmap.scaled(
                target,
                QtCore.Qt.AspectRatioMode.KeepAspectRatio,
                QtCore.Qt.TransformationMode.SmoothTransformation,
            )
        self.image_label.setPixmap(pixmap)

    def _clear_error(self) -> None:
        self.error_label.setText("")
        self.error_label.hide()

    def _dismiss(self) -> None:
        if self.on_dismiss is not None:
            self.on_dismiss()
