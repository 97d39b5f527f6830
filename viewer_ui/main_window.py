from __future__ import annotations

from typing import Optional

from PyQt6 import QtCore, QtWidgets

from .canvas import ScatterCanvas
from .controller import ViewerController
from .detail_panel import DetailPanel


class ViewerWindow(QtWidgets.QMainWindow):
    """Scatter canvas alone in overview mode, canvas plus detail pane otherwise."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Art Map")
        self.canvas = ScatterCanvas()
        self.detail_panel = DetailPanel()
        self.detail_panel.hide()

        self.splitter = QtWidgets.QSplitter(QtCore.Qt.Orientation.Horizontal)
        self.splitter.setChildrenCollapsible(False)
        self.splitter.addWidget(self.canvas)
        self.splitter.addWidget(self.detail_panel)
        self.setCentralWidget(self.splitter)
        self.controller: Optional[ViewerController] = None

    def bind(self, controller: ViewerController) -> None:
        self.controller = controller
        self.canvas.attach(controller.renderer, controller.recognizer)
        self.canvas.on_click = controller.handle_click
        self.canvas.on_reset = controller.reset_view
        self.canvas.on_rebuild = controller.request_rebuild
        self.canvas.on_resized = controller.resize
        self.detail_panel.on_dismiss = controller.dismiss_detail

    # -- ViewHost ---------------------------------------------------------
    def show_detail_panel(self, visible: bool) -> None:
        if self.detail_panel.isHidden() != visible:
            return
        self.detail_panel.setVisible(visible)
        if visible:
            total = max(2, self.splitter.width())
            self.splitter.setSizes([total // 2, total - total // 2])
        self.canvas.setFocus()

    def set_overlay(self, message: Optional[str]) -> None:
        self.canvas.set_overlay(message)

    def set_pointer_enabled(self, enabled: bool) -> None:
        self.canvas.set_pointer_enabled(enabled)

    def request_repaint(self) -> None:
        self.canvas.update()

    def closeEvent(self, event) -> None:  # type: ignore[override]
        if self.controller is not None:
            self.controller.close()
        super().closeEvent(event)
