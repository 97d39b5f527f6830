from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from PyQt6 import QtGui

from viewport_core.types import Artist


class PointStore(Protocol):
    def load_points(self) -> List[Dict[str, Any]]:
        ...

    def get_artist(self, name: str) -> Optional[Artist]:
        ...


class ImageLoader(Protocol):
    def load(self, filename: str, resized: bool = False) -> QtGui.QImage:
        ...
