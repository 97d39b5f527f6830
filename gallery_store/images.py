from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from PyQt6 import QtGui

from viewport_core.errors import ImageLoadError

THUMBNAILS_DIR = "thumbnails"
RESIZED_DIR = "resized"


class DirectoryImageLoader:
    """Decodes thumbnails and resized images from a gallery directory.

    Thumbnails are cached by filename; resized images are decoded on demand
    because only the selected point's image is ever shown.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root).resolve()
        self._thumbs: Dict[str, QtGui.QImage] = {}

    def resolve(self, filename: str, resized: bool = False) -> Optional[Path]:
        if not filename:
            return None
        folder = (self.root / (RESIZED_DIR if resized else THUMBNAILS_DIR)).resolve()
        candidate = (folder / filename).resolve()
        try:
            candidate.relative_to(folder)
        except ValueError:
            return None
        return candidate

    def load(self, filename: str, resized: bool = False) -> QtGui.QImage:
        if not resized:
            cached = self._thumbs.get(filename)
            if cached is not None:
                return cached
        try:
            path = self.resolve(filename, resized)
            exists = path is not None and path.exists()
        except (OSError, ValueError) as exc:
            raise ImageLoadError(filename, f"unusable path: {exc}") from exc
        if path is None:
            raise ImageLoadError(filename, "path escapes the gallery directory")
        if not exists:
            raise ImageLoadError(filename, f"no such file {path}")
        image = QtGui.QImage(str(path))
        if image.isNull():
            raise ImageLoadError(filename, f"could not decode {path.name}")
        if not resized:
            self._thumbs[filename] = image
        return image
