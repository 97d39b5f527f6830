from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from viewport_core.errors import ArtistLookupError, DataFetchError
from viewport_core.types import Artist

logger = logging.getLogger(__name__)

POINTS_FILE = "points.json"
ARTISTS_FILE = "artists.json"


def _load_json(path: Path) -> Tuple[Optional[Any], Optional[str]]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None, "missing file"
    except OSError as exc:
        return None, f"io error: {exc}"
    try:
        return json.loads(text), None
    except json.JSONDecodeError as exc:
        return None, f"invalid json: {exc.msg}"


class JsonGalleryStore:
    """Point and artist records read from ``points.json`` / ``artists.json``.

    ``points.json`` is either a list of records or ``{"points": [...]}``; each
    record carries ``filename``, ``artist`` and ``x``/``y`` or a two-element
    ``projection``. ``artists.json`` is a list of artist records.
    """

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)
        self._artists: Optional[Dict[str, Artist]] = None

    def load_points(self) -> List[Dict[str, Any]]:
        path = self.data_dir / POINTS_FILE
        data, error = _load_json(path)
        if error:
            raise DataFetchError(f"{path}: {error}")
        if isinstance(data, dict):
            data = data.get("points")
        if not isinstance(data, list):
            raise DataFetchError(f"{path}: expected a list of point records")
        records = [item for item in data if isinstance(item, dict)]
        skipped = len(data) - len(records)
        if skipped:
            logger.warning("points file %s: skipped %d non-object entries", path, skipped)
        logger.info("points loaded count=%d source=%s", len(records), path)
        return records

    def get_artist(self, name: str) -> Optional[Artist]:
        return self._artist_index().get(name)

    def _artist_index(self) -> Dict[str, Artist]:
        if self._artists is not None:
            return self._artists
        path = self.data_dir / ARTISTS_FILE
        data, error = _load_json(path)
        if error:
            raise ArtistLookupError(f"{path}: {error}")
        if not isinstance(data, list):
            raise ArtistLookupError(f"{path}: expected a list of artist records")
        index: Dict[str, Artist] = {}
        for item in data:
            if isinstance(item, dict) and isinstance(item.get("name"), str):
                artist = Artist.from_record(item)
                index.setdefault(artist.name, artist)
        self._artists = index
        return index
