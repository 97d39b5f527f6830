"""Adapters for the external point/artist store and image source."""

from .base import ImageLoader, PointStore
from .images import DirectoryImageLoader
from .store import JsonGalleryStore

__all__ = [
    "DirectoryImageLoader",
    "ImageLoader",
    "JsonGalleryStore",
    "PointStore",
]
