from __future__ import annotations


class ViewerError(Exception):
    """Base class for errors raised by the scatter viewer."""


class DataFetchError(ViewerError):
    """The point list could not be fetched from the store."""


class ImageLoadError(ViewerError):
    """A thumbnail or resized image could not be loaded."""

    def __init__(self, filename: str, reason: str = "") -> None:
        self.filename = filename
        self.reason = reason
        message = f"Failed to load {filename}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class BitmapBuildError(ViewerError):
    """A tier bitmap could not be rasterized."""


class ArtistLookupError(ViewerError):
    """Artist details for the selected point could not be fetched."""
