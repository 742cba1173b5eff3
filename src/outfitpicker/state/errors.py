"""Rotation cache errors."""

from outfitpicker.errors import OutfitPickerError


class CacheError(OutfitPickerError):
    """Base exception for rotation cache persistence."""


class CacheDecodeError(CacheError):
    """Raised when the stored cache cannot be parsed; a factory reset recovers."""


class CacheEncodeError(CacheError):
    """Raised when the cache cannot be serialized."""
