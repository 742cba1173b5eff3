"""Custom exceptions for configuration management."""

from outfitpicker.errors import OutfitPickerError


class ConfigError(OutfitPickerError):
    """Raised when configuration data cannot be processed."""
