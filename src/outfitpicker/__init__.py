"""Outfit picker: rotate through categorized outfit files without repeats."""

from importlib import metadata as _metadata

from outfitpicker.errors import OutfitPickerError
from outfitpicker.selection import OutfitPicker, OutfitSelection, OutfitSession

__all__ = ["__version__", "OutfitPicker", "OutfitSelection", "OutfitSession", "OutfitPickerError"]


def __getattr__(name: str):
    if name == "__version__":
        return _metadata.version("outfitpicker")
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
