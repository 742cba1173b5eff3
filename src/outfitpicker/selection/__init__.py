"""Outfit selection without repeats across rotation cycles."""

from .engine import OutfitPicker
from .models import CategoryOutfitState, OutfitSelection, RotationStatus
from .session import OutfitSession

__all__ = [
    "OutfitPicker",
    "OutfitSelection",
    "RotationStatus",
    "CategoryOutfitState",
    "OutfitSession",
]
