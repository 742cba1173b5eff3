"""Result models returned by the selection engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, NamedTuple

from pydantic import BaseModel

from outfitpicker.scanning.models import CategoryReference, FileEntry


class OutfitSelection(BaseModel):
    """An outfit chosen by the engine together with rotation metadata.

    Attributes:
        outfit: The chosen outfit file.
        rotation_progress: Worn fraction after the outfit was marked worn.
        rotation_was_reset: Whether this call started a new rotation.
    """

    outfit: FileEntry
    rotation_progress: float
    rotation_was_reset: bool = False


class RotationStatus(NamedTuple):
    """Worn and total outfit counts for a category."""

    worn: int
    total: int


@dataclass(slots=True)
class CategoryOutfitState:
    """Snapshot of a category's outfits split by worn status."""

    category: CategoryReference
    all_outfits: List[FileEntry] = field(default_factory=list)
    available_outfits: List[FileEntry] = field(default_factory=list)
    worn_outfits: List[FileEntry] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.all_outfits)

    @property
    def available_count(self) -> int:
        return len(self.available_outfits)

    @property
    def worn_count(self) -> int:
        return len(self.worn_outfits)

    @property
    def progress(self) -> float:
        if self.total_count == 0:
            return 1.0
        return self.worn_count / self.total_count

    @property
    def is_rotation_complete(self) -> bool:
        return self.total_count > 0 and self.worn_count >= self.total_count

    @property
    def status_text(self) -> str:
        return f"{self.worn_count} of {self.total_count} outfits worn"


__all__ = ["OutfitSelection", "RotationStatus", "CategoryOutfitState"]
