"""Rotation cache models tracking worn outfits per category."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field, field_serializer

CACHE_VERSION = 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CategoryCache(BaseModel):
    """Worn-outfit tracking for a single category.

    ``total_outfits`` is recorded when the entry is created and is left
    untouched by ``reset``; completion is judged against it rather than the
    live file count.

    Attributes:
        worn_outfits: File names worn during the current rotation.
        total_outfits: Outfit count captured when the entry was created.
        last_updated: Timestamp of the last mutation.
    """

    worn_outfits: Set[str] = Field(default_factory=set)
    total_outfits: int = 0
    last_updated: datetime = Field(default_factory=_utcnow)

    @field_serializer("worn_outfits")
    def _serialize_worn(self, worn: Set[str]) -> List[str]:
        return sorted(worn)

    @property
    def worn_count(self) -> int:
        return len(self.worn_outfits)

    def is_rotation_complete(self) -> bool:
        return len(self.worn_outfits) >= self.total_outfits

    def rotation_progress(self) -> float:
        """Return the worn fraction in ``[0.0, 1.0]``; an empty total counts as fully rotated."""
        if self.total_outfits == 0:
            return 1.0
        return min(1.0, len(self.worn_outfits) / self.total_outfits)

    def remaining_outfits(self) -> int:
        return max(0, self.total_outfits - len(self.worn_outfits))

    def is_worn(self, file_name: str) -> bool:
        return file_name in self.worn_outfits

    def add_worn(self, file_name: str) -> None:
        self.worn_outfits.add(file_name)
        self.last_updated = _utcnow()

    def reset(self) -> None:
        self.worn_outfits.clear()
        self.last_updated = _utcnow()


class RotationCache(BaseModel):
    """Persisted rotation state for every category, keyed by category path."""

    categories: Dict[str, CategoryCache] = Field(default_factory=dict)
    version: int = CACHE_VERSION
    created_at: datetime = Field(default_factory=_utcnow)

    def get(self, category_path: str) -> Optional[CategoryCache]:
        return self.categories.get(category_path)

    def get_or_create(self, category_path: str, total_outfits: int) -> CategoryCache:
        """Return the entry for ``category_path``, creating it when absent.

        An existing entry is returned untouched; ``total_outfits`` only seeds
        new entries.
        """
        entry = self.categories.get(category_path)
        if entry is None:
            entry = CategoryCache(total_outfits=total_outfits)
            self.categories[category_path] = entry
        return entry

    def worn_set(self, category_path: str) -> Set[str]:
        entry = self.categories.get(category_path)
        return set(entry.worn_outfits) if entry is not None else set()

    def reset_all(self) -> None:
        for entry in self.categories.values():
            entry.reset()

    def remove(self, category_path: str) -> bool:
        return self.categories.pop(category_path, None) is not None


__all__ = ["CACHE_VERSION", "CategoryCache", "RotationCache"]
