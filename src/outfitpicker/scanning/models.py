"""Data models describing scanned categories and outfit files."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class CategoryState(str, Enum):
    """Classification of a category directory at scan time."""

    HAS_OUTFITS = "has_outfits"
    EMPTY = "empty"
    NO_MATCHING_FILES = "no_matching_files"
    USER_EXCLUDED = "user_excluded"


class CategoryReference(BaseModel):
    """Name and absolute path identifying a category directory."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: Path

    @property
    def cache_key(self) -> str:
        """Return the string used to key this category in the rotation cache."""
        return str(self.path)

    def __str__(self) -> str:
        return self.name


class CategoryInfo(BaseModel):
    """A category together with its scan state and outfit counts.

    Attributes:
        category: Reference to the scanned directory.
        state: Classification computed during the scan.
        outfit_count: Number of matching outfit files (0 when excluded).
        worn_count: Worn outfits recorded in the cache for this category.
    """

    category: CategoryReference
    state: CategoryState
    outfit_count: int = 0
    worn_count: int = 0


class FileEntry(BaseModel):
    """An outfit file identified by its absolute path."""

    model_config = ConfigDict(frozen=True)

    file_path: Path

    @classmethod
    def from_path(cls, path: Path | str) -> "FileEntry":
        return cls(file_path=Path(path))

    @property
    def file_name(self) -> str:
        return self.file_path.name

    @property
    def category_path(self) -> Path:
        return self.file_path.parent

    @property
    def category_name(self) -> str:
        return self.file_path.parent.name


__all__ = ["CategoryState", "CategoryReference", "CategoryInfo", "FileEntry"]
