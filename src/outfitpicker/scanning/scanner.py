"""Filesystem scanning for outfit categories.

The scanner walks the immediate children of a root directory, treating each
visible subdirectory as a category. Per-category reads run on a bounded
thread pool; the first failure aborts the whole scan.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import AbstractSet, List, Protocol

from outfitpicker.errors import DirectoryNotFoundError, FileSystemError

from .models import CategoryInfo, CategoryReference, CategoryState, FileEntry

LOGGER = logging.getLogger(__name__)

OUTFIT_EXTENSION = ".avatar"
MAX_CONCURRENT_SCANS = 10


class CategoryScannerPort(Protocol):
    """Capability the selection engine needs from a category scanner."""

    def scan_categories(self, root: Path, excluded: AbstractSet[str]) -> List[CategoryInfo]:
        ...

    def scan_outfits(self, category_path: Path) -> List[FileEntry]:
        ...


class CategoryScanner:
    """Discover categories and outfit files beneath a root directory."""

    def __init__(
        self,
        *,
        extension: str = OUTFIT_EXTENSION,
        max_workers: int = MAX_CONCURRENT_SCANS,
    ) -> None:
        self.extension = extension
        self.max_workers = max(1, max_workers)

    def scan_categories(self, root: Path, excluded: AbstractSet[str]) -> List[CategoryInfo]:
        """Classify every visible subdirectory of ``root``.

        Args:
            root: Directory whose children are categories.
            excluded: Category names to report as ``USER_EXCLUDED``.

        Returns:
            List[CategoryInfo]: Categories sorted by name.

        Raises:
            DirectoryNotFoundError: If ``root`` does not exist.
            FileSystemError: If ``root`` or any category cannot be read.
        """
        root = Path(root)
        if not root.exists():
            raise DirectoryNotFoundError(f"Outfit root not found: {root}")

        references = [
            CategoryReference(name=name, path=path) for name, path in self._list_directories(root)
        ]
        if not references:
            return []

        workers = min(self.max_workers, len(references))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="category-scan") as pool:
            infos = list(pool.map(lambda ref: self._scan_category(ref, excluded), references))

        infos.sort(key=lambda info: info.category.name)
        LOGGER.debug("Scanned %d categories under %s", len(infos), root)
        return infos

    def scan_outfits(self, category_path: Path) -> List[FileEntry]:
        """Return outfit files directly inside ``category_path`` sorted by name.

        Raises:
            FileSystemError: If the directory cannot be read.
        """
        outfits: List[FileEntry] = []
        try:
            with os.scandir(category_path) as entries:
                for entry in entries:
                    if not entry.is_file():
                        continue
                    if entry.name.endswith(self.extension):
                        outfits.append(FileEntry.from_path(entry.path))
        except OSError as exc:
            raise FileSystemError(f"Failed to read category {category_path}: {exc}") from exc

        outfits.sort(key=lambda outfit: outfit.file_name)
        return outfits

    def _scan_category(
        self, reference: CategoryReference, excluded: AbstractSet[str]
    ) -> CategoryInfo:
        if reference.name in excluded:
            return CategoryInfo(category=reference, state=CategoryState.USER_EXCLUDED)

        outfit_count = len(self.scan_outfits(reference.path))
        if outfit_count:
            state = CategoryState.HAS_OUTFITS
        elif self._has_any_files(reference.path):
            state = CategoryState.NO_MATCHING_FILES
        else:
            state = CategoryState.EMPTY
        return CategoryInfo(category=reference, state=state, outfit_count=outfit_count)

    def _list_directories(self, root: Path) -> List[tuple[str, Path]]:
        directories: List[tuple[str, Path]] = []
        try:
            with os.scandir(root) as entries:
                for entry in entries:
                    if entry.name.startswith("."):
                        continue
                    if not entry.is_dir():
                        continue
                    directories.append((entry.name, Path(entry.path)))
        except OSError as exc:
            raise FileSystemError(f"Failed to read outfit root {root}: {exc}") from exc
        return directories

    def _has_any_files(self, path: Path) -> bool:
        try:
            with os.scandir(path) as entries:
                return any(entry.is_file() for entry in entries)
        except OSError as exc:
            raise FileSystemError(f"Failed to read category {path}: {exc}") from exc


__all__ = ["CategoryScanner", "CategoryScannerPort", "OUTFIT_EXTENSION", "MAX_CONCURRENT_SCANS"]
