"""Persistence for the rotation cache."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from outfitpicker.errors import FileSystemError

from .errors import CacheDecodeError, CacheEncodeError, CacheError
from .models import CACHE_VERSION, CategoryCache, RotationCache

DEFAULT_CACHE_PATH = Path("~/.outfitpicker/cache.json")


class CacheStore(Protocol):
    """Load/save/delete contract the selection engine persists through."""

    def load(self) -> RotationCache:
        ...

    def save(self, cache: RotationCache) -> None:
        ...

    def delete(self) -> None:
        ...


class CacheRepository:
    """Store the rotation cache as a JSON document on disk."""

    def __init__(self, cache_path: Path | None = None) -> None:
        """Initialize the repository.

        Args:
            cache_path: Location of the cache file; defaults to
                ``~/.outfitpicker/cache.json``.
        """
        self._cache_path = (cache_path or DEFAULT_CACHE_PATH).expanduser()

    @property
    def cache_path(self) -> Path:
        """Return the resolved cache file location."""
        return self._cache_path

    def load(self) -> RotationCache:
        """Load the rotation cache.

        Returns:
            RotationCache: Stored cache, or a fresh empty cache when the file is missing.

        Raises:
            CacheDecodeError: If the stored content cannot be parsed.
            FileSystemError: If the file exists but cannot be read.
        """
        if not self._cache_path.exists():
            return RotationCache()

        try:
            text = self._cache_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise CacheDecodeError(f"Cache file is not valid UTF-8: {exc}") from exc
        except OSError as exc:
            raise FileSystemError(f"Failed to read cache {self._cache_path}: {exc}") from exc

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CacheDecodeError(f"Invalid cache data: {exc}") from exc

        try:
            return RotationCache.model_validate(data)
        except ValidationError as exc:
            raise CacheDecodeError(f"Invalid cache data: {exc}") from exc

    def save(self, cache: RotationCache) -> None:
        """Persist the rotation cache, creating the parent directory if needed.

        Raises:
            CacheEncodeError: If the cache cannot be serialized.
            FileSystemError: If the file cannot be written.
        """
        try:
            payload = json.dumps(cache.model_dump(mode="json"), indent=2, sort_keys=False)
        except (TypeError, ValueError) as exc:
            raise CacheEncodeError(f"Failed to encode cache: {exc}") from exc

        try:
            self._cache_path.parent.mkdir(parents=True, exist_ok=True)
            self._cache_path.write_text(payload, encoding="utf-8")
        except OSError as exc:
            raise FileSystemError(f"Failed to write cache {self._cache_path}: {exc}") from exc

    def delete(self) -> None:
        """Remove the cache file; a missing file is not an error."""
        try:
            self._cache_path.unlink(missing_ok=True)
        except OSError as exc:
            raise FileSystemError(f"Failed to delete cache {self._cache_path}: {exc}") from exc


class InMemoryCacheRepository:
    """Cache store that keeps a private copy of the cache in memory."""

    def __init__(self, cache: RotationCache | None = None) -> None:
        self._cache = cache.model_copy(deep=True) if cache is not None else None
        self.save_count = 0

    def load(self) -> RotationCache:
        if self._cache is None:
            return RotationCache()
        return self._cache.model_copy(deep=True)

    def save(self, cache: RotationCache) -> None:
        self._cache = cache.model_copy(deep=True)
        self.save_count += 1

    def delete(self) -> None:
        self._cache = None


__all__ = [
    "CacheStore",
    "CacheRepository",
    "InMemoryCacheRepository",
    "DEFAULT_CACHE_PATH",
    "CACHE_VERSION",
    "CategoryCache",
    "RotationCache",
    "CacheError",
    "CacheDecodeError",
    "CacheEncodeError",
]
