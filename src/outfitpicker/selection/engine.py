"""Selection engine that rotates through outfits without repeats.

Every mutating operation loads the rotation cache, applies its change, and
saves the cache before returning. The load/mutate/save window is guarded by a
per-instance lock so concurrent callers sharing one engine cannot drop each
other's worn markers. Separate processes writing the same cache file are not
coordinated.
"""

from __future__ import annotations

import logging
import random
import threading
from pathlib import Path
from typing import Any, List, Optional, Tuple

from outfitpicker.config import (
    ConfigError,
    ConfigManager,
    OutfitPickerConfig,
    resolve_with_precedence,
)
from outfitpicker.errors import (
    CategoryNotFoundError,
    DirectoryNotFoundError,
    NoOutfitsAvailableError,
    OutfitNotFoundError,
    OutfitPickerError,
    require_name,
)
from outfitpicker.scanning import (
    CategoryInfo,
    CategoryReference,
    CategoryScanner,
    CategoryScannerPort,
    CategoryState,
    FileEntry,
)
from outfitpicker.state import CacheRepository, CacheStore, CategoryCache

from .models import CategoryOutfitState, OutfitSelection, RotationStatus
from .session import OutfitSession

LOGGER = logging.getLogger(__name__)


class OutfitPicker:
    """Pick outfits once per rotation cycle and persist worn progress."""

    def __init__(
        self,
        config: OutfitPickerConfig,
        *,
        cache_store: CacheStore,
        scanner: CategoryScannerPort | None = None,
        config_manager: ConfigManager | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Loaded configuration supplying the root and exclusions.
            cache_store: Store used to load and save the rotation cache.
            scanner: Category scanner; defaults to the filesystem scanner.
            config_manager: Optional manager used to persist config changes.
            rng: Random source for selections.
        """
        self._config = config
        self._cache_store = cache_store
        self._scanner: CategoryScannerPort = scanner or CategoryScanner()
        self._config_manager = config_manager
        self._rng = rng or random.Random()
        self._lock = threading.Lock()

    @classmethod
    def from_config_manager(
        cls,
        manager: ConfigManager,
        *,
        config: OutfitPickerConfig | None = None,
    ) -> "OutfitPicker":
        """Build an engine backed by the on-disk cache named in the configuration."""
        resolved = config or manager.load()
        cache_path = Path(resolved.cache.path) if resolved.cache.path else None
        return cls(
            resolved,
            cache_store=CacheRepository(cache_path),
            config_manager=manager,
        )

    @property
    def config(self) -> OutfitPickerConfig:
        return self._config

    @property
    def root(self) -> Path:
        root = self._config.root_path()
        if root is None:
            raise ConfigError("No outfit root configured. Set `root` in the configuration.")
        return root

    # Category discovery ------------------------------------------------

    def get_categories(self) -> List[CategoryInfo]:
        """Scan categories and attach worn counts from the cache.

        The cache is read on a best-effort basis: if it cannot be loaded the
        categories are returned without worn counts.
        """
        categories = self._scanner.scan_categories(self.root, self._config.excluded_set())
        try:
            cache = self._cache_store.load()
        except OutfitPickerError as exc:
            LOGGER.warning("Rotation cache unavailable; omitting worn counts: %s", exc)
            return categories

        for info in categories:
            entry = cache.get(info.category.cache_key)
            if entry is not None:
                info.worn_count = entry.worn_count
        return categories

    def get_outfits(self, category_name: str) -> List[FileEntry]:
        """Return every outfit in the named category, sorted by file name."""
        category = self._find_category(category_name)
        return self._scanner.scan_outfits(category.path)

    def get_outfit_state(self, category_name: str) -> CategoryOutfitState:
        category = self._find_category(category_name)
        outfits = self._scanner.scan_outfits(category.path)
        worn = self._cache_store.load().worn_set(category.cache_key) if outfits else set()
        return CategoryOutfitState(
            category=category,
            all_outfits=outfits,
            available_outfits=[o for o in outfits if o.file_name not in worn],
            worn_outfits=[o for o in outfits if o.file_name in worn],
        )

    # Selection -----------------------------------------------------------

    def select_random_outfit(self, category_name: str) -> Optional[OutfitSelection]:
        """Pick an unworn outfit at random and mark it worn.

        When every outfit has been worn the category's rotation is reset first
        and the returned selection reports ``rotation_was_reset``.

        Returns:
            Optional[OutfitSelection]: The selection, or ``None`` when the
            category has no outfits.
        """
        require_name(category_name, "Category name")
        outfits = self.get_outfits(category_name)
        if not outfits:
            return None

        category_path = str(outfits[0].category_path)
        with self._lock:
            cache = self._cache_store.load()
            entry = cache.get_or_create(category_path, len(outfits))
            rotation_was_reset = self._reset_if_complete(entry, category_name)

            candidates = [o for o in outfits if not entry.is_worn(o.file_name)]
            if not candidates:
                return None
            chosen = self._rng.choice(candidates)

            entry.add_worn(chosen.file_name)
            progress = entry.rotation_progress()
            self._cache_store.save(cache)

        LOGGER.info(
            "Selected %s from %s (progress %.2f)", chosen.file_name, category_name, progress
        )
        return OutfitSelection(
            outfit=chosen, rotation_progress=progress, rotation_was_reset=rotation_was_reset
        )

    def select_random_outfit_across_categories(self) -> Optional[OutfitSelection]:
        """Pick a random category that has outfits, then select from it."""
        eligible = [
            info for info in self.get_categories() if info.state is CategoryState.HAS_OUTFITS
        ]
        if not eligible:
            return None
        category = self._rng.choice(eligible)
        return self.select_random_outfit(category.category.name)

    def select_outfit_manually(self, category_name: str, file_name: str) -> OutfitSelection:
        """Choose a specific outfit by name and mark it worn.

        Raises:
            NoOutfitsAvailableError: If the category has no outfits.
            OutfitNotFoundError: If ``file_name`` is not in the category.
        """
        require_name(category_name, "Category name")
        require_name(file_name, "File name")
        outfits = self.get_outfits(category_name)
        outfit = self._require_outfit(outfits, category_name, file_name)

        with self._lock:
            cache = self._cache_store.load()
            entry = cache.get_or_create(str(outfit.category_path), len(outfits))
            rotation_was_reset = self._reset_if_complete(entry, category_name)
            entry.add_worn(outfit.file_name)
            progress = entry.rotation_progress()
            self._cache_store.save(cache)

        return OutfitSelection(
            outfit=outfit, rotation_progress=progress, rotation_was_reset=rotation_was_reset
        )

    def wear_outfit(
        self,
        category_name: str,
        file_name: str,
        *,
        session: OutfitSession | None = None,
    ) -> None:
        """Mark an outfit worn without evaluating rotation completion.

        Args:
            category_name: Category containing the outfit.
            file_name: Outfit file name.
            session: Browsing session whose skips are cleared once an outfit is worn.
        """
        require_name(category_name, "Category name")
        require_name(file_name, "File name")
        outfits = self.get_outfits(category_name)
        outfit = self._require_outfit(outfits, category_name, file_name)

        with self._lock:
            cache = self._cache_store.load()
            cache.get_or_create(str(outfit.category_path), len(outfits)).add_worn(file_name)
            self._cache_store.save(cache)

        if session is not None:
            session.reset_category(category_name)
            session.reset_global()

    # Suggestions ---------------------------------------------------------

    def suggest_outfit(
        self, category_name: str, session: OutfitSession
    ) -> Optional[FileEntry]:
        """Preview a random unworn outfit without touching the cache.

        Outfits already shown in ``session`` are skipped until every candidate
        has been shown, at which point the category's session scope starts
        over. A fully worn category previews from all of its outfits.
        """
        require_name(category_name, "Category name")
        outfits = self.get_outfits(category_name)
        if not outfits:
            return None

        worn = self._cache_store.load().worn_set(str(outfits[0].category_path))
        candidates = [o for o in outfits if o.file_name not in worn] or outfits
        unseen = [
            o for o in candidates if not session.is_skipped_in_category(category_name, o.file_name)
        ]
        if not unseen:
            session.reset_category(category_name)
            unseen = candidates

        chosen = self._rng.choice(unseen)
        session.skip_in_category(category_name, chosen.file_name)
        return chosen

    def suggest_outfit_across_categories(self, session: OutfitSession) -> Optional[FileEntry]:
        """Preview a random unworn outfit from any category with outfits."""
        cache = self._cache_store.load()
        candidates: List[Tuple[str, FileEntry]] = []
        for info in self.get_categories():
            if info.state is not CategoryState.HAS_OUTFITS:
                continue
            worn = cache.worn_set(info.category.cache_key)
            for outfit in self._scanner.scan_outfits(info.category.path):
                if outfit.file_name not in worn:
                    candidates.append((info.category.name, outfit))
        if not candidates:
            return None

        unseen = [
            (name, outfit)
            for name, outfit in candidates
            if not session.is_skipped_global(name, outfit.file_name)
        ]
        if not unseen:
            session.reset_global()
            unseen = candidates

        name, chosen = self._rng.choice(unseen)
        session.skip_global(name, chosen.file_name)
        return chosen

    # Resets --------------------------------------------------------------

    def reset_category(self, category_name: str) -> None:
        """Clear the worn set of one category; a category without outfits is left alone."""
        require_name(category_name, "Category name")
        outfits = self.get_outfits(category_name)
        if not outfits:
            return

        with self._lock:
            cache = self._cache_store.load()
            entry = cache.get(str(outfits[0].category_path))
            if entry is None:
                return
            entry.reset()
            self._cache_store.save(cache)
        LOGGER.info("Reset rotation for %s", category_name)

    def reset_all_categories(self) -> None:
        with self._lock:
            cache = self._cache_store.load()
            cache.reset_all()
            self._cache_store.save(cache)
        LOGGER.info("Reset rotation for all categories")

    def prune_cache(self) -> List[str]:
        """Drop cache entries whose category directory no longer appears in a scan.

        Returns:
            List[str]: Removed category paths, sorted.
        """
        present = {info.category.cache_key for info in self.get_categories()}
        with self._lock:
            cache = self._cache_store.load()
            stale = sorted(key for key in cache.categories if key not in present)
            for key in stale:
                cache.remove(key)
            if stale:
                self._cache_store.save(cache)
        if stale:
            LOGGER.info("Pruned %d stale cache entries", len(stale))
        return stale

    def factory_reset(self) -> None:
        """Delete the rotation cache and, when managed, the configuration file."""
        with self._lock:
            self._cache_store.delete()
            if self._config_manager is not None:
                self._config_manager.delete()

    # Read-only queries ---------------------------------------------------

    def get_rotation_status(self, category_name: str) -> RotationStatus:
        """Return ``(worn, total)`` using the live outfit count as the total."""
        outfits = self.get_outfits(category_name)
        if not outfits:
            return RotationStatus(0, 0)
        worn = self._cache_store.load().worn_set(str(outfits[0].category_path))
        return RotationStatus(len(worn), len(outfits))

    def is_rotation_complete(self, category_name: str) -> bool:
        worn, total = self.get_rotation_status(category_name)
        return total > 0 and worn >= total

    def is_outfit_worn(self, category_name: str, file_name: str) -> bool:
        require_name(file_name, "File name")
        outfits = self.get_outfits(category_name)
        if not outfits:
            return False
        return file_name in self._cache_store.load().worn_set(str(outfits[0].category_path))

    def get_worn_outfits(self, category_name: str) -> List[FileEntry]:
        return self.get_outfit_state(category_name).worn_outfits

    def get_unworn_outfits(self, category_name: str) -> List[FileEntry]:
        return self.get_outfit_state(category_name).available_outfits

    def get_all_worn_outfits(self) -> List[Tuple[str, List[str]]]:
        """Return ``(category_path, worn file names)`` pairs for every non-empty entry."""
        cache = self._cache_store.load()
        return sorted(
            (path, sorted(entry.worn_outfits))
            for path, entry in cache.categories.items()
            if entry.worn_outfits
        )

    # Configuration -------------------------------------------------------

    def exclude_category(self, category_name: str) -> None:
        require_name(category_name, "Category name")
        if category_name in self._config.excluded_categories:
            return
        excluded = [*self._config.excluded_categories, category_name]
        self._update_config(excluded_categories=excluded)

    def include_category(self, category_name: str) -> None:
        require_name(category_name, "Category name")
        excluded = [name for name in self._config.excluded_categories if name != category_name]
        self._update_config(excluded_categories=excluded)

    def change_root(self, new_root: Path | str, *, clear_cache: bool = True) -> None:
        """Point the engine at a different outfit root.

        Raises:
            DirectoryNotFoundError: If ``new_root`` does not exist.
        """
        new_path = Path(new_root).expanduser()
        if not new_path.is_dir():
            raise DirectoryNotFoundError(f"Outfit root not found: {new_path}")
        if self._config.root_path() == new_path:
            return
        self._update_config(root=str(new_path))
        if clear_cache:
            with self._lock:
                self._cache_store.delete()

    # Internal helpers ----------------------------------------------------

    def _find_category(self, category_name: str) -> CategoryReference:
        require_name(category_name, "Category name")
        categories = self._scanner.scan_categories(self.root, self._config.excluded_set())
        for info in categories:
            if info.category.name == category_name:
                return info.category
        raise CategoryNotFoundError(f"Category not found: {category_name}")

    def _require_outfit(
        self, outfits: List[FileEntry], category_name: str, file_name: str
    ) -> FileEntry:
        if not outfits:
            raise NoOutfitsAvailableError(f"No outfits available in {category_name}")
        for outfit in outfits:
            if outfit.file_name == file_name:
                return outfit
        raise OutfitNotFoundError(f"Outfit '{file_name}' not found in category '{category_name}'")

    def _reset_if_complete(self, entry: CategoryCache, category_name: str) -> bool:
        if not entry.is_rotation_complete():
            return False
        entry.reset()
        LOGGER.info("Rotation complete for %s; starting a new cycle", category_name)
        return True

    def _update_config(self, **changes: Any) -> None:
        self._config = resolve_with_precedence(defaults=self._config, cli_overrides=changes)
        if self._config_manager is not None:
            # Only the changed keys reach the file; runtime overrides stay in memory.
            self._config_manager.update(changes)


__all__ = ["OutfitPicker"]
