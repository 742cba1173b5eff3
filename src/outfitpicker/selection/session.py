"""In-memory tracking of outfits already shown during a browsing session."""

from __future__ import annotations

from typing import Dict, Iterable, List, Set


class OutfitSession:
    """Remember skipped outfits so suggestions do not repeat within a session.

    Category scopes are keyed by category name and hold file names. The global
    scope holds ``"<category>/<file>"`` keys used for cross-category browsing.
    Nothing here is persisted.
    """

    def __init__(self) -> None:
        self._category_skipped: Dict[str, Set[str]] = {}
        self._global_skipped: Set[str] = set()

    @staticmethod
    def global_key(category_name: str, file_name: str) -> str:
        return f"{category_name}/{file_name}"

    def skip_in_category(self, category_name: str, file_name: str) -> None:
        self._category_skipped.setdefault(category_name, set()).add(file_name)

    def skip_global(self, category_name: str, file_name: str) -> None:
        self._global_skipped.add(self.global_key(category_name, file_name))

    def is_skipped_in_category(self, category_name: str, file_name: str) -> bool:
        return file_name in self._category_skipped.get(category_name, ())

    def is_skipped_global(self, category_name: str, file_name: str) -> bool:
        return self.global_key(category_name, file_name) in self._global_skipped

    def skipped_count_in_category(self, category_name: str) -> int:
        return len(self._category_skipped.get(category_name, ()))

    def global_skipped_count(self) -> int:
        return len(self._global_skipped)

    def filter_category_skipped(self, category_name: str, file_names: Iterable[str]) -> List[str]:
        return [name for name in file_names if not self.is_skipped_in_category(category_name, name)]

    def reset_category(self, category_name: str) -> None:
        self._category_skipped.pop(category_name, None)

    def reset_global(self) -> None:
        self._global_skipped.clear()

    def reset_all(self) -> None:
        self._category_skipped.clear()
        self._global_skipped.clear()


__all__ = ["OutfitSession"]
