"""Category scanner tests."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Iterable, List

import pytest

from outfitpicker.errors import DirectoryNotFoundError, FileSystemError
from outfitpicker.scanning import (
    OUTFIT_EXTENSION,
    CategoryScanner,
    CategoryState,
    FileEntry,
)


def _category(root: Path, name: str, files: Iterable[str] = ()) -> Path:
    path = root / name
    path.mkdir(parents=True)
    for file_name in files:
        (path / file_name).write_text("", encoding="utf-8")
    return path


def test_missing_root_raises(tmp_path: Path) -> None:
    scanner = CategoryScanner()

    with pytest.raises(DirectoryNotFoundError):
        scanner.scan_categories(tmp_path / "missing", frozenset())


def test_categories_sorted_by_name(tmp_path: Path) -> None:
    for name in ("Zoo", "Apple", "Mango"):
        _category(tmp_path, name, ["look.avatar"])

    infos = CategoryScanner().scan_categories(tmp_path, frozenset())

    assert [info.category.name for info in infos] == ["Apple", "Mango", "Zoo"]
    assert all(info.state is CategoryState.HAS_OUTFITS for info in infos)


def test_states_are_classified(tmp_path: Path) -> None:
    _category(tmp_path, "Casual", ["a.avatar", "b.avatar", "notes.txt"])
    _category(tmp_path, "Empty")
    _category(tmp_path, "Docs", ["readme.md"])
    _category(tmp_path, "Formal", ["c.avatar"])

    infos = {
        info.category.name: info
        for info in CategoryScanner().scan_categories(tmp_path, frozenset({"Formal"}))
    }

    assert infos["Casual"].state is CategoryState.HAS_OUTFITS
    assert infos["Casual"].outfit_count == 2
    assert infos["Empty"].state is CategoryState.EMPTY
    assert infos["Docs"].state is CategoryState.NO_MATCHING_FILES
    assert infos["Docs"].outfit_count == 0
    assert infos["Formal"].state is CategoryState.USER_EXCLUDED
    assert infos["Formal"].outfit_count == 0


def test_exclusion_wins_over_contents(tmp_path: Path) -> None:
    _category(tmp_path, "Full", ["a.avatar", "b.avatar"])
    _category(tmp_path, "Bare")
    excluded = frozenset({"Full", "Bare"})

    infos = CategoryScanner().scan_categories(tmp_path, excluded)

    assert {info.state for info in infos} == {CategoryState.USER_EXCLUDED}
    assert excluded == frozenset({"Full", "Bare"})


def test_hidden_directories_and_loose_files_are_skipped(tmp_path: Path) -> None:
    _category(tmp_path, ".git", ["x.avatar"])
    _category(tmp_path, "Visible", ["x.avatar"])
    (tmp_path / "loose.avatar").write_text("", encoding="utf-8")

    infos = CategoryScanner().scan_categories(tmp_path, frozenset())

    assert [info.category.name for info in infos] == ["Visible"]
    assert infos[0].category.path == tmp_path / "Visible"


def test_empty_root_returns_no_categories(tmp_path: Path) -> None:
    assert CategoryScanner().scan_categories(tmp_path, frozenset()) == []


def test_scan_outfits_filters_and_sorts(tmp_path: Path) -> None:
    path = _category(tmp_path, "Casual", ["b.avatar", "a.avatar", "c.png"])
    (path / "nested.avatar").mkdir()

    outfits = CategoryScanner().scan_outfits(path)

    assert [outfit.file_name for outfit in outfits] == ["a.avatar", "b.avatar"]
    assert outfits[0] == FileEntry.from_path(path / "a.avatar")
    assert outfits[0].category_name == "Casual"
    assert outfits[0].category_path == path


def test_scan_outfits_missing_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(FileSystemError):
        CategoryScanner().scan_outfits(tmp_path / "gone")


def test_custom_extension(tmp_path: Path) -> None:
    path = _category(tmp_path, "Casual", ["a.x", "b.x", f"c{OUTFIT_EXTENSION}"])

    outfits = CategoryScanner(extension=".x").scan_outfits(path)

    assert [outfit.file_name for outfit in outfits] == ["a.x", "b.x"]


class _FailingScanner(CategoryScanner):
    def __init__(self, broken: str) -> None:
        super().__init__()
        self.broken = broken

    def scan_outfits(self, category_path: Path) -> List[FileEntry]:
        if Path(category_path).name == self.broken:
            raise FileSystemError(f"cannot read {category_path}")
        return super().scan_outfits(category_path)


def test_single_category_failure_aborts_scan(tmp_path: Path) -> None:
    for name in ("A", "B", "C"):
        _category(tmp_path, name, ["x.avatar"])

    with pytest.raises(FileSystemError):
        _FailingScanner("B").scan_categories(tmp_path, frozenset())


class _CountingScanner(CategoryScanner):
    def __init__(self, max_workers: int) -> None:
        super().__init__(max_workers=max_workers)
        self._lock = threading.Lock()
        self.in_flight = 0
        self.peak = 0

    def scan_outfits(self, category_path: Path) -> List[FileEntry]:
        with self._lock:
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
        try:
            time.sleep(0.02)
            return super().scan_outfits(category_path)
        finally:
            with self._lock:
                self.in_flight -= 1


def test_concurrency_is_bounded(tmp_path: Path) -> None:
    for index in range(8):
        _category(tmp_path, f"cat{index}", ["x.avatar"])
    scanner = _CountingScanner(max_workers=3)

    infos = scanner.scan_categories(tmp_path, frozenset())

    assert len(infos) == 8
    assert 1 <= scanner.peak <= 3
