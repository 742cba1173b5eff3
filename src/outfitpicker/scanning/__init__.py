"""Category discovery for outfit directories."""

from .models import CategoryInfo, CategoryReference, CategoryState, FileEntry
from .scanner import MAX_CONCURRENT_SCANS, OUTFIT_EXTENSION, CategoryScanner, CategoryScannerPort

__all__ = [
    "CategoryInfo",
    "CategoryReference",
    "CategoryState",
    "FileEntry",
    "CategoryScanner",
    "CategoryScannerPort",
    "OUTFIT_EXTENSION",
    "MAX_CONCURRENT_SCANS",
]
