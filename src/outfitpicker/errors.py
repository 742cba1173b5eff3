"""Error hierarchy shared by every outfit picker component."""


class OutfitPickerError(Exception):
    """Base exception for all outfit picker failures."""


class InvalidInputError(OutfitPickerError):
    """Raised when a caller supplies an empty or malformed name."""


class NotFoundError(OutfitPickerError):
    """Base exception for missing directories, categories, and outfits."""


class DirectoryNotFoundError(NotFoundError):
    """Raised when the outfit root directory does not exist."""


class CategoryNotFoundError(NotFoundError):
    """Raised when no scanned category matches the requested name."""


class OutfitNotFoundError(NotFoundError):
    """Raised when a named outfit is absent from its category."""


class NoOutfitsAvailableError(OutfitPickerError):
    """Raised when an operation needs outfits but the category has none."""


class FileSystemError(OutfitPickerError):
    """Raised when a directory or file cannot be read or written."""


def require_name(value: str, label: str) -> str:
    """Reject empty or whitespace-only names before any I/O happens.

    Args:
        value: Name supplied by the caller.
        label: Human-readable description used in the error message.

    Returns:
        str: The original value when it is non-blank.

    Raises:
        InvalidInputError: If the value is empty or whitespace.
    """
    if not value or not value.strip():
        raise InvalidInputError(f"{label} cannot be empty")
    return value


__all__ = [
    "OutfitPickerError",
    "InvalidInputError",
    "NotFoundError",
    "DirectoryNotFoundError",
    "CategoryNotFoundError",
    "OutfitNotFoundError",
    "NoOutfitsAvailableError",
    "FileSystemError",
    "require_name",
]
