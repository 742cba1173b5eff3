"""Configuration models describing outfit picker settings."""

from __future__ import annotations

from pathlib import Path
from typing import FrozenSet, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class PickerBaseModel(BaseModel):
    """Shared configuration for outfit picker Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class CacheSettings(PickerBaseModel):
    """Rotation cache location.

    Attributes:
        path: Cache file path; ``None`` selects ``~/.outfitpicker/cache.json``.
    """

    path: Optional[str] = None


class LoggingSettings(PickerBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Standard logging level name; matching ignores case.
    """

    level: LogLevel = "WARNING"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class CLIOptions(PickerBaseModel):
    """CLI behavior defaults.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        json_default: Whether commands emit JSON unless told otherwise.
    """

    quiet_default: bool = False
    json_default: bool = False


class OutfitPickerConfig(PickerBaseModel):
    """Top-level configuration for the outfit picker.

    Attributes:
        root: Directory whose subdirectories are outfit categories.
        excluded_categories: Category names treated as unavailable.
        cache: Rotation cache settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    root: Optional[str] = None
    excluded_categories: List[str] = Field(default_factory=list)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)

    def root_path(self) -> Optional[Path]:
        return Path(self.root).expanduser() if self.root else None

    def excluded_set(self) -> FrozenSet[str]:
        return frozenset(self.excluded_categories)


__all__ = [
    "PickerBaseModel",
    "CacheSettings",
    "LoggingSettings",
    "CLIOptions",
    "OutfitPickerConfig",
]
