"""YAML-backed configuration for the outfit picker.

The effective configuration is built from four layers: model defaults, the
YAML file, ``OUTFITPICKER__`` environment variables, and per-invocation
overrides. Only the file layer is ever written back.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Tuple

import yaml

from outfitpicker.errors import FileSystemError

from .exceptions import ConfigError
from .models import OutfitPickerConfig
from .resolver import ENV_PREFIX, env_layer, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.outfitpicker/config.yaml")
_HEADER = "# Outfit picker configuration file ({stamp})\n# Edit with `outfitpicker config edit`.\n"


class ConfigManager:
    """Own the configuration file and resolve the effective configuration."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Bind the manager to a file and an environment.

        Args:
            config_path: YAML file location; defaults to ``~/.outfitpicker/config.yaml``.
            env: Environment consulted for overrides; defaults to ``os.environ``.
        """
        self._path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = os.environ if env is None else env

    @property
    def config_path(self) -> Path:
        return self._path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> OutfitPickerConfig:
        """Resolve the effective configuration, writing a default file first if none exists.

        Args:
            cli_overrides: Dotted-key overrides that win over every other layer.
            include_env: Whether ``OUTFITPICKER__`` variables are applied.
            env_overrides: Environment to read instead of the bound one.

        Raises:
            ConfigError: If the file cannot be parsed or a value is invalid.
        """
        self.ensure_exists()
        env: Mapping[str, str] = {}
        if include_env:
            env = self._env if env_overrides is None else env_overrides
        return resolve_with_precedence(
            defaults=OutfitPickerConfig(),
            file_overrides=self.load_file_overrides(),
            env_overrides=env_layer(env),
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the mapping stored in the file, or an empty mapping when absent."""
        text = self.read_text()
        if not text:
            return {}
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {self._path}: {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"{self._path} must contain a mapping at the top level.")
        return data

    def update(self, changes: Mapping[str, Any]) -> Tuple[dict[str, Any], OutfitPickerConfig]:
        """Apply dotted-key ``changes`` to the stored file and persist the result.

        Returns:
            Tuple[dict[str, Any], OutfitPickerConfig]: The file contents before
            the change and the validated configuration that was written.
        """
        before = self.load_file_overrides()
        updated = resolve_with_precedence(
            defaults=OutfitPickerConfig(), file_overrides=before, cli_overrides=changes
        )
        self.save(updated)
        return before, updated

    def save(self, config: OutfitPickerConfig) -> None:
        body = yaml.safe_dump(config.model_dump(mode="python"), sort_keys=False)
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(_HEADER.format(stamp=stamp) + body, encoding="utf-8")
        except OSError as exc:
            raise FileSystemError(f"Failed to write config {self._path}: {exc}") from exc

    def ensure_exists(self) -> Path:
        if not self._path.exists():
            self.save(OutfitPickerConfig())
        return self._path

    def read_text(self) -> str:
        """Return the raw file contents; a missing file reads as empty.

        Raises:
            ConfigError: If the file is not valid UTF-8.
            FileSystemError: If the file cannot be read.
        """
        if not self._path.exists():
            return ""
        try:
            return self._path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ConfigError(f"{self._path} is not valid UTF-8: {exc}") from exc
        except OSError as exc:
            raise FileSystemError(f"Failed to read config {self._path}: {exc}") from exc

    def delete(self) -> None:
        """Remove the file; a missing file is not an error."""
        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            raise FileSystemError(f"Failed to delete config {self._path}: {exc}") from exc


__all__ = [
    "ConfigManager",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "OutfitPickerConfig",
    "resolve_with_precedence",
]
