"""Layering of configuration sources into one validated config."""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
from typing import Any

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import OutfitPickerConfig

ENV_PREFIX = "OUTFITPICKER__"


def resolve_with_precedence(
    *,
    defaults: OutfitPickerConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> OutfitPickerConfig:
    """Layer overrides onto ``defaults`` and validate the result.

    Layers apply in order file, environment, CLI; a later layer wins. Keys may
    be nested mappings or dotted paths such as ``"cache.path"``.

    Raises:
        ConfigError: If a layer is malformed or the merged values are invalid.
    """
    merged = defaults.model_dump(mode="python")
    for layer in (file_overrides, env_overrides, cli_overrides):
        if layer:
            merged = merge_layer(merged, expand_dotted(layer))

    try:
        return OutfitPickerConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def expand_dotted(overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Turn ``{"cache.path": x}`` into ``{"cache": {"path": x}}``, recursively."""
    if not isinstance(overrides, Mapping):
        raise ConfigError("Configuration overrides must be a mapping.")

    nested: dict[str, Any] = {}
    for key, value in overrides.items():
        if not isinstance(key, str):
            raise ConfigError(f"Configuration keys must be strings, got {key!r}.")
        if isinstance(value, Mapping):
            value = expand_dotted(value)
        *parents, leaf = key.split(".")
        node = nested
        for part in parents:
            child = node.setdefault(part, {})
            if not isinstance(child, dict):
                raise ConfigError(f"Override for {key} conflicts with a scalar value.")
            node = child
        current = node.get(leaf)
        if isinstance(current, dict) and isinstance(value, dict):
            node[leaf] = merge_layer(current, value)
        else:
            node[leaf] = value
    return nested


def merge_layer(base: Mapping[str, Any], layer: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``layer`` merged in; nested mappings merge key by key."""
    merged = dict(base)
    for key, value in layer.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_layer(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


def env_layer(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``OUTFITPICKER__SECTION__KEY`` variables as dotted overrides.

    Values are parsed as YAML so ``true`` and ``[a, b]`` become a bool and a
    list; anything YAML rejects is kept as the raw string.
    """
    layer: dict[str, Any] = {}
    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        key = ".".join(part.lower() for part in name[len(ENV_PREFIX) :].split("__") if part)
        if not key:
            continue
        try:
            layer[key] = yaml.safe_load(raw)
        except yaml.YAMLError:
            layer[key] = raw
    return layer


__all__ = ["ENV_PREFIX", "resolve_with_precedence", "expand_dotted", "merge_layer", "env_layer"]
