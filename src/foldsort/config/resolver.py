"""Merging of settings sources into a validated :class:`FoldsortConfig`.

Settings reach foldsort in three spellings: nested YAML sections
(``llm: {api_key: ...}``), dotted keys (``llm.api_key``) and the flat keys a
desktop host stores (``apiKey``). :func:`canonicalize` folds all of them into
nested mappings before sources are layered and validated.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from .errors import ConfigError
from .models import FoldsortConfig

ENV_PREFIX = "FOLDSORT__"

# Flat settings keys written by the desktop host, mapped to dotted config paths.
SETTINGS_KEY_ALIASES: dict[str, str] = {
    "apiKey": "llm.api_key",
    "baseUrl": "llm.base_url",
    "model": "llm.model",
    "provider": "llm.provider",
    "debugMode": "debug_mode",
    "themeMode": "ui.theme_mode",
    "language": "ui.language",
}


def split_key(key: str, *, aliases: bool = True) -> list[str]:
    """Return the section path for ``key``, resolving top-level host aliases.

    Raises:
        ConfigError: If ``key`` has no usable segments.
    """
    dotted = key.strip()
    if aliases:
        dotted = SETTINGS_KEY_ALIASES.get(dotted, dotted)
    segments = [segment.strip() for segment in dotted.split(".")]
    if not segments or not all(segments):
        raise ConfigError(f"Invalid setting key {key!r}; use a dotted path such as 'llm.model'.")
    return segments


def set_dotted(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Store ``value`` at ``path`` inside ``target``, creating sections as needed.

    Mapping values are merged into an existing section rather than replacing it.

    Raises:
        ConfigError: If a section along ``path`` already holds a plain value.
    """
    node = target
    for index, segment in enumerate(path[:-1]):
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            dotted = ".".join(path[: index + 1])
            raise ConfigError(f"Setting {dotted} is a value, not a section.", key=dotted)
        node = child

    leaf = path[-1]
    if not isinstance(value, Mapping):
        node[leaf] = value
        return
    section = node.get(leaf)
    if not isinstance(section, dict):
        section = node[leaf] = {}
    for key, child_value in value.items():
        set_dotted(section, [str(key)], child_value)


def canonicalize(source: Mapping[str, Any], *, aliases: bool = True) -> dict[str, Any]:
    """Fold aliased, dotted, and nested keys of ``source`` into nested sections.

    Host aliases are only recognized at the top level of ``source``.

    Raises:
        ConfigError: If ``source`` is not a mapping or a key is invalid.
    """
    if not isinstance(source, Mapping):
        raise ConfigError("Settings must be a mapping of keys to values.")

    nested: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"Setting keys must be strings, got {key!r}.")
        if isinstance(value, Mapping):
            value = canonicalize(value, aliases=False)
        set_dotted(nested, split_key(key, aliases=aliases), value)
    return nested


def parse_env(env: Mapping[str, str], *, prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """Collect ``FOLDSORT__SECTION__KEY`` variables as nested settings.

    Values are read as YAML literals so ``true``, ``3`` and ``[a, b]`` keep their
    types; anything YAML rejects is kept as the raw string.
    """
    overrides: dict[str, Any] = {}
    for name, raw_value in env.items():
        if not name.startswith(prefix) or name == prefix:
            continue
        path = [segment.lower() for segment in name[len(prefix) :].split("__")]
        try:
            value = yaml.safe_load(raw_value)
        except yaml.YAMLError:
            value = raw_value
        set_dotted(overrides, path, value)
    return overrides


def resolve_with_precedence(
    *,
    defaults: FoldsortConfig,
    file_overrides: Optional[Mapping[str, Any]] = None,
    env_overrides: Optional[Mapping[str, Any]] = None,
    cli_overrides: Optional[Mapping[str, Any]] = None,
) -> FoldsortConfig:
    """Layer settings sources over ``defaults``: file, then environment, then CLI.

    Raises:
        ConfigError: If a source is malformed or the merged settings are invalid.
    """
    merged = defaults.model_dump(mode="python")
    for layer in (file_overrides, env_overrides, cli_overrides):
        if not layer:
            continue
        for key, value in canonicalize(layer).items():
            set_dotted(merged, [key], value)

    try:
        return FoldsortConfig.model_validate(merged)
    except ValidationError as exc:
        first = exc.errors()[0]
        key = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ConfigError(f"Invalid configuration values: {exc}", key=key) from exc


__all__ = [
    "ENV_PREFIX",
    "SETTINGS_KEY_ALIASES",
    "canonicalize",
    "parse_env",
    "resolve_with_precedence",
    "set_dotted",
    "split_key",
]
