"""Configuration management for foldsort.

Settings live in ``~/.foldsort/config.yaml``. The file stores only what the
user changed; defaults come from :class:`FoldsortConfig`, and ``FOLDSORT__``
environment variables and command line overrides are layered on top when
settings are loaded.
"""

from __future__ import annotations

import difflib
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from .errors import ConfigError
from .models import (
    DEFAULT_PROJECT_MARKERS,
    SECRET_PLACEHOLDER,
    FoldsortConfig,
    LLMSettings,
    ScanSettings,
)
from .resolver import (
    ENV_PREFIX,
    SETTINGS_KEY_ALIASES,
    canonicalize,
    parse_env,
    resolve_with_precedence,
    set_dotted,
    split_key,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.foldsort/config.yaml")
_HEADER_LINES = (
    "# foldsort configuration file",
    "# Only changed settings are stored; manage them with `foldsort config set`.",
)
_STAMP_PREFIX = "# Last updated:"


class ConfigManager:
    """Read, layer, and persist foldsort settings."""

    def __init__(
        self,
        config_path: Optional[Path] = None,
        *,
        env: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Initialize the manager.

        Args:
            config_path: Settings file location; defaults to ``~/.foldsort/config.yaml``.
            env: Environment mapping consulted for ``FOLDSORT__`` overrides.
        """
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Return the resolved settings file path."""
        return self._config_path

    def ensure_exists(self) -> Path:
        """Create an empty settings file if none exists yet."""
        if not self._config_path.exists():
            self._write({})
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Optional[Mapping[str, Any]] = None,
        include_env: bool = True,
        env_overrides: Optional[Mapping[str, str]] = None,
    ) -> FoldsortConfig:
        """Return effective settings: defaults, file, environment, then CLI overrides.

        Raises:
            ConfigError: If the file is unreadable or the merged settings are invalid.
        """
        env_data = None
        if include_env:
            env_data = parse_env(env_overrides if env_overrides is not None else self._env)
        return resolve_with_precedence(
            defaults=FoldsortConfig(),
            file_overrides=self.stored_settings(),
            env_overrides=env_data,
            cli_overrides=cli_overrides,
        )

    def stored_settings(self) -> dict[str, Any]:
        """Return the settings saved in the file as nested sections.

        Flat host keys such as ``apiKey`` are folded into their sections.

        Raises:
            ConfigError: If the file is not a YAML mapping.
        """
        if not self._config_path.exists():
            return {}
        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return canonicalize(raw)

    def save(self, settings: Mapping[str, Any]) -> None:
        """Validate ``settings`` and replace the stored file with them.

        Raises:
            ConfigError: If the settings do not validate; the file is left untouched.
        """
        stored = canonicalize(settings)
        resolve_with_precedence(defaults=FoldsortConfig(), file_overrides=stored)
        self._write(stored)

    def set_value(self, key: str, raw_value: str) -> list[str]:
        """Store one setting given as a dotted key and a YAML literal.

        Args:
            key: Dotted path such as ``scan.max_depth`` or a host key such as ``apiKey``.
            raw_value: Value text, parsed as YAML (``3``, ``true``, ``[a, b]``).

        Returns:
            list[str]: Unified diff of the settings file; empty when nothing changed.

        Raises:
            ConfigError: If the value cannot be parsed or the result is invalid.
        """
        path = split_key(key)
        try:
            value = yaml.safe_load(raw_value)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Unable to parse value: {exc}", key=key) from exc

        self.ensure_exists()
        before = self._body_lines()
        stored = self.stored_settings()
        set_dotted(stored, path, value)
        self.save(stored)
        after = self._body_lines()
        LOGGER.debug("Set %s in %s", ".".join(path), self._config_path)

        diff = difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
        return list(diff) if before != after else []

    def render(self, *, include_env: bool = True) -> str:
        """Return effective settings as YAML with secrets masked."""
        data = self.load(include_env=include_env).masked_dump()
        return yaml.safe_dump(data, sort_keys=False)

    def _body_lines(self) -> list[str]:
        if not self._config_path.exists():
            return []
        lines = self._config_path.read_text(encoding="utf-8").splitlines()
        return [line for line in lines if not line.startswith(_STAMP_PREFIX)]

    def _write(self, stored: Mapping[str, Any]) -> None:
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        body = yaml.safe_dump(dict(stored), sort_keys=False) if stored else ""
        text = "\n".join((*_HEADER_LINES, f"{_STAMP_PREFIX} {stamp}", "")) + body
        self._config_path.write_text(text, encoding="utf-8")


__all__ = [
    "ConfigManager",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_PROJECT_MARKERS",
    "ENV_PREFIX",
    "FoldsortConfig",
    "LLMSettings",
    "SECRET_PLACEHOLDER",
    "SETTINGS_KEY_ALIASES",
    "ScanSettings",
    "resolve_with_precedence",
]
