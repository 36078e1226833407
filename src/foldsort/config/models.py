"""Configuration models describing foldsort settings."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_PROJECT_MARKERS: tuple[str, ...] = (
    "package.json",
    "Cargo.toml",
    "pyproject.toml",
    "setup.py",
    "requirements.txt",
    "go.mod",
    "Makefile",
    "CMakeLists.txt",
    "pom.xml",
    "build.gradle",
    ".git",
    ".gitignore",
    "README.md",
    "README",
    "LICENSE",
    "Dockerfile",
    ".vscode",
    ".idea",
    "tsconfig.json",
    "vite.config.js",
    "webpack.config.js",
)


class FoldsortBaseModel(BaseModel):
    """Shared configuration for foldsort settings models."""

    model_config = ConfigDict(extra="forbid")


class LLMSettings(FoldsortBaseModel):
    """Categorization service options.

    Attributes:
        provider: ``openai`` for the hosted API or ``custom`` for a compatible endpoint.
        model: Model identifier passed to the chat completion request.
        api_key: Credential for the categorization request.
        base_url: Optional endpoint override.
        temperature: Sampling temperature for the request.
        timeout_seconds: Request timeout applied by the HTTP client.
    """

    provider: Literal["openai", "custom"] = "openai"
    model: str = "gpt-4o"
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    temperature: float = 0.2
    timeout_seconds: float = 60.0

    @field_validator("base_url", mode="before")
    @classmethod
    def _blank_url_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ScanSettings(FoldsortBaseModel):
    """Budget applied when summarizing subfolders.

    Attributes:
        max_depth: Deepest level visited below a summarized folder (0 is the folder).
        max_files_scanned: Files counted per summarized folder before stopping.
        markers: File and directory names that identify software projects. A
            comma-separated string is accepted so the list can come from one
            environment variable.
    """

    max_depth: int = Field(default=3, ge=0)
    max_files_scanned: int = Field(default=500, ge=1)
    markers: List[str] = Field(default_factory=lambda: list(DEFAULT_PROJECT_MARKERS))

    @field_validator("markers", mode="before")
    @classmethod
    def _normalize_markers(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, (list, tuple)):
            return value
        markers: list[str] = []
        for raw in value:
            name = str(raw).strip()
            if not name or name in markers:
                continue
            if "/" in name or "\\" in name:
                raise ValueError(f"marker {name!r} must be a bare file or folder name")
            markers.append(name)
        return markers


class UISettings(FoldsortBaseModel):
    """Presentation preferences stored for host applications.

    Attributes:
        theme_mode: Preferred color scheme.
        language: Interface language code.
    """

    theme_mode: Literal["light", "dark", "system"] = "dark"
    language: str = "en"


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(FoldsortBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level; case-insensitive on input.
    """

    level: LogLevel = "WARNING"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value


# Dotted paths whose values are never shown back to the user.
SECRET_SETTINGS: tuple[str, ...] = ("llm.api_key",)
SECRET_PLACEHOLDER = "********"


class FoldsortConfig(FoldsortBaseModel):
    """Top-level configuration struct for foldsort.

    Attributes:
        llm: Categorization service settings.
        scan: Folder summary budget.
        ui: Presentation preferences.
        logging: Logging configuration.
        debug_mode: Whether plan building returns prompt and response diagnostics.
    """

    llm: LLMSettings = Field(default_factory=LLMSettings)
    scan: ScanSettings = Field(default_factory=ScanSettings)
    ui: UISettings = Field(default_factory=UISettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    debug_mode: bool = False

    def masked_dump(self) -> Dict[str, Any]:
        """Return the settings as plain data with secrets replaced by a placeholder."""
        data = self.model_dump(mode="json")
        for dotted in SECRET_SETTINGS:
            *parents, leaf = dotted.split(".")
            node = data
            for segment in parents:
                node = node[segment]
            if node.get(leaf):
                node[leaf] = SECRET_PLACEHOLDER
        return data


__all__ = [
    "DEFAULT_PROJECT_MARKERS",
    "SECRET_PLACEHOLDER",
    "SECRET_SETTINGS",
    "FoldsortBaseModel",
    "LLMSettings",
    "LogLevel",
    "ScanSettings",
    "UISettings",
    "LoggingSettings",
    "FoldsortConfig",
]
