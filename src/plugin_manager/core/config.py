"""
Plugin Manager configuration management.

Provides centralized configuration with validation using Pydantic.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = Path.home() / ".plugin_manager" / "config.json"


class LoggingConfig(BaseModel):
    """Configuration for structured logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    file_enabled: bool = False
    console_enabled: bool = True
    json_format: bool = False
    log_directory: Path = Field(
        default_factory=lambda: Path.home() / ".plugin_manager" / "logs"
    )

    @field_validator("log_directory", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        return Path(v).expanduser().resolve()


class PluginManagerConfig(BaseModel):
    """Main plugin manager configuration."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    scope: str | None = None
    plugin_modules: list[str] = Field(default_factory=list)
    plugin_directories: list[Path] = Field(default_factory=list)
    argument_groups: list[str] | None = None
    defaults: dict[str, Any] = Field(default_factory=dict)
    plugins: dict[str, dict[str, Any]] = Field(default_factory=dict)

    @field_validator("scope")
    @classmethod
    def strip_scope(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip().strip(".")
        return v or None

    @field_validator("plugin_directories", mode="before")
    @classmethod
    def expand_directories(cls, v: list[str | Path]) -> list[Path]:
        return [Path(p).expanduser().resolve() for p in v]

    @classmethod
    def load(cls, config_path: Path | None = None) -> PluginManagerConfig:
        """Load configuration from file or create default."""
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        if config_path.exists():
            with open(config_path) as f:
                data = json.load(f)
            return cls.model_validate(data)

        return cls()

    def save(self, config_path: Path | None = None) -> None:
        """Save configuration to file."""
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2, default=str)

    def plugin_options(self, overrides: dict[str, dict[str, Any]] | None = None) -> dict[str, dict[str, Any]]:
        """
        Merge per-plugin options from the file with overrides.

        Overrides (typically parsed from the command line) win per argument.
        """
        merged = {name: dict(options) for name, options in self.plugins.items()}
        for name, options in (overrides or {}).items():
            merged.setdefault(name, {}).update(options)
        return merged


def get_default_config() -> PluginManagerConfig:
    """Get the default configuration."""
    return PluginManagerConfig()


def load_config(config_path: Path | None = None) -> PluginManagerConfig:
    """Load or create configuration."""
    config = PluginManagerConfig.load(config_path)
    if config.logging.file_enabled:
        config.logging.log_directory.mkdir(parents=True, exist_ok=True)
    return config
