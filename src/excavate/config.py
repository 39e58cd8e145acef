"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Constructor arguments
  2. Environment variables  (EXCAVATE__DETECTION__SCRIPT_RUNNER=yarn)
  3. excavate.yaml          (searched in cwd, then the platform config dir)
  4. Hardcoded defaults

The config file is optional; all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_CONFIG_FILENAME = "excavate.yaml"
_DEFAULT_CONFIG_DIR = platformdirs.user_config_dir("excavate")


def _find_config_file() -> str | None:
    """Return the path of the first excavate.yaml found, or None."""
    candidates = [
        Path(_CONFIG_FILENAME),
        Path(_DEFAULT_CONFIG_DIR) / _CONFIG_FILENAME,
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class DetectionSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Key under package.json "engines" holding the runtime constraint
    runtime_key: str = "node"
    # Used as "<script_runner> run <script>"
    script_runner: str = "npm"
    # Used to invoke tool binaries directly, e.g. "npx tsc"
    package_executor: str = "npx"
    # Repository age assumed when no last-activity date is known
    default_age_years: float = 3.0


class RegistrySettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # None selects the registry document bundled with the package
    path: str | None = None


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: EXCAVATE__LOGGING__LEVEL=DEBUG
        env_prefix="EXCAVATE__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    detection: DetectionSettings = DetectionSettings()
    registry: RegistrySettings = RegistrySettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
