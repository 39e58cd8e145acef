"""Unit tests for configuration loading and validation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import platformdirs
import pytest
from pydantic import ValidationError

from excavate.config import _DEFAULT_CONFIG_DIR, DetectionSettings, Settings

if TYPE_CHECKING:
    from pathlib import Path


class TestDefaults:
    def test_default_config_dir_matches_platformdirs(self) -> None:
        assert platformdirs.user_config_dir("excavate") == _DEFAULT_CONFIG_DIR

    def test_detection_defaults(self) -> None:
        settings = DetectionSettings()
        assert settings.runtime_key == "node"
        assert settings.script_runner == "npm"
        assert settings.package_executor == "npx"
        assert settings.default_age_years == 3.0

    def test_registry_defaults_to_bundled_document(self) -> None:
        assert Settings().registry.path is None


class TestEnvironmentOverrides:
    def test_nested_env_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EXCAVATE__DETECTION__SCRIPT_RUNNER", "yarn")
        monkeypatch.setenv("EXCAVATE__LOGGING__LEVEL", "DEBUG")
        settings = Settings()
        assert settings.detection.script_runner == "yarn"
        assert settings.logging.level == "DEBUG"

    def test_init_args_beat_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("EXCAVATE__REGISTRY__PATH", "/from/env.json")
        settings = Settings(registry={"path": str(tmp_path / "init.json")})
        assert settings.registry.path == str(tmp_path / "init.json")


class TestConfigValidation:
    def test_wrong_type_raises_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            Settings(detection={"default_age_years": "old"})  # type: ignore[arg-type]

    def test_unknown_top_level_field_raises_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            Settings(completely_unknown_field="oops")  # type: ignore[call-arg]

    def test_unknown_nested_field_raises_validation_error(self) -> None:
        """A typo like 'script_runer' is caught instead of silently using the default."""
        with pytest.raises(ValidationError):
            DetectionSettings(script_runer="yarn")  # type: ignore[call-arg]

    def test_invalid_log_format(self) -> None:
        with pytest.raises(ValidationError):
            Settings(logging={"format": "xml"})  # type: ignore[arg-type]
