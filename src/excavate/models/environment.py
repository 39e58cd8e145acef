from __future__ import annotations

import re
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+$")


class VersionSource(StrEnum):
    MANIFEST_ENGINES = "manifest_engines"
    VERSION_FILE = "version_file"
    CI_CONFIG = "ci_config"
    DEFAULT = "default"


class BuildTool(StrEnum):
    WEBPACK = "webpack"
    VITE = "vite"
    TSC = "tsc"
    ROLLUP = "rollup"
    ESBUILD = "esbuild"
    PARCEL = "parcel"
    GULP = "gulp"
    GRUNT = "grunt"
    NONE = "none"


class RuntimeVersionInfo(BaseModel):
    """Best-guess runtime version for a repository checkout."""

    model_config = ConfigDict(frozen=True)

    version: str  # "major.minor.patch"
    confidence: float = Field(ge=0.0, le=1.0)
    source: VersionSource
    details: str | None = None

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        if not _VERSION_RE.match(v):
            raise ValueError(f"Version must be major.minor.patch: {v!r}")
        return v


class BuildConfiguration(BaseModel):
    """How (and whether) a repository is built before it can run."""

    model_config = ConfigDict(frozen=True)

    has_build_step: bool = False
    build_command: str | None = None
    build_tool: BuildTool = BuildTool.NONE
    requires_compilation: bool = False

    @model_validator(mode="after")
    def validate_build_command(self) -> BuildConfiguration:
        if self.has_build_step and not self.build_command:
            raise ValueError("build_command must be set when has_build_step is true")
        return self
