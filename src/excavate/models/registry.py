from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

# Registry documents use camelCase keys on disk.
_DOCUMENT_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class PackageReplacement(BaseModel):
    """Deprecated package and the modern package that supersedes it."""

    model_config = _DOCUMENT_CONFIG

    old_name: str
    new_name: str
    version_mapping: dict[str, str]  # old version range -> new version range
    requires_code_changes: bool
    code_change_description: str | None = None

    @field_validator("old_name", "new_name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("package name must not be empty")
        return v


class ArchitectureIncompatibleEntry(BaseModel):
    """Package that ships no binaries for some CPU architectures."""

    model_config = _DOCUMENT_CONFIG

    package_name: str
    incompatible_architectures: tuple[str, ...]
    replacement: str | None = None
    reason: str


class DeadUrlPattern(BaseModel):
    """Glob-style locator template for a source that no longer resolves."""

    model_config = _DOCUMENT_CONFIG

    pattern: str  # "*" matches any run of characters, "/" included
    replacement_package: str | None = None
    replacement_version: str | None = None
    reason: str

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        if not v:
            raise ValueError("pattern must not be empty")
        return v


class RegistryDocument(BaseModel):
    """Top-level schema of the dead-source registry JSON document."""

    model_config = _DOCUMENT_CONFIG

    version: str
    last_updated: datetime
    replacements: tuple[PackageReplacement, ...]
    architecture_incompatible: tuple[ArchitectureIncompatibleEntry, ...]
    known_dead_urls: tuple[str, ...]
    # Document order is significant: the first matching pattern wins.
    dead_url_patterns: tuple[DeadUrlPattern, ...] = ()
