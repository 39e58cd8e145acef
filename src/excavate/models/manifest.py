from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PackageManifest(BaseModel):
    """The parts of package.json read during detection. Other keys are ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    engines: dict[str, Any] = {}
    scripts: dict[str, Any] = {}
    dependencies: dict[str, Any] = {}
    dev_dependencies: dict[str, Any] = Field(default={}, alias="devDependencies")

    @field_validator("engines", "scripts", "dependencies", "dev_dependencies", mode="before")
    @classmethod
    def non_object_as_empty(cls, v: Any) -> Any:
        # Legacy manifests carry forms like "engines": ["node >= 0.8"]; one bad
        # section must not hide the others.
        return v if isinstance(v, dict) else {}

    def has_dependency(self, name: str) -> bool:
        """True if ``name`` is declared (with a non-empty range) as a direct or dev dependency."""
        return bool(self.dependencies.get(name) or self.dev_dependencies.get(name))
