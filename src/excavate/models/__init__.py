from __future__ import annotations

from excavate.models.environment import (
    BuildConfiguration,
    BuildTool,
    RuntimeVersionInfo,
    VersionSource,
)
from excavate.models.manifest import PackageManifest
from excavate.models.registry import (
    ArchitectureIncompatibleEntry,
    DeadUrlPattern,
    PackageReplacement,
    RegistryDocument,
)

__all__ = [
    # environment
    "RuntimeVersionInfo",
    "VersionSource",
    "BuildConfiguration",
    "BuildTool",
    # manifest
    "PackageManifest",
    # registry
    "RegistryDocument",
    "PackageReplacement",
    "ArchitectureIncompatibleEntry",
    "DeadUrlPattern",
]
