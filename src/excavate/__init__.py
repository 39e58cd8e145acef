"""Infer the historical build environment of an unmaintained repository."""

from __future__ import annotations

from excavate.build_config import BuildConfigDetector
from excavate.errors import ErrorCode, ExcavateError
from excavate.registry import PatternRegistry
from excavate.runtime_version import (
    RuntimeVersionDetector,
    docker_image,
    is_valid_version,
    major_version,
)

__version__ = "0.1.0"

__all__ = [
    "BuildConfigDetector",
    "RuntimeVersionDetector",
    "PatternRegistry",
    "ErrorCode",
    "ExcavateError",
    "is_valid_version",
    "major_version",
    "docker_image",
]
