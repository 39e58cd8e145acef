"""Read-only filesystem access for repository checkouts.

Absence is a normal outcome here: every reader returns ``None`` instead of
raising when a file is missing, unreadable or malformed. Failures are logged
at debug level so they remain observable.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from excavate.models.manifest import PackageManifest

if TYPE_CHECKING:
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger

log = structlog.get_logger()

MANIFEST_FILENAME = "package.json"


def read_text(path: Path, logger: FilteringBoundLogger | None = None) -> str | None:
    """Return the file's text, or ``None`` if it is absent or unreadable."""
    logger = logger or log
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError):
        logger.debug("file_read_error", path=str(path), exc_info=True)
        return None


def load_manifest(
    repo_path: Path, logger: FilteringBoundLogger | None = None
) -> PackageManifest | None:
    """Parse ``package.json`` at the repository root.

    Returns ``None`` when the manifest is missing, is not valid JSON, or its
    root is not an object. A section of the wrong type reads as empty.
    """
    logger = logger or log
    manifest_path = repo_path / MANIFEST_FILENAME
    content = read_text(manifest_path, logger)
    if content is None:
        return None

    try:
        return PackageManifest.model_validate(json.loads(content))
    except (json.JSONDecodeError, ValidationError):
        logger.debug("manifest_parse_error", path=str(manifest_path), exc_info=True)
        return None
