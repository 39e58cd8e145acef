"""Dead-source registry: loading and locator pattern matching.

The registry document is read once per instance, validated, and its
``deadUrlPatterns`` compiled into anchored regexes. After that the instance
is read-only: every query is a pure function of the loaded document and the
input, so repeated calls always agree.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from excavate.errors import ErrorCode, ExcavateError
from excavate.models.registry import RegistryDocument

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from excavate.config import Settings
    from excavate.models.registry import (
        ArchitectureIncompatibleEntry,
        DeadUrlPattern,
        PackageReplacement,
    )

log = structlog.get_logger()

BUNDLED_REGISTRY_PATH = Path(__file__).parent / "data" / "dead-source-registry.json"


def compile_pattern(template: str) -> re.Pattern[str]:
    """Translate a ``*`` template into a regex meant for ``fullmatch``.

    Everything except ``*`` is literal; ``*`` matches any run of characters,
    path separators included.
    """
    return re.compile(".*".join(re.escape(part) for part in template.split("*")), re.DOTALL)


@dataclass(frozen=True)
class CompiledPattern:
    """Registry entry paired with its compiled matcher."""

    entry: DeadUrlPattern
    regex: re.Pattern[str]

    def matches(self, locator: str) -> bool:
        return self.regex.fullmatch(locator) is not None


class PatternRegistry:
    """Known-dead package sources and their replacements."""

    def __init__(
        self,
        path: str | Path | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._path = Path(path) if path is not None else BUNDLED_REGISTRY_PATH
        self._log = logger or log
        self._document: RegistryDocument | None = None
        self._patterns: tuple[CompiledPattern, ...] = ()

    @classmethod
    def default(cls, logger: FilteringBoundLogger | None = None) -> PatternRegistry:
        """Registry over the document bundled with the package."""
        return cls(BUNDLED_REGISTRY_PATH, logger)

    @classmethod
    def from_settings(
        cls, settings: Settings, logger: FilteringBoundLogger | None = None
    ) -> PatternRegistry:
        return cls(settings.registry.path, logger)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def loaded(self) -> bool:
        return self._document is not None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, path: str | Path | None = None) -> RegistryDocument:
        """Read and validate the registry document, returning it.

        Idempotent: once a document is loaded, later calls return it unchanged.

        Raises:
            ExcavateError: ``REGISTRY_LOAD_FAILED`` if the file cannot be read,
                ``REGISTRY_INVALID`` if it is not valid JSON or violates the schema.
        """
        if self._document is not None:
            return self._document
        if path is not None:
            self._path = Path(path)

        try:
            content = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            self._log.error("registry_load_failed", path=str(self._path), exc_info=True)
            raise ExcavateError(
                ErrorCode.REGISTRY_LOAD_FAILED,
                f"Could not read registry document {self._path}: {exc}",
            ) from exc

        try:
            document = RegistryDocument.model_validate(json.loads(content))
        except (json.JSONDecodeError, ValidationError) as exc:
            self._log.error("registry_invalid", path=str(self._path), exc_info=True)
            raise ExcavateError(
                ErrorCode.REGISTRY_INVALID,
                f"Registry document {self._path} is invalid: {exc}",
            ) from exc

        self._patterns = tuple(
            CompiledPattern(entry=entry, regex=compile_pattern(entry.pattern))
            for entry in document.dead_url_patterns
        )
        self._document = document
        self._log.info(
            "registry_loaded",
            path=str(self._path),
            version=document.version,
            dead_url_patterns=len(self._patterns),
            replacements=len(document.replacements),
        )
        return document

    def _require_document(self) -> RegistryDocument:
        if self._document is None:
            return self.load()
        return self._document

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def matches_dead_pattern(self, locator: str) -> DeadUrlPattern | None:
        """First pattern, in document order, whose template matches ``locator`` in full."""
        self._require_document()
        for compiled in self._patterns:
            if compiled.matches(locator):
                self._log.info(
                    "dead_url_pattern_matched", locator=locator, pattern=compiled.entry.pattern
                )
                return compiled.entry
        return None

    def lookup(self, package_name: str) -> PackageReplacement | None:
        """Replacement recorded for a deprecated package, if any."""
        for replacement in self._require_document().replacements:
            if replacement.old_name == package_name:
                return replacement
        return None

    def incompatible_with(
        self, package_name: str, architecture: str
    ) -> ArchitectureIncompatibleEntry | None:
        """Entry explaining why ``package_name`` cannot run on ``architecture``."""
        for entry in self._require_document().architecture_incompatible:
            if entry.package_name != package_name:
                continue
            if architecture in entry.incompatible_architectures:
                return entry
        return None

    def is_known_dead_url(self, locator: str) -> bool:
        """True if ``locator`` contains one of the exact dead URLs listed in the document."""
        return any(dead in locator for dead in self._require_document().known_dead_urls)

    @property
    def version(self) -> str:
        return self._require_document().version

    @property
    def replacements(self) -> tuple[PackageReplacement, ...]:
        return self._require_document().replacements

    @property
    def architecture_incompatible(self) -> tuple[ArchitectureIncompatibleEntry, ...]:
        return self._require_document().architecture_incompatible

    @property
    def known_dead_urls(self) -> tuple[str, ...]:
        return self._require_document().known_dead_urls

    @property
    def dead_url_patterns(self) -> tuple[DeadUrlPattern, ...]:
        return self._require_document().dead_url_patterns
