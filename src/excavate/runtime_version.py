"""Historical runtime (Node.js) version detection.

Strategies are tried in a fixed order and the first one that produces a
version wins. The order is part of the contract: a manifest ``engines``
constraint always beats ``.nvmrc``, which always beats CI configuration.
When nothing is found, the version is guessed from the repository's age.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from excavate.config import DetectionSettings
from excavate.manifest import load_manifest, read_text
from excavate.models.environment import RuntimeVersionInfo, VersionSource

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

log = structlog.get_logger()

VERSION_FILE = ".nvmrc"
LTS_PREFIX = "lts/"

# Latest release of each LTS line, oldest first.
LTS_CODENAMES: tuple[tuple[str, str], ...] = (
    ("argon", "4.9.1"),
    ("boron", "6.17.1"),
    ("carbon", "8.17.0"),
    ("dubnium", "10.24.1"),
    ("erbium", "12.22.12"),
    ("fermium", "14.21.3"),
    ("gallium", "16.20.2"),
    ("hydrogen", "18.19.0"),
    ("iron", "20.11.0"),
    ("jod", "22.11.0"),
)

CI_CONFIG_PATHS: tuple[str, ...] = (
    ".github/workflows/ci.yml",
    ".github/workflows/test.yml",
    ".github/workflows/main.yml",
    ".github/workflows/build.yml",
    ".github/workflows/node.js.yml",
    ".travis.yml",
    ".circleci/config.yml",
    ".gitlab-ci.yml",
    "azure-pipelines.yml",
    "appveyor.yml",
)

_VERSION_GROUPS = r"['\"]?(\d+)\.?(\d+)?\.?(\d+)?"

CI_VERSION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"node[-_]?version:\s*" + _VERSION_GROUPS, re.IGNORECASE),
    re.compile(r"node:\s*" + _VERSION_GROUPS, re.IGNORECASE),
    re.compile(r"setup-node@.*\n.*node-version:\s*" + _VERSION_GROUPS, re.IGNORECASE),
    re.compile(r"node_js:\s*\n\s*-\s*" + _VERSION_GROUPS, re.IGNORECASE),
)

# (exclusive upper bound in years, version); anything older gets the fallback.
AGE_BRACKETS: tuple[tuple[float, str], ...] = (
    (1, "20.11.0"),
    (2, "18.19.0"),
    (3, "16.20.2"),
    (4, "14.21.3"),
    (5, "12.22.12"),
)
OLDEST_FALLBACK = "10.24.1"

_VERSION_RUN_RE = re.compile(r"(\d+)\.?(\d+)?\.?(\d+)?")
_VALID_VERSION_RE = re.compile(r"\d+\.\d+\.\d+")
_LEADING_DIGITS_RE = re.compile(r"^(\d+)")
_YEAR = timedelta(days=365)

Strategy = Callable[[Path], RuntimeVersionInfo | None]


def is_valid_version(version: str) -> bool:
    """True iff ``version`` is exactly ``major.minor.patch``."""
    return _VALID_VERSION_RE.fullmatch(version) is not None


def major_version(version: str) -> int:
    """Leading numeric component of ``version``, or 0 if there is none."""
    match = _LEADING_DIGITS_RE.match(version)
    return int(match.group(1)) if match else 0


def docker_image(version: str) -> str:
    """Container image used to reproduce a build on ``version``."""
    return f"node:{version}-alpine"


def _normalize(match: re.Match[str]) -> str:
    major, minor, patch = match.group(1, 2, 3)
    return f"{major}.{minor or '0'}.{patch or '0'}"


def extract_version(text: str) -> str | None:
    """Normalize the first ``major[.minor[.patch]]`` run in ``text``."""
    match = _VERSION_RUN_RE.search(text)
    return _normalize(match) if match else None


def lookup_lts_codename(codename: str) -> str | None:
    codename = codename.lower()
    for name, version in LTS_CODENAMES:
        if name == codename:
            return version
    return None


class RuntimeVersionDetector:
    """Guess the runtime version a repository was developed against."""

    def __init__(
        self,
        settings: DetectionSettings | None = None,
        logger: FilteringBoundLogger | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings or DetectionSettings()
        self._log = logger or log
        self._clock = clock or (lambda: datetime.now(UTC))
        self._strategies: tuple[Strategy, ...] = (
            self._from_manifest_engines,
            self._from_version_file,
            self._from_ci_config,
        )

    def detect(
        self, repo_path: str | Path, last_activity: datetime | None = None
    ) -> RuntimeVersionInfo:
        """Run the strategy chain. Always returns a result."""
        repo_path = Path(repo_path)
        self._log.info("runtime_version_detection_started", repo=str(repo_path))

        for strategy in self._strategies:
            result = strategy(repo_path)
            if result is not None:
                self._log.info(
                    "runtime_version_detected",
                    version=result.version,
                    confidence=result.confidence,
                    source=result.source.value,
                )
                return result

        return self._default(last_activity)

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def _from_manifest_engines(self, repo_path: Path) -> RuntimeVersionInfo | None:
        manifest = load_manifest(repo_path, self._log)
        if manifest is None:
            return None

        constraint = manifest.engines.get(self._settings.runtime_key)
        if not isinstance(constraint, str):
            self._log.debug("engines_constraint_missing", key=self._settings.runtime_key)
            return None

        # ">=12.0.0", "^14.15.0" and "12.x" all reduce to their first version run
        version = extract_version(constraint)
        if version is None:
            self._log.debug("engines_constraint_unparseable", constraint=constraint)
            return None

        return RuntimeVersionInfo(
            version=version,
            confidence=0.9,
            source=VersionSource.MANIFEST_ENGINES,
            details=f"Parsed from engines.{self._settings.runtime_key}: {constraint}",
        )

    def _from_version_file(self, repo_path: Path) -> RuntimeVersionInfo | None:
        content = read_text(repo_path / VERSION_FILE, self._log)
        if content is None:
            return None

        pinned = content.strip()
        if pinned.startswith(LTS_PREFIX):
            codename = pinned.split("/")[1]
            version = lookup_lts_codename(codename)
            if version is None:
                self._log.debug("lts_codename_unknown", value=pinned)
                return None
            return RuntimeVersionInfo(
                version=version,
                confidence=0.8,
                source=VersionSource.VERSION_FILE,
                details=f"Mapped from LTS codename: {pinned}",
            )

        version = extract_version(pinned.removeprefix("v"))
        if version is None:
            self._log.debug("version_file_unparseable", value=pinned)
            return None

        return RuntimeVersionInfo(
            version=version,
            confidence=0.85,
            source=VersionSource.VERSION_FILE,
            details=f"Parsed from {VERSION_FILE}: {pinned}",
        )

    def _from_ci_config(self, repo_path: Path) -> RuntimeVersionInfo | None:
        for ci_file in CI_CONFIG_PATHS:
            content = read_text(repo_path / ci_file, self._log)
            if content is None:
                continue

            for pattern in CI_VERSION_PATTERNS:
                match = pattern.search(content)
                if match:
                    return RuntimeVersionInfo(
                        version=_normalize(match),
                        confidence=0.7,
                        source=VersionSource.CI_CONFIG,
                        details=f"Found in CI configuration: {ci_file}",
                    )

        return None

    def _default(self, last_activity: datetime | None) -> RuntimeVersionInfo:
        if last_activity is None:
            years = self._settings.default_age_years
        else:
            if last_activity.tzinfo is None:
                last_activity = last_activity.replace(tzinfo=UTC)
            years = (self._clock() - last_activity) / _YEAR

        version = OLDEST_FALLBACK
        for upper_bound, candidate in AGE_BRACKETS:
            if years < upper_bound:
                version = candidate
                break

        self._log.warning("runtime_version_defaulted", version=version, age_years=round(years, 1))

        return RuntimeVersionInfo(
            version=version,
            confidence=0.3,
            source=VersionSource.DEFAULT,
            details=f"Estimated based on repository age (~{years:.1f} years)",
        )
