"""Shared fixtures: on-disk repository checkouts and registry documents."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Protocol

import pytest

if TYPE_CHECKING:
    from pathlib import Path


class RepoFactory(Protocol):
    def __call__(
        self, manifest: dict[str, Any] | str | None = None, files: dict[str, str] | None = None
    ) -> Path: ...


@pytest.fixture()
def make_repo(tmp_path: Path) -> RepoFactory:
    """Build a repository checkout under tmp_path.

    ``manifest`` is written to package.json (dicts are JSON-encoded, strings
    written verbatim so malformed manifests can be simulated). ``files`` maps
    relative paths to contents.
    """
    counter = 0

    def _make(
        manifest: dict[str, Any] | str | None = None, files: dict[str, str] | None = None
    ) -> Path:
        nonlocal counter
        counter += 1
        repo = tmp_path / f"repo{counter}"
        repo.mkdir()
        if manifest is not None:
            content = manifest if isinstance(manifest, str) else json.dumps(manifest, indent=2)
            (repo / "package.json").write_text(content, encoding="utf-8")
        for relative, content in (files or {}).items():
            target = repo / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        return repo

    return _make


@pytest.fixture()
def registry_document() -> dict[str, Any]:
    return {
        "version": "1.0.0",
        "lastUpdated": "2024-06-01T00:00:00Z",
        "replacements": [
            {
                "oldName": "node-sass",
                "newName": "sass",
                "versionMapping": {"*": "^1.69.0"},
                "requiresCodeChanges": False,
            }
        ],
        "architectureIncompatible": [
            {
                "packageName": "phantomjs",
                "incompatibleArchitectures": ["arm64"],
                "replacement": "puppeteer",
                "reason": "No ARM64 binaries",
            }
        ],
        "knownDeadUrls": ["github.com/substack/querystring"],
        "deadUrlPatterns": [
            {
                "pattern": "github.com/substack/querystring/*",
                "replacementPackage": "query-string",
                "replacementVersion": "^7.1.3",
                "reason": "Repository removed",
            },
            {
                "pattern": "github.com/substack/*",
                "replacementPackage": "generic-substack",
                "replacementVersion": None,
                "reason": "Owner account removed",
            },
        ],
    }


@pytest.fixture()
def registry_path(tmp_path: Path, registry_document: dict[str, Any]) -> Path:
    path = tmp_path / "registry.json"
    path.write_text(json.dumps(registry_document), encoding="utf-8")
    return path
