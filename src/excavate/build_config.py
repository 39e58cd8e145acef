"""Build configuration detection.

Three passes run in order over a repository checkout:

  A. package.json scripts     - an explicit build script always wins
  B. TypeScript dependency    - implies a compilation step
  C. Tool config files        - bundler / task runner / tsconfig on disk

A command or tool chosen by an earlier pass is never overwritten by a later
one. Every table below is ordered; earlier entries take precedence.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from excavate.config import DetectionSettings
from excavate.manifest import load_manifest
from excavate.models.environment import BuildConfiguration, BuildTool

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from excavate.models.manifest import PackageManifest

log = structlog.get_logger()

BUILD_SCRIPT_NAMES: tuple[str, ...] = (
    "build",
    "compile",
    "prepare",
    "prepublish",
    "prepublishOnly",
)

# Searched as substrings of the chosen script's command text.
SCRIPT_TOOLS: tuple[BuildTool, ...] = (
    BuildTool.WEBPACK,
    BuildTool.VITE,
    BuildTool.TSC,
    BuildTool.ROLLUP,
    BuildTool.ESBUILD,
    BuildTool.PARCEL,
)

COMPILER_PACKAGE = "typescript"

CONFIG_FILES: tuple[tuple[str, BuildTool], ...] = (
    ("webpack.config.js", BuildTool.WEBPACK),
    ("webpack.config.ts", BuildTool.WEBPACK),
    ("vite.config.js", BuildTool.VITE),
    ("vite.config.ts", BuildTool.VITE),
    ("rollup.config.js", BuildTool.ROLLUP),
    ("gulpfile.js", BuildTool.GULP),
    ("Gruntfile.js", BuildTool.GRUNT),
    ("tsconfig.json", BuildTool.TSC),
)

BUNDLERS = frozenset({BuildTool.WEBPACK, BuildTool.VITE, BuildTool.ROLLUP})
TASK_RUNNERS = frozenset({BuildTool.GULP, BuildTool.GRUNT})
COMPILING_TOOLS = BUNDLERS | {BuildTool.TSC}


@dataclass
class _BuildState:
    """Mutable accumulator threaded through the detection passes."""

    has_build_step: bool = False
    build_command: str | None = None
    build_tool: BuildTool = BuildTool.NONE
    requires_compilation: bool = False

    def freeze(self) -> BuildConfiguration:
        return BuildConfiguration(
            has_build_step=self.has_build_step,
            build_command=self.build_command,
            build_tool=self.build_tool,
            requires_compilation=self.requires_compilation,
        )


def infer_script_tool(command: str) -> BuildTool:
    """First known tool whose name appears in ``command``."""
    for tool in SCRIPT_TOOLS:
        if tool.value in command:
            return tool
    return BuildTool.NONE


class BuildConfigDetector:
    """Decide whether a repository needs a build step, and how to run it."""

    def __init__(
        self,
        settings: DetectionSettings | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._settings = settings or DetectionSettings()
        self._log = logger or log

    def detect(self, repo_path: str | Path) -> BuildConfiguration:
        """Inspect the checkout. Never raises; no signal yields an empty configuration."""
        repo_path = Path(repo_path)
        self._log.info("build_detection_started", repo=str(repo_path))

        state = _BuildState()
        manifest = load_manifest(repo_path, self._log)
        if manifest is not None:
            self._apply_scripts(manifest, state)
            self._apply_compiler_dependency(manifest, state)
        self._apply_config_files(repo_path, state)

        config = state.freeze()
        self._log.info(
            "build_configuration_detected",
            has_build_step=config.has_build_step,
            build_command=config.build_command,
            build_tool=config.build_tool.value,
            requires_compilation=config.requires_compilation,
        )
        return config

    def _executor_command(self, tool: BuildTool, *args: str) -> str:
        return " ".join((self._settings.package_executor, tool.value, *args))

    def _is_file(self, path: Path) -> bool:
        """Existence check that treats an inaccessible path as absent."""
        try:
            return path.is_file()
        except OSError:
            self._log.debug("file_stat_error", path=str(path), exc_info=True)
            return False

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    def _apply_scripts(self, manifest: PackageManifest, state: _BuildState) -> None:
        for name in BUILD_SCRIPT_NAMES:
            command = manifest.scripts.get(name)
            if not command or not isinstance(command, str):
                continue

            state.has_build_step = True
            state.build_command = f"{self._settings.script_runner} run {name}"
            state.build_tool = infer_script_tool(command)
            self._log.info("build_script_found", script=name, command=command)
            return

    def _apply_compiler_dependency(self, manifest: PackageManifest, state: _BuildState) -> None:
        if not manifest.has_dependency(COMPILER_PACKAGE):
            return

        state.requires_compilation = True
        if state.build_tool is BuildTool.NONE:
            state.build_tool = BuildTool.TSC
        if not state.has_build_step:
            state.has_build_step = True
            state.build_command = self._executor_command(BuildTool.TSC)

    def _apply_config_files(self, repo_path: Path, state: _BuildState) -> None:
        for filename, tool in CONFIG_FILES:
            if not self._is_file(repo_path / filename):
                continue

            self._log.info("build_config_file_found", file=filename, tool=tool.value)

            if state.build_tool is BuildTool.NONE:
                state.build_tool = tool
            if tool in COMPILING_TOOLS:
                state.requires_compilation = True

            if state.has_build_step:
                continue
            state.has_build_step = True
            if tool in BUNDLERS:
                state.build_command = self._executor_command(tool, "build")
            elif tool in TASK_RUNNERS:
                state.build_command = self._executor_command(tool)
            else:
                state.build_command = self._executor_command(BuildTool.TSC)
