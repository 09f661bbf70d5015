"""Automatic rebuilding of the client application during development.

Two strategies exist:

- ``EMBEDDED``: the client is served from a regular host application. A pipeline
  stage notices changed client sources on incoming requests and runs a build
  before the request is served.
- ``STANDALONE_DEV_SERVER``: the process is the ``litestar-blazor`` dev server
  itself, which keeps a watch build running next to it for its whole lifetime.
"""

import logging
import os
import time
from contextlib import asynccontextmanager
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

import anyio
from anyio import to_thread
from litestar.enums import ScopeType

from litestar_blazor.config._constants import DEV_SERVER_APPLICATION_NAME, DIST_DIR_NAME
from litestar_blazor.pipeline import NOT_FOUND
from litestar_blazor.process import RebuildProcess
from litestar_blazor.utils import log_fail, log_info, log_success, log_warn

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence

    from litestar import Litestar
    from litestar.types import Scope

    from litestar_blazor.config import BuildConfig, RuntimeConfig
    from litestar_blazor.pipeline import PipelineBuilder, StageResult

__all__ = (
    "AutoRebuildStrategy",
    "DevServerAutoRebuild",
    "HostedAutoRebuildStage",
    "select_auto_rebuild_strategy",
    "use_auto_rebuild",
)

logger = logging.getLogger("litestar_blazor")

_IGNORED_DIRS = frozenset({"bin", "obj", DIST_DIR_NAME, "node_modules", "__pycache__"})


class AutoRebuildStrategy(str, Enum):
    EMBEDDED = "embedded"
    STANDALONE_DEV_SERVER = "standalone-dev-server"


def select_auto_rebuild_strategy(application_name: str) -> AutoRebuildStrategy:
    """Pick the auto-rebuild strategy from the process identity.

    Args:
        application_name: Name of the running application.

    Returns:
        ``STANDALONE_DEV_SERVER`` when running as the dev server, otherwise ``EMBEDDED``.
    """
    if application_name.casefold() == DEV_SERVER_APPLICATION_NAME.casefold():
        return AutoRebuildStrategy.STANDALONE_DEV_SERVER
    return AutoRebuildStrategy.EMBEDDED


def default_rebuild_command(project: Path) -> "list[str]":
    return ["dotnet", "build", str(project)]


def default_watch_command(project: Path) -> "list[str]":
    return ["dotnet", "watch", "--project", str(project), "build"]


def use_auto_rebuild(
    builder: "PipelineBuilder", config: "BuildConfig", runtime: "RuntimeConfig"
) -> "AutoRebuildStrategy | None":
    """Attach the auto-rebuild strategy that fits the running process.

    Args:
        builder: The pipeline being composed.
        config: The client build configuration.
        runtime: Runtime settings.

    Returns:
        The attached strategy, or None when the descriptor names no source project.
    """
    project = config.source_project_path
    source_dir = config.source_project_dir
    if project is None or source_dir is None:
        log_warn("Auto-rebuild is enabled but the build descriptor names no source project; skipping")
        return None

    strategy = select_auto_rebuild_strategy(runtime.application_name)
    if strategy is AutoRebuildStrategy.STANDALONE_DEV_SERVER:
        command = runtime.watch_command or default_watch_command(project)
        builder.add_lifespan(DevServerAutoRebuild(command, cwd=source_dir).lifespan)
    else:
        command = runtime.rebuild_command or default_rebuild_command(project)
        builder.use(HostedAutoRebuildStage(source_dir, command, poll_interval=runtime.rebuild_poll_interval))
    log_info(f"Auto-rebuild enabled ({strategy.value}): {' '.join(command)}")
    return strategy


class HostedAutoRebuildStage:
    """Rebuild the client before serving when its sources changed.

    The stage never answers a request itself; it only makes sure the files the
    following stages serve are fresh.
    """

    __slots__ = ("_built_at", "_checked_at", "_lock", "command", "name", "poll_interval", "source_dir")

    def __init__(
        self,
        source_dir: Path,
        command: "Sequence[str]",
        poll_interval: float = 1.0,
        name: str = "auto-rebuild",
    ) -> None:
        self.source_dir = source_dir
        self.command = list(command)
        self.poll_interval = poll_interval
        self.name = name
        self._built_at: "float | None" = None
        self._checked_at: "float | None" = None
        self._lock: "anyio.Lock | None" = None

    async def __call__(self, scope: "Scope") -> "StageResult":
        if scope["type"] == ScopeType.HTTP:
            await self.rebuild_if_changed()
        return NOT_FOUND

    async def rebuild_if_changed(self) -> bool:
        """Run the build command when a source file is newer than the last build.

        Requests arriving while a scan or build is running wait for it, so they are
        served the rebuilt output.

        Returns:
            True if a build was run.
        """
        if self._lock is None:
            self._lock = anyio.Lock()
        async with self._lock:
            now = time.monotonic()
            if self._checked_at is not None and now - self._checked_at < self.poll_interval:
                return False
            self._checked_at = now

            latest = await to_thread.run_sync(self.latest_source_mtime)
            if self._built_at is None:
                self._built_at = latest
                return False
            if latest <= self._built_at:
                return False
            await self._build()
            self._built_at = latest
        return True

    async def _build(self) -> None:
        log_info(f"Client sources changed, rebuilding: {' '.join(self.command)}")
        try:
            result = await anyio.run_process(self.command, cwd=self.source_dir, check=False)
        except OSError as e:
            log_fail(f"Rebuild could not start: {e!s}")
            return
        if result.returncode != 0:
            stderr = result.stderr.decode(errors="ignore") if result.stderr else ""
            log_fail(f"Rebuild failed (exit {result.returncode})")
            logger.warning("Rebuild output:\n%s", stderr or result.stdout.decode(errors="ignore"))
            return
        log_success("Rebuild finished")

    def latest_source_mtime(self) -> float:
        """Scan the source directory for the newest modification time.

        Returns:
            The newest mtime, or 0.0 when the directory is empty or missing.
        """
        latest = 0.0
        for dirpath, dirnames, filenames in os.walk(self.source_dir):
            dirnames[:] = [d for d in dirnames if d not in _IGNORED_DIRS and not d.startswith(".")]
            for filename in filenames:
                try:
                    latest = max(latest, os.stat(os.path.join(dirpath, filename)).st_mtime)  # noqa: PTH116, PTH118
                except OSError:
                    continue
        return latest


class DevServerAutoRebuild:
    """Keep a watch build running for the lifetime of the dev server."""

    __slots__ = ("command", "cwd", "process")

    def __init__(self, command: "Sequence[str]", cwd: Path) -> None:
        self.command = list(command)
        self.cwd = cwd
        self.process = RebuildProcess()

    @asynccontextmanager
    async def lifespan(self, app: "Litestar") -> "AsyncIterator[None]":
        """Start the watch build on startup and stop it on shutdown.

        Yields:
            None
        """
        self.process.start(self.command, self.cwd)
        log_success("Watch build started")
        try:
            yield
        finally:
            self.process.stop()
            log_info("Watch build stopped.")
