"""Runtime execution settings."""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from litestar_blazor.config._constants import TRUE_VALUES

__all__ = ("RuntimeConfig", "resolve_application_name")


def resolve_application_name() -> str:
    """Resolve the identity of the running process.

    Reads BLAZOR_APPLICATION_NAME, falling back to the name of the executable
    that started the process (``litestar``, ``uvicorn``, ``litestar-blazor`` ...).

    Returns:
        The application name.
    """
    env_value = os.getenv("BLAZOR_APPLICATION_NAME", "").strip()
    if env_value:
        return env_value
    return Path(sys.argv[0]).stem if sys.argv and sys.argv[0] else ""


@dataclass
class RuntimeConfig:
    """Runtime execution settings.

    Attributes:
        dev_mode: Whether the host runs in development mode. Auto-rebuild only runs in dev mode.
            Can also be set via the BLAZOR_DEV_MODE environment variable.
        application_name: Process identity, compared with the standalone dev server name
            to choose the auto-rebuild strategy.
        rebuild_command: Command run in-process when client sources change.
            Defaults to ``dotnet build <project>``.
        watch_command: Long-running command started by the standalone dev server.
            Defaults to ``dotnet watch --project <project> build``.
        rebuild_poll_interval: Minimum number of seconds between two source scans.
    """

    dev_mode: bool = field(default_factory=lambda: os.getenv("BLAZOR_DEV_MODE", "False") in TRUE_VALUES)
    application_name: str = field(default_factory=resolve_application_name)
    rebuild_command: "list[str] | None" = None
    watch_command: "list[str] | None" = None
    rebuild_poll_interval: float = 1.0
