"""Utilities for console logging and request path checks."""

__all__ = (
    "console",
    "is_framework_path",
    "is_not_framework_path",
    "log_fail",
    "log_info",
    "log_success",
    "log_warn",
)

from typing import TYPE_CHECKING

from litestar.cli._utils import console  # pyright: ignore[reportPrivateImportUsage]

from litestar_blazor.config._constants import FRAMEWORK_PATH_PREFIX

if TYPE_CHECKING:
    from litestar.types import Scope

_TICK = "[bold green]✓[/]"
_INFO = "[cyan]•[/]"
_WARN = "[yellow]![/]"
_FAIL = "[red]x[/]"


def log_success(message: str) -> None:
    """Print a success message with consistent styling."""

    console.print(f"{_TICK} {message}")


def log_info(message: str) -> None:
    """Print an informational message with consistent styling."""

    console.print(f"{_INFO} {message}")


def log_warn(message: str) -> None:
    """Print a warning message with consistent styling."""

    console.print(f"{_WARN} {message}")


def log_fail(message: str) -> None:
    """Print an error message with consistent styling."""

    console.print(f"{_FAIL} {message}")


def is_framework_path(path: str) -> bool:
    """Check if a request path lies in the reserved client runtime namespace.

    Matching is per path segment and case-insensitive, so ``/_framework`` and
    ``/_Framework/blazor.boot.json`` match while ``/_frameworks`` does not.

    Args:
        path: Incoming request path.

    Returns:
        True when ``path`` is ``/_framework`` or a descendant of it.
    """
    lowered = path.lower()
    return lowered == FRAMEWORK_PATH_PREFIX or lowered.startswith(f"{FRAMEWORK_PATH_PREFIX}/")


def is_not_framework_path(scope: "Scope") -> bool:
    """Stage predicate guarding the SPA fallback.

    Returns:
        True when the request path is outside ``/_framework``.
    """
    return not is_framework_path(scope.get("path", "/"))
