"""Build descriptor loading.

The client build writes a small descriptor next to the client assembly. Two shapes
are understood:

- the line format written by the client build tooling, where the first line is
  the source project path (``.`` meaning the assembly itself), the second line is the
  output assembly path relative to the project directory, and ``autorebuild:true`` /
  ``debug:true`` lines toggle the feature flags;
- a JSON object with ``distPath``, ``webRootPath``, ``sourceProjectPath``,
  ``autoRebuild`` and ``debug`` keys.

Only those fields are consumed; anything else in the descriptor is ignored.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

from litestar.exceptions import SerializationException
from litestar.serialization import decode_json

from litestar_blazor.config._constants import (
    AUTO_REBUILD_FLAG,
    DEBUG_FLAG,
    DESCRIPTOR_SUFFIX,
    DIST_DIR_NAME,
    WEB_ROOT_DIR_NAME,
)
from litestar_blazor.exceptions import ConfigMalformedError, ConfigNotFoundError

__all__ = ("BuildConfig", "descriptor_path_for", "resolve_build_config")


@dataclass(frozen=True)
class BuildConfig:
    """Paths and feature flags derived from the client build descriptor.

    Attributes:
        dist_path: Directory holding the built client application.
        web_root_path: Secondary static root served from source, or None when absent.
        enable_auto_rebuild: Whether the client should be rebuilt when its sources change.
        enable_debugging: Whether debug symbols and the debugger proxy are enabled.
        source_project_path: Client project file or directory, used by auto-rebuild.
        descriptor_path: The descriptor this configuration was read from.
    """

    dist_path: Path
    web_root_path: "Path | None" = None
    enable_auto_rebuild: bool = False
    enable_debugging: bool = False
    source_project_path: "Path | None" = None
    descriptor_path: "Path | None" = None

    def __post_init__(self) -> None:
        """Normalize path types to Path objects; an empty web root means none."""
        if isinstance(self.dist_path, str):
            object.__setattr__(self, "dist_path", Path(self.dist_path))
        if isinstance(self.web_root_path, str):
            object.__setattr__(self, "web_root_path", Path(self.web_root_path) if self.web_root_path else None)
        if isinstance(self.source_project_path, str):
            object.__setattr__(self, "source_project_path", Path(self.source_project_path))
        if isinstance(self.descriptor_path, str):
            object.__setattr__(self, "descriptor_path", Path(self.descriptor_path))

    @property
    def source_project_dir(self) -> "Path | None":
        """Directory containing the client sources.

        Returns:
            The project directory, or None when the descriptor did not name a project.
        """
        if self.source_project_path is None:
            return None
        if self.source_project_path.suffix and not self.source_project_path.is_dir():
            return self.source_project_path.parent
        return self.source_project_path


def descriptor_path_for(client_assembly_path: "str | Path") -> Path:
    """Locate the build descriptor that belongs to a client assembly.

    Args:
        client_assembly_path: Path of the client assembly (or module file).

    Returns:
        Sibling path with the assembly suffix replaced by ``.blazor.config``.
    """
    assembly = Path(client_assembly_path)
    return assembly.with_name(f"{assembly.stem}{DESCRIPTOR_SUFFIX}")


def resolve_build_config(client_assembly_path: "str | Path") -> BuildConfig:
    """Read the build descriptor for a client assembly.

    Args:
        client_assembly_path: Path of the client assembly (or module file).

    Raises:
        ConfigNotFoundError: If the descriptor is missing or unreadable.

    Returns:
        The parsed build configuration.
    """
    assembly = Path(client_assembly_path)
    descriptor = descriptor_path_for(assembly)
    try:
        text = descriptor.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigNotFoundError(str(descriptor)) from e

    if text.lstrip().startswith("{"):
        return _parse_json_descriptor(descriptor, text)
    return _parse_line_descriptor(descriptor, assembly, text)


def _parse_line_descriptor(descriptor: Path, assembly: Path, text: str) -> BuildConfig:
    lines = [line.rstrip() for line in text.splitlines()]
    if len(lines) < 2 or not lines[0] or not lines[1]:  # noqa: PLR2004
        raise ConfigMalformedError(str(descriptor), "expected the project path and output assembly path lines")

    source_project = assembly if lines[0] == "." else _rooted(descriptor.parent, Path(lines[0]))
    source_dir = source_project.parent
    output_assembly = _rooted(source_dir, Path(lines[1]))

    web_root = source_dir / WEB_ROOT_DIR_NAME
    return BuildConfig(
        dist_path=output_assembly.parent / DIST_DIR_NAME,
        web_root_path=web_root if web_root.is_dir() else None,
        enable_auto_rebuild=AUTO_REBUILD_FLAG in lines,
        enable_debugging=DEBUG_FLAG in lines,
        source_project_path=source_project,
        descriptor_path=descriptor,
    )


def _parse_json_descriptor(descriptor: Path, text: str) -> BuildConfig:
    try:
        document = decode_json(text)
    except SerializationException as e:
        raise ConfigMalformedError(str(descriptor), f"invalid JSON ({e})") from e
    if not isinstance(document, dict):
        raise ConfigMalformedError(str(descriptor), "expected a JSON object")
    data = cast("dict[str, Any]", document)

    dist_path = _json_path(descriptor, data, "distPath")
    if dist_path is None:
        raise ConfigMalformedError(str(descriptor), "missing 'distPath'")

    return BuildConfig(
        dist_path=dist_path,
        web_root_path=_json_path(descriptor, data, "webRootPath"),
        enable_auto_rebuild=_json_flag(descriptor, data, "autoRebuild"),
        enable_debugging=_json_flag(descriptor, data, "debug"),
        source_project_path=_json_path(descriptor, data, "sourceProjectPath"),
        descriptor_path=descriptor,
    )


def _json_path(descriptor: Path, data: "dict[str, Any]", key: str) -> "Path | None":
    value = data.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ConfigMalformedError(str(descriptor), f"{key!r} must be a string")
    return _rooted(descriptor.parent, Path(value))


def _json_flag(descriptor: Path, data: "dict[str, Any]", key: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise ConfigMalformedError(str(descriptor), f"{key!r} must be a boolean")
    return value


def _rooted(base: Path, path: Path) -> Path:
    return path if path.is_absolute() else base / path
