"""File extension to content-type mapping for served files."""

import mimetypes
from collections.abc import Iterator, Mapping
from functools import lru_cache
from pathlib import PurePath, PurePosixPath
from types import MappingProxyType

from litestar_blazor.config._constants import OCTET_STREAM, WASM_MEDIA_TYPE

__all__ = ("ContentTypeTable", "build_content_type_table", "default_content_types")


def _normalize_extension(extension: str) -> str:
    extension = extension.lower()
    return extension if extension.startswith(".") else f".{extension}"


class ContentTypeTable(Mapping[str, str]):
    """Read-only, case-insensitive mapping of file extensions (with the dot) to MIME types."""

    __slots__ = ("_mappings",)

    def __init__(self, mappings: "Mapping[str, str]") -> None:
        self._mappings: Mapping[str, str] = MappingProxyType(
            {_normalize_extension(ext): media_type for ext, media_type in mappings.items()}
        )

    def __getitem__(self, extension: str) -> str:
        return self._mappings[_normalize_extension(extension)]

    def __iter__(self) -> "Iterator[str]":
        return iter(self._mappings)

    def __len__(self) -> int:
        return len(self._mappings)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self)} entries)"

    def content_type_for(self, path: "str | PurePath") -> "str | None":
        """Look up the content type for a file path.

        Args:
            path: File name or request path.

        Returns:
            The MIME type, or None when the extension is unknown.
        """
        suffix = PurePosixPath(str(path)).suffix
        return self.get(suffix) if suffix else None


@lru_cache(maxsize=1)
def default_content_types() -> ContentTypeTable:
    """Baseline extension table.

    A fresh :class:`mimetypes.MimeTypes` only carries the interpreter's built-in
    defaults, so ``mime.types`` files on the host do not change what gets served.

    Returns:
        The baseline table.
    """
    return ContentTypeTable(mimetypes.MimeTypes().types_map[True])


def build_content_type_table(enable_debugging: bool) -> ContentTypeTable:
    """Build the content-type table for the distribution directory.

    Adds the client runtime's binary formats to the baseline. Debug symbols
    (``.pdb``) only get a type when debugging is enabled; without one they are
    never served.

    Args:
        enable_debugging: Whether debug symbols may be served.

    Returns:
        The augmented table.
    """
    mappings = dict(default_content_types())
    mappings[".dll"] = OCTET_STREAM
    mappings[".mem"] = OCTET_STREAM
    mappings[".wasm"] = WASM_MEDIA_TYPE
    if enable_debugging:
        mappings[".pdb"] = OCTET_STREAM
    else:
        mappings.pop(".pdb", None)
    return ContentTypeTable(mappings)
