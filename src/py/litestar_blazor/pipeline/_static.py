"""Static file and SPA fallback stages."""

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import anyio
from litestar.enums import ScopeType
from litestar.response.file import ASGIFileResponse

from litestar_blazor.config._constants import DEFAULT_PAGE
from litestar_blazor.content_types import ContentTypeTable, default_content_types
from litestar_blazor.exceptions import DefaultPageNotFoundError
from litestar_blazor.pipeline._results import NOT_FOUND, Failed, Handled, NotFound, StageResult

if TYPE_CHECKING:
    from litestar.types import Scope

__all__ = (
    "PhysicalFileProvider",
    "PrepareResponseHook",
    "SpaFallbackStage",
    "StaticFileOptions",
    "StaticFileResponseContext",
    "StaticFileStage",
)

_SERVED_METHODS = frozenset({"GET", "HEAD"})


@dataclass
class StaticFileResponseContext:
    """A static file response that has been selected but not yet started.

    Attributes:
        scope: The ASGI scope of the request.
        path: The file that will be sent.
        media_type: Content type of the file.
        headers: Response headers; hooks may add to or change them.
    """

    scope: "Scope"
    path: Path
    media_type: str
    headers: "dict[str, str]" = field(default_factory=dict)


PrepareResponseHook = Callable[[StaticFileResponseContext], None]


@dataclass(frozen=True)
class StaticFileOptions:
    """Configuration of one static file serving unit.

    Attributes:
        root: Directory the files are served from.
        content_types: Extension table; files with unknown extensions are not served.
        on_prepare_response: Hook called for every file response before it starts.
        default_page: Page served by the SPA fallback, relative to ``root``.
    """

    root: Path
    content_types: ContentTypeTable = field(default_factory=default_content_types)
    on_prepare_response: "PrepareResponseHook | None" = None
    default_page: str = DEFAULT_PAGE

    def __post_init__(self) -> None:
        if isinstance(self.root, str):
            object.__setattr__(self, "root", Path(self.root))


class PhysicalFileProvider:
    """Maps request paths to regular files below a root directory.

    Parent references, dot-prefixed segments and files whose real location is
    outside the root are reported as missing.
    """

    __slots__ = ("root",)

    def __init__(self, root: "str | Path") -> None:
        self.root = Path(root).resolve()

    async def get_file(self, subpath: str) -> "Path | None":
        """Find the file for a request path.

        Args:
            subpath: Request path relative to the root (a leading slash is ignored).

        Returns:
            The file path, or None when no servable file exists.
        """
        parts = [part for part in subpath.split("/") if part]
        if not parts or any(part.startswith(".") or "\\" in part or "\0" in part for part in parts):
            return None

        candidate = anyio.Path(self.root.joinpath(*parts))
        try:
            if not await candidate.is_file():
                return None
            resolved = await candidate.resolve()
        except OSError:
            return None
        if not Path(resolved).is_relative_to(self.root):
            return None
        return Path(candidate)


class StaticFileStage:
    """Serve ``GET``/``HEAD`` requests from a directory, falling through on a miss."""

    __slots__ = ("name", "options", "provider")

    def __init__(self, options: StaticFileOptions, name: str = "static") -> None:
        self.options = options
        self.provider = PhysicalFileProvider(options.root)
        self.name = name

    async def __call__(self, scope: "Scope") -> StageResult:
        if scope["type"] != ScopeType.HTTP or scope.get("method") not in _SERVED_METHODS:
            return NOT_FOUND
        return await self.serve(scope, scope["path"])

    async def serve(self, scope: "Scope", subpath: str) -> StageResult:
        """Serve ``subpath`` from the root when it names a file with a known content type.

        Returns:
            ``Handled`` with the file response, otherwise ``NOT_FOUND``.
        """
        media_type = self.options.content_types.content_type_for(subpath)
        if media_type is None:
            return NOT_FOUND
        file_path = await self.provider.get_file(subpath)
        if file_path is None:
            return NOT_FOUND

        context = StaticFileResponseContext(scope=scope, path=file_path, media_type=media_type)
        if self.options.on_prepare_response is not None:
            self.options.on_prepare_response(context)
        return Handled(
            ASGIFileResponse(
                file_path=context.path,
                filename=context.path.name,
                media_type=context.media_type,
                headers=context.headers,
                content_disposition_type="inline",
                is_head_response=scope.get("method") == "HEAD",
            )
        )


class SpaFallbackStage:
    """Answer ``GET``/``HEAD`` requests with the default page of a static file stage."""

    __slots__ = ("files", "name")

    def __init__(self, files: StaticFileStage, name: str = "spa-fallback") -> None:
        self.files = files
        self.name = name

    async def __call__(self, scope: "Scope") -> StageResult:
        if scope["type"] != ScopeType.HTTP or scope.get("method") not in _SERVED_METHODS:
            return NOT_FOUND
        default_page = self.files.options.default_page
        result = await self.files.serve(scope, default_page)
        if isinstance(result, NotFound):
            return Failed(DefaultPageNotFoundError(default_page, str(self.files.options.root)))
        return result
