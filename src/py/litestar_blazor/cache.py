"""Cache-Control policy for static file responses."""

from typing import TYPE_CHECKING

from litestar.datastructures import CacheControlHeader

if TYPE_CHECKING:
    from litestar_blazor.pipeline import StaticFileResponseContext

__all__ = ("NO_CACHE", "set_cache_headers")

NO_CACHE = CacheControlHeader(no_cache=True)


def set_cache_headers(context: "StaticFileResponseContext") -> None:
    """Apply ``Cache-Control: no-cache`` unless the response already carries a directive.

    Args:
        context: The static file response being prepared.
    """
    # "no-cache" lets the browser store the response but makes it revalidate
    # (via ETag) before reusing it. Once URLs carry content hashes, unchanged files
    # will not need a request at all.
    if any(name.lower() == NO_CACHE.HEADER_NAME for name in context.headers):
        return
    context.headers[NO_CACHE.HEADER_NAME] = NO_CACHE.to_header()
