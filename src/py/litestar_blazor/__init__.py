"""Litestar-Blazor: serve client-side web application bundles from Litestar.

This package attaches a built client application (its distribution directory,
an optional source web root, development tooling and an SPA fallback) to a
Litestar application.

Basic usage:
    from litestar import Litestar
    from litestar_blazor import BlazorOptions, BlazorPlugin

    app = Litestar(
        plugins=[BlazorPlugin(options=BlazorOptions(client_assembly_path="client/bin/Client.dll"))],
    )

Locating the client from one of its own modules:
    import client_app

    app = Litestar(plugins=[BlazorPlugin.from_marker(client_app)])
"""

from litestar_blazor.config import BlazorOptions, BuildConfig, RuntimeConfig, resolve_build_config
from litestar_blazor.content_types import ContentTypeTable, build_content_type_table
from litestar_blazor.pipeline import BlazorPipeline, PipelineBuilder
from litestar_blazor.plugin import BlazorPlugin, compose_pipeline, use_blazor, use_blazor_for

__all__ = (
    "BlazorOptions",
    "BlazorPipeline",
    "BlazorPlugin",
    "BuildConfig",
    "ContentTypeTable",
    "PipelineBuilder",
    "RuntimeConfig",
    "build_content_type_table",
    "compose_pipeline",
    "resolve_build_config",
    "use_blazor",
    "use_blazor_for",
)
