"""Blazor Plugin for Litestar.

This module composes the request pipeline that serves a client application
bundle from a Litestar app:

- Files from the client distribution directory (with the client runtime's content types)
- Files from the secondary web root, when the build descriptor names one
- Optional auto-rebuild and debugger proxy during development
- SPA fallback to the default page for everything outside ``/_framework``

Routes registered by the application itself always take precedence; the
pipeline only sees requests no other route matched.

Example::

    from litestar import Litestar
    from litestar_blazor import BlazorOptions, BlazorPlugin

    app = Litestar(
        plugins=[BlazorPlugin(options=BlazorOptions(client_assembly_path="client/bin/Client.dll"))],
    )
"""

from typing import TYPE_CHECKING, Any

from litestar.plugins import CLIPlugin, InitPluginProtocol

from litestar_blazor.cache import set_cache_headers
from litestar_blazor.config import BlazorOptions, resolve_build_config
from litestar_blazor.content_types import build_content_type_table
from litestar_blazor.debug_proxy import use_debug_proxy
from litestar_blazor.pipeline import PipelineBuilder, SpaFallbackStage, StaticFileOptions, StaticFileStage
from litestar_blazor.rebuild import use_auto_rebuild
from litestar_blazor.utils import is_not_framework_path, log_info, log_success

if TYPE_CHECKING:
    from click import Group
    from litestar.config.app import AppConfig

    from litestar_blazor.config import BuildConfig
    from litestar_blazor.pipeline import BlazorPipeline, PrepareResponseHook, StaticFileResponseContext

__all__ = ("BlazorPlugin", "compose_pipeline", "use_blazor", "use_blazor_for")


def _prepare_response_hook(options: BlazorOptions) -> "PrepareResponseHook":
    user_hook = options.on_prepare_response
    if user_hook is None:
        return set_cache_headers

    def prepare_response(context: "StaticFileResponseContext") -> None:
        user_hook(context)
        set_cache_headers(context)

    return prepare_response


def compose_pipeline(builder: PipelineBuilder, config: "BuildConfig", options: BlazorOptions) -> None:
    """Append the client application stages to ``builder`` in their fixed order.

    Args:
        builder: The pipeline being built.
        config: The client build configuration.
        options: Host options.
    """
    prepare_response = _prepare_response_hook(options)
    dist_files = StaticFileOptions(
        root=config.dist_path,
        content_types=build_content_type_table(config.enable_debugging),
        on_prepare_response=prepare_response,
        default_page=options.default_page,
    )

    if options.runtime.dev_mode and config.enable_auto_rebuild:
        use_auto_rebuild(builder, config, options.runtime)

    # First, match the request against files in the client app dist directory
    dist_stage = StaticFileStage(dist_files, name="dist")
    builder.use(dist_stage)

    # Next, match the request against static files in the web root, served
    # straight from source so they need no copy into dist
    if config.web_root_path is not None:
        web_root_files = StaticFileOptions(root=config.web_root_path, on_prepare_response=prepare_response)
        builder.use(StaticFileStage(web_root_files, name="webroot"))

    if config.enable_debugging:
        use_debug_proxy(builder)

    # Finally, serve the default page for anything else, excluding /_framework/*
    builder.use_when(is_not_framework_path, SpaFallbackStage(dist_stage))


def use_blazor(app_config: "AppConfig", options: BlazorOptions) -> "BlazorPipeline":
    """Attach a client application to a Litestar application config.

    Args:
        app_config: The Litestar application configuration.
        options: Where the client assembly lives and how to serve it.

    Returns:
        The composed pipeline, already registered on ``app_config``.
    """
    config = resolve_build_config(options.client_assembly_path)
    log_info(f"Serving client from {config.dist_path}")
    if config.web_root_path is not None:
        log_info(f"Serving web root from {config.web_root_path}")

    builder = PipelineBuilder()
    compose_pipeline(builder, config, options)
    pipeline = builder.build()

    app_config.route_handlers.extend(pipeline.create_route_handlers(opt=options.route_opt))
    app_config.lifespan.extend(pipeline.lifespans)  # pyright: ignore[reportUnknownMemberType]
    log_success(f"Client pipeline ready: {' → '.join(pipeline.stage_names)}")
    return pipeline


def use_blazor_for(app_config: "AppConfig", marker: Any, **option_kwargs: Any) -> "BlazorPipeline":
    """Attach the client application that defines ``marker``.

    Args:
        app_config: The Litestar application configuration.
        marker: Any module, class or function of the client application.
        **option_kwargs: Remaining ``BlazorOptions`` fields.

    Returns:
        The composed pipeline.
    """
    return use_blazor(app_config, BlazorOptions.from_marker(marker, **option_kwargs))


class BlazorPlugin(InitPluginProtocol, CLIPlugin):
    """Blazor plugin for Litestar.

    Example::

        from litestar import Litestar
        from litestar_blazor import BlazorPlugin

        import client_app

        app = Litestar(plugins=[BlazorPlugin.from_marker(client_app)])
    """

    __slots__ = ("_options", "_pipeline")

    def __init__(self, options: BlazorOptions) -> None:
        """Initialize the Blazor plugin.

        Args:
            options: Where the client assembly lives and how to serve it.
        """
        self._options = options
        self._pipeline: "BlazorPipeline | None" = None

    @classmethod
    def from_marker(cls, marker: Any, **option_kwargs: Any) -> "BlazorPlugin":
        """Create the plugin for the client application that defines ``marker``.

        Returns:
            The plugin.
        """
        return cls(BlazorOptions.from_marker(marker, **option_kwargs))

    @property
    def options(self) -> BlazorOptions:
        return self._options

    @property
    def pipeline(self) -> "BlazorPipeline | None":
        """The composed pipeline, available once the app has been initialized.

        Returns:
            The pipeline, or None before ``on_app_init``.
        """
        return self._pipeline

    def on_cli_init(self, cli: "Group") -> None:
        """Register CLI commands.

        Args:
            cli: The Click command group to add commands to.
        """
        from litestar_blazor.cli import blazor_group

        cli.add_command(blazor_group)

    def on_app_init(self, app_config: "AppConfig") -> "AppConfig":
        """Compose the client pipeline and register it on the application.

        A missing or malformed build descriptor aborts application startup.

        Args:
            app_config: The Litestar application configuration.

        Returns:
            The modified application configuration.
        """
        self._pipeline = use_blazor(app_config, self._options)
        return app_config
