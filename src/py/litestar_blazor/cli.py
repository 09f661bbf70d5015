"""Command line interface.

- ``litestar blazor status``: inspect the client build an app is configured with.
- ``litestar-blazor serve``: the standalone dev server, which keeps a watch build running.
"""

from pathlib import Path
from typing import TYPE_CHECKING

from click import group, option, version_option
from click import Path as ClickPath
from litestar.cli._utils import LitestarGroup  # pyright: ignore[reportPrivateImportUsage]

from litestar_blazor.__metadata__ import __project__, __version__

if TYPE_CHECKING:
    from litestar import Litestar
    from rich.table import Table

    from litestar_blazor.config import BuildConfig

__all__ = ("blazor_group", "dev_server_group")


@group(cls=LitestarGroup, name="blazor")
def blazor_group() -> None:
    """Manage the client application."""


@blazor_group.command(name="status", help="Show the client build configuration and request pipeline.")
def blazor_status(app: "Litestar") -> None:
    """Print the resolved build descriptor and the stage order."""
    from litestar.cli._utils import console  # pyright: ignore[reportPrivateImportUsage]

    from litestar_blazor.config import resolve_build_config
    from litestar_blazor.plugin import BlazorPlugin

    plugin = app.plugins.get(BlazorPlugin)
    config = resolve_build_config(plugin.options.client_assembly_path)

    console.rule("[yellow]Client application[/]", align="left")
    console.print(_config_table(config))
    if plugin.pipeline is not None:
        console.print(f"[bold]Pipeline:[/] {' → '.join(plugin.pipeline.stage_names)}")


def _config_table(config: "BuildConfig") -> "Table":
    from rich.table import Table

    table = Table(show_header=False, box=None)
    table.add_column(style="cyan")
    table.add_column()
    table.add_row("Descriptor", str(config.descriptor_path or "-"))
    table.add_row("Distribution", str(config.dist_path))
    table.add_row("Web root", str(config.web_root_path or "-"))
    table.add_row("Source project", str(config.source_project_path or "-"))
    table.add_row("Auto-rebuild", "on" if config.enable_auto_rebuild else "off")
    table.add_row("Debugging", "on" if config.enable_debugging else "off")
    return table


@group(name="litestar-blazor")
@version_option(__version__, prog_name=__project__)
def dev_server_group() -> None:
    """Standalone development server for client applications."""


@dev_server_group.command(name="serve", help="Serve a client application with auto-rebuild.")
@option(
    "--client-assembly",
    type=ClickPath(dir_okay=False, file_okay=True, path_type=Path),
    help="Path to the client assembly; its build descriptor must sit next to it.",
    required=True,
)
@option("--host", type=str, help="Interface to bind to.", default="127.0.0.1", show_default=True)
@option("--port", type=int, help="Port to bind to.", default=5000, show_default=True)
def dev_server_serve(client_assembly: Path, host: str, port: int) -> None:
    """Run the standalone dev server."""
    import uvicorn
    from litestar import Litestar

    from litestar_blazor.config import DEV_SERVER_APPLICATION_NAME, BlazorOptions, RuntimeConfig
    from litestar_blazor.plugin import BlazorPlugin
    from litestar_blazor.utils import log_info

    options = BlazorOptions(
        client_assembly_path=client_assembly.resolve(),
        runtime=RuntimeConfig(dev_mode=True, application_name=DEV_SERVER_APPLICATION_NAME),
    )
    app = Litestar(plugins=[BlazorPlugin(options)], debug=True)
    log_info(f"Dev server listening on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port)
