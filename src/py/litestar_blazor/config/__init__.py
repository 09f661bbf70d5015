"""Litestar-Blazor Configuration.

The configuration is split into logical groups:

- BlazorOptions: what the host passes in (client assembly location, hooks, route options)
- RuntimeConfig: execution settings (dev mode, process identity, rebuild commands)
- BuildConfig: paths and flags read from the client build descriptor

Example usage::

    # Point at the client assembly directly
    BlazorPlugin(options=BlazorOptions(client_assembly_path="client/bin/Client.dll"))

    # Infer the location from any module or type of the client app
    BlazorPlugin.from_marker(client_app)
"""

import inspect
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from litestar.exceptions import ImproperlyConfiguredException

from litestar_blazor.config._build import BuildConfig, descriptor_path_for, resolve_build_config
from litestar_blazor.config._constants import (
    DEFAULT_PAGE,
    DEV_SERVER_APPLICATION_NAME,
    FRAMEWORK_PATH_PREFIX,
    TRUE_VALUES,
)
from litestar_blazor.config._runtime import RuntimeConfig, resolve_application_name

if TYPE_CHECKING:
    from litestar_blazor.pipeline import PrepareResponseHook

__all__ = (
    "DEFAULT_PAGE",
    "DEV_SERVER_APPLICATION_NAME",
    "FRAMEWORK_PATH_PREFIX",
    "TRUE_VALUES",
    "BlazorOptions",
    "BuildConfig",
    "RuntimeConfig",
    "descriptor_path_for",
    "resolve_application_name",
    "resolve_build_config",
)


@dataclass
class BlazorOptions:
    """Options for attaching a client application to a Litestar app.

    Attributes:
        client_assembly_path: Location of the client assembly; the build descriptor sits next to it.
        runtime: Execution settings.
        default_page: Page served by the SPA fallback, relative to the distribution directory.
        on_prepare_response: Optional hook run on every static file response before the cache policy.
        exclude_from_auth: Mark the pipeline route with ``exclude_from_auth`` for auth middleware.
        opt: Extra route handler ``opt`` values.
    """

    client_assembly_path: "str | Path"
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    default_page: str = DEFAULT_PAGE
    on_prepare_response: "PrepareResponseHook | None" = None
    exclude_from_auth: bool = True
    opt: "dict[str, Any]" = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.client_assembly_path, str):
            self.client_assembly_path = Path(self.client_assembly_path)

    @classmethod
    def from_marker(cls, marker: Any, **kwargs: Any) -> "BlazorOptions":
        """Build options from any module, class or function of the client app.

        The file that defines ``marker`` is used as the client assembly path.

        Args:
            marker: A module, class or function defined by the client application.
            **kwargs: Remaining ``BlazorOptions`` fields.

        Raises:
            ImproperlyConfiguredException: If ``marker`` is not defined in a file.

        Returns:
            The options.
        """
        try:
            location = inspect.getfile(marker)
        except TypeError as e:
            msg = f"Cannot locate the client application from {marker!r}; pass a module, class or function defined in a file."
            raise ImproperlyConfiguredException(msg) from e
        return cls(client_assembly_path=Path(location).resolve(), **kwargs)

    @property
    def route_opt(self) -> "dict[str, Any]":
        """Route handler ``opt`` mapping for the pipeline route.

        Returns:
            The opt dictionary.
        """
        opt: dict[str, Any] = {}
        if self.exclude_from_auth:
            opt["exclude_from_auth"] = True
        return {**opt, **self.opt}
