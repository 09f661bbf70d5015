"""Debugger connection proxy.

The browser exposes its DevTools protocol on a local WebSocket. The in-browser
debugging tools connect to ``/_framework/debug/ws-proxy?browser=<url>`` on the
application's own origin, and this stage relays that connection to the browser
endpoint. ``GET /_framework/debug`` explains how to start a debuggable browser.
"""

import ipaddress
from contextlib import suppress
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qs, urlsplit

import anyio
import websockets
from litestar import WebSocket
from litestar.enums import ScopeType
from litestar.exceptions import WebSocketDisconnect
from litestar.response.base import ASGIResponse

from litestar_blazor.config._constants import FRAMEWORK_PATH_PREFIX
from litestar_blazor.pipeline import NOT_FOUND, Handled
from litestar_blazor.utils import console

if TYPE_CHECKING:
    from litestar.types import Receive, Scope, Send

    from litestar_blazor.pipeline import PipelineBuilder, StageResult

__all__ = ("DEBUG_INFO_PATH", "DEBUG_PROXY_PATH", "DebugProxyStage", "resolve_browser_target", "use_debug_proxy")

DEBUG_INFO_PATH = f"{FRAMEWORK_PATH_PREFIX}/debug"
DEBUG_PROXY_PATH = f"{DEBUG_INFO_PATH}/ws-proxy"

_DISCONNECT_EXCEPTIONS = (WebSocketDisconnect, anyio.ClosedResourceError, websockets.ConnectionClosed)

_DEBUG_INFO_HTML = """<!DOCTYPE html>
<html><head><title>Debugging</title></head>
<body style="font-family:system-ui;max-width:42rem;margin:3rem auto">
<h1>Debugging the client application</h1>
<p>Start a Chromium-based browser with remote debugging enabled, for example:</p>
<pre>chrome --remote-debugging-port=9222 --user-data-dir=/tmp/blazor-chrome-debug</pre>
<p>Then open the application in that browser and connect your debugger to
<code>ws://&lt;this host&gt;/_framework/debug/ws-proxy?browser=&lt;DevTools WebSocket URL&gt;</code>.</p>
</body></html>"""


def use_debug_proxy(builder: "PipelineBuilder") -> "DebugProxyStage":
    """Attach the debugger proxy to a pipeline.

    Returns:
        The attached stage.
    """
    stage = DebugProxyStage()
    builder.use(stage)
    return stage


def resolve_browser_target(query_string: bytes) -> "str | None":
    """Extract the browser DevTools URL from the proxy query string.

    Only ``ws``/``wss`` URLs on loopback hosts are accepted, so the proxy cannot be
    pointed at arbitrary hosts.

    Returns:
        The target URL, or None when missing or not allowed.
    """
    values = parse_qs(query_string.decode("latin-1")).get("browser")
    if not values:
        return None
    target = values[0]
    parts = urlsplit(target)
    if parts.scheme not in {"ws", "wss"} or not parts.hostname:
        return None
    if parts.hostname == "localhost":
        return target
    try:
        is_loopback = ipaddress.ip_address(parts.hostname).is_loopback
    except ValueError:
        return None
    return target if is_loopback else None


class DebugProxyStage:
    """Serve the debugger endpoints; every other request falls through."""

    __slots__ = ("name",)

    def __init__(self, name: str = "debug-proxy") -> None:
        self.name = name

    async def __call__(self, scope: "Scope") -> "StageResult":
        path = scope.get("path", "")
        if scope["type"] == ScopeType.WEBSOCKET and path == DEBUG_PROXY_PATH:
            target = resolve_browser_target(scope.get("query_string", b""))
            if target is None:
                return NOT_FOUND
            return Handled(_BrowserRelay(target))
        if scope["type"] == ScopeType.HTTP and path == DEBUG_INFO_PATH and scope.get("method") == "GET":
            return Handled(ASGIResponse(body=_DEBUG_INFO_HTML, media_type="text/html"))
        return NOT_FOUND


class _BrowserRelay:
    """ASGI app relaying one WebSocket connection to the browser DevTools endpoint."""

    __slots__ = ("target",)

    def __init__(self, target: str) -> None:
        self.target = target

    async def __call__(self, scope: "Scope", receive: "Receive", send: "Send") -> None:
        socket: WebSocket[Any, Any, Any] = WebSocket(scope, receive=receive, send=send)
        await socket.accept()
        try:
            async with websockets.connect(self.target, max_size=None, open_timeout=10) as upstream:
                await _run_websocket_proxy(socket, upstream)
        except (TimeoutError, OSError) as exc:
            console.print(f"[yellow][debug-proxy] Connection to {self.target} failed: {exc}[/]")
            with suppress(anyio.ClosedResourceError, WebSocketDisconnect):
                await socket.close(code=1011, reason="Browser debugging endpoint unavailable")
        except BaseException as exc:
            exceptions: "list[BaseException] | tuple[BaseException, ...] | None" = getattr(exc, "exceptions", None)
            if exceptions is not None:
                if any(not isinstance(err, _DISCONNECT_EXCEPTIONS) for err in exceptions):
                    raise
                return
            if not isinstance(exc, _DISCONNECT_EXCEPTIONS):
                raise


async def _run_websocket_proxy(socket: "WebSocket[Any, Any, Any]", upstream: Any) -> None:
    """Relay messages in both directions until either side closes."""

    async def client_to_upstream() -> None:
        try:
            while True:
                await upstream.send(await socket.receive_text())
        except _DISCONNECT_EXCEPTIONS:
            pass
        finally:
            with suppress(websockets.ConnectionClosed):
                await upstream.close()

    async def upstream_to_client() -> None:
        try:
            async for msg in upstream:
                if isinstance(msg, str):
                    await socket.send_text(msg)
                else:
                    await socket.send_bytes(msg)
        except _DISCONNECT_EXCEPTIONS:
            pass
        finally:
            with suppress(anyio.ClosedResourceError, WebSocketDisconnect):
                await socket.close()

    async with anyio.create_task_group() as tg:
        tg.start_soon(client_to_upstream)
        tg.start_soon(upstream_to_client)
