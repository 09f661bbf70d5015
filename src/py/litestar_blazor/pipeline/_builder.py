"""Ordered stage pipeline and its builder."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Any

from litestar import HttpMethod, Request, WebSocket, route, websocket
from litestar.exceptions import NotFoundException
from litestar.types import ASGIApp, Receive, Scope, Send

from litestar_blazor.pipeline._results import NOT_FOUND, Failed, Handled, NotFound, StageResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from litestar import Litestar
    from litestar.handlers import BaseRouteHandler

    from litestar_blazor.pipeline._results import PipelineStage

__all__ = ("BlazorPipeline", "ConditionalStage", "Lifespan", "PipelineBuilder", "ScopePredicate")

ScopePredicate = Callable[[Scope], bool]
Lifespan = Callable[["Litestar"], AbstractAsyncContextManager[None]]


class ConditionalStage:
    """Run ``stage`` only for requests accepted by ``predicate``."""

    __slots__ = ("name", "predicate", "stage")

    def __init__(self, predicate: ScopePredicate, stage: "PipelineStage", name: "str | None" = None) -> None:
        self.predicate = predicate
        self.stage = stage
        self.name = name or stage.name

    async def __call__(self, scope: Scope) -> StageResult:
        if not self.predicate(scope):
            return NOT_FOUND
        return await self.stage(scope)


class BlazorPipeline:
    """An immutable, ordered sequence of stages.

    Stages are evaluated in order. The first :class:`Handled` result answers the
    request, :class:`NotFound` moves on to the next stage, and :class:`Failed`
    re-raises its error. When no stage answers, Litestar's ``NotFoundException`` is
    raised so the host's regular 404 handling applies.
    """

    __slots__ = ("_lifespans", "_stages")

    def __init__(self, stages: "Sequence[PipelineStage]", lifespans: "Sequence[Lifespan]" = ()) -> None:
        self._stages: tuple[PipelineStage, ...] = tuple(stages)
        self._lifespans: tuple[Lifespan, ...] = tuple(lifespans)

    @property
    def stages(self) -> "tuple[PipelineStage, ...]":
        return self._stages

    @property
    def lifespans(self) -> "tuple[Lifespan, ...]":
        return self._lifespans

    @property
    def stage_names(self) -> "list[str]":
        return [stage.name for stage in self._stages]

    async def resolve(self, scope: Scope) -> StageResult:
        """Find the first stage that answers the request.

        Returns:
            The deciding stage result, or ``NOT_FOUND`` when every stage passed.
        """
        for stage in self._stages:
            result = await stage(scope)
            if not isinstance(result, NotFound):
                return result
        return NOT_FOUND

    async def handle(self, scope: Scope) -> ASGIApp:
        """Pick the ASGI app that answers the request.

        Raises:
            NotFoundException: If no stage answers the request.

        Returns:
            The app of the deciding ``Handled`` result.
        """
        result = await self.resolve(scope)
        match result:
            case Handled(app=app):
                return app
            case Failed(error=error):
                raise error
            case _:
                raise NotFoundException(detail=f"No file or fallback for {scope.get('path', '/')}")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        app = await self.handle(scope)
        await app(scope, receive, send)

    def create_route_handlers(
        self, name: str = "blazor", opt: "dict[str, Any] | None" = None
    ) -> "list[BaseRouteHandler]":
        """Create the catch-all HTTP and WebSocket handlers that run this pipeline.

        Routes registered by the application are more specific and always win; only
        requests that match nothing else reach the pipeline.

        Returns:
            The HTTP handler (named ``name``) and the WebSocket handler (``<name>_ws``).
        """
        pipeline = self

        @route(
            path=["/", "/{path:path}"],
            http_method=[
                HttpMethod.GET,
                HttpMethod.HEAD,
                HttpMethod.POST,
                HttpMethod.PUT,
                HttpMethod.PATCH,
                HttpMethod.DELETE,
            ],
            name=name,
            opt=opt or {},
            include_in_schema=False,
        )
        async def blazor_pipeline(request: "Request[Any, Any, Any]") -> ASGIApp:
            return await pipeline.handle(request.scope)

        @websocket(path=["/", "/{path:path}"], name=f"{name}_ws", opt=opt or {})
        async def blazor_pipeline_ws(socket: "WebSocket[Any, Any, Any]") -> None:
            app = await pipeline.handle(socket.scope)
            await app(socket.scope, socket.receive, socket.send)

        return [blazor_pipeline, blazor_pipeline_ws]


class PipelineBuilder:
    """Append-only collection of stages and the lifespans they need."""

    __slots__ = ("lifespans", "stages")

    def __init__(self) -> None:
        self.stages: list[PipelineStage] = []
        self.lifespans: list[Lifespan] = []

    def use(self, stage: "PipelineStage") -> "PipelineBuilder":
        """Append a stage.

        Returns:
            The builder, for chaining.
        """
        self.stages.append(stage)
        return self

    def use_when(
        self, predicate: ScopePredicate, stage: "PipelineStage", name: "str | None" = None
    ) -> "PipelineBuilder":
        """Append a stage that only sees requests accepted by ``predicate``.

        Returns:
            The builder, for chaining.
        """
        return self.use(ConditionalStage(predicate, stage, name=name))

    def add_lifespan(self, lifespan: Lifespan) -> "PipelineBuilder":
        """Register a lifespan context needed by one of the stages.

        Returns:
            The builder, for chaining.
        """
        self.lifespans.append(lifespan)
        return self

    def build(self) -> BlazorPipeline:
        return BlazorPipeline(self.stages, self.lifespans)
