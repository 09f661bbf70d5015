"""Stage results and the stage protocol."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Union

if TYPE_CHECKING:
    from litestar.types import ASGIApp, Scope

__all__ = ("NOT_FOUND", "Failed", "Handled", "NotFound", "PipelineStage", "StageResult")


@dataclass(frozen=True)
class Handled:
    """The stage produced a response; ``app`` sends it."""

    app: "ASGIApp"


@dataclass(frozen=True)
class NotFound:
    """The stage does not handle the request; the next stage is tried."""

    reason: str = ""


@dataclass(frozen=True)
class Failed:
    """The stage recognized the request but could not serve it."""

    error: Exception


StageResult = Union[Handled, NotFound, Failed]

NOT_FOUND = NotFound()


class PipelineStage(Protocol):
    """A request matcher that either answers the request or lets it fall through."""

    name: str

    async def __call__(self, scope: "Scope") -> StageResult: ...
