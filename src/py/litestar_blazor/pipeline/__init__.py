"""Ordered request pipeline: stage results, the builder and the file serving stages."""

from litestar_blazor.pipeline._builder import BlazorPipeline, ConditionalStage, Lifespan, PipelineBuilder, ScopePredicate
from litestar_blazor.pipeline._results import NOT_FOUND, Failed, Handled, NotFound, PipelineStage, StageResult
from litestar_blazor.pipeline._static import (
    PhysicalFileProvider,
    PrepareResponseHook,
    SpaFallbackStage,
    StaticFileOptions,
    StaticFileResponseContext,
    StaticFileStage,
)

__all__ = (
    "NOT_FOUND",
    "BlazorPipeline",
    "ConditionalStage",
    "Failed",
    "Handled",
    "Lifespan",
    "NotFound",
    "PhysicalFileProvider",
    "PipelineBuilder",
    "PipelineStage",
    "PrepareResponseHook",
    "ScopePredicate",
    "SpaFallbackStage",
    "StaticFileOptions",
    "StaticFileResponseContext",
    "StaticFileStage",
)
