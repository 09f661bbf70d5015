"""Tests for auto-rebuild strategy selection and the rebuild stages."""

import os
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock, Mock

import anyio
import pytest

from litestar_blazor.config import BuildConfig, RuntimeConfig
from litestar_blazor.pipeline import NOT_FOUND, PipelineBuilder
from litestar_blazor.rebuild import (
    AutoRebuildStrategy,
    DevServerAutoRebuild,
    HostedAutoRebuildStage,
    select_auto_rebuild_strategy,
    use_auto_rebuild,
)

if TYPE_CHECKING:
    from pytest_mock import MockerFixture

    from conftest import ClientLayout

pytestmark = pytest.mark.anyio


def touch_in_future(path: Path, seconds: float = 60.0) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch()
    future = time.time() + seconds
    os.utime(path, (future, future))


@pytest.fixture
def run_process(mocker: "MockerFixture") -> AsyncMock:
    """Replace the build subprocess with a successful no-op."""
    return mocker.patch(
        "litestar_blazor.rebuild.anyio.run_process",
        new=AsyncMock(return_value=Mock(returncode=0, stdout=b"", stderr=b"")),
    )


@pytest.mark.parametrize(
    ("application_name", "expected"),
    [
        ("litestar-blazor", AutoRebuildStrategy.STANDALONE_DEV_SERVER),
        ("LITESTAR-BLAZOR", AutoRebuildStrategy.STANDALONE_DEV_SERVER),
        ("uvicorn", AutoRebuildStrategy.EMBEDDED),
        ("litestar", AutoRebuildStrategy.EMBEDDED),
        ("", AutoRebuildStrategy.EMBEDDED),
    ],
)
def test_select_strategy(application_name: str, expected: AutoRebuildStrategy) -> None:
    assert select_auto_rebuild_strategy(application_name) is expected


def test_use_auto_rebuild_without_source_project(client_layout: "ClientLayout") -> None:
    builder = PipelineBuilder()
    config = BuildConfig(dist_path=client_layout.dist_dir, enable_auto_rebuild=True)

    assert use_auto_rebuild(builder, config, RuntimeConfig(dev_mode=True, application_name="uvicorn")) is None
    assert builder.stages == []
    assert builder.lifespans == []


def test_use_auto_rebuild_custom_command(client_layout: "ClientLayout") -> None:
    builder = PipelineBuilder()
    config = BuildConfig(
        dist_path=client_layout.dist_dir, enable_auto_rebuild=True, source_project_path=client_layout.project_file
    )
    runtime = RuntimeConfig(dev_mode=True, application_name="uvicorn", rebuild_command=["make", "client"])

    assert use_auto_rebuild(builder, config, runtime) is AutoRebuildStrategy.EMBEDDED
    stage = builder.stages[0]
    assert isinstance(stage, HostedAutoRebuildStage)
    assert stage.command == ["make", "client"]
    assert stage.source_dir == client_layout.project_dir


def test_use_auto_rebuild_default_commands(client_layout: "ClientLayout") -> None:
    config = BuildConfig(
        dist_path=client_layout.dist_dir, enable_auto_rebuild=True, source_project_path=client_layout.project_file
    )

    hosted = PipelineBuilder()
    use_auto_rebuild(hosted, config, RuntimeConfig(dev_mode=True, application_name="uvicorn"))
    assert hosted.stages[0].command == ["dotnet", "build", str(client_layout.project_file)]  # type: ignore[attr-defined]

    standalone = PipelineBuilder()
    use_auto_rebuild(standalone, config, RuntimeConfig(dev_mode=True, application_name="litestar-blazor"))
    lifespan = standalone.lifespans[0]
    watcher = lifespan.__self__  # type: ignore[attr-defined]
    assert isinstance(watcher, DevServerAutoRebuild)
    assert watcher.command == ["dotnet", "watch", "--project", str(client_layout.project_file), "build"]
    assert watcher.cwd == client_layout.project_dir


async def test_first_check_records_baseline(client_layout: "ClientLayout", run_process: AsyncMock) -> None:
    stage = HostedAutoRebuildStage(client_layout.project_dir, ["dotnet", "build"], poll_interval=0)

    assert await stage.rebuild_if_changed() is False
    assert await stage.rebuild_if_changed() is False
    run_process.assert_not_called()


async def test_rebuilds_after_source_change(client_layout: "ClientLayout", run_process: AsyncMock) -> None:
    stage = HostedAutoRebuildStage(client_layout.project_dir, ["dotnet", "build"], poll_interval=0)
    await stage.rebuild_if_changed()

    touch_in_future(client_layout.project_dir / "Pages" / "Counter.cshtml")

    assert await stage({"type": "http", "path": "/", "method": "GET"}) is NOT_FOUND  # type: ignore[arg-type]
    run_process.assert_awaited_once_with(["dotnet", "build"], cwd=client_layout.project_dir, check=False)
    assert await stage.rebuild_if_changed() is False


async def test_build_output_changes_are_ignored(client_layout: "ClientLayout", run_process: AsyncMock) -> None:
    stage = HostedAutoRebuildStage(client_layout.project_dir, ["dotnet", "build"], poll_interval=0)
    await stage.rebuild_if_changed()

    touch_in_future(client_layout.project_dir / "bin" / "dist" / "app.wasm")
    touch_in_future(client_layout.project_dir / "obj" / "project.assets.json")
    touch_in_future(client_layout.project_dir / ".vs" / "state.json")

    assert await stage.rebuild_if_changed() is False
    run_process.assert_not_called()


async def test_scans_are_throttled(client_layout: "ClientLayout", run_process: AsyncMock) -> None:
    stage = HostedAutoRebuildStage(client_layout.project_dir, ["dotnet", "build"], poll_interval=3600)
    await stage.rebuild_if_changed()

    touch_in_future(client_layout.project_dir / "Pages" / "Counter.cshtml")

    assert await stage.rebuild_if_changed() is False
    run_process.assert_not_called()


async def test_failed_build_does_not_raise(client_layout: "ClientLayout", mocker: "MockerFixture") -> None:
    run_process = mocker.patch(
        "litestar_blazor.rebuild.anyio.run_process",
        new=AsyncMock(return_value=Mock(returncode=1, stdout=b"", stderr=b"error CS1002: ; expected")),
    )
    stage = HostedAutoRebuildStage(client_layout.project_dir, ["dotnet", "build"], poll_interval=0)
    await stage.rebuild_if_changed()

    touch_in_future(client_layout.project_dir / "Program.cs")

    assert await stage.rebuild_if_changed() is True
    run_process.assert_awaited_once()


async def test_missing_build_tool_does_not_raise(client_layout: "ClientLayout", mocker: "MockerFixture") -> None:
    mocker.patch("litestar_blazor.rebuild.anyio.run_process", new=AsyncMock(side_effect=FileNotFoundError("dotnet")))
    stage = HostedAutoRebuildStage(client_layout.project_dir, ["dotnet", "build"], poll_interval=0)
    await stage.rebuild_if_changed()

    touch_in_future(client_layout.project_dir / "Program.cs")

    assert await stage.rebuild_if_changed() is True


async def test_dev_server_lifespan_runs_watch_build(tmp_path: Path, mocker: "MockerFixture") -> None:
    watcher = DevServerAutoRebuild(["dotnet", "watch", "build"], cwd=tmp_path)
    start = mocker.patch.object(watcher.process, "start")
    stop = mocker.patch.object(watcher.process, "stop")

    async with watcher.lifespan(Mock()):
        start.assert_called_once_with(["dotnet", "watch", "build"], tmp_path)
        stop.assert_not_called()

    stop.assert_called_once_with()


async def test_requests_during_build_wait_for_it(client_layout: "ClientLayout", mocker: "MockerFixture") -> None:
    events: list[str] = []

    async def slow_build(*args: Any, **kwargs: Any) -> Mock:
        events.append("build-start")
        await anyio.sleep(0.3)
        events.append("build-end")
        return Mock(returncode=0, stdout=b"", stderr=b"")

    mocker.patch("litestar_blazor.rebuild.anyio.run_process", new=slow_build)
    stage = HostedAutoRebuildStage(client_layout.project_dir, ["dotnet", "build"], poll_interval=0)
    await stage.rebuild_if_changed()
    touch_in_future(client_layout.project_dir / "Pages" / "Counter.cshtml")

    async def request(label: str, delay: float) -> None:
        await anyio.sleep(delay)
        await stage({"type": "http", "path": "/counter", "method": "GET"})  # type: ignore[arg-type]
        events.append(label)

    async with anyio.create_task_group() as tg:
        tg.start_soon(request, "first", 0)
        tg.start_soon(request, "second", 0.05)

    assert events.count("build-start") == 1
    assert events.index("first") > events.index("build-end")
    assert events.index("second") > events.index("build-end")
