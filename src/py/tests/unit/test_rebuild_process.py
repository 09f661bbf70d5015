import sys
from pathlib import Path

import pytest

from litestar_blazor.exceptions import RebuildProcessError
from litestar_blazor.process import RebuildProcess

_SLEEP = [sys.executable, "-c", "import time; time.sleep(30)"]


def test_start_and_stop(tmp_path: Path) -> None:
    process = RebuildProcess()

    process.start(_SLEEP, str(tmp_path))
    try:
        assert process.is_running
        first = process.process
        process.start(_SLEEP, tmp_path)
        assert process.process is first
    finally:
        process.stop(timeout=5.0)

    assert not process.is_running
    assert process.process is None


def test_stop_without_start_is_noop() -> None:
    process = RebuildProcess()

    process.stop()

    assert process.process is None


def test_start_missing_command(tmp_path: Path) -> None:
    process = RebuildProcess()

    with pytest.raises(RebuildProcessError) as exc_info:
        process.start(["litestar-blazor-missing-build-tool"], tmp_path)

    assert exc_info.value.command == ["litestar-blazor-missing-build-tool"]
    assert not process.is_running


def test_instances_are_tracked() -> None:
    process = RebuildProcess()

    assert process in RebuildProcess._instances


@pytest.mark.skipif(sys.platform == "win32", reason="process groups are POSIX only")
def test_stop_kills_process_ignoring_sigterm(tmp_path: Path) -> None:
    process = RebuildProcess()
    stubborn = [
        sys.executable,
        "-c",
        "import signal, time; signal.signal(signal.SIGTERM, signal.SIG_IGN); time.sleep(30)",
    ]

    process.start(stubborn, tmp_path)
    child = process.process
    process.stop(timeout=0.5)

    assert process.process is None
    assert child is not None
    assert child.poll() is not None
