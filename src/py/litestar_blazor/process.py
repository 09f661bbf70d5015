"""Long-running rebuild process management."""

import os
import signal
import subprocess
import threading
from contextlib import suppress
from pathlib import Path
from typing import Any

from litestar_blazor.exceptions import RebuildProcessError
from litestar_blazor.utils import console

__all__ = ("RebuildProcess",)

_KILL_SIGNAL = getattr(signal, "SIGKILL", signal.SIGTERM)


class RebuildProcess:
    """Manages a watch/rebuild child process.

    The process is started in its own session so that stopping it also stops the
    compilers and watchers it spawned. Every instance is stopped on interpreter exit.
    """

    _instances: "list[RebuildProcess]" = []
    _atexit_registered: bool = False

    def __init__(self) -> None:
        self.process: "subprocess.Popen[Any] | None" = None
        self._lock = threading.Lock()

        RebuildProcess._instances.append(self)
        if not RebuildProcess._atexit_registered:
            import atexit

            atexit.register(RebuildProcess._cleanup_all_instances)
            RebuildProcess._atexit_registered = True

    @classmethod
    def _cleanup_all_instances(cls) -> None:
        """Stop all tracked RebuildProcess instances."""
        for instance in cls._instances:
            with suppress(Exception):
                instance.stop()

    @property
    def is_running(self) -> bool:
        return self.process is not None and self.process.poll() is None

    def start(self, command: "list[str]", cwd: "Path | str | None") -> None:
        """Start the process unless it is already running.

        Args:
            command: The command to run (e.g., ["dotnet", "watch", "build"]).
            cwd: The working directory for the process.

        Raises:
            RebuildProcessError: If the process cannot be started or exits immediately.
        """
        if cwd is not None and isinstance(cwd, str):
            cwd = Path(cwd)

        with self._lock:
            if self.is_running:
                return
            try:
                self.process = subprocess.Popen(  # noqa: S603
                    command,
                    cwd=cwd,
                    start_new_session=True,
                )
            except OSError as e:
                console.print(f"[red]Failed to start rebuild process: {e!s}[/]")
                msg = f"Failed to start rebuild process: {e!s}"
                raise RebuildProcessError(msg, command=command) from e

            if self.process.poll() is not None:
                console.print(
                    "[red]Rebuild process exited immediately.[/]\n"
                    f"[red]Command:[/] {' '.join(command)}\n"
                    f"[red]Exit code:[/] {self.process.returncode}"
                )
                msg = f"Rebuild process failed to start (exit {self.process.returncode})"
                raise RebuildProcessError(msg, command=command, exit_code=self.process.returncode)

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the process together with everything it spawned.

        The session is asked to exit with ``SIGTERM``; whatever is still alive after
        ``timeout`` seconds gets ``SIGKILL``.

        Raises:
            RebuildProcessError: If the process fails to stop.
        """
        with self._lock:
            process, self.process = self.process, None
            if process is None or process.poll() is not None:
                return
            for sig, grace in ((signal.SIGTERM, timeout), (_KILL_SIGNAL, 1.0)):
                _signal_session(process, sig)
                try:
                    process.wait(timeout=grace)
                except subprocess.TimeoutExpired:
                    continue
                return
        console.print(f"[red]Rebuild process {process.pid} did not exit[/]")
        msg = f"Rebuild process {process.pid} did not exit after being killed"
        raise RebuildProcessError(msg, command=list(process.args))


def _signal_session(process: "subprocess.Popen[Any]", sig: signal.Signals) -> None:
    with suppress(ProcessLookupError):
        if hasattr(os, "killpg"):
            os.killpg(process.pid, sig)
        elif sig is signal.SIGTERM:
            process.terminate()
        else:
            process.kill()
