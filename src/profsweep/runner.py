# Copyright (c) Syntropy Systems
"""Child process management for build-tool invocations."""
from __future__ import annotations

import contextlib
import ctypes
import os
import signal
import subprocess
import sys
import time
from typing import IO, TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path


def setup_pdeathsig() -> None:
    """Set PDEATHSIG so the child dies with profsweep.

    Only works on Linux.
    """
    if sys.platform != "linux":
        return
    try:
        libc = ctypes.CDLL("libc.so.6", use_errno=True)
        pr_set_pdeathsig = 1
        libc.prctl(pr_set_pdeathsig, signal.SIGKILL)
    except (AttributeError, OSError):
        # Can't set PDEATHSIG, continue without it
        return


class ProcessRunner:
    """Runs one command to completion in its own process group.

    Features:
    - Uses start_new_session=True so the whole group can be signalled
    - Sets PDEATHSIG on Linux to prevent orphans
    - Optionally captures stdout/stderr to a log file
    - Terminates the group if the caller is interrupted while waiting
    """

    command_argv: list[str]
    workdir: Path | None
    log_path: Path | None
    kill_grace_period: float
    env: dict[str, str]
    _process: subprocess.Popen[bytes] | None
    _exit_code: int | None
    _output_file: IO[str] | None

    def __init__(
        self,
        command_argv: list[str],
        *,
        workdir: Path | None = None,
        log_path: Path | None = None,
        env: Mapping[str, str] | None = None,
        kill_grace_period: float = 10.0,
    ) -> None:
        """Initialize a process runner.

        Args:
            command_argv: Command as list of argv tokens (no shell)
            workdir: Working directory, defaults to the current one
            log_path: File receiving stdout and stderr; inherit when None
            env: Environment overrides layered on os.environ
            kill_grace_period: Seconds between SIGTERM and SIGKILL on interrupt

        """
        self.command_argv = command_argv
        self.workdir = workdir
        self.log_path = log_path
        self.kill_grace_period = kill_grace_period

        # Merge environment
        self.env = os.environ.copy()
        if env:
            self.env.update(env)

        self._process = None
        self._exit_code = None
        self._output_file = None

    def start(self) -> None:
        """Start the process."""
        stdout: IO[str] | None = None
        if self.log_path is not None:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            self._output_file = self.log_path.open("w")
            stdout = self._output_file

        try:
            self._process = subprocess.Popen(  # noqa: S603
                self.command_argv,
                stdout=stdout,
                stderr=subprocess.STDOUT if stdout is not None else None,
                env=self.env,
                cwd=str(self.workdir) if self.workdir is not None else None,
                start_new_session=True,  # Creates new process group
                preexec_fn=setup_pdeathsig if sys.platform == "linux" else None,  # noqa: PLW1509
            )
        except OSError:
            self._cleanup()
            raise

    def wait(self) -> int:
        """Wait for the process to finish and return exit code.

        A KeyboardInterrupt while waiting kills the process group and is
        re-raised.
        """
        if self._process is None:
            return self._exit_code or 0

        try:
            code = self._process.wait()
        except KeyboardInterrupt:
            _ = self.kill(self.kill_grace_period)
            raise

        self._exit_code = code
        self._cleanup()
        return code

    def run(self) -> int:
        """Start the process and block until it exits."""
        self.start()
        return self.wait()

    def kill(self, grace_period: float = 10.0) -> int:
        """Kill the process group.

        First sends SIGTERM, waits for grace_period, then sends SIGKILL if
        still alive.

        Returns:
            Exit code (negative signal number if killed)

        """
        if self._process is None:
            return self._exit_code or 0

        if self._process.poll() is not None:
            exit_code = self._process.returncode or 0
            self._exit_code = exit_code
            self._cleanup()
            return exit_code

        try:
            pgid = os.getpgid(self._process.pid)
        except (OSError, ProcessLookupError):
            self._cleanup()
            return self._exit_code or -signal.SIGKILL

        with contextlib.suppress(OSError, ProcessLookupError):
            os.killpg(pgid, signal.SIGTERM)

        deadline = time.monotonic() + grace_period
        while time.monotonic() < deadline:
            if self._process.poll() is not None:
                exit_code = self._process.returncode or 0
                self._exit_code = exit_code
                self._cleanup()
                return exit_code
            time.sleep(0.1)

        # Still alive - SIGKILL
        with contextlib.suppress(OSError, ProcessLookupError):
            os.killpg(pgid, signal.SIGKILL)

        with contextlib.suppress(subprocess.TimeoutExpired):
            _ = self._process.wait(timeout=5.0)

        exit_code = self._process.returncode or -signal.SIGKILL
        self._exit_code = exit_code
        self._cleanup()
        return exit_code

    def _cleanup(self) -> None:
        if self._output_file:
            self._output_file.close()
            self._output_file = None

    @property
    def exit_code(self) -> int | None:
        """Get the exit code if finished."""
        return self._exit_code
