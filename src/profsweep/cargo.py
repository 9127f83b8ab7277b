# Copyright (c) Syntropy Systems
"""Cargo as the build tool driven by a sweep."""
from __future__ import annotations

import logging
import shlex
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from profsweep.errors import BuildToolError
from profsweep.runner import ProcessRunner

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127


@dataclass(frozen=True)
class ExitOutcome:
    """How a build-tool invocation ended."""

    exit_code: int

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class BuildTool(Protocol):
    """Anything that can run a build-tool subcommand and report its exit."""

    def invoke(
        self,
        subcommand: str,
        extra_args: Sequence[str],
        env: Mapping[str, str],
    ) -> ExitOutcome:
        ...


@dataclass
class CargoInvoker:
    """Runs ``cargo <subcommand>`` against a fixed manifest.

    Every invocation gets ``--manifest-path`` and the fixed ``cargo_flags``;
    only the subcommand, its extra arguments and the profile environment
    vary between calls.
    """

    manifest_path: Path
    cargo: str = "cargo"
    cargo_flags: list[str] = field(default_factory=list)
    log_dir: Path | None = None
    kill_grace_period: float = 10.0
    _counter: int = field(default=0, init=False, repr=False)

    def command_for(self, subcommand: str, extra_args: Sequence[str]) -> list[str]:
        """Build the argv for one invocation."""
        return [
            self.cargo,
            subcommand,
            "--manifest-path",
            str(self.manifest_path),
            *self.cargo_flags,
            *extra_args,
        ]

    def invoke(
        self,
        subcommand: str,
        extra_args: Sequence[str],
        env: Mapping[str, str],
    ) -> ExitOutcome:
        """Run cargo and block until it exits."""
        if shutil.which(self.cargo) is None:
            logger.error("Cargo executable not found: %s", self.cargo)
            raise BuildToolError(subcommand, COMMAND_NOT_FOUND)

        argv = self.command_for(subcommand, extra_args)
        logger.debug("Running %s", shlex.join(argv))

        self._counter += 1
        log_path = None
        if self.log_dir is not None:
            log_path = self.log_dir / f"{self._counter:03d}-{subcommand}.log"

        runner = ProcessRunner(
            argv,
            log_path=log_path,
            env=env,
            kill_grace_period=self.kill_grace_period,
        )
        try:
            code = runner.run()
        except OSError as e:
            logger.error("Failed to start %s: %s", argv[0], e)
            raise BuildToolError(subcommand, COMMAND_NOT_FOUND) from e
        except KeyboardInterrupt:
            logger.warning("Interrupted, stopped cargo %s", subcommand)
            raise

        if code != 0 and log_path is not None:
            logger.error("cargo %s failed, output in %s", subcommand, log_path)
        return ExitOutcome(exit_code=code)
