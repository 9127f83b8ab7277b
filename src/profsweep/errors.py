# Copyright (c) Syntropy Systems
"""Exceptions raised by profsweep."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class ProfsweepError(Exception):
    """Base class for all profsweep failures."""


class StateLoadError(ProfsweepError):
    """The state file exists but could not be read or decoded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to load state from {path}: {reason}")


class StateSaveError(ProfsweepError):
    """The state file could not be written."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to save state to {path}: {reason}")


class BuildToolError(ProfsweepError):
    """A build-tool invocation exited unsuccessfully."""

    def __init__(self, subcommand: str, exit_code: int) -> None:
        self.subcommand = subcommand
        self.exit_code = exit_code
        super().__init__(f"'{subcommand}' failed with exit code {exit_code}")


class ConsistencyError(ProfsweepError):
    """An internal invariant was violated."""


class UnknownKnobError(ConsistencyError):
    """An override references a knob missing from the baseline."""

    def __init__(self, path: str) -> None:
        self.knob_path = path
        super().__init__(f"Override references unknown knob '{path}'")
