# Copyright (c) Syntropy Systems
"""Pytest fixtures for profsweep tests."""
from __future__ import annotations

import os
import tempfile
from collections.abc import Callable, Generator, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from profsweep.cargo import ExitOutcome
from profsweep.catalog import env_var_for
from profsweep.models.knob import KnobDefinition

# Store original cwd at module load time
_original_cwd = Path.cwd()

FailPredicate = Callable[[str, Sequence[str], Mapping[str, str]], bool]


@dataclass
class Call:
    """One recorded build-tool invocation."""

    subcommand: str
    extra_args: list[str]
    env: dict[str, str]


@dataclass
class FakeBuildTool:
    """Records invocations instead of spawning cargo.

    ``fail_when`` decides which invocations exit with ``exit_code``.
    """

    fail_when: FailPredicate | None = None
    exit_code: int = 101
    calls: list[Call] = field(default_factory=list)

    def invoke(
        self,
        subcommand: str,
        extra_args: Sequence[str],
        env: Mapping[str, str],
    ) -> ExitOutcome:
        self.calls.append(Call(subcommand, list(extra_args), dict(env)))
        if self.fail_when is not None and self.fail_when(subcommand, extra_args, env):
            return ExitOutcome(exit_code=self.exit_code)
        return ExitOutcome(exit_code=0)


def make_knob(name: str, values: Sequence[str], default: str) -> KnobDefinition:
    """Build a release-profile knob for tests."""
    path = f"profile.release.{name}"
    return KnobDefinition(
        path=path,
        env_var=env_var_for(path),
        allowed_values=tuple(values),
        default_value=default,
    )


OPT_LEVEL = make_knob("opt-level", ["0", "1", "2", "3"], "3")
DEBUG = make_knob("debug", ["false", "true"], "false")
PANIC = make_knob("panic", [], "unwind")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def project_dir(temp_dir: Path) -> Generator[Path, None, None]:
    """Run the test from inside a temporary data directory."""
    os.chdir(temp_dir)

    yield temp_dir

    # Always return to original cwd
    os.chdir(_original_cwd)


@pytest.fixture
def small_catalog() -> tuple[KnobDefinition, ...]:
    """opt-level {0..3} default 3, debug {false,true} default false, panic fixed."""
    return (OPT_LEVEL, DEBUG, PANIC)


@pytest.fixture
def fake_tool() -> FakeBuildTool:
    """A build tool that always succeeds."""
    return FakeBuildTool()
