# Copyright (c) Syntropy Systems
"""Timing a single experiment: clean, build, then build-and-run."""
from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from profsweep.errors import BuildToolError
from profsweep.merge import to_environment
from profsweep.models.state import ExperimentResult

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from profsweep.cargo import BuildTool
    from profsweep.models.knob import KnobOverride

logger = logging.getLogger(__name__)

CLEAN = "clean"
BENCH = "bench"
NO_RUN = "--no-run"


def _invoke(
    tool: BuildTool,
    subcommand: str,
    extra_args: Sequence[str],
    env: Mapping[str, str],
) -> int:
    """Run one step and return its elapsed monotonic nanoseconds."""
    started = time.perf_counter_ns()
    outcome = tool.invoke(subcommand, extra_args, env)
    elapsed = time.perf_counter_ns() - started

    if not outcome.success:
        name = " ".join([subcommand, *extra_args])
        raise BuildToolError(name, outcome.exit_code)
    return elapsed


def run_experiment(
    config: Sequence[KnobOverride],
    tool: BuildTool,
    target_args: Sequence[str] = (),
) -> ExperimentResult:
    """Time one fully merged configuration.

    Steps, all with the same environment:
    1. ``clean`` so the build is a full rebuild (not timed)
    2. ``bench --no-run``: the build duration
    3. ``bench``: the run duration, which also covers whatever is left to
       rebuild before the benchmark starts

    The first failing step raises BuildToolError and later steps are
    skipped. Retrying is left to the next sweep invocation.
    """
    env = to_environment(config)

    _ = _invoke(tool, CLEAN, [], env)
    build_ns = _invoke(tool, BENCH, [NO_RUN, *target_args], env)
    run_ns = _invoke(tool, BENCH, list(target_args), env)

    result = ExperimentResult(build_ns=build_ns, run_ns=run_ns)
    logger.debug(
        "Experiment timings: build %.2fs, run %.2fs",
        result.build_seconds,
        result.run_seconds,
    )
    return result
