# Copyright (c) Syntropy Systems
"""The resumable sweep: run every pending case, checkpoint after each."""
from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Protocol

from profsweep.experiment import run_experiment
from profsweep.merge import merge_config
from profsweep.plan import build_baseline
from profsweep.state import new_state, read_state, save_state

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from profsweep.cargo import BuildTool
    from profsweep.models.knob import KnobDefinition
    from profsweep.models.state import Experiment, ExperimentResult, ExperimentState

logger = logging.getLogger(__name__)


class SweepPhase(str, enum.Enum):
    """Where a sweep is in its lifecycle."""

    FRESH = "fresh"
    RESUMING = "resuming"
    RUNNING = "running"
    COMPLETE = "complete"


class _CaseStarted(Protocol):
    def __call__(self, index: int, experiment: Experiment) -> None:
        ...


class _CaseDone(Protocol):
    def __call__(
        self, index: int, experiment: Experiment, result: ExperimentResult
    ) -> None:
        ...


class Sweep:
    """Drives the build tool through a plan, one case at a time.

    The state's results are a prefix of its plan's cases. Each successful
    case appends exactly one result and the whole state is saved before the
    next case starts, so an interrupted sweep resumes at the first case
    without a result and redoes at most that one case.
    """

    state: ExperimentState
    state_path: Path
    tool: BuildTool
    target_args: list[str]
    phase: SweepPhase

    def __init__(
        self,
        state: ExperimentState,
        state_path: Path,
        tool: BuildTool,
        *,
        target_args: Sequence[str] = (),
        resumed: bool = False,
    ) -> None:
        self.state = state
        self.state_path = state_path
        self.tool = tool
        self.target_args = list(target_args)

        state.check_invariant()
        if state.is_complete:
            self.phase = SweepPhase.COMPLETE
        elif resumed:
            self.phase = SweepPhase.RESUMING
        else:
            self.phase = SweepPhase.FRESH

    @classmethod
    def open(
        cls,
        state_path: Path,
        catalog: Sequence[KnobDefinition],
        tool: BuildTool,
        *,
        target_args: Sequence[str] = (),
    ) -> Sweep:
        """Resume the sweep persisted at state_path, or plan a new one."""
        state = read_state(state_path)
        if state is None:
            logger.info("Planning a new sweep at %s", state_path)
            return cls(new_state(catalog), state_path, tool, target_args=target_args)

        if state.plan.baseline != build_baseline(catalog):
            logger.warning(
                "Knob catalog changed since %s was created; "
                "continuing with the persisted plan",
                state_path,
            )
        return cls(state, state_path, tool, target_args=target_args, resumed=True)

    def run(
        self,
        on_case_start: _CaseStarted | None = None,
        on_case_done: _CaseDone | None = None,
    ) -> ExperimentState:
        """Run every case that has no result yet.

        Raises BuildToolError as soon as a case fails; that case gets no
        result and the persisted state is left as of the last success.
        """
        state = self.state
        state.check_invariant()
        total = len(state.plan.cases)

        if not state.is_complete:
            self.phase = SweepPhase.RUNNING

        for index, experiment in enumerate(state.plan.cases):
            if index < state.next_index:
                logger.info(
                    "Skipping case %d (%s): already recorded", index, experiment.label
                )
                continue

            logger.info("Running case %d/%d: %s", index + 1, total, experiment.label)
            if on_case_start is not None:
                on_case_start(index, experiment)

            config = merge_config(state.plan.baseline, experiment.overrides)
            result = run_experiment(config, self.tool, self.target_args)

            state.record(result)
            save_state(self.state_path, state)

            logger.info(
                "Case %d/%d done: build %.2fs, run %.2fs",
                index + 1,
                total,
                result.build_seconds,
                result.run_seconds,
            )
            if on_case_done is not None:
                on_case_done(index, experiment, result)

        self.phase = SweepPhase.COMPLETE
        return state
