# Copyright (c) Syntropy Systems
"""Pydantic models for sweep plans, timing results and persisted state."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import Field
from typing_extensions import override

from profsweep.errors import ConsistencyError

from .base import ProfsweepBaseModel
from .knob import KnobOverride

NS_PER_SECOND = 1_000_000_000


def utcnow() -> str:
    """Get current UTC time as ISO format string."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class Experiment(ProfsweepBaseModel):
    """One planned trial: the baseline with zero or more knobs overridden."""

    overrides: list[KnobOverride] = Field(default_factory=list)

    @property
    def is_control(self) -> bool:
        """True for the unmodified-baseline case."""
        return not self.overrides

    @property
    def label(self) -> str:
        if self.is_control:
            return "baseline"
        return ", ".join(str(item) for item in self.overrides)


class Plan(ProfsweepBaseModel):
    """Baseline configuration plus the ordered list of cases to run."""

    baseline: list[KnobOverride]
    cases: list[Experiment] = Field(default_factory=list)


class ExperimentResult(ProfsweepBaseModel):
    """Timings of one successful experiment, in monotonic nanoseconds."""

    build_ns: int = Field(ge=0)
    run_ns: int = Field(ge=0)

    @property
    def total_ns(self) -> int:
        return self.build_ns + self.run_ns

    @property
    def build_seconds(self) -> float:
        return self.build_ns / NS_PER_SECOND

    @property
    def run_seconds(self) -> float:
        return self.run_ns / NS_PER_SECOND

    @property
    def total_seconds(self) -> float:
        return self.total_ns / NS_PER_SECOND


class ExperimentState(ProfsweepBaseModel):
    """The persisted unit: a plan and the results recorded so far.

    ``results[i]`` belongs to ``plan.cases[i]``; results always form a
    gapless prefix of the cases.
    """

    plan: Plan
    results: list[ExperimentResult] = Field(default_factory=list)
    created_at: str = ""
    updated_at: str | None = None

    @override
    def model_post_init(self, __context: object, /) -> None:
        if not self.created_at:
            self.created_at = utcnow()

    @property
    def next_index(self) -> int:
        """Index of the first case without a recorded result."""
        return len(self.results)

    @property
    def is_complete(self) -> bool:
        return len(self.results) == len(self.plan.cases)

    def pending_cases(self) -> list[tuple[int, Experiment]]:
        """Return (index, case) pairs that still need a result."""
        return list(enumerate(self.plan.cases))[self.next_index :]

    def check_invariant(self) -> None:
        """Raise ConsistencyError if results outgrew the plan."""
        if len(self.results) > len(self.plan.cases):
            msg = (
                f"State holds {len(self.results)} results for "
                f"{len(self.plan.cases)} planned cases"
            )
            raise ConsistencyError(msg)

    def record(self, result: ExperimentResult) -> None:
        """Append the result for the case at ``next_index``."""
        self.check_invariant()
        if self.is_complete:
            msg = "Cannot record a result: every planned case already has one"
            raise ConsistencyError(msg)
        self.results.append(result)
        self.check_invariant()


class ReportEntry(ProfsweepBaseModel):
    """A case paired with its result, as ranked in a report."""

    rank: int
    index: int
    experiment: Experiment
    result: ExperimentResult
