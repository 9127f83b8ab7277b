# Copyright (c) Syntropy Systems
"""Experiment plan generation from a knob catalog."""
from __future__ import annotations

from typing import TYPE_CHECKING

from profsweep.models.knob import KnobOverride
from profsweep.models.state import Experiment, Plan

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from profsweep.models.knob import KnobDefinition


def build_baseline(catalog: Sequence[KnobDefinition]) -> list[KnobOverride]:
    """Pin every catalog knob to its default value."""
    return [KnobOverride(knob=knob, value=knob.default_value) for knob in catalog]


def is_redundant(experiment: Experiment, baseline: Sequence[KnobOverride]) -> bool:
    """True if every override already matches the baseline.

    The control case (no overrides) is never considered redundant.
    """
    if experiment.is_control:
        return False
    return all(item in baseline for item in experiment.overrides)


def generate_single_knob_cases(
    catalog: Sequence[KnobDefinition],
) -> Iterator[Experiment]:
    """Yield one experiment per (knob, alternative value), in catalog order."""
    for knob in catalog:
        for value in knob.allowed_values:
            yield Experiment(overrides=[KnobOverride(knob=knob, value=value)])


def build_plan(catalog: Sequence[KnobDefinition]) -> Plan:
    """Build the sweep plan for a catalog.

    The first case is always the unmodified baseline, used as the control.
    It is followed by single-knob cases, knob by knob and value by value,
    leaving out any case that would just repeat the baseline. Results are
    matched to cases by index, so this order must not change.
    """
    baseline = build_baseline(catalog)
    cases = [Experiment()]

    for experiment in generate_single_knob_cases(catalog):
        if is_redundant(experiment, baseline):
            continue
        cases.append(experiment)

    return Plan(baseline=baseline, cases=cases)
