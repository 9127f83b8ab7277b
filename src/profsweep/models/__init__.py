# Copyright (c) Syntropy Systems
"""Pydantic models for profsweep plans, results and state."""

from profsweep.models.knob import KnobDefinition, KnobOverride
from profsweep.models.state import (
    Experiment,
    ExperimentResult,
    ExperimentState,
    Plan,
    ReportEntry,
)

__all__ = [
    "Experiment",
    "ExperimentResult",
    "ExperimentState",
    "KnobDefinition",
    "KnobOverride",
    "Plan",
    "ReportEntry",
]
