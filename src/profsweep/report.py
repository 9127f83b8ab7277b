# Copyright (c) Syntropy Systems
"""Ranking completed sweeps and exporting the ranking."""
from __future__ import annotations

import csv
from typing import TYPE_CHECKING

from pydantic import TypeAdapter

from profsweep.errors import ConsistencyError
from profsweep.models.state import ReportEntry

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from profsweep.models.state import ExperimentState

_REPORT_ADAPTER = TypeAdapter(list[ReportEntry])

CSV_FIELDS = [
    "rank",
    "index",
    "experiment",
    "build_s",
    "run_s",
    "total_s",
    "delta_s",
]


def build_report(state: ExperimentState) -> list[ReportEntry]:
    """Pair every case with its result, fastest total first.

    Ties keep plan order. The sweep must be complete.
    """
    state.check_invariant()
    if not state.is_complete:
        msg = (
            f"Report requested with {len(state.results)} of "
            f"{len(state.plan.cases)} cases recorded"
        )
        raise ConsistencyError(msg)

    pairs = list(enumerate(zip(state.plan.cases, state.results)))
    # sorted() is stable, so equal totals stay in plan order
    pairs = sorted(pairs, key=lambda pair: pair[1][1].total_ns)

    return [
        ReportEntry(rank=rank, index=index, experiment=experiment, result=result)
        for rank, (index, (experiment, result)) in enumerate(pairs, 1)
    ]


def baseline_entry(report: Sequence[ReportEntry]) -> ReportEntry | None:
    """Return the control case's entry, if the plan had one."""
    return next((entry for entry in report if entry.experiment.is_control), None)


def delta_seconds(entry: ReportEntry, baseline: ReportEntry | None) -> float | None:
    """Total time relative to the control case (negative is faster)."""
    if baseline is None:
        return None
    return entry.result.total_seconds - baseline.result.total_seconds


def write_report(report: Sequence[ReportEntry], output: Path) -> None:
    """Export the ranking to a .json or .csv file."""
    suffix = output.suffix.lower()
    if suffix not in (".csv", ".json"):
        msg = f"Report output must be .csv or .json, got '{output.name}'"
        raise ValueError(msg)

    if suffix == ".json":
        _ = output.write_bytes(_REPORT_ADAPTER.dump_json(list(report), indent=2))
        return

    control = baseline_entry(report)
    with output.open("w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for entry in report:
            delta = delta_seconds(entry, control)
            writer.writerow(
                {
                    "rank": entry.rank,
                    "index": entry.index,
                    "experiment": entry.experiment.label,
                    "build_s": f"{entry.result.build_seconds:.3f}",
                    "run_s": f"{entry.result.run_seconds:.3f}",
                    "total_s": f"{entry.result.total_seconds:.3f}",
                    "delta_s": "" if delta is None else f"{delta:+.3f}",
                }
            )
