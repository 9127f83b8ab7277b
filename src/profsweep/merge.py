# Copyright (c) Syntropy Systems
"""Merging sparse experiment overrides into a complete configuration."""
from __future__ import annotations

from typing import TYPE_CHECKING

from profsweep.errors import ConsistencyError, UnknownKnobError
from profsweep.models.knob import KnobOverride

if TYPE_CHECKING:
    from collections.abc import Sequence


def merge_config(
    baseline: Sequence[KnobOverride],
    overrides: Sequence[KnobOverride],
) -> list[KnobOverride]:
    """Apply overrides on top of the baseline.

    The result covers every baseline knob exactly once, in baseline order,
    and only the overridden values change. Knobs are matched by path. An
    override for a knob the baseline does not know about, or one whose
    definition disagrees with the baseline's, means the plan is corrupt.
    """
    config = list(baseline)
    positions = {item.knob.path: i for i, item in enumerate(config)}

    for item in overrides:
        index = positions.get(item.knob.path)
        if index is None:
            raise UnknownKnobError(item.knob.path)

        current = config[index]
        if item.knob != current.knob:
            msg = (
                f"Override for '{item.knob.path}' does not match the baseline "
                f"definition (env var {item.knob.env_var}, "
                f"expected {current.knob.env_var})"
            )
            raise ConsistencyError(msg)
        config[index] = KnobOverride(knob=current.knob, value=item.value)

    return config


def to_environment(config: Sequence[KnobOverride]) -> dict[str, str]:
    """Project a merged config onto the environment variables Cargo reads.

    If two knobs share an environment variable, the later one in ``config``
    wins.
    """
    env: dict[str, str] = {}
    for item in config:
        env[item.knob.env_var] = item.value
    return env
