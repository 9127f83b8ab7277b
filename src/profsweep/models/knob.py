# Copyright (c) Syntropy Systems
"""Knob definitions and single-knob overrides."""

from __future__ import annotations

from pydantic import Field
from typing_extensions import override

from .base import FrozenModel


class KnobDefinition(FrozenModel):
    """A tunable release-profile setting.

    Identity is ``path``; two definitions compare equal only when every
    field matches.
    """

    path: str
    env_var: str
    allowed_values: tuple[str, ...] = Field(default_factory=tuple)
    default_value: str

    @property
    def name(self) -> str:
        """Last component of the dotted profile path (e.g. ``opt-level``)."""
        return self.path.rsplit(".", 1)[-1]


class KnobOverride(FrozenModel):
    """A single knob pinned to a value."""

    knob: KnobDefinition
    value: str

    @override
    def __str__(self) -> str:
        return f"{self.knob.name}={self.value}"
