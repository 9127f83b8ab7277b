# Copyright (c) Syntropy Systems
"""Shared Pydantic model helpers for profsweep."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict


class ProfsweepBaseModel(BaseModel):
    """Base model with shared config for profsweep schemas."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="ignore",
        populate_by_name=True,
    )


class FrozenModel(BaseModel):
    """Immutable, hashable model for catalog-level records."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )
