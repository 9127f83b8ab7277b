# Copyright (c) Syntropy Systems
"""Configuration management for profsweep."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import cast

import yaml

from profsweep.catalog import DEFAULT_CATALOG, dump_catalog, load_catalog
from profsweep.models.knob import KnobDefinition
from profsweep.state import STATE_FILENAME

CONFIG_FILENAME = "profsweep.yaml"


@dataclass
class SweepSettings:
    """Configuration for a sweep."""

    # Cargo.toml of the crate being measured
    manifest_path: Path = field(default_factory=lambda: Path("Cargo.toml"))

    # Holds the state file, config file and logs
    data_dir: Path = field(default_factory=Path)

    # Cargo executable
    cargo: str = "cargo"

    # Passed to every cargo invocation, after --manifest-path
    cargo_flags: list[str] = field(default_factory=list)

    # Selects the benchmark target, e.g. ["--bench", "throughput"]
    target_args: list[str] = field(default_factory=list)

    # Write cargo output to per-invocation logs instead of the terminal
    capture_output: bool = True

    # Grace period before SIGKILL after SIGTERM (seconds)
    kill_grace_period: int = 10

    # Replaces the built-in knob catalog when set
    catalog: list[dict[str, object]] | None = None

    @property
    def state_path(self) -> Path:
        return self.data_dir / STATE_FILENAME

    @property
    def config_path(self) -> Path:
        return self.data_dir / CONFIG_FILENAME

    @property
    def logs_dir(self) -> Path:
        return self.data_dir / "logs"

    def catalog_definitions(self) -> tuple[KnobDefinition, ...]:
        """The knob catalog this sweep plans from."""
        if self.catalog is None:
            return DEFAULT_CATALOG
        return load_catalog(self.catalog)


def _str_list(value: object) -> list[str] | None:
    if isinstance(value, list):
        return [str(item) for item in cast("list[object]", value)]
    return None


def load_settings(
    data_dir: Path | None = None,
    manifest_path: Path | None = None,
) -> SweepSettings:
    """Load settings from <data_dir>/profsweep.yaml or defaults.

    Explicit arguments take precedence over the file. Values of the wrong
    type in the file are ignored.
    """
    settings = SweepSettings()
    if data_dir is not None:
        settings.data_dir = data_dir

    config_path = settings.config_path
    if config_path.exists():
        try:
            with config_path.open() as f:
                data = cast("dict[str, object]", yaml.safe_load(f) or {})
        except yaml.YAMLError as e:
            msg = f"Invalid config file {config_path}: {e}"
            raise ValueError(msg) from e

        if not isinstance(data, dict):
            msg = f"Config file {config_path} must contain a mapping"
            raise ValueError(msg)

        manifest = data.get("manifest_path")
        if isinstance(manifest, str):
            settings.manifest_path = Path(manifest)
        cargo = data.get("cargo")
        if isinstance(cargo, str):
            settings.cargo = cargo
        cargo_flags = _str_list(data.get("cargo_flags"))
        if cargo_flags is not None:
            settings.cargo_flags = cargo_flags
        target_args = _str_list(data.get("target_args"))
        if target_args is not None:
            settings.target_args = target_args
        capture_output = data.get("capture_output")
        if isinstance(capture_output, bool):
            settings.capture_output = capture_output
        kill_grace_period = data.get("kill_grace_period")
        if isinstance(kill_grace_period, (int, float)):
            settings.kill_grace_period = int(kill_grace_period)
        catalog = data.get("catalog")
        if isinstance(catalog, list):
            settings.catalog = cast("list[dict[str, object]]", catalog)

    if manifest_path is not None:
        settings.manifest_path = manifest_path

    return settings


def default_config_data() -> dict[str, object]:
    """Contents written by ``profsweep init``."""
    return {
        "manifest_path": "Cargo.toml",
        "cargo": "cargo",
        "cargo_flags": [],
        "target_args": [],
        "capture_output": True,
        "kill_grace_period": 10,
        "catalog": dump_catalog(DEFAULT_CATALOG),
    }
