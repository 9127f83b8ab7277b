# Copyright (c) Syntropy Systems
"""The catalog of Cargo release-profile knobs to sweep."""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import cast

from profsweep.models.knob import KnobDefinition

PROFILE_PREFIX = "profile.release"


def env_var_for(path: str) -> str:
    """Derive Cargo's environment variable for a dotted profile path.

    ``profile.release.opt-level`` -> ``CARGO_PROFILE_RELEASE_OPT_LEVEL``
    """
    return "CARGO_" + path.replace(".", "_").replace("-", "_").upper()


def _knob(name: str, values: Sequence[str], default: str) -> KnobDefinition:
    path = f"{PROFILE_PREFIX}.{name}"
    return KnobDefinition(
        path=path,
        env_var=env_var_for(path),
        allowed_values=tuple(values),
        default_value=default,
    )


DEFAULT_CATALOG: tuple[KnobDefinition, ...] = (
    _knob("opt-level", ["0", "1", "2", "3"], "3"),
    _knob("debug", ["false", "1", "true"], "true"),
    _knob("rpath", [], "false"),
    _knob("lto", ["false", "thin", "true"], "true"),
    _knob("debug-assertions", ["false", "true"], "true"),
    _knob("codegen-units", ["1", "4", "16"], "1"),
    _knob("panic", [], "unwind"),
    _knob("incremental", ["false", "true"], "false"),
    _knob("overflow-checks", ["false", "true"], "true"),
)


def load_catalog(entries: Sequence[Mapping[str, object]]) -> tuple[KnobDefinition, ...]:
    """Build a catalog from config-file entries.

    Each entry needs ``path`` and ``default``; ``values`` defaults to no
    alternatives and ``env_var`` to the Cargo convention for ``path``.
    Scalars are stringified so YAML ``3`` and ``"3"`` mean the same value.
    """
    catalog: list[KnobDefinition] = []
    seen: set[str] = set()

    for entry in entries:
        if not isinstance(entry, Mapping):
            msg = f"Catalog entry must be a mapping, got {entry!r}"
            raise ValueError(msg)
        if "path" not in entry:
            msg = f"Catalog entry must have 'path' field: {dict(entry)}"
            raise ValueError(msg)
        if "default" not in entry:
            msg = f"Catalog entry '{entry['path']}' must have 'default' field"
            raise ValueError(msg)

        path = str(entry["path"])
        if path in seen:
            msg = f"Duplicate catalog entry for '{path}'"
            raise ValueError(msg)
        seen.add(path)

        raw_values = entry.get("values") or []
        if not isinstance(raw_values, list):
            msg = f"Catalog entry '{path}': 'values' must be a list"
            raise ValueError(msg)

        env_var = entry.get("env_var")
        catalog.append(
            KnobDefinition(
                path=path,
                env_var=str(env_var) if env_var else env_var_for(path),
                allowed_values=tuple(
                    _format_value(v) for v in cast("list[object]", raw_values)
                ),
                default_value=_format_value(entry["default"]),
            )
        )

    return tuple(catalog)


def dump_catalog(catalog: Sequence[KnobDefinition]) -> list[dict[str, object]]:
    """Inverse of load_catalog, for writing config files."""
    return [
        {
            "path": knob.path,
            "env_var": knob.env_var,
            "values": list(knob.allowed_values),
            "default": knob.default_value,
        }
        for knob in catalog
    ]


def _format_value(value: object) -> str:
    # YAML reads true/false as bools; Cargo wants the lowercase spelling
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
