# Copyright (c) Syntropy Systems
"""Loading and atomically checkpointing sweep state."""
from __future__ import annotations

import logging
import os
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from profsweep.errors import ConsistencyError, StateLoadError, StateSaveError
from profsweep.models.state import ExperimentState, utcnow
from profsweep.plan import build_plan

if TYPE_CHECKING:
    from collections.abc import Sequence

    from profsweep.models.knob import KnobDefinition

logger = logging.getLogger(__name__)

STATE_FILENAME = "profsweep-state.json"


def read_state(path: Path) -> ExperimentState | None:
    """Read persisted state, or None if the file does not exist.

    Any other failure is a StateLoadError.
    """
    try:
        text = path.read_text()
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        raise StateLoadError(path, str(e)) from e

    try:
        state = ExperimentState.model_validate_json(text)
    except ValidationError as e:
        raise StateLoadError(path, str(e)) from e

    try:
        state.check_invariant()
    except ConsistencyError as e:
        raise StateLoadError(path, str(e)) from e

    return state


def new_state(catalog: Sequence[KnobDefinition]) -> ExperimentState:
    """Create a fresh state with a plan built from the catalog."""
    return ExperimentState(plan=build_plan(catalog))


def load_state(path: Path, catalog: Sequence[KnobDefinition]) -> ExperimentState:
    """Load persisted state, or start fresh if none exists yet."""
    state = read_state(path)
    if state is None:
        logger.info("No state at %s, starting a fresh sweep", path)
        return new_state(catalog)
    logger.info(
        "Loaded state from %s: %d of %d cases recorded",
        path,
        len(state.results),
        len(state.plan.cases),
    )
    return state


def save_state(path: Path, state: ExperimentState) -> None:
    """Write state so readers only ever see a complete snapshot.

    The JSON goes to a temporary file in the target directory, is fsynced,
    and then renamed over the target.
    """
    state.updated_at = utcnow()
    payload = state.model_dump_json(indent=2)

    tmp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_path = Path(f.name)
            _ = f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path is not None:
            with suppress(OSError):
                tmp_path.unlink()
        raise StateSaveError(path, str(e)) from e

    logger.debug("Checkpointed %d result(s) to %s", len(state.results), path)
