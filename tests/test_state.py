# Copyright (c) Syntropy Systems
"""Tests for state persistence."""

import json
import os
from pathlib import Path

import pytest

from profsweep.catalog import DEFAULT_CATALOG
from profsweep.errors import ConsistencyError, StateLoadError, StateSaveError
from profsweep.models.state import ExperimentResult, ExperimentState
from profsweep.plan import build_plan
from profsweep.state import STATE_FILENAME, load_state, new_state, read_state, save_state


def _state_with_results(count: int) -> ExperimentState:
    state = new_state(DEFAULT_CATALOG)
    for i in range(count):
        state.record(ExperimentResult(build_ns=1_000_000_000 + i, run_ns=123_456_789 * i))
    return state


class TestSaveLoad:
    """Tests for save_state / read_state round trips."""

    def test_roundtrip_fresh(self, temp_dir: Path) -> None:
        """A fresh state reads back equal."""
        path = temp_dir / STATE_FILENAME
        state = new_state(DEFAULT_CATALOG)

        save_state(path, state)

        assert read_state(path) == state

    def test_roundtrip_with_results(self, temp_dir: Path) -> None:
        """Results, including nanosecond timings, survive exactly."""
        path = temp_dir / STATE_FILENAME
        state = _state_with_results(5)

        save_state(path, state)
        loaded = read_state(path)

        assert loaded == state
        assert loaded is not None
        assert loaded.results[3].run_ns == 123_456_789 * 3
        assert loaded.updated_at is not None

    def test_json_shape(self, temp_dir: Path) -> None:
        """The file is a JSON object with plan and results."""
        path = temp_dir / STATE_FILENAME
        save_state(path, _state_with_results(1))

        data = json.loads(path.read_text())
        assert set(data) >= {"plan", "results"}
        assert set(data["plan"]) == {"baseline", "cases"}
        assert data["results"] == [{"build_ns": 1_000_000_000, "run_ns": 0}]
        assert data["plan"]["baseline"][0]["knob"]["path"] == "profile.release.opt-level"

    def test_overwrite(self, temp_dir: Path) -> None:
        """Saving again replaces the previous snapshot."""
        path = temp_dir / STATE_FILENAME
        save_state(path, _state_with_results(1))
        save_state(path, _state_with_results(2))

        loaded = read_state(path)
        assert loaded is not None
        assert len(loaded.results) == 2

    def test_no_temp_files_left(self, temp_dir: Path) -> None:
        """Only the target file remains after a save."""
        path = temp_dir / STATE_FILENAME
        save_state(path, _state_with_results(2))

        assert sorted(p.name for p in temp_dir.iterdir()) == [STATE_FILENAME]

    def test_creates_parent_directory(self, temp_dir: Path) -> None:
        """The data directory is created on first save."""
        path = temp_dir / "nested" / "data" / STATE_FILENAME
        save_state(path, new_state(DEFAULT_CATALOG))
        assert path.exists()


class TestLoadState:
    """Tests for load_state and read_state failure handling."""

    def test_missing_file_starts_fresh(self, temp_dir: Path) -> None:
        """No state file means a new plan with no results."""
        state = load_state(temp_dir / STATE_FILENAME, DEFAULT_CATALOG)

        assert state.plan == build_plan(DEFAULT_CATALOG)
        assert state.results == []
        assert read_state(temp_dir / STATE_FILENAME) is None

    def test_existing_file_wins_over_catalog(self, temp_dir: Path) -> None:
        """A persisted plan is used as-is."""
        path = temp_dir / STATE_FILENAME
        state = _state_with_results(1)
        save_state(path, state)

        assert load_state(path, []) == state

    def test_corrupt_json(self, temp_dir: Path) -> None:
        """Garbage in the state file is fatal."""
        path = temp_dir / STATE_FILENAME
        _ = path.write_text("{not json")

        with pytest.raises(StateLoadError) as exc_info:
            _ = load_state(path, DEFAULT_CATALOG)
        assert exc_info.value.path == path

    def test_undecodable_file(self, temp_dir: Path) -> None:
        """Bytes that are not UTF-8 are a load error, not a decode crash."""
        path = temp_dir / STATE_FILENAME
        _ = path.write_bytes(b'{"plan": \xff\xfe}')

        with pytest.raises(StateLoadError) as exc_info:
            _ = read_state(path)
        assert exc_info.value.path == path

    def test_truncated_file(self, temp_dir: Path) -> None:
        """A partially written file is fatal, not treated as fresh."""
        path = temp_dir / STATE_FILENAME
        save_state(path, _state_with_results(2))
        text = path.read_text()
        _ = path.write_text(text[: len(text) // 2])

        with pytest.raises(StateLoadError):
            _ = read_state(path)

    def test_negative_duration_rejected(self, temp_dir: Path) -> None:
        """Durations must be non-negative."""
        path = temp_dir / STATE_FILENAME
        save_state(path, _state_with_results(1))
        data = json.loads(path.read_text())
        data["results"][0]["build_ns"] = -5
        _ = path.write_text(json.dumps(data))

        with pytest.raises(StateLoadError):
            _ = read_state(path)

    def test_more_results_than_cases(self, temp_dir: Path) -> None:
        """A results list longer than the plan is rejected on load."""
        path = temp_dir / STATE_FILENAME
        save_state(path, _state_with_results(1))
        data = json.loads(path.read_text())
        data["plan"]["cases"] = []
        _ = path.write_text(json.dumps(data))

        with pytest.raises(StateLoadError, match="results"):
            _ = read_state(path)

    def test_unreadable_path(self, temp_dir: Path) -> None:
        """A directory where the file should be is an I/O fault."""
        path = temp_dir / STATE_FILENAME
        path.mkdir()

        with pytest.raises(StateLoadError):
            _ = read_state(path)


class TestSaveFailures:
    """Tests for save_state failure handling."""

    def test_replace_failure_keeps_previous_snapshot(
        self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """If the rename fails the old file is intact and the temp file is gone."""
        path = temp_dir / STATE_FILENAME
        save_state(path, _state_with_results(1))
        before = path.read_text()

        def broken_replace(src: object, dst: object) -> None:
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", broken_replace)

        with pytest.raises(StateSaveError, match="disk full"):
            save_state(path, _state_with_results(2))

        assert path.read_text() == before
        assert sorted(p.name for p in temp_dir.iterdir()) == [STATE_FILENAME]

    def test_parent_is_a_file(self, temp_dir: Path) -> None:
        """An unusable data directory is a save error."""
        blocker = temp_dir / "blocker"
        _ = blocker.write_text("")

        with pytest.raises(StateSaveError):
            save_state(blocker / STATE_FILENAME, new_state(DEFAULT_CATALOG))


class TestInvariant:
    """Tests for the results-prefix invariant."""

    def test_record_appends_in_order(self) -> None:
        """Each record fills the next index."""
        state = new_state(DEFAULT_CATALOG)
        assert state.next_index == 0

        state.record(ExperimentResult(build_ns=1, run_ns=2))
        assert state.next_index == 1
        assert state.pending_cases()[0][0] == 1

    def test_record_on_complete_state(self) -> None:
        """Recording past the end of the plan is refused."""
        state = ExperimentState(plan=build_plan([]))
        state.record(ExperimentResult(build_ns=1, run_ns=1))
        assert state.is_complete

        with pytest.raises(ConsistencyError):
            state.record(ExperimentResult(build_ns=1, run_ns=1))
        assert len(state.results) == 1

    def test_check_invariant(self) -> None:
        """Results longer than cases fail the check."""
        state = ExperimentState(
            plan=build_plan([]),
            results=[ExperimentResult(build_ns=1, run_ns=1)] * 2,
        )
        with pytest.raises(ConsistencyError):
            state.check_invariant()
