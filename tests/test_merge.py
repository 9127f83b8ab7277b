# Copyright (c) Syntropy Systems
"""Tests for config merging."""

import pytest
from conftest import DEBUG, OPT_LEVEL, PANIC, make_knob

from profsweep.catalog import DEFAULT_CATALOG
from profsweep.errors import ConsistencyError, UnknownKnobError
from profsweep.merge import merge_config, to_environment
from profsweep.models.knob import KnobDefinition, KnobOverride
from profsweep.plan import build_baseline, build_plan


class TestMergeConfig:
    """Tests for merge_config."""

    def test_no_overrides_is_baseline(self):
        """Merging nothing returns the baseline unchanged."""
        baseline = build_baseline(DEFAULT_CATALOG)
        assert merge_config(baseline, []) == baseline

    def test_single_override_changes_one_knob(self):
        """Every planned case differs from the baseline in exactly its knob."""
        plan = build_plan(DEFAULT_CATALOG)

        for case in plan.cases[1:]:
            merged = merge_config(plan.baseline, case.overrides)
            override = case.overrides[0]

            assert len(merged) == len(plan.baseline)
            changed = [
                (before, after)
                for before, after in zip(plan.baseline, merged)
                if before != after
            ]
            assert len(changed) == 1
            before, after = changed[0]
            assert before.knob == after.knob == override.knob
            assert before.value == override.knob.default_value
            assert after == override

    def test_preserves_baseline_order(self):
        """The merged config keeps baseline order."""
        baseline = build_baseline([OPT_LEVEL, DEBUG, PANIC])
        merged = merge_config(baseline, [KnobOverride(knob=DEBUG, value="true")])

        assert [item.knob.path for item in merged] == [
            OPT_LEVEL.path,
            DEBUG.path,
            PANIC.path,
        ]
        assert merged[1].value == "true"

    def test_baseline_not_mutated(self):
        """Merging works on a copy."""
        baseline = build_baseline([OPT_LEVEL])
        snapshot = list(baseline)
        _ = merge_config(baseline, [KnobOverride(knob=OPT_LEVEL, value="0")])
        assert baseline == snapshot

    def test_overrides_do_not_leak_between_cases(self):
        """Each merge starts from the baseline, not the previous result."""
        baseline = build_baseline([OPT_LEVEL, DEBUG])
        first = merge_config(baseline, [KnobOverride(knob=OPT_LEVEL, value="0")])
        second = merge_config(baseline, [KnobOverride(knob=DEBUG, value="true")])

        assert first[1].value == "false"
        assert second[0].value == "3"

    def test_unknown_knob_raises(self):
        """An override for a knob outside the baseline is a consistency error."""
        baseline = build_baseline([OPT_LEVEL])
        stray = make_knob("lto", ["thin"], "true")

        with pytest.raises(UnknownKnobError) as exc_info:
            _ = merge_config(baseline, [KnobOverride(knob=stray, value="thin")])

        assert exc_info.value.knob_path == "profile.release.lto"
        assert isinstance(exc_info.value, ConsistencyError)

    def test_mismatched_definition_raises(self):
        """An override whose definition disagrees with the baseline is rejected."""
        baseline = build_baseline([OPT_LEVEL, DEBUG])
        wrong = KnobDefinition(
            path=OPT_LEVEL.path,
            env_var="WRONG",
            allowed_values=OPT_LEVEL.allowed_values,
            default_value=OPT_LEVEL.default_value,
        )

        with pytest.raises(ConsistencyError, match="opt-level"):
            _ = merge_config(baseline, [KnobOverride(knob=wrong, value="0")])

    def test_override_keeps_baseline_definition(self):
        """Only the value changes; the env var still comes from the baseline."""
        baseline = build_baseline([OPT_LEVEL])
        merged = merge_config(baseline, [KnobOverride(knob=OPT_LEVEL, value="0")])

        assert merged[0].knob is baseline[0].knob
        assert to_environment(merged) == {"CARGO_PROFILE_RELEASE_OPT_LEVEL": "0"}


class TestToEnvironment:
    """Tests for to_environment."""

    def test_scenario_env(self):
        """opt-level=0 against {opt-level: 3, debug: false}."""
        baseline = build_baseline([OPT_LEVEL, DEBUG])
        merged = merge_config(baseline, [KnobOverride(knob=OPT_LEVEL, value="0")])

        assert to_environment(merged) == {
            "CARGO_PROFILE_RELEASE_OPT_LEVEL": "0",
            "CARGO_PROFILE_RELEASE_DEBUG": "false",
        }

    def test_last_write_wins(self):
        """Two knobs sharing an env var: the later one is used."""
        first = KnobDefinition(path="a.one", env_var="SHARED", default_value="1")
        second = KnobDefinition(path="a.two", env_var="SHARED", default_value="2")

        env = to_environment(build_baseline([first, second]))
        assert env == {"SHARED": "2"}
