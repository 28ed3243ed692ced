"""Tests for domain/plan.py."""

import pytest

from runreport.domain.plan import RunPlan
from runreport.infrastructure.event_source import StateChangeEmitter


class TestRunPlan:
    """Tests for RunPlan."""

    def test_defaults(self) -> None:
        plan = RunPlan(files=("a.py",), status=StateChangeEmitter())
        assert plan.fail_fast_enabled is False
        assert plan.matching is False
        assert plan.previous_failures == 0
        assert plan.run_vector == 1
        assert plan.file_path_prefix is None

    def test_negative_previous_failures_raises(self) -> None:
        with pytest.raises(ValueError, match="previous_failures"):
            RunPlan(files=(), status=StateChangeEmitter(), previous_failures=-1)

    def test_zero_run_vector_raises(self) -> None:
        with pytest.raises(ValueError, match="run_vector"):
            RunPlan(files=(), status=StateChangeEmitter(), run_vector=0)

    def test_frozen(self) -> None:
        plan = RunPlan(files=(), status=StateChangeEmitter())
        with pytest.raises(AttributeError):
            plan.run_vector = 2  # type: ignore[misc]
