"""Run plan: what the driver hands the reporter at the start of a run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from runreport.domain.ports.event_source import StateChangeSource


@dataclass(frozen=True, slots=True)
class RunPlan:
    """Immutable description of one run.

    Attributes:
        files: Test file identifiers under test.
        status: Event channel for the rest of the run.
        fail_fast_enabled: Remaining tests are abandoned after the first failure.
        matching: A title match filter is active.
        previous_failures: Failures from the previous run in files not rerun.
        run_vector: Monotonically increasing run counter (1 for the first run).
        file_path_prefix: Common path stripped from titles. None = computed
            from files by the reporter.
    """

    files: tuple[str, ...]
    status: StateChangeSource
    fail_fast_enabled: bool = False
    matching: bool = False
    previous_failures: int = 0
    run_vector: int = 1
    file_path_prefix: str | None = None

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.previous_failures < 0:
            raise ValueError(f"previous_failures must be >= 0, got {self.previous_failures}")
        if self.run_vector < 1:
            raise ValueError(f"run_vector must be >= 1, got {self.run_vector}")
