"""Reporter protocol: contract for run reporters.

Users can plug another reporter (e.g. a TAP or mini reporter) into the same
driver by satisfying this Protocol.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from runreport.domain.events import Event
    from runreport.domain.plan import RunPlan


class RunReporterProtocol(Protocol):
    """Lifecycle contract for run reporters.

    Lifecycle:
    1. start_run(plan) - reset state, subscribe to plan.status
    2. consume_state_change(event) - once per event, in arrival order
    3. end_run() - render the summary from accumulated state

    start_run may be called again (watch mode) without calling end_run.
    """

    def start_run(self, plan: RunPlan) -> None:
        """Begin a run. Fully supersedes any previous run's state."""
        ...

    def consume_state_change(self, event: Event) -> None:
        """Apply one event."""
        ...

    def end_run(self) -> None:
        """Render the end-of-run summary."""
        ...
