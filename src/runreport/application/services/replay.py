"""RunReplayer: feeds a recorded NDJSON event log to a reporter.

Log format: one JSON object per line. An optional ``{"type": "plan", ...}``
record (anywhere, first one wins) carries the run plan:

    {"type": "plan", "files": [...], "failFastEnabled": false,
     "matching": false, "previousFailures": 0, "runVector": 1}

Every other record is a raw event (see infrastructure.conversion). Without a
plan record the file list is collected from the events' test files.

Lines that are not valid JSON objects and events that fail conversion are
logged and skipped: a damaged log still renders as much as possible.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from runreport.domain.events import StatsEvent
from runreport.domain.exceptions import ConversionError
from runreport.domain.plan import RunPlan
from runreport.infrastructure.conversion import convert_event
from runreport.infrastructure.event_source import StateChangeEmitter

if TYPE_CHECKING:
    from collections.abc import Iterable

    from runreport.domain.events import RunStats
    from runreport.domain.ports.reporter import RunReporterProtocol

logger = logging.getLogger(__name__)

PLAN_TYPE = "plan"


@dataclass(frozen=True, slots=True)
class ReplayResult:
    """Outcome of one replay.

    Attributes:
        events: Events delivered to the reporter.
        skipped: Records dropped (invalid JSON or failed conversion).
        stats: First stats snapshot seen, if any.
    """

    events: int
    skipped: int
    stats: RunStats | None

    @property
    def passed(self) -> bool:
        """Run had stats and nothing failed."""
        stats = self.stats
        if stats is None:
            return False
        return (
            stats.failed_tests == 0
            and stats.failed_hooks == 0
            and stats.uncaught_exceptions == 0
            and stats.unhandled_rejections == 0
        )


class RunReplayer:
    """Replays event logs through a reporter, one run per replay() call."""

    def __init__(
        self,
        reporter: RunReporterProtocol,
        *,
        fail_fast_enabled: bool = False,
        matching: bool = False,
        previous_failures: int = 0,
    ) -> None:
        """Initialize replayer.

        Args:
            reporter: Reporter receiving the run.
            fail_fast_enabled: Default when the log has no plan record.
            matching: Default when the log has no plan record.
            previous_failures: Default when the log has no plan record.
        """
        self._reporter = reporter
        self._fail_fast_enabled = fail_fast_enabled
        self._matching = matching
        self._previous_failures = previous_failures
        self._run_vector = 0

    def replay(self, lines: Iterable[str]) -> ReplayResult:
        """Parse lines, start a run, deliver every event, end the run."""
        records, skipped = _parse_records(lines)
        plan_record = next((r for r in records if r.get("type") == PLAN_TYPE), None)
        raw_events = [r for r in records if r.get("type") != PLAN_TYPE]

        self._run_vector += 1
        emitter = StateChangeEmitter()
        plan = self._build_plan(plan_record, raw_events, emitter)

        self._reporter.start_run(plan)

        delivered = 0
        stats: RunStats | None = None
        for raw in raw_events:
            try:
                event = convert_event(raw)
            except ConversionError as exc:
                logger.warning("skipping %s event: %s", raw.get("type"), exc)
                skipped += 1
                continue
            if stats is None and isinstance(event, StatsEvent):
                stats = event.stats
            emitter.emit(event)
            delivered += 1

        self._reporter.end_run()
        logger.debug("replayed %d event(s), skipped %d record(s)", delivered, skipped)
        return ReplayResult(events=delivered, skipped=skipped, stats=stats)

    def _build_plan(
        self,
        plan_record: dict[str, object] | None,
        raw_events: list[dict[str, object]],
        emitter: StateChangeEmitter,
    ) -> RunPlan:
        record = plan_record or {}
        files = record.get("files")
        if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
            files = _collect_files(raw_events)

        return RunPlan(
            files=tuple(files),
            status=emitter,
            fail_fast_enabled=bool(record.get("failFastEnabled", self._fail_fast_enabled)),
            matching=bool(record.get("matching", self._matching)),
            previous_failures=_int_field(record, "previousFailures", self._previous_failures, minimum=0),
            run_vector=_int_field(record, "runVector", self._run_vector, minimum=1),
            file_path_prefix=_str_field(record, "filePathPrefix"),
        )


def _parse_records(lines: Iterable[str]) -> tuple[list[dict[str, object]], int]:
    records: list[dict[str, object]] = []
    skipped = 0
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError as exc:
            logger.warning("line %d: invalid JSON (%s)", number, exc.msg)
            skipped += 1
            continue
        if not isinstance(record, dict):
            logger.warning("line %d: expected a JSON object, got %s", number, type(record).__name__)
            skipped += 1
            continue
        records.append(record)
    return records, skipped


def _collect_files(raw_events: list[dict[str, object]]) -> list[str]:
    """Distinct test files in first-seen order."""
    seen: dict[str, None] = {}
    for raw in raw_events:
        file = raw.get("testFile", raw.get("test_file"))
        if isinstance(file, str):
            seen.setdefault(file, None)
    return list(seen)


def _int_field(record: dict[str, object], name: str, default: int, *, minimum: int) -> int:
    value = record.get(name, default)
    if not isinstance(value, int) or isinstance(value, bool) or value < minimum:
        logger.warning("plan field %s is not an int >= %d, using %d", name, minimum, default)
        return default
    return value


def _str_field(record: dict[str, object], name: str) -> str | None:
    value = record.get(name)
    return value if isinstance(value, str) else None
