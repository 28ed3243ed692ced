"""Domain layer: immutable value objects for run lifecycle events.

Each event maps 1:1 to a ``type`` tag emitted by the test process.
All objects frozen, invariants validated in __post_init__.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


class EventType(Enum):
    """Event type tags emitted by the test process."""

    DECLARED_TEST = "declared-test"
    HOOK_FAILED = "hook-failed"
    INTERNAL_ERROR = "internal-error"
    MISSING_IMPORT = "missing-ava-import"
    SELECTED_TEST = "selected-test"
    STATS = "stats"
    TEST_FAILED = "test-failed"
    TEST_PASSED = "test-passed"
    TIMEOUT = "timeout"
    UNCAUGHT_EXCEPTION = "uncaught-exception"
    UNHANDLED_REJECTION = "unhandled-rejection"
    WORKER_FAILED = "worker-failed"
    WORKER_FINISHED = "worker-finished"
    WORKER_STDERR = "worker-stderr"
    WORKER_STDOUT = "worker-stdout"
    UNKNOWN = "unknown"


# =============================================================================
# Serialized errors
# =============================================================================


@dataclass(frozen=True, slots=True)
class ErrorSource:
    """Source location an error was thrown from."""

    file: str
    line: int
    is_within_project: bool = True
    is_dependency: bool = False

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.line < 1:
            raise ValueError(f"line must be >= 1, got {self.line}")


@dataclass(frozen=True, slots=True)
class AssertionValue:
    """Labelled, pre-formatted value attached to an assertion error."""

    label: str
    formatted: str


@dataclass(frozen=True, slots=True)
class ImproperUsage:
    """Details about an assertion that was used incorrectly.

    Attributes:
        name: Error class name for snapshot problems (e.g. ChecksumError).
        snap_path: Snapshot file involved, if any.
        expected_version: Snapshot format version the runner expects.
        actual_version: Snapshot format version found on disk.
    """

    name: str | None = None
    snap_path: str | None = None
    expected_version: int | None = None
    actual_version: int | None = None


@dataclass(frozen=True, slots=True)
class SerializedError:
    """Error as serialized by the test process.

    Exactly one rendering shape applies, chosen by inspection:
    assertion error (is_assertion_error), non-error thrown value
    (non_error_object) or plain error (message/stack). Any of them
    may carry a source location.
    """

    message: str | None = None
    stack: str | None = None
    summary: str | None = None
    name: str | None = None
    source: ErrorSource | None = None
    is_assertion_error: bool = False
    assertion: str | None = None
    values: tuple[AssertionValue, ...] = ()
    statements: tuple[tuple[str, str], ...] = ()
    improper_usage: ImproperUsage | None = None
    non_error_object: bool = False
    formatted: str | None = None


# =============================================================================
# Stats snapshot
# =============================================================================


def _require_non_negative(obj: object, names: tuple[str, ...]) -> None:
    for name in names:
        value = getattr(obj, name)
        if value < 0:
            raise ValueError(f"{name} must be >= 0, got {value}")


@dataclass(frozen=True, slots=True)
class FileStats:
    """Per-file counters from the stats snapshot."""

    declared_tests: int = 0
    selected_tests: int = 0
    remaining_tests: int = 0
    passed_tests: int = 0
    passed_known_failing_tests: int = 0
    failed_tests: int = 0
    failed_hooks: int = 0
    skipped_tests: int = 0
    todo_tests: int = 0
    uncaught_exceptions: int = 0
    unhandled_rejections: int = 0

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        _require_non_negative(self, _FILE_COUNTERS)


_FILE_COUNTERS = (
    "declared_tests",
    "selected_tests",
    "remaining_tests",
    "passed_tests",
    "passed_known_failing_tests",
    "failed_tests",
    "failed_hooks",
    "skipped_tests",
    "todo_tests",
    "uncaught_exceptions",
    "unhandled_rejections",
)


@dataclass(frozen=True, slots=True)
class RunStats:
    """Run-wide counters. Authoritative once received.

    Attributes:
        files: Number of test files in the run.
        finished_workers: Number of workers that exited normally.
        by_file: Per-file breakdown keyed by file identifier (read-only).
    """

    declared_tests: int = 0
    selected_tests: int = 0
    failed_hooks: int = 0
    failed_tests: int = 0
    passed_tests: int = 0
    passed_known_failing_tests: int = 0
    skipped_tests: int = 0
    todo_tests: int = 0
    unhandled_rejections: int = 0
    uncaught_exceptions: int = 0
    remaining_tests: int = 0
    files: int = 0
    finished_workers: int = 0
    by_file: Mapping[str, FileStats] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        """Validate invariants and freeze by_file. FAIL-FIRST."""
        _require_non_negative(self, _RUN_COUNTERS)
        if not isinstance(self.by_file, MappingProxyType):
            object.__setattr__(self, "by_file", MappingProxyType(dict(self.by_file)))

    @property
    def skipped_files(self) -> int:
        """Files that never finished (fail-fast abandoned them)."""
        return max(self.files - self.finished_workers, 0)


_RUN_COUNTERS = (
    "declared_tests",
    "selected_tests",
    "failed_hooks",
    "failed_tests",
    "passed_tests",
    "passed_known_failing_tests",
    "skipped_tests",
    "todo_tests",
    "unhandled_rejections",
    "uncaught_exceptions",
    "remaining_tests",
    "files",
    "finished_workers",
)


# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True, slots=True)
class DeclaredTestEvent:
    """Test declared in a file (not necessarily selected)."""

    test_file: str
    title: str


@dataclass(frozen=True, slots=True)
class HookFailedEvent:
    """before/after hook failed."""

    test_file: str
    title: str
    err: SerializedError
    logs: tuple[str, ...] = ()
    duration: float = 0


@dataclass(frozen=True, slots=True)
class InternalErrorEvent:
    """Test process crashed inside the runner itself."""

    err: SerializedError
    test_file: str | None = None


@dataclass(frozen=True, slots=True)
class MissingImportEvent:
    """Test file never imported the test helper, so no tests registered."""

    test_file: str


@dataclass(frozen=True, slots=True)
class SelectedTestEvent:
    """Test selected to run (possibly as skip or todo)."""

    test_file: str
    title: str
    skip: bool = False
    todo: bool = False
    known_failing: bool = False


@dataclass(frozen=True, slots=True)
class StatsEvent:
    """Run-wide stats snapshot."""

    stats: RunStats


@dataclass(frozen=True, slots=True)
class TestFailedEvent:
    """Test failed."""

    __test__ = False

    test_file: str
    title: str
    err: SerializedError
    logs: tuple[str, ...] = ()
    duration: float = 0
    known_failing: bool = False


@dataclass(frozen=True, slots=True)
class TestPassedEvent:
    """Test passed. known_failing: expected to fail but passed anyway."""

    __test__ = False

    test_file: str
    title: str
    duration: float = 0
    known_failing: bool = False
    logs: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class TimeoutEvent:
    """Run aborted after a period of inactivity (milliseconds)."""

    period: int


@dataclass(frozen=True, slots=True)
class UncaughtExceptionEvent:
    """Exception escaped a test file outside of any test."""

    test_file: str
    err: SerializedError


@dataclass(frozen=True, slots=True)
class UnhandledRejectionEvent:
    """Rejected promise/future nobody awaited."""

    test_file: str
    err: SerializedError


@dataclass(frozen=True, slots=True)
class WorkerFailedEvent:
    """Worker process exited abnormally (exit code or signal)."""

    test_file: str
    non_zero_exit_code: int | None = None
    signal: str | None = None


@dataclass(frozen=True, slots=True)
class WorkerFinishedEvent:
    """Worker process exited normally."""

    test_file: str
    forced_exit: bool = False


@dataclass(frozen=True, slots=True)
class WorkerStdoutEvent:
    """Raw stdout chunk from a worker."""

    test_file: str
    chunk: str | bytes


@dataclass(frozen=True, slots=True)
class WorkerStderrEvent:
    """Raw stderr chunk from a worker."""

    test_file: str
    chunk: str | bytes


@dataclass(frozen=True, slots=True)
class UnknownEvent:
    """Event with an unrecognized type tag. Kept for forward compatibility."""

    type: str
    payload: Mapping[str, object] = field(default_factory=lambda: MappingProxyType({}))


Event = (
    DeclaredTestEvent
    | HookFailedEvent
    | InternalErrorEvent
    | MissingImportEvent
    | SelectedTestEvent
    | StatsEvent
    | TestFailedEvent
    | TestPassedEvent
    | TimeoutEvent
    | UncaughtExceptionEvent
    | UnhandledRejectionEvent
    | WorkerFailedEvent
    | WorkerFinishedEvent
    | WorkerStdoutEvent
    | WorkerStderrEvent
    | UnknownEvent
)

FailureEvent = HookFailedEvent | TestFailedEvent


def get_event_type(event: Event) -> EventType:
    """Get EventType for event.

    Exhaustive match on Event union. Type system ensures all cases covered.
    """
    match event:
        case DeclaredTestEvent():
            return EventType.DECLARED_TEST
        case HookFailedEvent():
            return EventType.HOOK_FAILED
        case InternalErrorEvent():
            return EventType.INTERNAL_ERROR
        case MissingImportEvent():
            return EventType.MISSING_IMPORT
        case SelectedTestEvent():
            return EventType.SELECTED_TEST
        case StatsEvent():
            return EventType.STATS
        case TestFailedEvent():
            return EventType.TEST_FAILED
        case TestPassedEvent():
            return EventType.TEST_PASSED
        case TimeoutEvent():
            return EventType.TIMEOUT
        case UncaughtExceptionEvent():
            return EventType.UNCAUGHT_EXCEPTION
        case UnhandledRejectionEvent():
            return EventType.UNHANDLED_REJECTION
        case WorkerFailedEvent():
            return EventType.WORKER_FAILED
        case WorkerFinishedEvent():
            return EventType.WORKER_FINISHED
        case WorkerStdoutEvent():
            return EventType.WORKER_STDOUT
        case WorkerStderrEvent():
            return EventType.WORKER_STDERR
        case UnknownEvent():
            return EventType.UNKNOWN
