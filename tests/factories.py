"""Test factories for creating domain objects.

Centralized factory functions to avoid duplication across test modules.
All factories follow the same pattern: accept simplified parameters,
return fully constructed domain objects.
"""

from __future__ import annotations

from types import MappingProxyType

from runreport.application.reporters.verbose import ReporterConfig, VerboseReporter
from runreport.domain.events import (
    AssertionValue,
    ErrorSource,
    FileStats,
    HookFailedEvent,
    RunStats,
    SerializedError,
    StatsEvent,
    TestFailedEvent,
    TestPassedEvent,
)
from runreport.domain.plan import RunPlan
from runreport.infrastructure.event_source import StateChangeEmitter
from runreport.infrastructure.line_writer import LineWriter
from tests.tty_stream import TTYStream

# Default test file - consistent across all tests
DEFAULT_TEST_FILE = "test/a.py"


def make_error(
    message: str = "boom",
    *,
    stack: str | None = None,
    source: ErrorSource | None = None,
    **kwargs: object,
) -> SerializedError:
    """Create a plain SerializedError for tests."""
    return SerializedError(message=message, stack=stack, source=source, **kwargs)


def make_assertion_error(
    message: str = "Difference:",
    *,
    values: tuple[tuple[str, str], ...] = (("Difference:", "- 1\n+ 2"),),
    **kwargs: object,
) -> SerializedError:
    """Create an assertion-style SerializedError for tests."""
    return SerializedError(
        message=message,
        is_assertion_error=True,
        values=tuple(AssertionValue(label=label, formatted=formatted) for label, formatted in values),
        **kwargs,
    )


def make_test_failed(
    title: str = "fails",
    *,
    test_file: str = DEFAULT_TEST_FILE,
    err: SerializedError | None = None,
    logs: tuple[str, ...] = (),
) -> TestFailedEvent:
    """Create a TestFailedEvent for tests."""
    return TestFailedEvent(test_file=test_file, title=title, err=err or make_error(), logs=logs)


def make_hook_failed(
    title: str = "before hook",
    *,
    test_file: str = DEFAULT_TEST_FILE,
    err: SerializedError | None = None,
) -> HookFailedEvent:
    """Create a HookFailedEvent for tests."""
    return HookFailedEvent(test_file=test_file, title=title, err=err or make_error())


def make_test_passed(
    title: str = "passes",
    *,
    test_file: str = DEFAULT_TEST_FILE,
    duration: float = 0,
    known_failing: bool = False,
    logs: tuple[str, ...] = (),
) -> TestPassedEvent:
    """Create a TestPassedEvent for tests."""
    return TestPassedEvent(
        test_file=test_file,
        title=title,
        duration=duration,
        known_failing=known_failing,
        logs=logs,
    )


def make_stats(by_file: dict[str, FileStats] | None = None, **counters: int) -> StatsEvent:
    """Create a StatsEvent for tests. Unspecified counters are 0."""
    return StatsEvent(stats=RunStats(**counters, by_file=MappingProxyType(by_file or {})))


def make_plan(
    emitter: StateChangeEmitter,
    files: tuple[str, ...] = (DEFAULT_TEST_FILE,),
    **kwargs: object,
) -> RunPlan:
    """Create a RunPlan bound to emitter for tests."""
    return RunPlan(files=files, status=emitter, **kwargs)


def make_reporter(
    *,
    columns: int | None = None,
    **config: object,
) -> tuple[VerboseReporter, TTYStream]:
    """Create a VerboseReporter writing plain text to a TTYStream.

    Colors are off unless color_system is passed.
    """
    config.setdefault("color_system", None)
    stream = TTYStream(columns=columns)
    reporter = VerboseReporter(LineWriter(stream), ReporterConfig(**config))
    return reporter, stream
