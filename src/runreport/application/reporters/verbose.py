"""Verbose reporter: run lifecycle events → colorized console lines.

Stateful event consumer. Accumulates run-wide state from events as they
arrive, prints per-event lines immediately, and renders the end-of-run
summary from accumulated state only.

Every entry point writes inside a LineWriter batch, so each call reaches
the output stream as one uninterrupted write.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from runreport.application.reporters.colors import Colors
from runreport.application.reporters.figures import get_figures
from runreport.application.reporters.formatting import (
    code_excerpt,
    common_path_prefix,
    format_serialized_error,
    improper_usage_message,
    indent_string,
    plur,
    pretty_ms,
    prefix_title,
    relative_path,
    trim_off_newlines,
)
from runreport.domain.events import (
    DeclaredTestEvent,
    HookFailedEvent,
    InternalErrorEvent,
    MissingImportEvent,
    SelectedTestEvent,
    StatsEvent,
    TestFailedEvent,
    TestPassedEvent,
    TimeoutEvent,
    UncaughtExceptionEvent,
    UnhandledRejectionEvent,
    WorkerFailedEvent,
    WorkerFinishedEvent,
    WorkerStderrEvent,
    WorkerStdoutEvent,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from runreport.domain.events import Event, FailureEvent, RunStats, SerializedError
    from runreport.domain.plan import RunPlan
    from runreport.domain.ports.event_source import Subscription
    from runreport.domain.ports.output import OutputSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReporterConfig:
    """Configuration for the verbose reporter.

    All fields have defaults. Immutable (frozen dataclass).

    Attributes:
        watching: Watch mode: titles always prefixed, reruns separated by
            a rule, first summary line stamped with the time.
        color_system: rich color system name. None = plain text.
        duration_threshold_ms: Passed tests slower than this show duration.
        unicode: Use unicode glyphs (ASCII fallback otherwise).
        rule_width: Rule width when the sink does not report columns.
    """

    watching: bool = False
    color_system: str | None = "standard"
    duration_threshold_ms: float = 100
    unicode: bool = True
    rule_width: int = 80

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.duration_threshold_ms < 0:
            raise ValueError(f"duration_threshold_ms must be >= 0, got {self.duration_threshold_ms}")
        if self.rule_width < 1:
            raise ValueError(f"rule_width must be >= 1, got {self.rule_width}")


def _identity_title(test_file: str, title: str) -> str:
    return title


class VerboseReporter:
    """Verbose console reporter.

    One line per test as it completes, plus skip/todo markers, worker
    problems and raw worker output; full failure details at the end.
    """

    def __init__(self, writer: OutputSink, config: ReporterConfig | None = None) -> None:
        """Initialize reporter.

        Args:
            writer: Output sink. Not owned: never closed by the reporter.
            config: Reporter configuration. Uses defaults if None.
        """
        self._writer = writer
        self._config = config or ReporterConfig()
        self._colors = Colors(color_system=self._config.color_system)
        self._figures = get_figures(unicode=self._config.unicode)
        self._subscription: Subscription | None = None
        self.reset()

    @property
    def colors(self) -> Colors:
        """Style renderer used for all output."""
        return self._colors

    @property
    def failures(self) -> tuple[FailureEvent, ...]:
        """Failures recorded this run, in arrival order."""
        return tuple(self._failures)

    @property
    def stats(self) -> RunStats | None:
        """Stats snapshot for this run, if received."""
        return self._stats

    def reset(self) -> None:
        """Dispose of the previous run's subscription and clear all run state."""
        if self._subscription is not None:
            self._subscription.dispose()
        self._subscription = None

        self._fail_fast_enabled = False
        self._failures: list[FailureEvent] = []
        self._files_with_missing_imports: set[str] = set()
        self._known_failures: list[TestPassedEvent] = []
        self._last_line_is_empty = False
        self._matching = False
        self._prefix_title: Callable[[str, str], str] = _identity_title
        self._previous_failures = 0
        self._stats: RunStats | None = None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start_run(self, plan: RunPlan) -> None:
        """Begin a run, superseding any previous one."""
        self.reset()

        self._fail_fast_enabled = plan.fail_fast_enabled
        self._matching = plan.matching
        self._previous_failures = plan.previous_failures

        if self._config.watching or len(plan.files) > 1:
            base = plan.file_path_prefix
            if base is None:
                base = common_path_prefix(plan.files)
            separator = f" {self._colors.dim(self._figures.pointer)} "
            self._prefix_title = lambda test_file, title: prefix_title(base, test_file, title, separator)

        self._subscription = plan.status.on(self.consume_state_change)
        logger.debug("run %d started with %d file(s)", plan.run_vector, len(plan.files))

        with self._writer.batch():
            if self._config.watching and plan.run_vector > 1:
                width = self._writer.columns or self._config.rule_width
                self._write_line(self._colors.dim(self._figures.line * width))
            self._write_line()

    def consume_state_change(self, event: Event) -> None:
        """Apply one event: update state and print its immediate output."""
        with self._writer.batch():
            self._dispatch(event)

    def end_run(self) -> None:
        """Render the end-of-run summary from accumulated state."""
        with self._writer.batch():
            self._write_summary()

    # =========================================================================
    # Event dispatch
    # =========================================================================

    def _dispatch(self, event: Event) -> None:  # noqa: C901, PLR0912
        """Exhaustive match on Event union. Unknown events are ignored."""
        cross = self._figures.cross
        match event:
            case DeclaredTestEvent():
                pass

            case HookFailedEvent() | TestFailedEvent():
                self._failures.append(event)
                self._write_test_summary(event)

            case InternalErrorEvent():
                if event.test_file:
                    label = f"Internal error when running {relative_path(event.test_file)}"
                else:
                    label = "Internal error"
                self._write_line(self._colors.error(f"  {cross} {label}"))
                self._write_line(indent_string(self._colors.stack(event.err.summary or event.err.message or ""), 2))
                self._write_line(indent_string(self._colors.error_stack(event.err.stack or ""), 2))
                self._write_line("\n\n")

            case MissingImportEvent():
                self._files_with_missing_imports.add(event.test_file)
                self._write_line(
                    self._colors.error(
                        f"  {cross} No tests found in {relative_path(event.test_file)}, "
                        "make sure to import the test helper at the top of your test file"
                    )
                )

            case SelectedTestEvent():
                if event.skip:
                    self._write_line("  " + self._colors.skip(f"- {self._prefix_title(event.test_file, event.title)}"))
                elif event.todo:
                    self._write_line("  " + self._colors.todo(f"- {self._prefix_title(event.test_file, event.title)}"))

            case StatsEvent():
                if self._stats is None:
                    self._stats = event.stats
                else:
                    logger.warning("ignoring repeated stats event, keeping first snapshot")

            case TestPassedEvent():
                if event.known_failing:
                    self._known_failures.append(event)
                self._write_test_summary(event)

            case TimeoutEvent():
                self._write_line(
                    self._colors.error(
                        f"  {cross} Exited because no new tests completed within the last "
                        f"{event.period}ms of inactivity"
                    )
                )

            case UncaughtExceptionEvent():
                self._write_crash(f"Uncaught exception in {relative_path(event.test_file)}", event.err)

            case UnhandledRejectionEvent():
                self._write_crash(f"Unhandled rejection in {relative_path(event.test_file)}", event.err)

            case WorkerFailedEvent():
                if event.test_file not in self._files_with_missing_imports:
                    file = relative_path(event.test_file)
                    if event.non_zero_exit_code:
                        reason = f"exited with a non-zero exit code: {event.non_zero_exit_code}"
                    else:
                        reason = f"exited due to {event.signal}"
                    self._write_line(self._colors.error(f"  {cross} {file} {reason}"))

            case WorkerFinishedEvent():
                if not event.forced_exit and event.test_file not in self._files_with_missing_imports:
                    self._write_worker_finished(event.test_file)

            case WorkerStdoutEvent() | WorkerStderrEvent():
                self._writer.write(event.chunk)

            case _:
                logger.debug("ignoring event %r", type(event).__name__)

    def _write_worker_finished(self, test_file: str) -> None:
        file_stats = self._stats.by_file.get(test_file) if self._stats is not None else None
        if file_stats is None:
            logger.debug("no stats for finished worker %s", test_file)
            return

        cross = self._figures.cross
        file = relative_path(test_file)
        if file_stats.declared_tests == 0:
            self._write_line(self._colors.error(f"  {cross} No tests found in {file}"))
        elif not self._fail_fast_enabled and file_stats.remaining_tests > 0:
            remaining = file_stats.remaining_tests
            self._write_line(self._colors.error(f"  {cross} {remaining} {plur('test', remaining)} remaining in {file}"))

    def _write_crash(self, title: str, err: SerializedError) -> None:
        self._ensure_empty_line()
        self._write_line("  " + self._colors.title(title))
        self._write_line()
        self._write_err(err)
        self._write_line()

    # =========================================================================
    # Line output
    # =========================================================================

    def _write_line(self, text: str = "") -> None:
        self._writer.write_line(text)
        self._last_line_is_empty = text == ""

    def _ensure_empty_line(self) -> None:
        if not self._last_line_is_empty:
            self._write_line()

    def _write_err(self, err: SerializedError) -> None:
        """Error detail block shared by failures and crashes."""
        if err.source is not None:
            self._write_line("  " + self._colors.error_source(f"{err.source.file}:{err.source.line}"))
            excerpt = code_excerpt(err.source, self._colors, max_width=self._writer.columns)
            if excerpt:
                self._write_line()
                self._write_line(indent_string(excerpt, 2))

        if err.is_assertion_error:
            result = format_serialized_error(err)
            if result.print_message:
                self._write_line()
                self._write_line(indent_string(err.message or "", 2))

            if result.formatted:
                self._write_line()
                self._write_line(indent_string(result.formatted, 2))

            message = improper_usage_message(err, self._colors)
            if message:
                self._write_line()
                self._write_line(indent_string(message, 2))
        elif err.non_error_object:
            self._write_line(indent_string(trim_off_newlines(err.formatted or ""), 2))
        else:
            self._write_line()
            self._write_line(indent_string(err.message or "", 2))

        if err.stack and "\n" in err.stack:
            self._write_line()
            self._write_line(indent_string(self._colors.error_stack(err.stack), 2))

    def _write_logs(self, logs: tuple[str, ...]) -> None:
        marker = f"    {self._colors.information(self._figures.info)} "
        for log in logs:
            log_lines = indent_string(self._colors.log(log), 6)
            if log_lines.startswith(" " * 6):
                log_lines = marker + log_lines[6:]
            self._write_line(log_lines)

    def _write_test_summary(self, event: HookFailedEvent | TestFailedEvent | TestPassedEvent) -> None:
        title = self._prefix_title(event.test_file, event.title)
        match event:
            case HookFailedEvent() | TestFailedEvent():
                cross = self._colors.error(self._figures.cross)
                self._write_line(f"  {cross} {title} {self._colors.error(event.err.message or '')}")
            case TestPassedEvent(known_failing=True):
                tick = self._colors.error(self._figures.tick)
                self._write_line(f"  {tick} {self._colors.error(title)}")
            case TestPassedEvent():
                duration = ""
                if event.duration > self._config.duration_threshold_ms:
                    duration = self._colors.duration(f" ({pretty_ms(event.duration)})")
                self._write_line(f"  {self._colors.pass_(self._figures.tick)} {title}{duration}")

        self._write_logs(event.logs)

    def _write_failure(self, event: FailureEvent) -> None:
        self._write_line("  " + self._colors.title(self._prefix_title(event.test_file, event.title)))
        self._write_logs(event.logs)
        self._write_line()
        self._write_err(event.err)

    # =========================================================================
    # Summary
    # =========================================================================

    def _write_summary(self) -> None:  # noqa: C901, PLR0912
        cross = self._figures.cross
        stats = self._stats
        if stats is None:
            self._write_line(self._colors.error(f"  {cross} Couldn't find any files to test"))
            self._write_line()
            return

        if self._matching and stats.selected_tests == 0:
            self._write_line(self._colors.error(f"  {cross} Couldn't find any matching tests"))
            self._write_line()
            return

        self._write_line()

        postfix = ""
        if self._config.watching:
            postfix = " " + self._colors.dim(f"[{datetime.now().strftime('%H:%M:%S')}]")

        count_lines: list[str] = []
        if stats.failed_hooks > 0:
            count_lines.append(self._colors.error(f"{stats.failed_hooks} {plur('hook', stats.failed_hooks)} failed"))
        if stats.failed_tests > 0:
            count_lines.append(self._colors.error(f"{stats.failed_tests} {plur('test', stats.failed_tests)} failed"))
        if stats.failed_hooks == 0 and stats.failed_tests == 0 and stats.passed_tests > 0:
            count_lines.append(self._colors.pass_(f"{stats.passed_tests} {plur('test', stats.passed_tests)} passed"))
        for index, line in enumerate(count_lines):
            self._write_line("  " + line + (postfix if index == 0 else ""))

        known = stats.passed_known_failing_tests
        if known > 0:
            self._write_line("  " + self._colors.error(f"{known} {plur('known failure', known)}"))
        if stats.skipped_tests > 0:
            self._write_line("  " + self._colors.skip(f"{stats.skipped_tests} {plur('test', stats.skipped_tests)} skipped"))
        if stats.todo_tests > 0:
            self._write_line("  " + self._colors.todo(f"{stats.todo_tests} {plur('test', stats.todo_tests)} todo"))
        if stats.unhandled_rejections > 0:
            count = stats.unhandled_rejections
            self._write_line("  " + self._colors.error(f"{count} unhandled {plur('rejection', count)}"))
        if stats.uncaught_exceptions > 0:
            count = stats.uncaught_exceptions
            self._write_line("  " + self._colors.error(f"{count} uncaught {plur('exception', count)}"))
        if self._previous_failures > 0:
            count = self._previous_failures
            self._write_line(
                "  " + self._colors.error(f"{count} previous {plur('failure', count)} in test files that were not rerun")
            )

        if self._known_failures:
            self._write_line()
            for event in self._known_failures:
                self._write_line("  " + self._colors.error(self._prefix_title(event.test_file, event.title)))

        write_disclaimer = self._fail_fast_enabled and (stats.remaining_tests > 0 or stats.skipped_files > 0)

        if self._failures:
            self._write_line()
            last = len(self._failures) - 1
            for index, event in enumerate(self._failures):
                self._write_failure(event)
                if index != last or write_disclaimer:
                    self._write_line()
                    self._write_line()
                    self._write_line()

        if write_disclaimer:
            self._write_line("  " + self._colors.information(f"`--fail-fast` is on. {self._fail_fast_remaining(stats)}."))

        self._write_line()

    @staticmethod
    def _fail_fast_remaining(stats: RunStats) -> str:
        remaining = ""
        if stats.remaining_tests > 0:
            count = stats.remaining_tests
            remaining += f"At least {count} {plur('test was', count, 'tests were')} skipped"
            if stats.skipped_files > 0:
                remaining += ", as well as "
        if stats.skipped_files > 0:
            count = stats.skipped_files
            remaining += f"{count} {plur('test file', count)}"
            if stats.remaining_tests == 0:
                remaining += f" {plur('was', count, 'were')} skipped"
        return remaining
