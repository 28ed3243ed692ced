"""Pure string helpers shared by reporters.

No state, no output: every function maps inputs to a string (or None).
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from runreport.application.reporters.colors import Colors
    from runreport.domain.events import ErrorSource, SerializedError

_NON_BLANK_LINE = re.compile(r"^(?!\s*$)", re.MULTILINE)
_OUTER_NEWLINES = re.compile(r"^[\r\n]+|[\r\n]+$")
_TITLE_MARKERS = (
    (re.compile(r"\.spec"), ""),
    (re.compile(r"\.test"), ""),
    (re.compile(r"(^|(?<=[\\/]))test_"), ""),
    (re.compile(r"_test(?=\.py$)"), ""),
    (re.compile(r"\.py$"), ""),
)


def plur(word: str, count: int, plural: str | None = None) -> str:
    """Singular for count == 1, otherwise plural (default: word + "s")."""
    if count == 1:
        return word
    return plural if plural is not None else word + "s"


def pretty_ms(ms: float) -> str:
    """Human readable duration: 150ms, 1.5s, 1m 5s, 1h 2m."""
    if round(ms) < 1000:
        return f"{round(ms)}ms"

    seconds = round(ms / 1000, 1)
    if seconds < 60:
        text = f"{seconds:.1f}".rstrip("0").rstrip(".")
        return f"{text}s"

    days, rest = divmod(round(ms / 1000), 86400)
    hours, rest = divmod(rest, 3600)
    minutes, secs = divmod(rest, 60)
    units = ((days, "d"), (hours, "h"), (minutes, "m"), (secs, "s"))
    return " ".join(f"{value}{unit}" for value, unit in units if value)


def indent_string(text: str, count: int) -> str:
    """Indent every line that is not blank."""
    return _NON_BLANK_LINE.sub(" " * count, text)


def trim_off_newlines(text: str) -> str:
    """Strip leading and trailing newlines, keeping other whitespace."""
    return _OUTER_NEWLINES.sub("", text)


def relative_path(file: str) -> str:
    """Path relative to the current working directory, for display."""
    try:
        return os.path.relpath(file)
    except ValueError:
        # Different drive on Windows
        return file


def common_path_prefix(files: Iterable[str]) -> str:
    """Deepest directory shared by all files, with trailing separator.

    Empty string when there are no files or they share nothing.
    """
    directories = [os.path.dirname(file) for file in files]
    if not directories:
        return ""
    try:
        common = os.path.commonpath(directories)
    except ValueError:
        # Mixed absolute and relative paths
        return ""
    if not common:
        return ""
    return common if common.endswith(os.sep) else common + os.sep


def prefix_title(base_prefix: str, file: str, title: str, separator: str = " › ") -> str:
    """Prefix title with the file's path below base_prefix.

    Test markers (test_ prefix, _test suffix, .spec/.test) and the .py
    extension are dropped; __tests__ directories are skipped.
    """
    prefix = file[len(base_prefix) :] if base_prefix and file.startswith(base_prefix) else file
    for pattern, replacement in _TITLE_MARKERS:
        prefix = pattern.sub(replacement, prefix)

    parts = [part for part in re.split(r"[\\/]", prefix) if part and part != "__tests__"]
    return separator.join([*parts, title])


# =============================================================================
# Code excerpts
# =============================================================================


def code_excerpt(
    source: ErrorSource,
    colors: Colors,
    *,
    max_width: int | None = None,
    around: int = 1,
) -> str | None:
    """Lines around source.line with line numbers, the failing line highlighted.

    Returns None for dependency or out-of-project sources and for files that
    cannot be read.
    """
    if not source.is_within_project or source.is_dependency:
        return None

    try:
        lines = Path(source.file).read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError):
        return None

    if source.line > len(lines):
        return None

    first = max(source.line - around, 1)
    last = min(source.line + around, len(lines))
    numbers = range(first, last + 1)
    width = max_width or 80
    number_width = len(str(last))
    value_width = max(width - number_width - 5, 1)

    values = [_truncate(lines[number - 1].expandtabs(4), value_width) for number in numbers]
    longest = max(len(value) for value in values)

    rendered = []
    for number, value in zip(numbers, values, strict=True):
        line_number = f"{number:>{number_width}}:"
        padded = value.ljust(longest)
        if number == source.line:
            rendered.append(colors.style("excerpt_focus", f" {line_number} {padded}"))
        else:
            rendered.append(f" {colors.dim(line_number)} {padded}")
    return "\n".join(rendered)


def _truncate(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: width - 1] + "…"


# =============================================================================
# Serialized errors
# =============================================================================


@dataclass(frozen=True, slots=True)
class FormattedError:
    """Result of format_serialized_error.

    Attributes:
        formatted: Labelled values and statements, or None when there are none.
        print_message: Whether the message adds anything over the first label.
    """

    formatted: str | None
    print_message: bool


def format_serialized_error(err: SerializedError) -> FormattedError:
    """Format the values and statements attached to an assertion error."""
    message = err.message or ""
    if err.values:
        print_message = not err.values[0].label.startswith(message)
    else:
        print_message = bool(message)

    if not err.values and not err.statements:
        return FormattedError(formatted=None, print_message=print_message)

    formatted = ""
    for value in err.values:
        formatted += f"{value.label}\n\n{value.formatted}\n\n"
    for left, right in err.statements:
        formatted += f"{left}\n{right}\n\n"

    return FormattedError(formatted=trim_off_newlines(formatted), print_message=print_message)


def improper_usage_message(err: SerializedError, colors: Colors) -> str | None:
    """Hint for an assertion that was used incorrectly, or None."""
    usage = err.improper_usage
    if usage is None:
        return None

    if err.assertion in ("raises", "not_raises"):
        example = colors.style("code", f"t.{err.assertion}(lambda: {colors.dim('...')})")
        return (
            f"Try wrapping the first argument to `t.{err.assertion}()` in a function:\n\n"
            f"  {example}\n\n"
            "The assertion needs a callable so it can observe the exception itself."
        )

    if err.assertion == "snapshot":
        file_path = colors.style("path", usage.snap_path or "<unknown>")
        update_flag = colors.style("code", "--update-snapshots")
        if usage.name == "ChecksumError":
            return (
                "The snapshot file is corrupted.\n\n"
                f"File path: {file_path}\n\n"
                f"Please run the tests again with the {update_flag} flag to recreate it."
            )
        if usage.name == "LegacyError":
            return (
                "The snapshot file was created with an unsupported legacy format.\n\n"
                f"File path: {file_path}\n\n"
                f"Please run the tests again with the {update_flag} flag to upgrade."
            )
        if usage.name == "VersionMismatchError":
            expected = usage.expected_version
            actual = usage.actual_version
            if expected is not None and actual is not None and actual < expected:
                upgrade = f"Please run the tests again with the {update_flag} flag to upgrade."
            else:
                upgrade = "You should upgrade the test runner."
            return (
                f"The snapshot file is v{actual}, but only v{expected} is supported.\n\n"
                f"File path: {file_path}\n\n"
                f"{upgrade}"
            )

    return None
