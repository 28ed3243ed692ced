"""Infrastructure layer: raw event payload conversion.

Converts JSON-decoded dicts (as written by the test process, one per
NDJSON line) to domain events. Stateless adapter.

FAIL-FIRST on missing/invalid fields of a known event type: raises
ConversionError naming the field. Unknown ``type`` tags are NOT errors:
they become UnknownEvent so newer runners keep working with older reporters.

Keys are accepted in snake_case or camelCase (test_file / testFile).
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING

from runreport.domain.events import (
    AssertionValue,
    DeclaredTestEvent,
    ErrorSource,
    Event,
    EventType,
    FileStats,
    HookFailedEvent,
    ImproperUsage,
    InternalErrorEvent,
    MissingImportEvent,
    RunStats,
    SelectedTestEvent,
    SerializedError,
    StatsEvent,
    TestFailedEvent,
    TestPassedEvent,
    TimeoutEvent,
    UncaughtExceptionEvent,
    UnhandledRejectionEvent,
    UnknownEvent,
    WorkerFailedEvent,
    WorkerFinishedEvent,
    WorkerStderrEvent,
    WorkerStdoutEvent,
)
from runreport.domain.exceptions import ConversionError

if TYPE_CHECKING:
    from collections.abc import Mapping

_MISSING = object()

_KNOWN_TYPES = {member.value: member for member in EventType if member is not EventType.UNKNOWN}


def convert_event(raw: Mapping[str, object]) -> Event:
    """Convert raw mapping to Event. Dispatches by ``type``.

    Raises:
        ConversionError: Missing/invalid field for a known event type.
    """
    tag = _str(raw, "type")
    event_type = _KNOWN_TYPES.get(tag)
    if event_type is None:
        return UnknownEvent(type=tag, payload=MappingProxyType(dict(raw)))

    match event_type:
        case EventType.DECLARED_TEST:
            return DeclaredTestEvent(test_file=_str(raw, "test_file"), title=_str(raw, "title"))

        case EventType.HOOK_FAILED:
            return HookFailedEvent(
                test_file=_str(raw, "test_file"),
                title=_str(raw, "title"),
                err=convert_error(_dict(raw, "err")),
                logs=_logs(raw),
                duration=_number(raw, "duration"),
            )

        case EventType.INTERNAL_ERROR:
            return InternalErrorEvent(
                err=convert_error(_dict(raw, "err")),
                test_file=_str_or_none(raw, "test_file"),
            )

        case EventType.MISSING_IMPORT:
            return MissingImportEvent(test_file=_str(raw, "test_file"))

        case EventType.SELECTED_TEST:
            return SelectedTestEvent(
                test_file=_str(raw, "test_file"),
                title=_str(raw, "title"),
                skip=_bool(raw, "skip"),
                todo=_bool(raw, "todo"),
                known_failing=_bool(raw, "known_failing"),
            )

        case EventType.STATS:
            return StatsEvent(stats=convert_stats(_dict(raw, "stats")))

        case EventType.TEST_FAILED:
            return TestFailedEvent(
                test_file=_str(raw, "test_file"),
                title=_str(raw, "title"),
                err=convert_error(_dict(raw, "err")),
                logs=_logs(raw),
                duration=_number(raw, "duration"),
                known_failing=_bool(raw, "known_failing"),
            )

        case EventType.TEST_PASSED:
            return TestPassedEvent(
                test_file=_str(raw, "test_file"),
                title=_str(raw, "title"),
                duration=_number(raw, "duration"),
                known_failing=_bool(raw, "known_failing"),
                logs=_logs(raw),
            )

        case EventType.TIMEOUT:
            return TimeoutEvent(period=_int(raw, "period"))

        case EventType.UNCAUGHT_EXCEPTION:
            return UncaughtExceptionEvent(
                test_file=_str(raw, "test_file"),
                err=convert_error(_dict(raw, "err")),
            )

        case EventType.UNHANDLED_REJECTION:
            return UnhandledRejectionEvent(
                test_file=_str(raw, "test_file"),
                err=convert_error(_dict(raw, "err")),
            )

        case EventType.WORKER_FAILED:
            return WorkerFailedEvent(
                test_file=_str(raw, "test_file"),
                non_zero_exit_code=_int_or_none(raw, "non_zero_exit_code"),
                signal=_str_or_none(raw, "signal"),
            )

        case EventType.WORKER_FINISHED:
            return WorkerFinishedEvent(
                test_file=_str(raw, "test_file"),
                forced_exit=_bool(raw, "forced_exit"),
            )

        case EventType.WORKER_STDOUT:
            return WorkerStdoutEvent(test_file=_str(raw, "test_file"), chunk=_chunk(raw))

        case EventType.WORKER_STDERR:
            return WorkerStderrEvent(test_file=_str(raw, "test_file"), chunk=_chunk(raw))

    raise AssertionError(f"unhandled event type {event_type}")  # pragma: no cover


def convert_error(raw: Mapping[str, object]) -> SerializedError:
    """Convert raw serialized error to SerializedError."""
    source_raw = _get(raw, "source")
    source = None if source_raw is None else _convert_source(_as_dict(source_raw, "source"))

    values_raw = _get(raw, "values")
    values = (
        ()
        if values_raw is None
        else tuple(
            AssertionValue(label=_str(value, "label"), formatted=_str(value, "formatted"))
            for value in _list_of_dicts(values_raw, "values")
        )
    )

    statements_raw = _get(raw, "statements")
    statements = () if statements_raw is None else _convert_statements(statements_raw)

    is_assertion_error = _bool(raw, "is_assertion_error") or _bool(raw, "ava_assertion_error")

    return SerializedError(
        message=_str_or_none(raw, "message"),
        stack=_str_or_none(raw, "stack"),
        summary=_str_or_none(raw, "summary"),
        name=_str_or_none(raw, "name"),
        source=source,
        is_assertion_error=is_assertion_error,
        assertion=_str_or_none(raw, "assertion"),
        values=values,
        statements=statements,
        improper_usage=_convert_improper_usage(_get(raw, "improper_usage")),
        non_error_object=_bool(raw, "non_error_object"),
        formatted=_str_or_none(raw, "formatted"),
    )


def convert_stats(raw: Mapping[str, object]) -> RunStats:
    """Convert raw stats snapshot to RunStats.

    by_file may be a mapping or a list of [file, stats] pairs.
    """
    by_file_raw = _get(raw, "by_file")
    by_file: dict[str, FileStats] = {}
    if isinstance(by_file_raw, dict):
        pairs = list(by_file_raw.items())
    elif isinstance(by_file_raw, list):
        pairs = [_pair(entry) for entry in by_file_raw]
    elif by_file_raw is None:
        pairs = []
    else:
        raise ConversionError(field="by_file", expected="dict | list", got=type(by_file_raw))

    for file, file_raw in pairs:
        if not isinstance(file, str):
            raise ConversionError(field="by_file", expected="str key", got=type(file))
        file_stats = _as_dict(file_raw, "by_file")
        by_file[file] = FileStats(**{name: _count(file_stats, name) for name in FileStats.__dataclass_fields__})

    counters = {name: _count(raw, name) for name in RunStats.__dataclass_fields__ if name != "by_file"}
    return RunStats(**counters, by_file=MappingProxyType(by_file))


def _convert_source(raw: dict[str, object]) -> ErrorSource:
    """Convert raw dict to ErrorSource."""
    line = _int(raw, "line")
    if line < 1:
        raise ConversionError(field="line", expected="int >= 1", got=type(line))
    return ErrorSource(
        file=_str(raw, "file"),
        line=line,
        is_within_project=_bool(raw, "is_within_project", default=True),
        is_dependency=_bool(raw, "is_dependency"),
    )


def _convert_statements(raw: object) -> tuple[tuple[str, str], ...]:
    if not isinstance(raw, list):
        raise ConversionError(field="statements", expected="list", got=type(raw))
    statements = []
    for item in raw:
        if not isinstance(item, list | tuple) or len(item) != 2:
            raise ConversionError(field="statements", expected="[str, str] pair", got=type(item))
        left, right = item
        if not isinstance(left, str) or not isinstance(right, str):
            raise ConversionError(field="statements", expected="[str, str] pair", got=type(item))
        statements.append((left, right))
    return tuple(statements)


def _convert_improper_usage(raw: object) -> ImproperUsage | None:
    if raw is None or raw is False:
        return None
    if raw is True:
        return ImproperUsage()
    usage = _as_dict(raw, "improper_usage")
    return ImproperUsage(
        name=_str_or_none(usage, "name"),
        snap_path=_str_or_none(usage, "snap_path"),
        expected_version=_int_or_none(usage, "expected_version"),
        actual_version=_int_or_none(usage, "actual_version"),
    )


def _logs(raw: Mapping[str, object]) -> tuple[str, ...]:
    value = _get(raw, "logs")
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(log, str) for log in value):
        raise ConversionError(field="logs", expected="list[str]", got=type(value))
    return tuple(value)


def _chunk(raw: Mapping[str, object]) -> str | bytes:
    """Extract worker output chunk: str, byte list, or serialized Buffer."""
    value = _get(raw, "chunk")
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and value.get("type") == "Buffer":
        value = value.get("data")
    if isinstance(value, list) and all(isinstance(b, int) and 0 <= b < 256 for b in value):
        return bytes(value)
    raise ConversionError(field="chunk", expected="str | bytes", got=type(value))


def _pair(entry: object) -> tuple[object, object]:
    if not isinstance(entry, list) or len(entry) != 2:
        raise ConversionError(field="by_file", expected="[file, stats] pair", got=type(entry))
    return entry[0], entry[1]


# =============================================================================
# Key lookup
# =============================================================================


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _get(raw: Mapping[str, object], name: str, default: object = None) -> object:
    """Look up snake_case key, then camelCase key."""
    value = raw.get(name, _MISSING)
    if value is _MISSING:
        value = raw.get(_camel(name), _MISSING)
    return default if value is _MISSING else value


# =============================================================================
# Type extractors (FAIL-FIRST)
# =============================================================================


def _str(raw: Mapping[str, object], name: str) -> str:
    """Extract str. Raises ConversionError if missing or not str."""
    value = _get(raw, name)
    if not isinstance(value, str):
        raise ConversionError(field=name, expected="str", got=type(value))
    return value


def _str_or_none(raw: Mapping[str, object], name: str) -> str | None:
    """Extract str or None. Raises ConversionError if other type."""
    value = _get(raw, name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConversionError(field=name, expected="str | None", got=type(value))
    return value


def _int(raw: Mapping[str, object], name: str) -> int:
    """Extract int. Raises ConversionError if missing or not int."""
    value = _get(raw, name)
    if not isinstance(value, int) or isinstance(value, bool):
        raise ConversionError(field=name, expected="int", got=type(value))
    return value


def _int_or_none(raw: Mapping[str, object], name: str) -> int | None:
    """Extract int or None. Raises ConversionError if other type."""
    value = _get(raw, name)
    if value is None:
        return None
    if not isinstance(value, int) or isinstance(value, bool):
        raise ConversionError(field=name, expected="int | None", got=type(value))
    return value


def _count(raw: Mapping[str, object], name: str) -> int:
    """Extract counter. Missing counter = 0.

    Raises ConversionError if not a non-negative int.
    """
    value = _get(raw, name, 0)
    if not isinstance(value, int) or isinstance(value, bool):
        raise ConversionError(field=name, expected="int", got=type(value))
    if value < 0:
        raise ConversionError(field=name, expected="int >= 0", got=type(value))
    return value


def _number(raw: Mapping[str, object], name: str) -> float:
    """Extract int/float. Missing = 0."""
    value = _get(raw, name, 0)
    if not isinstance(value, int | float) or isinstance(value, bool):
        raise ConversionError(field=name, expected="int | float", got=type(value))
    return value


def _bool(raw: Mapping[str, object], name: str, *, default: bool = False) -> bool:
    """Extract bool. Missing/None = default."""
    value = _get(raw, name)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConversionError(field=name, expected="bool", got=type(value))
    return value


def _dict(raw: Mapping[str, object], name: str) -> dict[str, object]:
    """Extract dict. Raises ConversionError if missing or not dict."""
    return _as_dict(_get(raw, name), name)


def _as_dict(value: object, name: str) -> dict[str, object]:
    if not isinstance(value, dict):
        raise ConversionError(field=name, expected="dict", got=type(value))
    return value


def _list_of_dicts(value: object, name: str) -> list[dict[str, object]]:
    """Extract list of dicts. Raises ConversionError if wrong shape."""
    if not isinstance(value, list):
        raise ConversionError(field=name, expected="list", got=type(value))
    for item in value:
        if not isinstance(item, dict):
            raise ConversionError(field=name, expected="list[dict]", got=type(item))
    return value
