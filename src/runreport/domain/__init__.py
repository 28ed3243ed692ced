"""runreport domain layer.

Pure domain logic with no external dependencies.
Only imports: typing, dataclasses, enum, types, collections.abc
"""

from runreport.domain.events import (
    AssertionValue,
    ErrorSource,
    Event,
    EventType,
    FileStats,
    ImproperUsage,
    RunStats,
    SerializedError,
    get_event_type,
)
from runreport.domain.exceptions import ConversionError, RunReportError, StreamClosedError
from runreport.domain.plan import RunPlan

__all__ = [
    # Exceptions
    "RunReportError",
    "ConversionError",
    "StreamClosedError",
    # Events
    "Event",
    "EventType",
    "get_event_type",
    # Value objects
    "AssertionValue",
    "ErrorSource",
    "ImproperUsage",
    "SerializedError",
    "FileStats",
    "RunStats",
    "RunPlan",
]
