"""Infrastructure: event channel, output sink, payload conversion."""

from runreport.infrastructure.conversion import convert_error, convert_event, convert_stats
from runreport.infrastructure.event_source import EmitterSubscription, StateChangeEmitter
from runreport.infrastructure.line_writer import LineWriter

__all__ = [
    "EmitterSubscription",
    "LineWriter",
    "StateChangeEmitter",
    "convert_error",
    "convert_event",
    "convert_stats",
]
