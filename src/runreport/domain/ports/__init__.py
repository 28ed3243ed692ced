"""Domain ports (interfaces/protocols)."""

from runreport.domain.ports.event_source import StateChangeSource, Subscription
from runreport.domain.ports.output import OutputSink
from runreport.domain.ports.reporter import RunReporterProtocol

__all__ = [
    "OutputSink",
    "RunReporterProtocol",
    "StateChangeSource",
    "Subscription",
]
