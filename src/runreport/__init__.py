"""runreport - console reporter for test run lifecycle events."""

__version__ = "0.1.0"

from runreport.application.reporters import ReporterConfig, VerboseReporter
from runreport.domain.plan import RunPlan
from runreport.infrastructure.event_source import StateChangeEmitter
from runreport.infrastructure.line_writer import LineWriter

__all__ = [
    "LineWriter",
    "ReporterConfig",
    "RunPlan",
    "StateChangeEmitter",
    "VerboseReporter",
    "__version__",
]
