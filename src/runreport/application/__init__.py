"""Application layer.

- reporters: event → console rendering (VerboseReporter)
- services: drivers feeding recorded events to a reporter (RunReplayer)
"""

from runreport.application.reporters import ReporterConfig, VerboseReporter
from runreport.application.services import ReplayResult, RunReplayer

__all__ = [
    "ReplayResult",
    "ReporterConfig",
    "RunReplayer",
    "VerboseReporter",
]
