"""Reporters for run lifecycle events.

VerboseReporter renders events to a line writer using rich styles.
Users can implement other reporters with RunReporterProtocol.
"""

from runreport.application.reporters.colors import DEFAULT_THEME, Colors
from runreport.application.reporters.figures import ASCII, UNICODE, Figures, get_figures
from runreport.application.reporters.verbose import ReporterConfig, VerboseReporter

__all__ = [
    "ASCII",
    "DEFAULT_THEME",
    "UNICODE",
    "Colors",
    "Figures",
    "ReporterConfig",
    "VerboseReporter",
    "get_figures",
]
