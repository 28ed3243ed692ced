"""runreport command line interface.

Commands:
    replay: Render a recorded NDJSON event log with the verbose reporter.
"""

from runreport.presentation.cli.app import app, main
from runreport.presentation.cli.logs import setup_logging

__all__ = ["app", "main", "setup_logging"]
