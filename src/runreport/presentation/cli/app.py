import os
import sys
from typing import Optional

import typer

from runreport.application.reporters.verbose import ReporterConfig, VerboseReporter
from runreport.application.services.replay import RunReplayer
from runreport.infrastructure.line_writer import LineWriter
from runreport.presentation.cli.logs import setup_logging

app = typer.Typer(add_completion=False, help="runreport - console reporter for test run events")


@app.callback()
def _root() -> None:
    """Keep `replay` as an explicit subcommand."""


@app.command()
def replay(
    events: typer.FileText = typer.Argument(..., help="NDJSON event log, or - for stdin"),
    watch: bool = typer.Option(False, "--watch", "-w", help="Render as a watch-mode run"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colors"),
    fail_fast: bool = typer.Option(False, "--fail-fast", help="Default fail-fast flag when the log has no plan"),
    match: bool = typer.Option(False, "--match", help="Default match flag when the log has no plan"),
    previous_failures: int = typer.Option(0, "--previous-failures", min=0, help="Failures carried from a previous run"),
    width: Optional[int] = typer.Option(None, "--width", min=1, help="Override terminal width"),
    ascii_only: bool = typer.Option(False, "--ascii", help="Use ASCII glyphs"),
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Log level for diagnostics on stderr"),
):
    """Render a recorded event log. Exit code 1 when the run failed."""
    setup_logging(log_level)

    writer = LineWriter(sys.stdout, columns=width)
    color_system = None if no_color or os.environ.get("NO_COLOR") or not writer.is_tty else "standard"
    config = ReporterConfig(watching=watch, color_system=color_system, unicode=not ascii_only)
    reporter = VerboseReporter(writer, config)

    replayer = RunReplayer(
        reporter,
        fail_fast_enabled=fail_fast,
        matching=match,
        previous_failures=previous_failures,
    )
    result = replayer.replay(events)
    writer.close()

    if result.skipped:
        typer.echo(f"{result.skipped} record(s) skipped, see log output", err=True)
    raise typer.Exit(code=0 if result.passed else 1)


def main() -> None:
    app()
