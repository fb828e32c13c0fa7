"""UI helpers for CLI interaction.

This module provides reusable UI components and helpers for the CLI,
keeping the presentation logic separate from business logic.
"""

from collections.abc import Callable, Mapping
import functools
from typing import Any, ParamSpec, TypeVar

from rich.console import Console
from rich.markup import escape
from rich.table import Table
import typer

from cratematch.application.utilities.results import (
    ResilienceEnvelope,
    is_match_error,
)
from cratematch.config import get_logger
from cratematch.domain.matching import MatchOptions, MatchOutcome, MatchStatus

# Initialize console and logger
console = Console()
logger = get_logger(__name__)

# Type variables for command handler decorator
P = ParamSpec("P")
R = TypeVar("R")

_STATUS_STYLES = {
    MatchStatus.MATCHED: "bold green",
    MatchStatus.REVIEW: "bold yellow",
    MatchStatus.NO_MATCH: "bold red",
}


def command_error_handler(func: Callable[P, R]) -> Callable[P, R]:
    """Decorator to standardize error handling for CLI commands.

    Logs the failure with Loguru, prints a short message with Rich and
    converts the exception into a Typer exit with code 1.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        operation = func.__name__.replace("_", " ")

        with logger.contextualize(operation=operation):
            try:
                logger.debug(f"Executing {operation}")
                return func(*args, **kwargs)

            except typer.Exit:
                raise

            except typer.Abort:
                logger.info(f"Operation {operation} aborted by user")
                raise

            except Exception as e:
                logger.exception(f"Error during {operation}")
                console.print(f"\n[bold red]✗ Error during {operation}:[/bold red] {e}")
                raise typer.Exit(code=1) from e

    return wrapper


def _display_outcome(outcome: MatchOutcome, heading: str) -> None:
    query = outcome.search_query
    style = _STATUS_STYLES[outcome.status]
    console.print(
        f"\n[bold]{heading}[/bold] {escape(query.artist)} - {escape(query.title)} "
        f"[dim]({query.format or 'unknown format'})[/dim] "
        f"[{style}]{outcome.status.value}[/{style}]"
    )

    if outcome.best_match is None:
        console.print("[dim]No candidate reached the minimum confidence[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("", width=4)
    table.add_column("Release", justify="right")
    table.add_column("Artist")
    table.add_column("Title")
    table.add_column("Year", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Type")

    rows = [("best", outcome.best_match)] + [
        ("alt", alternative) for alternative in outcome.alternatives
    ]
    for label, candidate in rows:
        release = candidate.release
        table.add_row(
            label,
            str(release.id),
            escape(release.comparable_artist),
            escape(release.comparable_title),
            str(release.year or ""),
            str(candidate.confidence),
            candidate.classification.value,
        )
    console.print(table)


def display_match_result(result: ResilienceEnvelope, index: int = 1) -> None:
    """Render one safe-match envelope."""
    if is_match_error(result):
        console.print(
            f"\n[bold red]✗ #{index} {result.kind.value}:[/bold red] {escape(result.message)} "
            f"[dim](correlation id {result.correlation_id})[/dim]"
        )
        _display_outcome(result.fallback, "  fallback:")
        return

    _display_outcome(result, f"#{index}")


def display_presets(presets: Mapping[str, MatchOptions]) -> None:
    """Render the named matching presets as a table."""
    table = Table(title="Matching Presets")
    table.add_column("Preset", style="cyan")
    table.add_column("Strictness")
    table.add_column("Min confidence", justify="right")
    table.add_column("Alternatives", justify="right")
    table.add_column("Timeout (ms)", justify="right")

    for name, options in presets.items():
        table.add_row(
            name,
            options.format_strictness.value,
            str(options.min_confidence),
            str(options.max_alternatives) if options.include_alternatives else "off",
            str(options.timeout_ms),
        )
    console.print(table)


def display_health(health: Mapping[str, Any]) -> None:
    """Render breaker state and metrics after a run."""
    breaker = health["circuit_breaker"]
    metrics = health["metrics"]

    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("Metric", style="dim")
    summary.add_column("Value")
    summary.add_row("Circuit breaker", breaker["state"])
    summary.add_row("Requests", str(metrics["total_requests"]))
    summary.add_row("Successful", str(metrics["successful_requests"]))
    summary.add_row("Failed", str(metrics["failed_requests"]))
    summary.add_row("Timeouts", str(metrics["timeouts"]))
    summary.add_row("Invalid input", str(metrics["validation_errors"]))
    summary.add_row("Success rate", f"{metrics['success_rate']}%")
    console.print()
    console.print(summary)
