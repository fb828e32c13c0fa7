"""cratematch CLI - Main application entry point and app structure."""

import asyncio
from enum import Enum
from importlib.metadata import version
import json
from pathlib import Path
from typing import Annotated, Any

from rich.console import Console
import typer

from cratematch.application.services.matching_service import SafeMatcher
from cratematch.config import get_logger, log_startup_info, setup_loguru_logger
from cratematch.domain.matching import (
    MATCHING_PRESETS,
    FormatStrictness,
    merge_with_preset,
)
from cratematch.infrastructure.cli.ui import (
    command_error_handler,
    display_health,
    display_match_result,
    display_presets,
)

VERSION = version("cratematch")

console = Console(width=80)
logger = get_logger(__name__)

app = typer.Typer(
    help=f"cratematch v{VERSION} - Match your purchases against catalog releases",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
)

PresetName = Enum("PresetName", {name: name for name in MATCHING_PRESETS}, type=str)


def _load_documents(path: Path) -> list[dict[str, Any]]:
    """Read ``{"purchase": ..., "candidates": [...]}`` or a list of them."""
    data = json.loads(path.read_text(encoding="utf-8"))
    documents = data if isinstance(data, list) else [data]
    for index, document in enumerate(documents, start=1):
        if not isinstance(document, dict) or "purchase" not in document:
            raise ValueError(f"Entry {index} in {path} has no 'purchase' object")
    return documents


@app.command(name="match", rich_help_panel="🎯 Matching")
@command_error_handler
def match_command(
    file: Annotated[
        Path,
        typer.Argument(
            exists=True, dir_okay=False, readable=True, help="JSON file to match"
        ),
    ],
    preset: Annotated[
        PresetName, typer.Option("--preset", "-p", help="Matching preset")
    ] = PresetName("default"),
    strictness: Annotated[
        FormatStrictness | None,
        typer.Option("--strictness", "-s", help="Override format strictness"),
    ] = None,
    min_confidence: Annotated[
        int | None,
        typer.Option(
            "--min-confidence", min=0, max=100, help="Override minimum confidence"
        ),
    ] = None,
    as_json: Annotated[
        bool, typer.Option("--json", help="Print results as JSON")
    ] = False,
) -> None:
    """Match purchases in a JSON file against their candidate releases."""
    overrides: dict[str, Any] = {}
    if strictness is not None:
        overrides["format_strictness"] = strictness.value
    if min_confidence is not None:
        overrides["min_confidence"] = min_confidence
    options = merge_with_preset(preset.value, **overrides)

    documents = _load_documents(file)
    candidates_by_purchase = {
        id(document["purchase"]): document.get("candidates", [])
        for document in documents
    }

    async def fetch_candidates(purchase: Any) -> Any:
        return candidates_by_purchase[id(purchase)]

    matcher = SafeMatcher()
    results = asyncio.run(
        matcher.compute_match_batch(
            [document["purchase"] for document in documents],
            fetch_candidates,
            options,
        )
    )

    if as_json:
        typer.echo(json.dumps([result.as_dict() for result in results], indent=2))
        return

    for index, result in enumerate(results, start=1):
        display_match_result(result, index)
    display_health(matcher.health())


@app.command(name="presets", rich_help_panel="🎯 Matching")
def presets_command() -> None:
    """List the named matching presets."""
    display_presets(MATCHING_PRESETS)


@app.command(name="version", rich_help_panel="⚙️ System")
def version_command() -> None:
    """Show version information."""
    console.print(f"[bold bright_blue]cratematch[/bold bright_blue] [dim]v{VERSION}[/dim]")


@app.callback()
def init_cli(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output"),
    ] = False,
) -> None:
    """Initialize cratematch CLI."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    setup_loguru_logger(verbose)
    log_startup_info()


def main() -> int:
    """Application entry point."""
    try:
        return app() or 0
    except Exception:
        logger.exception("Unhandled exception")
        return 1
