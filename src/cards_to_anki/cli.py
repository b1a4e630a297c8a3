"""Command-line interface for building Anki packages."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .errors import ExportError
from .exporter import ApkgExporter, summarize_package
from .models import ExportOptions, ExportRequest

console = Console()


def display_summary(path: Path, data: bytes) -> None:
    """Display what a package holds."""
    summary = summarize_package(data)

    table = Table(title=f"{path.name}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Size", f"{len(data):,} bytes")
    table.add_row("Entries", ", ".join(summary.entries))
    table.add_row("Notes", str(summary.note_count))
    table.add_row("Cards", str(summary.card_count))
    table.add_row("Decks", ", ".join(summary.deck_names) or "-")
    table.add_row("Note types", str(len(summary.model_ids)))

    console.print(table)


@click.group()
@click.version_option(__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose: bool):
    """Cards to Anki - Build .apkg packages from JSON deck/card data."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    help="Output .apkg path (default: input name with .apkg suffix)",
)
@click.option(
    "--css",
    type=click.Path(exists=True, dir_okay=False),
    help="CSS file used to style both note types",
)
@click.option("--question-format", type=str, help="Front template of the Basic note type")
@click.option("--answer-format", type=str, help="Back template of the Basic note type")
def build(
    input_path: str,
    output: Optional[str],
    css: Optional[str],
    question_format: Optional[str],
    answer_format: Optional[str],
):
    """Build an .apkg from a JSON file of {"decks": [...], "cards": [...]}."""
    source = Path(input_path)
    output_path = Path(output) if output else source.with_suffix(".apkg")

    overrides = {}
    if css:
        overrides["css"] = Path(css).read_text(encoding="utf-8")
    if question_format:
        overrides["question_format"] = question_format
    if answer_format:
        overrides["answer_format"] = answer_format

    try:
        request = ExportRequest.from_json(source)
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Invalid input:[/red] {e}")
        sys.exit(1)

    exporter = ApkgExporter(ExportOptions(**overrides))
    try:
        with console.status("Building package..."):
            result = exporter.export(request.decks, request.cards, output_path)
    except ExportError as e:
        console.print(f"[red]Export failed:[/red] {e}")
        sys.exit(1)

    console.print(
        Panel(
            f"{len(request.cards)} cards in {len(request.decks)} decks\n[bold]{result}[/bold]",
            title="[bold]Package Created[/bold]",
            border_style="green",
        )
    )


@cli.command()
@click.argument("apkg_path", type=click.Path(exists=True, dir_okay=False))
def inspect(apkg_path: str):
    """Show what an .apkg file contains."""
    path = Path(apkg_path)
    try:
        display_summary(path, path.read_bytes())
    except ExportError as e:
        console.print(f"[red]Cannot read package:[/red] {e}")
        sys.exit(1)


def main():
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
