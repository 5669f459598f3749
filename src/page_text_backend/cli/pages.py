"""
Page commands for the Page Text CLI.

This module implements CLI commands for listing pages, showing the editable
text fields of a page and applying edit batches to it.
"""

import json
from pathlib import Path

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from ..exceptions.page_text_exceptions import (
    ConflictError,
    EditBatchValidationError,
    PageTextError,
    TemplateParseError,
)
from ..services.edit_validation import parse_edit_batch

console = Console()

# Create the pages command group
pages_app = typer.Typer(
    name="pages",
    help="Page listing and text editing commands",
    rich_markup_mode="rich",
)

VALUE_PREVIEW_LENGTH = 60


def _get_service():
    """Get the page text service from the main CLI module."""
    from .cli import get_page_text_service
    return get_page_text_service()


def _handle_page_error(operation: str, error: Exception) -> None:
    """Handle and display page operation errors consistently."""
    if isinstance(error, TemplateParseError):
        rprint(f"[red]Parse Error:[/red] {error}")
        rprint("The page was not modified. Fix the markup and try again.")
    elif isinstance(error, ConflictError):
        rprint(f"[yellow]Conflict:[/yellow] {error}")
    elif isinstance(error, EditBatchValidationError):
        rprint(f"[red]Invalid edits:[/red] {error}")
    elif isinstance(error, PageTextError):
        rprint(f"[red]Error:[/red] {error}")
    else:
        rprint(f"[red]Error:[/red] Unexpected error during {operation}: {error}")
    raise typer.Exit(1)


def _preview(value: str) -> str:
    """Single-line preview of a field value for table display."""
    # Lone surrogates cannot be written to the console
    value = value.encode("utf-8", errors="replace").decode("utf-8")
    flat = " ".join(value.split())
    if not flat:
        return "[dim](empty)[/dim]"
    if len(flat) > VALUE_PREVIEW_LENGTH:
        return flat[:VALUE_PREVIEW_LENGTH - 1] + "…"
    return flat


@pages_app.command("list")
def list_pages(
    as_json: bool = typer.Option(False, "--json", help="Print pages as JSON"),
) -> None:
    """
    List the editable pages of the project.

    Dynamic routes and pages under the admin base path are not listed.

    Example:
        page-text pages list
    """
    service = _get_service()
    try:
        pages = service.list_pages()
    except Exception as e:
        _handle_page_error("page listing", e)

    if as_json:
        typer.echo(json.dumps([page.to_dict() for page in pages], indent=2))
        return

    if not pages:
        rprint(f"[yellow]No pages found in[/yellow] {service.pages_dir}")
        return

    table = Table(title=f"Pages ({len(pages)})")
    table.add_column("Name", style="cyan")
    table.add_column("Path")
    table.add_column("Route", style="green")
    for page in pages:
        table.add_row(page.name, page.path, page.route)
    console.print(table)


@pages_app.command("fields")
def show_fields(
    page: str = typer.Argument(..., help="Page path relative to the pages directory"),
    as_json: bool = typer.Option(False, "--json", help="Print fields as JSON"),
) -> None:
    """
    Show the editable text fields of a page, grouped by section.

    Example:
        page-text pages fields about.astro --json
    """
    service = _get_service()
    try:
        result = service.get_page_fields(page)
    except Exception as e:
        _handle_page_error("field extraction", e)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    if not result.fields:
        rprint(f"[yellow]No editable text in[/yellow] {result.page_path}")
        return

    for group, fields in result.groups().items():
        table = Table(title=group or "(page)", title_justify="left")
        table.add_column("Id", style="cyan", no_wrap=True)
        table.add_column("Label")
        table.add_column("Value")
        for text_field in fields:
            table.add_row(text_field.id, text_field.label, _preview(text_field.value))
        console.print(table)

    if result.collection_refs:
        rprint(f"Collections: {', '.join(result.collection_refs)}")


@pages_app.command("apply")
def apply_edits(
    page: str = typer.Argument(..., help="Page path relative to the pages directory"),
    edits_file: Path = typer.Argument(
        ...,
        help="JSON file with an edit list or an object with an 'edits' list",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Report what would change without writing the page",
    ),
) -> None:
    """
    Apply a batch of text edits to a page.

    Each edit names a field id, the value it was read with and the new
    value. Edits whose text can no longer be located are dropped and
    reported. The command exits with status 1 when no edit applied.

    Example:
        page-text pages apply about.astro edits.json --dry-run
    """
    try:
        with open(edits_file, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        rprint(f"[red]Invalid JSON in {edits_file}:[/red] {e}")
        raise typer.Exit(1)

    service = _get_service()
    try:
        edits = parse_edit_batch(payload)
        result = service.apply_page_edits(page, edits, dry_run=dry_run)
    except Exception as e:
        _handle_page_error("edit application", e)

    verb = "Would apply" if dry_run else "Applied"
    rprint(f"[green]{verb} {len(result.applied)} of {len(edits)} edits[/green] to {page}")
    for edit_id in result.applied:
        rprint(f"  [green]✓[/green] {edit_id}")

    if result.dropped:
        table = Table(title="Dropped edits", title_justify="left")
        table.add_column("Id", style="cyan", no_wrap=True)
        table.add_column("Reason", style="yellow")
        table.add_column("Old value")
        for dropped in result.dropped:
            table.add_row(dropped.edit.id, dropped.reason.value, _preview(dropped.edit.old_value))
        console.print(table)

    if not result.applied:
        raise typer.Exit(1)
