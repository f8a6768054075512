"""CLI interface for ragvault."""

import asyncio
import json
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ....composition import container
from ....config import settings, setup_logging
from ...common.exception_handler import format_exception_json

app = typer.Typer(
    name="ragvault",
    help="ragvault - local document library with semantic search",
    add_completion=False,
)

console = Console()

# Determine if we're in debug mode (shows full stack traces)
DEBUG_MODE = os.getenv("DEBUG", "false").lower() == "true"


def handle_cli_error(exc: Exception) -> None:
    """Handle and display errors in CLI with structured format.

    In debug mode, shows full JSON error details.
    In normal mode, shows a user-friendly message with error code.

    Args:
        exc: The exception to handle.
    """
    error_data = format_exception_json(exc, include_trace=DEBUG_MODE)

    if DEBUG_MODE:
        console.print(
            Panel(
                json.dumps(error_data, indent=2, default=str),
                title="[bold red]Error Details[/]",
                border_style="red",
            )
        )
    else:
        error_type = error_data["error"]["type"]
        error_msg = error_data["error"]["message"]
        error_code = error_data["error"].get("code", "UNKNOWN")

        console.print(f"\n[red]Error [{error_code}]:[/] {error_msg}")
        console.print(f"[dim]Type: {error_type}[/]")
        console.print("[dim]Set DEBUG=true for full details[/]")


@app.callback()
def main() -> None:
    """Configure logging before any command runs."""
    setup_logging(settings.log_level, settings.log_file, settings.log_json)


@app.command()
def add(path: Path = typer.Argument(..., help="Text or markdown file to add")) -> None:
    """Add a document to the library."""
    try:
        document = asyncio.run(container.get_processing_service().add_document(path))
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)
    console.print(f"[green]Added[/] {document.name} [dim]({document.id})[/]")
    console.print(f"[dim]Run 'ragvault process {document.id}' to index it.[/]")


@app.command()
def process(document_id: str = typer.Argument(..., help="Document id")) -> None:
    """Chunk and embed a document."""
    try:
        with console.status("[bold green]Processing...[/]"):
            document = asyncio.run(container.get_processing_service().process_document(document_id))
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)
    console.print(f"[green]Processed[/] {document.name}: {len(document.chunks or [])} chunks")


@app.command("list")
def list_documents() -> None:
    """List documents in the library."""
    try:
        documents = asyncio.run(container.get_repository().get_all_documents())
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)

    if not documents:
        console.print("[yellow]Library is empty. Add a document with 'ragvault add PATH'.[/]")
        return

    table = Table(title="Documents")
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Size", justify="right")
    table.add_column("Processed", justify="center")
    table.add_column("Selected", justify="center")
    for doc in documents:
        table.add_row(
            doc.id,
            doc.name,
            doc.document_type,
            f"{doc.file_size:,}",
            "yes" if doc.is_processed else "no",
            "yes" if doc.is_selected else "no",
        )
    console.print(table)


@app.command()
def select(
    document_id: str = typer.Argument(..., help="Document id"),
    deselect: bool = typer.Option(False, "--deselect", help="Clear the selection instead"),
) -> None:
    """Mark a document as selected for retrieval."""
    try:
        found = asyncio.run(container.get_processing_service().set_selected(document_id, not deselect))
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)
    if not found:
        console.print(f"[red]No document with id {document_id}[/]")
        raise typer.Exit(1)
    console.print(f"{'Deselected' if deselect else 'Selected'} {document_id}")


@app.command()
def delete(document_id: str = typer.Argument(..., help="Document id")) -> None:
    """Delete a document with its content and vectors."""
    try:
        asyncio.run(container.get_repository().delete_document(document_id))
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)
    console.print(f"[green]Deleted[/] {document_id}")


async def _selected_document_ids() -> list[str]:
    documents = await container.get_repository().get_all_documents()
    return [d.id for d in documents if d.is_selected]


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query"),
    doc: list[str] = typer.Option(
        None, "--doc", help="Restrict to these document ids (default: the selected documents)"
    ),
    top: int = typer.Option(0, "--top", help="Number of results (0 = configured default)"),
) -> None:
    """Search indexed chunks.

    Without --doc the search covers the selected documents, or every
    document when none is selected.
    """
    try:
        document_ids = doc or asyncio.run(_selected_document_ids())
        with console.status("[bold green]Searching...[/]"):
            results = asyncio.run(
                container.get_retrieval_service().retrieve_relevant_chunks(
                    query, document_ids or None, top
                )
            )
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)

    if not results:
        console.print("[yellow]No relevant chunks found.[/]")
        return

    for result in results:
        chunk = result.chunk
        title = f"{chunk.source} #{chunk.chunk_index}"
        if chunk.section_path:
            title = f"{title} - {chunk.section_path}"
        console.print(
            Panel(chunk.content, title=title, subtitle=f"score {result.score:.3f}", border_style="cyan")
        )


if __name__ == "__main__":
    app()
