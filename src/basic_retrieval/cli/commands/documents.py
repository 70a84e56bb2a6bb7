"""Commands for ingesting and querying documents."""

from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from basic_retrieval.cli.app import app
from basic_retrieval.cli.commands.command_utils import (
    exit_with_error,
    get_container,
    run_with_cleanup,
)
from basic_retrieval.container import RetrievalContainer
from basic_retrieval.errors import RetrievalError
from basic_retrieval.schemas import RankedResult
from basic_retrieval.services.loaders import SAMPLE_DOCUMENTS, load_documents

console = Console()


async def _seed(container: RetrievalContainer) -> int:
    service = await container.ingestion_service()
    return await service.ingest(SAMPLE_DOCUMENTS)


async def _ingest(
    container: RetrievalContainer,
    path: Path,
    text_field: Optional[str],
    template: Optional[str],
) -> int:
    service = await container.ingestion_service()
    return await service.ingest(load_documents(path, text_field=text_field, template=template))


async def _query(container: RetrievalContainer, text: str, k: int) -> list[RankedResult]:
    service = await container.retrieval_service()
    return await service.retrieve_scored(text, k)


@app.command()
def seed(
    collection: Optional[str] = typer.Option(
        None, "--collection", "-c", help="Target collection (default: from config)"
    ),
):
    """Ingest the built-in sample sports corpus."""
    container = get_container(collection)
    try:
        count = run_with_cleanup(_seed(container))
    except RetrievalError as e:
        exit_with_error(e)
        return

    console.print(
        f"[green]✓ Ingested {count} sample documents into "
        f"[cyan]{container.config.collection_id}[/cyan][/green]"
    )


@app.command()
def ingest(
    path: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="CSV, JSON-lines or JSON file"
    ),
    collection: Optional[str] = typer.Option(
        None, "--collection", "-c", help="Target collection (default: from config)"
    ),
    text_field: Optional[str] = typer.Option(
        None, "--text-field", "-f", help="Column holding the document text"
    ),
    template: Optional[str] = typer.Option(
        None,
        "--template",
        "-t",
        help="Format string over row columns, e.g. '{team1} vs {team2}. Winner: {winner}.'",
    ),
):
    """Embed every row of a file and store it as a document."""
    if not text_field and not template:
        console.print("[red]✗ Provide --text-field or --template[/red]")
        raise typer.Exit(1)

    container = get_container(collection)
    try:
        count = run_with_cleanup(_ingest(container, path, text_field, template))
    except RetrievalError as e:
        exit_with_error(e)
        return
    except ValueError as e:
        logger.error(f"Failed to read {path}: {e}")
        console.print(f"[red]✗ Failed to read {path}:[/red] {e}")
        raise typer.Exit(1)

    console.print(
        f"[green]✓ Ingested {count} documents from {path.name} into "
        f"[cyan]{container.config.collection_id}[/cyan][/green]"
    )


@app.command()
def query(
    text: str = typer.Argument(..., help="Query text"),
    k: Optional[int] = typer.Option(
        None, "--top-k", "-k", min=1, help="Number of documents (default: from config)"
    ),
    collection: Optional[str] = typer.Option(
        None, "--collection", "-c", help="Collection to search (default: from config)"
    ),
    scores: bool = typer.Option(False, "--scores", "-s", help="Show similarity scores"),
):
    """Retrieve the documents most relevant to a query."""
    container = get_container(collection)
    top_k = k or container.config.default_top_k
    try:
        results = run_with_cleanup(_query(container, text, top_k))
    except RetrievalError as e:
        exit_with_error(e)
        return

    if not results:
        console.print("[yellow]No documents found.[/yellow]")
        return

    table = Table(title=f"Top {len(results)} for: {text}")
    table.add_column("#", justify="right")
    if scores:
        table.add_column("Score", justify="right")
    table.add_column("Text")
    table.add_column("Metadata")

    for position, result in enumerate(results, start=1):
        metadata = ", ".join(f"{key}={value}" for key, value in result.document.metadata.items())
        row = [str(position)]
        if scores:
            row.append(f"{result.score:.4f}")
        row.extend([result.document.text, metadata])
        table.add_row(*row)

    console.print(table)
