"""Database management commands."""

from typing import Optional

import typer
from loguru import logger
from rich.console import Console

from basic_retrieval.cli.app import app
from basic_retrieval.cli.commands.command_utils import (
    exit_with_error,
    get_container,
    run_with_cleanup,
)
from basic_retrieval.container import RetrievalContainer
from basic_retrieval.errors import RetrievalError

console = Console()


async def _check(container: RetrievalContainer) -> int:
    repository = await container.document_repository()
    await repository.ping()
    return await repository.count(container.config.collection_id)


@app.command()
def check(
    collection: Optional[str] = typer.Option(
        None, "--collection", "-c", help="Collection to count (default: from config)"
    ),
):
    """Check that the document store is reachable and count its documents."""
    container = get_container(collection)
    try:
        count = run_with_cleanup(_check(container))
    except RetrievalError as e:
        exit_with_error(e)
        return

    logger.info(f"Store check passed: {count} documents")
    console.print(f"[green]✓ Connected to {container.config.database_path}[/green]")
    console.print(
        f"  Collection [cyan]{container.config.collection_id}[/cyan]: {count} documents"
    )
