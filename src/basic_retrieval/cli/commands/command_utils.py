"""utility functions for commands"""

import asyncio
from typing import Awaitable, Optional, TypeVar

import typer
from rich.console import Console

from basic_retrieval import db
from basic_retrieval.config import ConfigManager, RetrievalConfig
from basic_retrieval.container import RetrievalContainer
from basic_retrieval.errors import RetrievalError, RetrievalFailedError

console = Console()

T = TypeVar("T")


def run_with_cleanup(coro: Awaitable[T]) -> T:
    """Run a coroutine, disposing database engines before the event loop closes."""

    async def _run() -> T:
        try:
            return await coro
        finally:
            await db.shutdown_db()

    return asyncio.run(_run())


def get_container(collection: Optional[str] = None) -> RetrievalContainer:
    """Container for a command, with the collection overridden if given."""
    config: RetrievalConfig = ConfigManager().config
    if collection:
        config = config.model_copy(update={"collection_id": collection})
    return RetrievalContainer.create(config)


def exit_with_error(error: RetrievalError) -> None:
    """Print a retrieval error and exit with status 1."""
    if isinstance(error, RetrievalFailedError):
        hint = " (retryable)" if error.retryable else ""
        console.print(f"[red]✗ {type(error.cause).__name__}{hint}:[/red] {error.cause}")
    else:
        console.print(f"[red]✗ {type(error).__name__}:[/red] {error}")
    raise typer.Exit(1)
