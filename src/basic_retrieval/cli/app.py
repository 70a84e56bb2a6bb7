from typing import Optional

import typer


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        import basic_retrieval
        from basic_retrieval.config import ConfigManager

        config = ConfigManager().config
        typer.echo(f"Basic Retrieval version: {basic_retrieval.__version__}")
        typer.echo(f"Database: {config.database_path}")
        typer.echo(f"Embedding: {config.embedding_provider} ({config.embedding_model})")
        raise typer.Exit()


app = typer.Typer(name="basic-retrieval")


@app.callback()
def app_callback(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Basic Retrieval - exact semantic retrieval over a local document store."""
