"""Main CLI entry point for basic-retrieval."""  # pragma: no cover

from basic_retrieval.cli.app import app  # pragma: no cover

# Register commands
from basic_retrieval.cli.commands import db, documents  # noqa: F401  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    # start the app
    app()
