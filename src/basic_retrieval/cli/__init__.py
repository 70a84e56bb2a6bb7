"""CLI tools for basic-retrieval."""
