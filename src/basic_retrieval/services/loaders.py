"""Readers that turn tabular files into documents for ingestion."""

import csv
import json
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional

from basic_retrieval.schemas import DocumentCreate, MetadataValue

# Sample sports corpus used by `basic-retrieval seed`
SAMPLE_DOCUMENTS: list[DocumentCreate] = [
    DocumentCreate(
        text="The 2024 Summer Olympics will feature new sports including breakdancing.",
        metadata={"source": "Olympics news", "category": "events"},
    ),
    DocumentCreate(
        text="Lionel Messi scored a historic goal to win the Copa America.",
        metadata={"source": "Football news", "category": "highlights"},
    ),
    DocumentCreate(
        text="Serena Williams announced her retirement from professional tennis.",
        metadata={"source": "Tennis news", "category": "retirement"},
    ),
]


def clean_metadata(row: Mapping[str, Any]) -> dict[str, MetadataValue]:
    """Keep scalar values, map missing values to None and serialize nested ones."""
    metadata: dict[str, MetadataValue] = {}
    for key, value in row.items():
        if key is None:
            # csv.DictReader puts surplus columns under a None key
            continue
        if value is None or isinstance(value, (bool, int, float, str)):
            metadata[str(key)] = value
        else:
            metadata[str(key)] = json.dumps(value, default=str)
    return metadata


def render_text(
    row: Mapping[str, Any],
    text_field: Optional[str] = None,
    template: Optional[str] = None,
) -> str:
    """
    Build document text from a row.

    Args:
        row: Source row
        text_field: Column holding the text
        template: str.format template over the row's columns, e.g.
            "IPL {season}: {team1} vs {team2}. Winner: {winner}."

    Raises:
        ValueError: If neither option is given, or the row lacks what they name
    """
    if template:
        try:
            return template.format(**{k: ("" if v is None else v) for k, v in row.items() if k})
        except (KeyError, IndexError) as exc:
            raise ValueError(f"Template references missing column {exc}") from exc
    if text_field:
        if text_field not in row or row[text_field] in (None, ""):
            raise ValueError(f"Row has no value for text field '{text_field}'")
        return str(row[text_field])
    raise ValueError("Either text_field or template is required")


def read_rows(path: Path) -> Iterator[dict[str, Any]]:
    """Yield rows from a .csv, .jsonl or .json file."""
    suffix = path.suffix.lower()
    if suffix == ".csv":
        with path.open(newline="", encoding="utf-8") as handle:
            yield from csv.DictReader(handle)
    elif suffix in (".jsonl", ".ndjson"):
        with path.open(encoding="utf-8") as handle:
            for line_number, line in enumerate(handle, start=1):
                if not line.strip():
                    continue
                row = json.loads(line)
                if not isinstance(row, dict):
                    raise ValueError(f"{path}:{line_number} is not a JSON object")
                yield row
    elif suffix == ".json":
        rows = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
            raise ValueError(f"{path} must contain a JSON array of objects")
        yield from rows
    else:
        raise ValueError(f"Unsupported file type: {path.suffix} (expected .csv, .jsonl or .json)")


def load_documents(
    path: Path,
    text_field: Optional[str] = None,
    template: Optional[str] = None,
) -> Iterator[DocumentCreate]:
    """Yield one DocumentCreate per row; every column becomes metadata."""
    for row in read_rows(path):
        yield DocumentCreate(
            text=render_text(row, text_field=text_field, template=template),
            metadata=clean_metadata(row),
        )
