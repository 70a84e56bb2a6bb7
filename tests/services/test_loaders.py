"""Tests for file loaders used by ingestion."""

import json

import pytest

from basic_retrieval.services.loaders import (
    clean_metadata,
    load_documents,
    read_rows,
    render_text,
)


def test_clean_metadata_keeps_scalars_and_serializes_nested_values():
    row = {"season": "2017", "runs": 5, "rate": 7.5, "won": True, "city": None, "tags": ["a"]}

    assert clean_metadata(row) == {
        "season": "2017",
        "runs": 5,
        "rate": 7.5,
        "won": True,
        "city": None,
        "tags": '["a"]',
    }


def test_clean_metadata_keeps_empty_csv_cells():
    assert clean_metadata({"season": "2017", "city": ""}) == {"season": "2017", "city": ""}


def test_clean_metadata_drops_surplus_csv_columns():
    assert clean_metadata({"a": "1", None: ["extra"]}) == {"a": "1"}


def test_render_text_from_template():
    row = {"team1": "Mumbai Indians", "team2": "Chennai Super Kings", "winner": None}
    text = render_text(row, template="{team1} vs {team2}. Winner: {winner}.")
    assert text == "Mumbai Indians vs Chennai Super Kings. Winner: ."


def test_render_text_template_with_unknown_column():
    with pytest.raises(ValueError, match="missing column"):
        render_text({"team1": "A"}, template="{team1} vs {team2}")


@pytest.mark.parametrize("template", ["{0}", "IPL {}: {team1}"])
def test_render_text_positional_template_is_rejected(template):
    with pytest.raises(ValueError, match="missing column"):
        render_text({"team1": "A"}, template=template)


def test_render_text_from_field():
    assert render_text({"body": "Messi scores"}, text_field="body") == "Messi scores"
    with pytest.raises(ValueError):
        render_text({"body": ""}, text_field="body")
    with pytest.raises(ValueError):
        render_text({"body": "x"})


def test_read_csv_rows(tmp_path):
    path = tmp_path / "matches.csv"
    path.write_text("id,team1,team2\n1,KKR,RCB\n2,MI,CSK\n", encoding="utf-8")

    rows = list(read_rows(path))

    assert rows == [
        {"id": "1", "team1": "KKR", "team2": "RCB"},
        {"id": "2", "team1": "MI", "team2": "CSK"},
    ]


def test_read_jsonl_rows_skips_blank_lines(tmp_path):
    path = tmp_path / "news.jsonl"
    path.write_text('{"text": "one"}\n\n{"text": "two"}\n', encoding="utf-8")

    assert [row["text"] for row in read_rows(path)] == ["one", "two"]


def test_read_json_array(tmp_path):
    path = tmp_path / "news.json"
    path.write_text(json.dumps([{"text": "one"}, {"text": "two"}]), encoding="utf-8")

    assert len(list(read_rows(path))) == 2


def test_read_json_rejects_non_objects(tmp_path):
    path = tmp_path / "news.json"
    path.write_text(json.dumps(["one", "two"]), encoding="utf-8")

    with pytest.raises(ValueError):
        list(read_rows(path))


def test_read_rows_rejects_unknown_suffix(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello", encoding="utf-8")

    with pytest.raises(ValueError, match="Unsupported file type"):
        list(read_rows(path))


def test_load_documents_uses_every_column_as_metadata(tmp_path):
    path = tmp_path / "matches.csv"
    path.write_text("season,team1,team2,winner\n2008,KKR,RCB,KKR\n", encoding="utf-8")

    documents = list(
        load_documents(path, template="IPL {season}: {team1} vs {team2}. Winner: {winner}.")
    )

    assert len(documents) == 1
    assert documents[0].text == "IPL 2008: KKR vs RCB. Winner: KKR."
    assert documents[0].metadata == {
        "season": "2008",
        "team1": "KKR",
        "team2": "RCB",
        "winner": "KKR",
    }
