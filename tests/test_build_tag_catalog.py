"""Tests for cleaning CRM export rows into catalog records."""

from __future__ import annotations

from pathlib import Path

from affinity_engine.tag_catalog import CatalogSnapshot
from scripts.build_tag_catalog import load_csv, to_records


def test_blank_and_duplicate_rows_dropped() -> None:
    records = to_records([
        {"id": "1", "name": "Ice Hockey", "category": "Personal"},
        {"id": "2", "name": "", "category": "Personal"},
        {"id": "3", "name": "Rowing", "category": ""},
        {"id": "4", "name": "ice hockey ", "category": "personal"},
    ])
    assert records == [
        {"id": 1, "name": "Ice Hockey", "category": "Personal", "external_ref": None},
    ]


def test_missing_ids_numbered_after_highest() -> None:
    records = to_records([
        {"name": "Rowing", "category": "Personal"},
        {"id": "40", "name": "Sailing", "category": "Personal"},
        {"id": "", "name": "Financial Aid", "category": "Philanthropic"},
    ])
    assert [r["id"] for r in records] == [41, 40, 42]


def test_non_numeric_ids_kept_as_strings() -> None:
    records = to_records([{"id": "AT-7", "name": "Rowing", "category": "Personal"}])
    assert records[0]["id"] == "AT-7"


def test_external_ref_from_bbec_column() -> None:
    records = to_records([{"id": "1", "name": "Rowing", "category": "Personal", "bbec_id": "BBEC-9"}])
    assert records[0]["external_ref"] == "BBEC-9"


def test_csv_export_builds_valid_snapshot(tmp_path: Path) -> None:
    path = tmp_path / "export.csv"
    path.write_text(
        "\ufeffName,Category,BBEC_ID\n"
        "Ice Hockey,Personal,BBEC-1\n"
        "Financial Aid,Philanthropic,\n",
        encoding="utf-8",
    )
    snapshot = CatalogSnapshot.from_records(to_records(load_csv(str(path))))

    assert len(snapshot) == 2
    assert snapshot.get(1).external_ref == "BBEC-1"
    assert snapshot.get(2).external_ref is None
    assert snapshot.categories() == ["Personal", "Philanthropic"]
