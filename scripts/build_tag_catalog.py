"""
One-time script: Build the affinity tag catalog from a CRM export.

Usage:
    python scripts/build_tag_catalog.py export.csv
    python scripts/build_tag_catalog.py export.json --output data/affinity_tags.json

The export may be a CSV with ``name`` and ``category`` columns (optional
``id`` and ``external_ref``/``bbec_id``) or a JSON list of the same
records. Rows without an id are numbered after the highest numeric id.
"""

import argparse
import csv
import json
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from affinity_engine.tag_catalog import CatalogSnapshot  # noqa: E402

DEFAULT_OUTPUT = PROJECT_ROOT / "data" / "affinity_tags.json"


def load_csv(filepath: str) -> list[dict]:
    """Load an affinity tag CSV export."""
    rows = []
    with open(filepath, encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        for row in reader:
            rows.append({k.strip().lower(): (v or "").strip() for k, v in row.items() if k})
    return rows


def load_json(filepath: str) -> list[dict]:
    with open(filepath, encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        raise ValueError(f"{filepath}: expected a JSON list of tag records")
    return raw


def to_records(rows: list[dict]) -> list[dict]:
    """Clean rows into catalog records, dropping blanks and duplicates."""
    numeric_ids = [int(r["id"]) for r in rows if str(r.get("id", "")).strip().isdigit()]
    next_id = max(numeric_ids, default=0) + 1

    records = []
    seen: set[tuple[str, str]] = set()
    for row in rows:
        name = str(row.get("name") or "").strip()
        category = str(row.get("category") or "").strip()
        if not name or not category:
            continue
        key = (name.lower(), category.lower())
        if key in seen:
            continue
        seen.add(key)

        tag_id = str(row.get("id") or "").strip()
        if tag_id.isdigit():
            tag_id = int(tag_id)
        elif not tag_id:
            tag_id = next_id
            next_id += 1

        external_ref = row.get("external_ref") or row.get("bbec_id") or row.get("bbecid") or None
        records.append({
            "id": tag_id,
            "name": name,
            "category": category,
            "external_ref": external_ref,
        })
    return records


def main():
    parser = argparse.ArgumentParser(description="Build the affinity tag catalog JSON")
    parser.add_argument("export", help="CRM export (.csv or .json)")
    parser.add_argument("--output", default=str(DEFAULT_OUTPUT), help="Catalog JSON to write")
    args = parser.parse_args()

    if args.export.lower().endswith(".json"):
        rows = load_json(args.export)
    else:
        rows = load_csv(args.export)
    print(f"Loaded {len(rows)} rows from {args.export}")

    records = to_records(rows)
    # Validates ids and required fields the same way the server will
    snapshot = CatalogSnapshot.from_records(records)

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(snapshot.to_records(), f, ensure_ascii=False, indent=2)

    print(f"\n{'=' * 60}")
    print(f"  Catalog written: {output}")
    print(f"  {len(snapshot)} tags across {len(snapshot.categories())} categories")
    for category in snapshot.categories():
        print(f"  - {category}: {len(snapshot.by_category(category))}")
    print(f"{'=' * 60}")


if __name__ == "__main__":
    main()
