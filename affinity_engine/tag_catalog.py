"""Immutable in-memory snapshot of the affinity tag catalog."""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Union

TagId = Union[int, str]


class TagCategory(str, Enum):
    PROFESSIONAL = "Professional"
    PERSONAL = "Personal"
    PHILANTHROPIC = "Philanthropic"

    @classmethod
    def parse(cls, value: Union[str, "TagCategory"]) -> "TagCategory":
        """Case-insensitive lookup; raises ValueError for unknown names."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        raise ValueError(f"Unknown tag category: {value!r}")


@dataclass(frozen=True)
class AffinityTag:
    id: TagId
    name: str
    category: str
    external_ref: Optional[str] = None

    def in_category(self, category: Union[str, TagCategory]) -> bool:
        wanted = category.value if isinstance(category, TagCategory) else str(category)
        return self.category.lower() == wanted.lower()


class CatalogSnapshot:
    """Read-only view of every tag known at one refresh.

    The tag order is preserved from the source and is used to break ties
    between equally similar candidates, so two snapshots built from the
    same list always rank identically.
    """

    def __init__(self, tags: Iterable[AffinityTag] = (), refreshed_at: Optional[datetime] = None):
        self._tags: tuple[AffinityTag, ...] = tuple(tags)
        self._by_id: dict[TagId, AffinityTag] = {}
        for tag in self._tags:
            if tag.id in self._by_id:
                raise ValueError(f"Duplicate affinity tag id: {tag.id!r}")
            self._by_id[tag.id] = tag
        self.refreshed_at = refreshed_at or datetime.now(timezone.utc)

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "CatalogSnapshot":
        tags = []
        for i, item in enumerate(records):
            if not isinstance(item, dict):
                raise ValueError(f"Affinity tag record {i} is not an object: {item!r}")
            missing = [k for k in ("id", "name", "category") if item.get(k) is None]
            if missing:
                raise ValueError(f"Affinity tag record {i} is missing {', '.join(missing)}")
            tags.append(AffinityTag(
                id=item["id"],
                name=str(item["name"]),
                category=str(item["category"]),
                external_ref=item.get("external_ref"),
            ))
        return cls(tags)

    @classmethod
    def from_json(cls, json_path: Union[str, Path]) -> "CatalogSnapshot":
        path = Path(json_path)
        if not path.exists():
            raise FileNotFoundError(f"Affinity tag catalog not found: {json_path}")

        with open(path, encoding="utf-8") as f:
            raw = json.load(f)

        if not isinstance(raw, list):
            raise ValueError(f"Affinity tag catalog must be a JSON list: {json_path}")
        return cls.from_records(raw)

    @property
    def tags(self) -> tuple[AffinityTag, ...]:
        return self._tags

    def get(self, tag_id: TagId) -> Optional[AffinityTag]:
        return self._by_id.get(tag_id)

    def by_category(self, category: Union[str, TagCategory]) -> tuple[AffinityTag, ...]:
        return tuple(t for t in self._tags if t.in_category(category))

    def categories(self) -> list[str]:
        seen: list[str] = []
        for tag in self._tags:
            if tag.category not in seen:
                seen.append(tag.category)
        return seen

    def to_records(self) -> list[dict]:
        return [
            {"id": t.id, "name": t.name, "category": t.category, "external_ref": t.external_ref}
            for t in self._tags
        ]

    def __len__(self) -> int:
        return len(self._tags)

    def __iter__(self):
        return iter(self._tags)
