"""Shared fixtures for affinity engine tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from affinity_engine.config_loader import MatchingConfig
from affinity_engine.tag_catalog import AffinityTag, CatalogSnapshot
from affinity_engine.tag_matcher import TagMatcher

SAMPLE_TAGS = [
    AffinityTag(id=1, name="Ice Hockey", category="Personal"),
    AffinityTag(id=2, name="Men's Hockey", category="Personal"),
    AffinityTag(id=3, name="Women's Hockey", category="Personal"),
    AffinityTag(id=4, name="Marine Biology Research", category="Professional"),
    AffinityTag(id=5, name="Scholarships — Engineering", category="Philanthropic", external_ref="BBEC-5"),
    AffinityTag(id=6, name="Financial Aid", category="Philanthropic"),
    AffinityTag(id=7, name="Entrepreneurship", category="Professional"),
    AffinityTag(id=8, name="Figure Skating", category="Personal"),
]


@pytest.fixture()
def sample_tags() -> list[AffinityTag]:
    return list(SAMPLE_TAGS)


@pytest.fixture()
def catalog(sample_tags: list[AffinityTag]) -> CatalogSnapshot:
    return CatalogSnapshot(sample_tags)


@pytest.fixture()
def matcher(catalog: CatalogSnapshot) -> TagMatcher:
    """Matcher at the loose (0.25) acceptance threshold."""
    return TagMatcher(catalog, MatchingConfig(acceptance_threshold=0.25))


@pytest.fixture()
def catalog_file(tmp_path: Path) -> Path:
    """The sample catalog written as JSON records."""
    path = tmp_path / "affinity_tags.json"
    path.write_text(json.dumps(CatalogSnapshot(SAMPLE_TAGS).to_records()), encoding="utf-8")
    return path
