"""Tests for config.yaml loading and matching setting validation."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from affinity_engine.config_loader import (
    AppConfig, CatalogConfig, MatchingConfig, PROJECT_ROOT, load_config, save_config,
    to_unit_interval,
)


class TestMatchingConfig:
    def test_defaults(self) -> None:
        cfg = MatchingConfig()
        assert cfg.acceptance_threshold == 0.25
        assert cfg.candidate_generosity == 0.5
        assert cfg.candidates_per_query == 3
        assert cfg.max_results == 10
        assert cfg.category_acceptance_threshold == 0.5
        assert cfg.category_generosity == 0.3
        assert cfg.dedup_policy == "first_accepted"

    def test_percent_scale_accepted(self) -> None:
        assert MatchingConfig(acceptance_threshold=60).acceptance_threshold == 0.6
        assert MatchingConfig(acceptance_threshold=250).acceptance_threshold == 1.0

    def test_negative_clamped(self) -> None:
        assert MatchingConfig(acceptance_threshold=-0.5).acceptance_threshold == 0.0

    @pytest.mark.parametrize("value", [1.5, 37.5, 99.9])
    def test_fractional_percentage_rejected(self, value: float) -> None:
        with pytest.raises(ValidationError, match="whole percentage"):
            MatchingConfig(acceptance_threshold=value)

    def test_fractional_percentage_in_yaml_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("matching:\n  acceptance_threshold: 1.5\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_config(path)

    def test_threshold_percent(self) -> None:
        assert MatchingConfig(acceptance_threshold=0.6).threshold_percent == 60

    def test_max_results_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            MatchingConfig(max_results=0)

    def test_unknown_dedup_policy_rejected(self) -> None:
        with pytest.raises(ValidationError):
            MatchingConfig(dedup_policy="random")

    @pytest.mark.parametrize("value, expected", [(0.3, 0.3), (1, 1.0), (30, 0.3), (100, 1.0)])
    def test_to_unit_interval(self, value: float, expected: float) -> None:
        assert to_unit_interval(value) == pytest.approx(expected)


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config(tmp_path / "config.yaml") == AppConfig()

    def test_partial_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"matching": {"acceptance_threshold": 0.6}}), encoding="utf-8")
        cfg = load_config(path)
        assert cfg.matching.acceptance_threshold == 0.6
        assert cfg.matching.max_results == 10
        assert cfg.normalizer.synonyms["ice hockey"] == ["Men's Hockey", "Women's Hockey", "Hockey"]

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == AppConfig()

    def test_save_then_load(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        cfg = AppConfig()
        cfg.catalog.auto_refresh = True
        cfg.catalog.refresh_interval = "hourly"
        save_config(cfg, path)
        assert load_config(path) == cfg

    def test_example_config_is_valid(self) -> None:
        cfg = load_config(PROJECT_ROOT / "config.example.yaml")
        assert cfg == AppConfig()


class TestCatalogConfig:
    def test_relative_path_resolved_against_project(self) -> None:
        assert CatalogConfig(tags_path="data/x.json").resolved_tags_path() == PROJECT_ROOT / "data" / "x.json"

    def test_absolute_path_kept(self, tmp_path: Path) -> None:
        path = tmp_path / "tags.json"
        assert CatalogConfig(tags_path=str(path)).resolved_tags_path() == path
