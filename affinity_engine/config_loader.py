"""Load and validate config.yaml."""

import shutil
from pathlib import Path
from typing import Dict, List, Literal

from pydantic import BaseModel, field_validator
import yaml

PROJECT_ROOT = Path(__file__).resolve().parent.parent
CONFIG_PATH = PROJECT_ROOT / "config.yaml"
CONFIG_EXAMPLE_PATH = PROJECT_ROOT / "config.example.yaml"

LOOSE_ACCEPTANCE_THRESHOLD = 0.25
STRICT_ACCEPTANCE_THRESHOLD = 0.6


def to_unit_interval(value: float) -> float:
    """Accept either a 0-1 fraction or a whole-number percentage.

    Values above 1 are read as percentages and must be whole numbers, so a
    typo like ``1.5`` is rejected instead of becoming 1.5%.
    """
    value = float(value)
    if value > 1:
        if not value.is_integer():
            raise ValueError(
                f"{value} is neither a fraction in [0, 1] nor a whole percentage"
            )
        value = value / 100.0
    return max(0.0, min(1.0, value))


class MatchingConfig(BaseModel):
    acceptance_threshold: float = LOOSE_ACCEPTANCE_THRESHOLD
    candidate_generosity: float = 0.5
    candidates_per_query: int = 3
    max_results: int = 10
    category_acceptance_threshold: float = 0.5
    category_generosity: float = 0.3
    category_weight: float = 0.5
    dedup_policy: Literal["first_accepted", "best_score"] = "first_accepted"

    @field_validator(
        "acceptance_threshold",
        "candidate_generosity",
        "category_acceptance_threshold",
        "category_generosity",
        "category_weight",
    )
    @classmethod
    def _unit_interval(cls, v: float) -> float:
        return to_unit_interval(v)

    @field_validator("candidates_per_query", "max_results")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @property
    def threshold_percent(self) -> int:
        return round(self.acceptance_threshold * 100)


class NormalizerConfig(BaseModel):
    leading_phrases: List[str] = [
        "Friends of",
        "Support for",
        "Supporting",
        "Funding for",
        "Donation to",
        "Gift to",
    ]
    trailing_nouns: List[str] = [
        "program",
        "initiative",
        "fund",
        "foundation",
        "department",
        "college",
        "school",
    ]
    institution_names: List[str] = ["Boston University", "BU"]
    synonyms: Dict[str, List[str]] = {
        "ice hockey": ["Men's Hockey", "Women's Hockey", "Hockey"],
    }


class CatalogConfig(BaseModel):
    tags_path: str = "data/affinity_tags.json"
    auto_refresh: bool = False
    refresh_interval: Literal["hourly", "daily", "weekly"] = "daily"

    def resolved_tags_path(self) -> Path:
        path = Path(self.tags_path)
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        return path


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000


class AppConfig(BaseModel):
    matching: MatchingConfig = MatchingConfig()
    normalizer: NormalizerConfig = NormalizerConfig()
    catalog: CatalogConfig = CatalogConfig()
    server: ServerConfig = ServerConfig()


def load_config(path: Path = CONFIG_PATH) -> AppConfig:
    """Load config from config.yaml, creating from example if needed."""
    if not path.exists():
        if path == CONFIG_PATH and CONFIG_EXAMPLE_PATH.exists():
            shutil.copy(CONFIG_EXAMPLE_PATH, path)
        else:
            return AppConfig()

    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return AppConfig(**raw)


def save_config(config: AppConfig, path: Path = CONFIG_PATH):
    """Save config to config.yaml."""
    data = config.model_dump()
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, allow_unicode=True)
