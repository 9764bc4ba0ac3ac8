"""Approximate name/category search over one catalog snapshot."""

from dataclasses import dataclass
from typing import Iterable, Union

from rapidfuzz import fuzz
from rapidfuzz.utils import default_process

from affinity_engine.tag_catalog import AffinityTag, TagCategory

TOKEN_MATCH_THRESHOLD = 75
MIN_TOKEN_COVERAGE = 0.7
PARTIAL_SCALE = 0.9
MIN_PARTIAL_LENGTH = 4


@dataclass(frozen=True)
class _IndexedTag:
    tag: AffinityTag
    name: str
    name_tokens: tuple[str, ...]
    category: str


def process_text(text: str) -> str:
    """Lowercase, turn punctuation into spaces and collapse whitespace."""
    if not text:
        return ""
    return " ".join(default_process(text).split())


class FuzzyIndex:
    """Ranks catalog tags by similarity to a free-text query.

    Distances are in ``[0, 1]`` with 0 meaning the processed query equals the
    processed tag name. Only tags within *generosity* of the query are
    returned, so a loose generosity surfaces more (weaker) candidates for the
    caller to filter.
    """

    def __init__(
        self,
        tags: Iterable[AffinityTag],
        generosity: float = 0.5,
        category_weight: float = 0.5,
    ):
        if not 0.0 <= generosity <= 1.0:
            raise ValueError(f"generosity must be within [0, 1], got {generosity}")
        if not 0.0 <= category_weight <= 1.0:
            raise ValueError(f"category_weight must be within [0, 1], got {category_weight}")

        self.generosity = generosity
        self.category_weight = category_weight
        self._entries: tuple[_IndexedTag, ...] = tuple(
            _IndexedTag(
                tag=tag,
                name=process_text(tag.name),
                name_tokens=tuple(process_text(tag.name).split()),
                category=process_text(tag.category),
            )
            for tag in tags
        )

    def for_category(self, category: Union[str, TagCategory], generosity: float) -> "FuzzyIndex":
        """Name-only index over the tags of a single category."""
        return FuzzyIndex(
            (e.tag for e in self._entries if e.tag.in_category(category)),
            generosity=generosity,
            category_weight=0.0,
        )

    @staticmethod
    def _token_fuzzy_score(q_tokens: tuple[str, ...], t_tokens: tuple[str, ...]) -> float:
        """Bidirectional token coverage score (0-100).

        Handles queries that are a fuzzy subset of the tag name
        (e.g. marine biology -> marine biology research) or vice versa.
        """
        if not q_tokens or not t_tokens:
            return 0.0

        q_scores = [max(fuzz.ratio(qt, tt) for tt in t_tokens) for qt in q_tokens]
        q_matched = sum(1 for s in q_scores if s >= TOKEN_MATCH_THRESHOLD)

        t_scores = [max(fuzz.ratio(qt, tt) for qt in q_tokens) for tt in t_tokens]
        t_matched = sum(1 for s in t_scores if s >= TOKEN_MATCH_THRESHOLD)

        coverage = (q_matched + t_matched) / (len(q_tokens) + len(t_tokens))
        if coverage < MIN_TOKEN_COVERAGE:
            return 0.0

        all_matched = [s for s in q_scores + t_scores if s >= TOKEN_MATCH_THRESHOLD]
        avg = sum(all_matched) / len(all_matched)

        return avg * (0.5 + 0.5 * coverage)

    def _name_score(self, query: str, q_tokens: tuple[str, ...], entry: _IndexedTag) -> float:
        if not query or not entry.name:
            return 0.0
        if query == entry.name:
            return 100.0

        scores = [
            fuzz.token_sort_ratio(query, entry.name),
            self._token_fuzzy_score(q_tokens, entry.name_tokens),
        ]
        if min(len(query), len(entry.name)) >= MIN_PARTIAL_LENGTH:
            scores.append(fuzz.partial_ratio(query, entry.name) * PARTIAL_SCALE)
        return max(scores)

    def _similarity(self, query: str, q_tokens: tuple[str, ...], entry: _IndexedTag) -> float:
        score = self._name_score(query, q_tokens, entry)
        if self.category_weight and entry.category:
            score = max(score, fuzz.ratio(query, entry.category) * self.category_weight)
        return score / 100.0

    def search(self, query: str) -> list[tuple[AffinityTag, float]]:
        """Return ``(tag, distance)`` pairs within generosity, closest first."""
        if not isinstance(query, str):
            return []
        processed = process_text(query)
        if not processed or not self._entries:
            return []

        q_tokens = tuple(processed.split())
        matches = []
        for entry in self._entries:
            distance = 1.0 - self._similarity(processed, q_tokens, entry)
            if distance <= self.generosity:
                matches.append((entry.tag, distance))

        # Stable sort keeps catalog order between equal distances
        matches.sort(key=lambda x: x[1])
        return matches

    @property
    def tags(self) -> tuple[AffinityTag, ...]:
        return tuple(e.tag for e in self._entries)

    def __len__(self) -> int:
        return len(self._entries)
