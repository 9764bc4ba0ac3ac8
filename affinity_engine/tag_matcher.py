"""Interest-to-affinity-tag matching: normalize -> fuzzy search -> dedupe -> rank."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Union

from affinity_engine.config_loader import MatchingConfig
from affinity_engine.fuzzy_index import FuzzyIndex
from affinity_engine.interest_normalizer import InterestNormalizer
from affinity_engine.tag_catalog import AffinityTag, CatalogSnapshot, TagCategory, TagId
from affinity_engine.transcript_scanner import TranscriptScanner

logger = logging.getLogger(__name__)


class InterestSource(str, Enum):
    PROFESSIONAL = "professional"
    PERSONAL = "personal"
    PHILANTHROPIC = "philanthropic"
    TRANSCRIPT = "transcript"


class TraceOutcome(str, Enum):
    ACCEPTED = "accepted"
    BELOW_THRESHOLD = "below_threshold"
    DUPLICATE = "duplicate"
    REPLACED = "replaced"


@dataclass(frozen=True)
class MatchResult:
    tag: AffinityTag
    score: float
    matched_interest: str


@dataclass(frozen=True)
class MatchTrace:
    """One candidate considered while matching, for audit and debugging."""

    phrase: str
    source: InterestSource
    variant: str
    tag: AffinityTag
    score: float
    outcome: TraceOutcome


MatchObserver = Callable[[MatchTrace], None]


def _as_phrases(values: Any, source: InterestSource) -> list[tuple[str, InterestSource]]:
    if not isinstance(values, (list, tuple)):
        return []
    return [(v, source) for v in values if isinstance(v, str)]


class TagMatcher:
    """Maps extracted interests onto one catalog snapshot.

    All indexes are built here, so a matcher is safe to share between
    concurrent requests: matching only reads from them. Configuration
    problems surface as exceptions from the constructor.
    """

    def __init__(
        self,
        catalog: CatalogSnapshot,
        config: Optional[MatchingConfig] = None,
        normalizer: Optional[InterestNormalizer] = None,
        observer: Optional[MatchObserver] = None,
    ):
        self.catalog = catalog
        self.config = config or MatchingConfig()
        self.normalizer = normalizer or InterestNormalizer()
        self.observer = observer

        self.index = FuzzyIndex(
            catalog.tags,
            generosity=self.config.candidate_generosity,
            category_weight=self.config.category_weight,
        )
        self.scanner = TranscriptScanner(catalog.tags)
        self._category_indexes = {
            category: self.index.for_category(category, self.config.category_generosity)
            for category in TagCategory
        }

    @property
    def acceptance_threshold(self) -> float:
        return self.config.acceptance_threshold

    def _emit(self, trace: MatchTrace, traces: Optional[list[MatchTrace]]):
        if traces is not None:
            traces.append(trace)
        if self.observer is not None:
            self.observer(trace)

    def _run(
        self,
        phrases: list[tuple[str, InterestSource]],
        index: FuzzyIndex,
        threshold: float,
        expand: bool,
        traces: Optional[list[MatchTrace]],
    ) -> list[MatchResult]:
        best_score = self.config.dedup_policy == "best_score"
        accepted: dict[TagId, MatchResult] = {}

        for phrase, source in phrases:
            variants = self.normalizer.normalize(phrase) if expand else [phrase]
            for variant in variants:
                candidates = index.search(variant)[:self.config.candidates_per_query]
                for tag, distance in candidates:
                    score = 1.0 - distance
                    if score <= threshold:
                        outcome = TraceOutcome.BELOW_THRESHOLD
                    elif tag.id not in accepted:
                        accepted[tag.id] = MatchResult(tag=tag, score=score, matched_interest=phrase)
                        outcome = TraceOutcome.ACCEPTED
                    elif best_score and score > accepted[tag.id].score:
                        accepted[tag.id] = MatchResult(tag=tag, score=score, matched_interest=phrase)
                        outcome = TraceOutcome.REPLACED
                    else:
                        outcome = TraceOutcome.DUPLICATE

                    if traces is not None or self.observer is not None:
                        self._emit(MatchTrace(
                            phrase=phrase,
                            source=source,
                            variant=variant,
                            tag=tag,
                            score=score,
                            outcome=outcome,
                        ), traces)

        # sort() is stable: equal scores keep acceptance order
        results = list(accepted.values())
        results.sort(key=lambda r: r.score, reverse=True)
        return results

    def _collect_phrases(
        self,
        professional_interests: Any,
        personal_interests: Any,
        philanthropic_priorities: Any,
        raw_transcript: Optional[str],
    ) -> list[tuple[str, InterestSource]]:
        phrases = (
            _as_phrases(professional_interests, InterestSource.PROFESSIONAL)
            + _as_phrases(personal_interests, InterestSource.PERSONAL)
            + _as_phrases(philanthropic_priorities, InterestSource.PHILANTHROPIC)
        )
        if isinstance(raw_transcript, str) and raw_transcript.strip():
            recovered = self.scanner.scan(raw_transcript)
            if recovered:
                logger.debug(f"Transcript scan recovered {len(recovered)} tag names: {recovered}")
            phrases.extend((name, InterestSource.TRANSCRIPT) for name in recovered)
        return phrases

    def match_interests_traced(
        self,
        professional_interests: Any = None,
        personal_interests: Any = None,
        philanthropic_priorities: Any = None,
        raw_transcript: Optional[str] = None,
    ) -> tuple[list[MatchResult], list[MatchTrace]]:
        """Like :meth:`match_interests`, also returning every candidate considered."""
        traces: list[MatchTrace] = []
        results = self._match_interests(
            professional_interests, personal_interests, philanthropic_priorities,
            raw_transcript, traces,
        )
        return results, traces

    def match_interests(
        self,
        professional_interests: Any = None,
        personal_interests: Any = None,
        philanthropic_priorities: Any = None,
        raw_transcript: Optional[str] = None,
    ) -> list[MatchResult]:
        """Best affinity tags for the three interest lists, highest score first.

        Each phrase is expanded into normalization variants and the top
        candidates of every variant above the acceptance threshold are kept,
        one result per tag. Capped at ``max_results``.
        """
        return self._match_interests(
            professional_interests, personal_interests, philanthropic_priorities,
            raw_transcript, None,
        )

    def _match_interests(
        self,
        professional_interests: Any,
        personal_interests: Any,
        philanthropic_priorities: Any,
        raw_transcript: Optional[str],
        traces: Optional[list[MatchTrace]],
    ) -> list[MatchResult]:
        if not len(self.catalog):
            return []

        phrases = self._collect_phrases(
            professional_interests, personal_interests, philanthropic_priorities, raw_transcript,
        )
        results = self._run(
            phrases, self.index, self.config.acceptance_threshold, expand=True, traces=traces,
        )[:self.config.max_results]

        logger.debug(
            f"Matched {len(phrases)} interests to {len(results)} affinity tags "
            f"(threshold {self.config.acceptance_threshold})"
        )
        return results

    def match_by_category(
        self,
        interests: Any,
        category: Union[str, TagCategory],
    ) -> list[MatchResult]:
        """Stricter lookup restricted to one category: no variants, no cap."""
        category = TagCategory.parse(category)
        index = self._category_indexes[category]
        phrases = _as_phrases(interests, InterestSource(category.value.lower()))
        return self._run(
            phrases, index, self.config.category_acceptance_threshold, expand=False, traces=None,
        )

    def find_similar_tags(self, search_term: str, limit: int = 5) -> list[AffinityTag]:
        """Raw fuzzy lookup for autocomplete; no score filtering beyond the index."""
        if limit <= 0:
            return []
        return [tag for tag, _ in self.index.search(search_term)[:limit]]
