"""Holds the currently published catalog snapshot and its matcher."""

import logging
import threading
from typing import Iterable, Optional, Union

from affinity_engine.config_loader import MatchingConfig, NormalizerConfig
from affinity_engine.interest_normalizer import InterestNormalizer
from affinity_engine.tag_catalog import AffinityTag, CatalogSnapshot
from affinity_engine.tag_matcher import MatchObserver, TagMatcher

logger = logging.getLogger(__name__)


class CatalogRegistry:
    """Publishes catalog refreshes by swapping in a fully built matcher.

    Readers take the current matcher without locking and keep using it for
    the whole request; a refresh never touches a matcher already handed out.
    The lock only serializes writers.
    """

    def __init__(
        self,
        matching: Optional[MatchingConfig] = None,
        normalizer: Optional[NormalizerConfig] = None,
        observer: Optional[MatchObserver] = None,
    ):
        self._matching = matching or MatchingConfig()
        self._normalizer = InterestNormalizer(normalizer)
        self._observer = observer
        self._write_lock = threading.Lock()
        self._matcher: Optional[TagMatcher] = None

    def _build(self, snapshot: CatalogSnapshot, matching: MatchingConfig) -> TagMatcher:
        return TagMatcher(snapshot, matching, self._normalizer, self._observer)

    def publish(self, tags: Union[CatalogSnapshot, Iterable[AffinityTag]]) -> TagMatcher:
        """Build a matcher over *tags* and make it current.

        Any failure propagates and leaves the previous matcher in place.
        """
        snapshot = tags if isinstance(tags, CatalogSnapshot) else CatalogSnapshot(tags)
        with self._write_lock:
            matcher = self._build(snapshot, self._matching)
            self._matcher = matcher
        logger.info(f"Published affinity tag catalog ({len(snapshot)} tags)")
        return matcher

    def reconfigure(self, matching: MatchingConfig) -> Optional[TagMatcher]:
        """Rebuild the current matcher with new matching settings."""
        with self._write_lock:
            self._matching = matching
            if self._matcher is None:
                return None
            matcher = self._build(self._matcher.catalog, matching)
            self._matcher = matcher
        logger.info(f"Matcher rebuilt with acceptance threshold {matching.acceptance_threshold}")
        return matcher

    def matcher(self) -> Optional[TagMatcher]:
        return self._matcher

    def snapshot(self) -> Optional[CatalogSnapshot]:
        matcher = self._matcher
        return matcher.catalog if matcher else None

    @property
    def matching(self) -> MatchingConfig:
        return self._matching

    @property
    def is_loaded(self) -> bool:
        return self._matcher is not None
