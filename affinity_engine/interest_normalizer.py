"""Expand raw interest phrases into search variants."""

import re
from typing import Optional

from affinity_engine.config_loader import NormalizerConfig

_WHITESPACE = re.compile(r"\s+")
# Institution names are removed first, so the tail may be a bare "at"
_TRAILING_AFFILIATION = re.compile(r"\s+at(?:\s+\w+){0,2}\s*$", re.IGNORECASE)


def _alternation(words: list[str]) -> str:
    # Longest first so "Support for" wins over "Support"
    ordered = sorted((w.strip() for w in words if w.strip()), key=len, reverse=True)
    return "|".join(re.escape(w) for w in ordered)


class InterestNormalizer:
    """Produces the ordered variants searched for one interest phrase.

    The original phrase always comes first. A single cleaned variant follows
    when stripping boilerplate changes it, then any synonym expansions whose
    trigger appears in the phrase.
    """

    def __init__(self, config: Optional[NormalizerConfig] = None):
        self.config = config or NormalizerConfig()

        leading = _alternation(self.config.leading_phrases)
        trailing = _alternation(self.config.trailing_nouns)
        institutions = _alternation(self.config.institution_names)

        self._leading = re.compile(rf"^\s*(?:{leading})\s+", re.IGNORECASE) if leading else None
        self._trailing = re.compile(rf"\s+(?:{trailing})\s*$", re.IGNORECASE) if trailing else None
        self._institutions = (
            re.compile(rf"\b(?:{institutions})\b", re.IGNORECASE) if institutions else None
        )
        self._synonyms = [
            (trigger.lower(), [s for s in expansions if s.strip()])
            for trigger, expansions in self.config.synonyms.items()
            if trigger.strip()
        ]

    def clean(self, phrase: str) -> str:
        cleaned = phrase
        if self._leading:
            cleaned = self._leading.sub("", cleaned, count=1)
        if self._trailing:
            cleaned = self._trailing.sub("", cleaned, count=1)
        if self._institutions:
            cleaned = self._institutions.sub(" ", cleaned)
        cleaned = _TRAILING_AFFILIATION.sub("", cleaned, count=1)
        return _WHITESPACE.sub(" ", cleaned).strip()

    def normalize(self, phrase: str) -> list[str]:
        variants = [phrase]
        if not isinstance(phrase, str):
            return variants

        cleaned = self.clean(phrase)
        if cleaned and cleaned != phrase:
            variants.append(cleaned)

        lowered = phrase.lower()
        for trigger, expansions in self._synonyms:
            if trigger in lowered:
                variants.extend(expansions)

        # The original stays at index 0 even if a rule reproduces it
        deduped = variants[:1]
        for variant in variants[1:]:
            if variant not in deduped:
                deduped.append(variant)
        return deduped


_default_normalizer = InterestNormalizer()


def normalize(phrase: str) -> list[str]:
    """Normalize with the built-in vocabulary."""
    return _default_normalizer.normalize(phrase)
