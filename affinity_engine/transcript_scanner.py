"""Recover catalog tags mentioned verbatim in a raw transcript."""

import re
from typing import Iterable

from affinity_engine.tag_catalog import AffinityTag

MIN_TOKEN_LENGTH = 3
_NON_WORD = re.compile(r"\W+")


def tokenize(text: str) -> list[str]:
    """Lowercase word tokens of at least three characters."""
    if not text:
        return []
    return [t for t in _NON_WORD.split(text.lower()) if len(t) >= MIN_TOKEN_LENGTH]


def _token_present(tag_token: str, transcript_tokens: set[str]) -> bool:
    # Containment either way tolerates plurals and stems (hockey / hockeys)
    return any(tag_token in tt or tt in tag_token for tt in transcript_tokens)


class TranscriptScanner:
    """Finds tags whose every name token appears in the transcript.

    Tag names are tokenized once when the scanner is built; scanning costs
    one pass over the catalog per transcript.
    """

    def __init__(self, tags: Iterable[AffinityTag]):
        self._tag_tokens: tuple[tuple[AffinityTag, tuple[str, ...]], ...] = tuple(
            (tag, tuple(tokenize(tag.name))) for tag in tags
        )

    def scan(self, raw_text: str) -> list[str]:
        """Names of the tags present in *raw_text*, in catalog order, without repeats."""
        if not isinstance(raw_text, str):
            return []
        transcript_tokens = set(tokenize(raw_text))
        if not transcript_tokens:
            return []

        found: list[str] = []
        for tag, tag_tokens in self._tag_tokens:
            if not tag_tokens or tag.name in found:
                continue
            if all(_token_present(t, transcript_tokens) for t in tag_tokens):
                found.append(tag.name)
        return found


def scan(raw_text: str, tags: Iterable[AffinityTag]) -> list[str]:
    return TranscriptScanner(tags).scan(raw_text)
