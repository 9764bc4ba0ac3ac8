"""
Tests for the transcript scanner.

Validates tokenization, token-level containment matching, and the
handling of tags whose names tokenize to nothing.
"""

from __future__ import annotations

from affinity_engine.tag_catalog import AffinityTag
from affinity_engine.transcript_scanner import TranscriptScanner, scan, tokenize


class TestTokenize:
    def test_lowercase_word_tokens(self) -> None:
        assert tokenize("She loves Ice-Hockey!") == ["she", "loves", "ice", "hockey"]

    def test_short_tokens_dropped(self) -> None:
        assert tokenize("I go to UK") == []

    def test_empty(self) -> None:
        assert tokenize("") == []


class TestTranscriptScanner:
    def test_recovers_tag_named_in_transcript(self) -> None:
        tags = [AffinityTag(id=1, name="Ice Hockey", category="Personal")]
        assert scan("She loves watching Ice Hockey games", tags) == ["Ice Hockey"]

    def test_tolerates_plurals(self) -> None:
        tags = [AffinityTag(id=1, name="Scholarship Fund", category="Philanthropic")]
        assert scan("He asked about scholarships and the annual funds", tags) == ["Scholarship Fund"]

    def test_every_tag_token_required(self) -> None:
        tags = [AffinityTag(id=1, name="Marine Biology", category="Professional")]
        assert scan("We talked about marine conservation", tags) == []

    def test_tag_without_usable_tokens_never_matches(self) -> None:
        tags = [
            AffinityTag(id=1, name="A B", category="Personal"),
            AffinityTag(id=2, name="", category="Personal"),
        ]
        assert scan("a b and anything else at all", tags) == []

    def test_catalog_order_and_no_repeats(self) -> None:
        tags = [
            AffinityTag(id=1, name="Women's Hockey", category="Personal"),
            AffinityTag(id=2, name="Ice Hockey", category="Personal"),
            AffinityTag(id=3, name="Ice Hockey", category="Philanthropic"),
        ]
        found = scan("Her daughter plays ice hockey on the women's team", tags)
        assert found == ["Women's Hockey", "Ice Hockey"]

    def test_blank_transcript(self) -> None:
        scanner = TranscriptScanner([AffinityTag(id=1, name="Ice Hockey", category="Personal")])
        assert scanner.scan("") == []
        assert scanner.scan("   ") == []
        assert scanner.scan(None) == []  # type: ignore[arg-type]

    def test_empty_catalog(self) -> None:
        assert scan("She loves Ice Hockey", []) == []
