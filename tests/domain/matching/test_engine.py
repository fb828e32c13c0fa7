"""Tests for match orchestration: scoring, ranking and status."""

from unittest.mock import patch

import pytest

from cratematch.domain.entities import CandidateRelease, FormatCategory, PurchaseRecord
from cratematch.domain.matching import engine
from cratematch.domain.matching.algorithms import calculate_confidence
from cratematch.domain.matching.engine import (
    compute_match,
    determine_status,
    handle_various_artists,
)
from cratematch.domain.matching.normalization import Normalizer
from cratematch.domain.matching.types import (
    MatchCandidate,
    MatchOptions,
    MatchStatus,
    SimilarityBreakdown,
)


def _candidate_with_confidence(confidence: int) -> MatchCandidate:
    return MatchCandidate(
        release=CandidateRelease(id=1, title="T", artist="A"),
        confidence=confidence,
        classification="fuzzy",
        breakdown=SimilarityBreakdown(artist_score=0, title_score=0),
    )


class TestComputeMatch:
    """Test scoring and ranking of candidates for one purchase."""

    def test_exact_cd_match_is_matched(self, purchase, release):
        """Test that an exact artist/title/CD candidate auto-matches."""
        outcome = compute_match(purchase, [release])

        assert outcome.best_match is not None
        assert outcome.best_match.confidence >= 95
        assert outcome.status == MatchStatus.MATCHED
        assert outcome.search_query.artist == "Radiohead"
        assert outcome.search_query.title == "OK Computer"
        assert outcome.search_query.format == "CD"

    def test_no_candidates(self, purchase):
        """Test that an empty candidate list is a no-match."""
        outcome = compute_match(purchase, [])

        assert outcome.best_match is None
        assert outcome.alternatives == []
        assert outcome.status == MatchStatus.NO_MATCH

    def test_only_first_100_candidates_scored(self, purchase, make_release):
        """Test that candidates past the hundredth are never scored."""
        candidates = [make_release(release_id=i, title=f"Album {i}") for i in range(150)]

        with patch.object(
            engine, "calculate_confidence", wraps=calculate_confidence
        ) as scorer:
            compute_match(purchase, candidates)

        assert scorer.call_count == 100

    def test_alternatives_sorted_and_capped(self, purchase, make_release):
        """Test that alternatives respect the cap and descending order."""
        candidates = [
            make_release(release_id=1, title="OK Computer"),
            make_release(release_id=2, title="OK Computer OKNOTOK"),
            make_release(release_id=3, title="Kid A"),
            make_release(release_id=4, title="OK Comp"),
            make_release(release_id=5, title="Amnesiac"),
        ]

        outcome = compute_match(purchase, candidates, MatchOptions(max_alternatives=2))

        assert outcome.best_match.release.id == 1
        assert len(outcome.alternatives) == 2
        confidences = [outcome.best_match.confidence] + [
            alt.confidence for alt in outcome.alternatives
        ]
        assert confidences == sorted(confidences, reverse=True)

    def test_alternatives_disabled(self, purchase, make_release):
        """Test that alternatives can be switched off."""
        candidates = [make_release(release_id=i) for i in range(3)]

        outcome = compute_match(
            purchase, candidates, MatchOptions(include_alternatives=False)
        )

        assert outcome.alternatives == []

    def test_zero_alternatives(self, purchase, make_release):
        """Test that max_alternatives=0 yields no alternatives."""
        candidates = [make_release(release_id=i) for i in range(3)]

        outcome = compute_match(purchase, candidates, MatchOptions(max_alternatives=0))

        assert outcome.best_match is not None
        assert outcome.alternatives == []

    def test_min_confidence_filters(self, purchase, make_release):
        """Test that candidates below min_confidence are dropped."""
        candidates = [make_release(artist="Metallica", title="Master of Puppets")]

        outcome = compute_match(purchase, candidates, MatchOptions(min_confidence=90))

        assert outcome.best_match is None
        assert outcome.status == MatchStatus.NO_MATCH

    def test_ties_prefer_newer_release(self, purchase, make_release):
        """Test that equal confidence and classification fall back to year."""
        candidates = [
            make_release(release_id=1, year=1997),
            make_release(release_id=2, year=2017),
        ]

        outcome = compute_match(purchase, candidates)

        assert outcome.best_match.release.id == 2

    def test_options_from_camel_case_mapping(self, purchase, make_release):
        """Test that option mappings with camelCase keys are accepted."""
        candidates = [make_release(release_id=i) for i in range(5)]

        outcome = compute_match(purchase, candidates, {"maxAlternatives": 1})

        assert len(outcome.alternatives) == 1

    def test_various_artists_canonicalized(self, make_release):
        """Test that compilation credits are spelled out before scoring."""
        purchase = PurchaseRecord(
            artist="VA", title="Warp 10+3", format=FormatCategory.DIGITAL
        )
        release = make_release(artist="Various Artists", title="Warp 10+3")

        outcome = compute_match(purchase, [release])

        assert outcome.search_query.artist == "Various Artists"
        assert outcome.status == MatchStatus.MATCHED

    def test_catalog_sort_name_matched(self, make_release):
        """Test that a "Last, First" purchase credit finds the catalog release."""
        purchase = PurchaseRecord(
            artist="Cash, Johnny", title="At Folsom Prison", format=FormatCategory.CD
        )
        release = make_release(artist="Johnny Cash", title="At Folsom Prison")

        outcome = compute_match(purchase, [release])

        assert outcome.status == MatchStatus.MATCHED
        assert outcome.best_match.breakdown.artist_score == 100

    def test_marker_only_titles_not_auto_matched(self):
        """Test that different parenthetical-only titles do not match."""
        purchase = PurchaseRecord(artist="Radiohead", title="(Live)", format="CD")
        release = CandidateRelease(id=1, title="(Demo)", artist="Radiohead")

        outcome = compute_match(purchase, [release])

        assert outcome.best_match.confidence < 70
        assert outcome.status == MatchStatus.NO_MATCH

    def test_normalizer_is_injectable(self, purchase, release):
        """Test that a supplied normalizer receives the cache writes."""
        normalizer = Normalizer()

        compute_match(purchase, [release], normalizer=normalizer)

        assert len(normalizer.cache) > 0


class TestDetermineStatus:
    """Status derives from the best candidate's confidence alone."""

    @pytest.mark.parametrize(
        ("confidence", "expected"),
        [
            (100, MatchStatus.MATCHED),
            (95, MatchStatus.MATCHED),
            (94, MatchStatus.REVIEW),
            (70, MatchStatus.REVIEW),
            (69, MatchStatus.NO_MATCH),
            (0, MatchStatus.NO_MATCH),
        ],
    )
    def test_thresholds(self, confidence, expected):
        """Test the 95 auto-match and 70 review thresholds."""
        assert determine_status(_candidate_with_confidence(confidence)) == expected

    def test_no_candidate(self):
        """Test that a missing best match is a no-match."""
        assert determine_status(None) == MatchStatus.NO_MATCH


class TestMatchOptions:
    """Test option validation."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_alternatives": 11},
            {"max_alternatives": -1},
            {"min_confidence": 101},
            {"timeout_ms": 999},
            {"timeout_ms": 30001},
            {"format_strictness": "sometimes"},
        ],
    )
    def test_out_of_range_rejected(self, kwargs):
        """Test that invalid option values raise ValueError."""
        with pytest.raises(ValueError):
            MatchOptions(**kwargs)

    def test_unknown_mapping_keys_ignored(self):
        """Test that unrecognised keys in a mapping are skipped."""
        options = MatchOptions.from_mapping({"timeoutMs": 2000, "colour": "blue"})

        assert options.timeout_ms == 2000


class TestHandleVariousArtists:
    """Test compilation credit canonicalization."""

    @pytest.mark.parametrize("artist", ["VA", "V.A.", "various", "Various Artists", "Compilation"])
    def test_spellings(self, artist):
        """Test the recognised compilation spellings."""
        assert handle_various_artists(artist) == "Various Artists"

    def test_regular_artist_untouched(self):
        """Test that other artists pass through."""
        assert handle_various_artists("Vashti Bunyan") == "Vashti Bunyan"
