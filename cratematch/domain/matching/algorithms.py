"""Pure algorithms for purchase/release confidence scoring.

These functions perform no I/O and implement the core business logic for
deciding how well a catalog release corresponds to a purchase.
"""

from cratematch.domain.entities import CandidateRelease, PurchaseRecord

from .artists import credit_pairs
from .editions import edition_aware_similarity
from .formats import format_bonus
from .normalization import Normalizer
from .similarity import edit_similarity, field_similarity, token_similarity
from .types import (
    FormatStrictness,
    MatchCandidate,
    MatchClassification,
    SimilarityBreakdown,
)

# Confidence scoring configuration
CONFIDENCE_CONFIG = {
    # Field weights
    "artist_weight": 0.6,
    "title_weight": 0.4,
    # Both fields at or above this count as a normalized match
    "normalized_similarity": 98,
    # Confidence bounds
    "min_confidence": 0,
    "max_confidence": 100,
}


def calculate_artist_similarity(
    purchase_artist: str,
    release_artist: str,
    normalizer: Normalizer | None = None,
) -> int:
    """Artist similarity: best field similarity over the credit variants.

    Covers "Last, First" sort names, "D.J." spellings and the members of
    collaboration credits such as "A feat. B" or "A / B".
    """
    return max(
        field_similarity(credit_a, credit_b, normalizer)
        for credit_a, credit_b in credit_pairs(purchase_artist, release_artist)
    )


def calculate_title_similarity(
    purchase_title: str,
    release_title: str,
    normalizer: Normalizer | None = None,
) -> int:
    """Title similarity: best of edit-distance, token overlap and edition-aware scores.

    The edition-aware score is unclamped and may exceed 100.
    """
    return max(
        edit_similarity(purchase_title, release_title, normalizer),
        token_similarity(purchase_title, release_title, normalizer),
        edition_aware_similarity(purchase_title, release_title, normalizer),
    )


def classify_match(
    purchase: PurchaseRecord,
    release_artist: str,
    release_title: str,
    artist_similarity: int,
    title_similarity: int,
) -> MatchClassification:
    """Exact on byte-identical raw fields, normalized on near-perfect scores."""
    if purchase.artist == release_artist and purchase.title == release_title:
        return MatchClassification.EXACT

    threshold = CONFIDENCE_CONFIG["normalized_similarity"]
    if artist_similarity >= threshold and title_similarity >= threshold:
        return MatchClassification.NORMALIZED

    return MatchClassification.FUZZY


def _clamp_score(value: float) -> int:
    return max(
        CONFIDENCE_CONFIG["min_confidence"],
        min(round(value), CONFIDENCE_CONFIG["max_confidence"]),
    )


def calculate_confidence(
    purchase: PurchaseRecord,
    release: CandidateRelease,
    strictness: FormatStrictness = FormatStrictness.LOOSE,
    normalizer: Normalizer | None = None,
) -> MatchCandidate:
    """Score one release against a purchase.

    Args:
        purchase: The purchase being matched
        release: Catalog candidate
        strictness: How much format agreement counts
        normalizer: Optional normalizer with its own cache

    Returns:
        MatchCandidate with clamped confidence, classification and breakdown
    """
    release_artist = release.comparable_artist
    release_title = release.comparable_title

    artist_similarity = calculate_artist_similarity(
        purchase.artist, release_artist, normalizer
    )
    title_similarity = calculate_title_similarity(
        purchase.title, release_title, normalizer
    )
    bonus = format_bonus(purchase.format, release.formats, strictness)

    weighted = (
        artist_similarity * CONFIDENCE_CONFIG["artist_weight"]
        + title_similarity * CONFIDENCE_CONFIG["title_weight"]
        + bonus
    )

    classification = classify_match(
        purchase, release_artist, release_title, artist_similarity, title_similarity
    )

    return MatchCandidate(
        release=release,
        confidence=_clamp_score(weighted),
        classification=classification,
        breakdown=SimilarityBreakdown(
            artist_score=_clamp_score(artist_similarity),
            title_score=_clamp_score(title_similarity),
            format_bonus=bonus,
        ),
    )
