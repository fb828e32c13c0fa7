"""Match orchestration: score every candidate for a purchase and rank them.

This is a pure, synchronous computation. The only state it touches is the
normalizer cache.
"""

from collections.abc import Iterable, Mapping
import re
from typing import Any

import attrs

from cratematch.domain.entities import CandidateRelease, PurchaseRecord

from .algorithms import calculate_confidence
from .normalization import Normalizer
from .types import MatchCandidate, MatchOptions, MatchOutcome, MatchStatus, SearchQuery

MAX_CANDIDATES = 100
AUTO_MATCH_THRESHOLD = 95
REVIEW_THRESHOLD = 70

VARIOUS_ARTISTS = "Various Artists"
_VARIOUS_ARTISTS_PATTERN = re.compile(
    r"^(?:various|various artists|v\.a\.|va|compilation)$", re.IGNORECASE
)


def handle_various_artists(artist: str) -> str:
    """Canonicalize the spellings of a compilation credit to "Various Artists"."""
    if _VARIOUS_ARTISTS_PATTERN.match(artist.strip()):
        return VARIOUS_ARTISTS
    return artist


def determine_status(best_match: MatchCandidate | None) -> MatchStatus:
    """Status from the best candidate's confidence alone."""
    if best_match is None or best_match.confidence < REVIEW_THRESHOLD:
        return MatchStatus.NO_MATCH
    if best_match.confidence >= AUTO_MATCH_THRESHOLD:
        return MatchStatus.MATCHED
    return MatchStatus.REVIEW


def rank_key(candidate: MatchCandidate) -> tuple[int, int, int]:
    """Sort key: confidence, then classification rank, then newer release year."""
    return (
        -candidate.confidence,
        -candidate.classification.rank,
        -(candidate.release.year or 0),
    )


def _coerce_options(options: MatchOptions | Mapping[str, Any] | None) -> MatchOptions:
    if options is None:
        return MatchOptions()
    if isinstance(options, MatchOptions):
        return options
    return MatchOptions.from_mapping(dict(options))


def compute_match(
    purchase: PurchaseRecord,
    candidates: Iterable[CandidateRelease],
    options: MatchOptions | Mapping[str, Any] | None = None,
    *,
    normalizer: Normalizer | None = None,
) -> MatchOutcome:
    """Match one purchase against its catalog candidates.

    Args:
        purchase: Purchase to match
        candidates: Catalog candidates; only the first 100 are scored
        options: MatchOptions or a mapping of option fields
        normalizer: Optional normalizer with its own cache

    Returns:
        MatchOutcome with best match, alternatives, query echo and status
    """
    match_options = _coerce_options(options)

    canonical_artist = handle_various_artists(purchase.artist)
    if canonical_artist != purchase.artist:
        purchase = attrs.evolve(purchase, artist=canonical_artist)

    scored = []
    for index, release in enumerate(candidates):
        if index >= MAX_CANDIDATES:
            break
        candidate = calculate_confidence(
            purchase, release, match_options.format_strictness, normalizer
        )
        if candidate.confidence >= match_options.min_confidence:
            scored.append(candidate)

    scored.sort(key=rank_key)

    best_match = scored[0] if scored else None
    alternatives = (
        scored[1 : match_options.max_alternatives + 1]
        if match_options.include_alternatives
        else []
    )

    return MatchOutcome(
        best_match=best_match,
        alternatives=alternatives,
        search_query=SearchQuery(
            artist=purchase.artist,
            title=purchase.title,
            format=purchase.format.value,
        ),
        status=determine_status(best_match),
    )
