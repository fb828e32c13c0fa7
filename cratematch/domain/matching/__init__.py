"""Purchase-to-catalog matching algorithms and types."""

from .algorithms import (
    CONFIDENCE_CONFIG,
    calculate_artist_similarity,
    calculate_confidence,
    calculate_title_similarity,
    classify_match,
)
from .artists import (
    canonical_dj_prefix,
    credit_variants,
    extract_split_artists,
    reorder_last_first,
)
from .editions import (
    EDITION_PATTERNS,
    EditionInfo,
    EditionPattern,
    edition_aware_similarity,
    extract_edition,
)
from .engine import (
    AUTO_MATCH_THRESHOLD,
    MAX_CANDIDATES,
    REVIEW_THRESHOLD,
    compute_match,
    determine_status,
    handle_various_artists,
)
from .formats import CATALOG_FORMATS, catalog_formats_for, format_bonus, format_matches
from .normalization import NormalizationCache, Normalizer, canonicalize, normalize_text
from .presets import MATCHING_PRESETS, get_preset, merge_with_preset, suggest_preset
from .protocols import CandidateFetcher
from .similarity import (
    edit_distance,
    edit_similarity,
    field_similarity,
    token_similarity,
)
from .types import (
    FormatStrictness,
    MatchCandidate,
    MatchClassification,
    MatchOptions,
    MatchOutcome,
    MatchStatus,
    SearchQuery,
    SimilarityBreakdown,
)

__all__ = [
    "AUTO_MATCH_THRESHOLD",
    "CATALOG_FORMATS",
    "CONFIDENCE_CONFIG",
    "EDITION_PATTERNS",
    "MATCHING_PRESETS",
    "MAX_CANDIDATES",
    "REVIEW_THRESHOLD",
    "CandidateFetcher",
    "EditionInfo",
    "EditionPattern",
    "FormatStrictness",
    "MatchCandidate",
    "MatchClassification",
    "MatchOptions",
    "MatchOutcome",
    "MatchStatus",
    "NormalizationCache",
    "Normalizer",
    "SearchQuery",
    "SimilarityBreakdown",
    "calculate_artist_similarity",
    "calculate_confidence",
    "calculate_title_similarity",
    "canonical_dj_prefix",
    "canonicalize",
    "catalog_formats_for",
    "classify_match",
    "compute_match",
    "credit_variants",
    "determine_status",
    "edit_distance",
    "edit_similarity",
    "edition_aware_similarity",
    "extract_edition",
    "extract_split_artists",
    "field_similarity",
    "format_bonus",
    "format_matches",
    "get_preset",
    "handle_various_artists",
    "merge_with_preset",
    "normalize_text",
    "reorder_last_first",
    "suggest_preset",
    "token_similarity",
]
