"""String similarity measures over normalized text.

Both measures return integers in [0, 100]. A field's similarity is the
maximum of the two, which lets word-order changes (token overlap) and small
spelling differences (edit distance) each score well.
"""

from collections import Counter

from rapidfuzz.distance import Levenshtein

from .normalization import Normalizer, normalize_text

IDENTICAL_SCORE = 100
NORMALIZED_IDENTICAL_SCORE = 98


def edit_distance(a: str, b: str) -> int:
    """Insert/delete/substitute distance between two strings.

    rapidfuzz computes this with a bit-parallel row, so memory stays linear
    in the shorter string.
    """
    return Levenshtein.distance(a, b)


def edit_similarity(a: str, b: str, normalizer: Normalizer | None = None) -> int:
    """Edit-distance similarity with short-circuits for identical input.

    Identical raw strings score 100; strings identical after normalization
    score 98; otherwise the score is the share of the longer normalized
    string left untouched by the edit distance.
    """
    if a == b:
        return IDENTICAL_SCORE

    normalized_a = normalize_text(a, normalizer=normalizer)
    normalized_b = normalize_text(b, normalizer=normalizer)

    if normalized_a == normalized_b:
        return NORMALIZED_IDENTICAL_SCORE

    max_length = max(len(normalized_a), len(normalized_b))
    if max_length == 0:
        return IDENTICAL_SCORE

    distance = edit_distance(normalized_a, normalized_b)
    return max(0, round(100 * (max_length - distance) / max_length))


def token_similarity(a: str, b: str, normalizer: Normalizer | None = None) -> int:
    """Token-overlap similarity (Dice coefficient over token multisets).

    Each shared token counts ``min(freq_a, freq_b)`` times; the total counts
    every token from both sides, duplicates included.
    """
    tokens_a = Counter(normalize_text(a, normalizer=normalizer).split())
    tokens_b = Counter(normalize_text(b, normalizer=normalizer).split())

    total_tokens = sum(tokens_a.values()) + sum(tokens_b.values())
    if total_tokens == 0:
        return IDENTICAL_SCORE
    if not tokens_a or not tokens_b:
        return 0

    matched = sum((tokens_a & tokens_b).values())
    return round(100 * matched * 2 / total_tokens)


def field_similarity(a: str, b: str, normalizer: Normalizer | None = None) -> int:
    """Best of edit-distance and token similarity."""
    return max(
        edit_similarity(a, b, normalizer),
        token_similarity(a, b, normalizer),
    )
