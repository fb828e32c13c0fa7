"""Text canonicalization for artist and title comparison.

Normalization runs a fixed pipeline whose order matters: Roman numerals are
converted while the text is still upper-case, and abbreviations are expanded
while their punctuation is still present.

Results are memoized per ``Normalizer`` in a bounded cache. The cache evicts
the oldest inserted entry when full; lookups do not refresh an entry's
position, so this is FIFO rather than LRU.
"""

import re
import threading
import unicodedata

DEFAULT_CACHE_SIZE = 1000

# Longest numerals first so "XIV" is never read as "X" + "IV"
_ROMAN_NUMERALS = {
    "XX": "20",
    "XIX": "19",
    "XVIII": "18",
    "XVII": "17",
    "XVI": "16",
    "XV": "15",
    "XIV": "14",
    "XIII": "13",
    "XII": "12",
    "XI": "11",
    "X": "10",
    "IX": "9",
    "VIII": "8",
    "VII": "7",
    "VI": "6",
    "V": "5",
    "IV": "4",
    "III": "3",
    "II": "2",
    "I": "1",
}
_ROMAN_PATTERN = re.compile(r"\b(" + "|".join(_ROMAN_NUMERALS) + r")\b")

_LETTER_SUBSTITUTIONS = str.maketrans({
    "ø": "o",
    "æ": "ae",
    "œ": "oe",
    "ß": "ss",
    "ł": "l",
    "đ": "d",
})

_PUNCTUATION_VARIANTS = str.maketrans({
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
    "–": "-",
    "—": "-",
    "…": "...",
})

_ABBREVIATIONS = (
    (re.compile(r"\bfeat\.?\s", re.IGNORECASE), "featuring "),
    (re.compile(r"\bft\.\s", re.IGNORECASE), "featuring "),
    (re.compile(r"&"), " and "),
    (re.compile(r"\bvol\.?\s", re.IGNORECASE), "volume "),
    (re.compile(r"\bpt\.?\s", re.IGNORECASE), "part "),
    # Dotted form only; a bare "no" is an ordinary word
    (re.compile(r"\bno\.\s", re.IGNORECASE), "number "),
)

# Bare tokens exposed once punctuation is gone, e.g. "(feat) X" -> "feat x"
_BARE_ABBREVIATIONS = {"feat": "featuring", "vol": "volume", "pt": "part"}
_BARE_ABBREVIATION_PATTERN = re.compile(
    r"\b(" + "|".join(_BARE_ABBREVIATIONS) + r")\b(?=\s)"
)

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^\w\s-]")
_LEADING_ARTICLE = re.compile(r"^(?:the|a|an)\s+")


def _strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.translate(_LETTER_SUBSTITUTIONS)


def _strip_leading_article(text: str) -> str:
    remainder = _LEADING_ARTICLE.sub("", text, count=1)
    # Leave "the the" alone so a second pass cannot strip again
    if remainder != text and _LEADING_ARTICLE.match(remainder + " "):
        return text
    return remainder


def canonicalize(
    text: str,
    *,
    expand_abbreviations: bool = True,
    remove_articles: bool = True,
) -> str:
    """Run the normalization pipeline without caching."""
    normalized = text.strip()
    normalized = _ROMAN_PATTERN.sub(lambda m: _ROMAN_NUMERALS[m.group(1)], normalized)
    normalized = normalized.lower()
    normalized = _strip_diacritics(normalized)
    normalized = normalized.translate(_PUNCTUATION_VARIANTS)
    normalized = _WHITESPACE.sub(" ", normalized)

    if expand_abbreviations:
        for pattern, replacement in _ABBREVIATIONS:
            normalized = pattern.sub(replacement, normalized)

    normalized = _DISALLOWED.sub("", normalized)
    normalized = normalized.replace("-", "")
    normalized = _WHITESPACE.sub(" ", normalized).strip()

    if expand_abbreviations:
        normalized = _BARE_ABBREVIATION_PATTERN.sub(
            lambda m: _BARE_ABBREVIATIONS[m.group(1)], normalized
        )

    if remove_articles:
        normalized = _strip_leading_article(normalized)

    return _WHITESPACE.sub(" ", normalized).strip()


class NormalizationCache:
    """Bounded, thread-safe memo of normalized strings with FIFO eviction."""

    def __init__(self, max_size: int = DEFAULT_CACHE_SIZE) -> None:
        if max_size < 1:
            raise ValueError(f"Cache size must be positive, got {max_size}")
        self.max_size = max_size
        self._entries: dict[tuple[str, bool, bool], str] = {}
        self._lock = threading.Lock()

    def get(self, key: tuple[str, bool, bool]) -> str | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: tuple[str, bool, bool], value: str) -> None:
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_size:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
            self._entries[key] = value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


class Normalizer:
    """Cached front end to :func:`canonicalize`.

    Each instance owns its cache so callers (and tests) can isolate state.
    """

    def __init__(self, cache: NormalizationCache | None = None) -> None:
        self.cache = cache if cache is not None else NormalizationCache()

    def normalize(
        self,
        text: str | None,
        *,
        expand_abbreviations: bool = True,
        remove_articles: bool = True,
    ) -> str:
        if not text:
            return ""

        key = (text, expand_abbreviations, remove_articles)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        normalized = canonicalize(
            text,
            expand_abbreviations=expand_abbreviations,
            remove_articles=remove_articles,
        )
        self.cache.put(key, normalized)
        return normalized


default_normalizer = Normalizer()


def normalize_text(
    text: str | None,
    *,
    expand_abbreviations: bool = True,
    remove_articles: bool = True,
    normalizer: Normalizer | None = None,
) -> str:
    """Normalize text for comparison using the shared or a supplied normalizer.

    Example:
        >>> normalize_text("The Beatles")
        'beatles'
        >>> normalize_text("Sigur Rós feat. Jónsi")
        'sigur ros featuring jonsi'
    """
    return (normalizer or default_normalizer).normalize(
        text,
        expand_abbreviations=expand_abbreviations,
        remove_articles=remove_articles,
    )
