"""Edition marker extraction and edition-aware title similarity.

An edition marker is a trailing qualifier such as "(Deluxe Edition)" or
" - 2011 Remaster" that names a variant of a release rather than the work
itself. Titles are compared on their base title first, with a small
adjustment for how the markers relate.
"""

import re

from attrs import define

from .normalization import Normalizer
from .similarity import edit_similarity

_EDITION_WORDS = (
    r"(?:\d+(?:st|nd|rd|th)\s+)?(?:anniversary\s+)?"
    r"(?:deluxe|special|limited|expanded|collector'?s?|anniversary|"
    r"remaster(?:ed)?|remix|live|demo|acoustic|unplugged)"
    r"(?:\s+(?:edition|version|release))?"
)
_YEAR = re.compile(r"(\d{4})")
_TRAILING_JUNK = re.compile(r"[\s\-,]+$")
_WHITESPACE = re.compile(r"\s+")

# Adjustments applied on top of the base-title similarity
EDITION_MATCH_WEIGHT = 0.1
BOTH_STANDARD_BONUS = 5
ONE_SIDED_EDITION_PENALTY = -2


@define(frozen=True, slots=True)
class EditionPattern:
    """A named edition-marker pattern; group 1 captures the marker text."""

    name: str
    regex: re.Pattern[str]


@define(frozen=True, slots=True)
class EditionInfo:
    """A title split into its base title and optional edition marker."""

    base_title: str
    edition: str | None = None
    year: int | None = None

    @property
    def has_edition(self) -> bool:
        return self.edition is not None


# Precedence is first-match-wins in this order. A title carrying both a
# bracketed and a dash marker resolves to whichever category appears first
# here; pass a reordered tuple to extract_edition to change that.
EDITION_PATTERNS: tuple[EditionPattern, ...] = (
    EditionPattern("parenthetical", re.compile(r"\(([^)]+)\)\s*$")),
    EditionPattern("bracketed", re.compile(r"\[([^\]]+)\]\s*$")),
    EditionPattern(
        "dash",
        re.compile(r"\s+-\s+((?:\d{4}\s+)?" + _EDITION_WORDS + r")\s*$", re.IGNORECASE),
    ),
    EditionPattern(
        "year_qualified",
        re.compile(
            r"[\s(\[]*(\d{4}\s*(?:remaster(?:ed)?|mix|version|edition))[)\]]?\s*$",
            re.IGNORECASE,
        ),
    ),
)


def extract_edition(
    title: str,
    patterns: tuple[EditionPattern, ...] = EDITION_PATTERNS,
) -> EditionInfo:
    """Split a title into base title, edition marker and marker year.

    Example:
        >>> extract_edition("Abbey Road (2019 Mix)")
        EditionInfo(base_title='Abbey Road', edition='2019 Mix', year=2019)
    """
    if not title:
        return EditionInfo(base_title="")

    for pattern in patterns:
        match = pattern.regex.search(title)
        if not match:
            continue
        remainder = _clean_base(title[: match.start()] + title[match.end() :])
        # A marker qualifies a title; a title that is only a marker has none
        if not remainder:
            continue
        edition = match.group(1).strip() or None
        year_match = _YEAR.search(edition or "")
        year = int(year_match.group(1)) if year_match else None
        return EditionInfo(base_title=remainder, edition=edition, year=year)

    return EditionInfo(base_title=_clean_base(title))


def _clean_base(text: str) -> str:
    text = _WHITESPACE.sub(" ", text)
    return _TRAILING_JUNK.sub("", text).strip()


def edition_aware_similarity(
    title_a: str,
    title_b: str,
    normalizer: Normalizer | None = None,
    patterns: tuple[EditionPattern, ...] = EDITION_PATTERNS,
) -> int:
    """Base-title similarity adjusted for edition agreement.

    Adds 10% of the marker-to-marker similarity when both titles carry a
    marker, +5 when neither does and -2 when only one does. The result is
    not clamped to 100; calculate_confidence clamps the final score.
    """
    info_a = extract_edition(title_a, patterns)
    info_b = extract_edition(title_b, patterns)

    base_similarity = edit_similarity(info_a.base_title, info_b.base_title, normalizer)

    if info_a.has_edition and info_b.has_edition:
        edition_similarity = edit_similarity(info_a.edition, info_b.edition, normalizer)
        adjustment = round(edition_similarity * EDITION_MATCH_WEIGHT)
    elif not info_a.has_edition and not info_b.has_edition:
        adjustment = BOTH_STANDARD_BONUS
    else:
        adjustment = ONE_SIDED_EDITION_PENALTY

    return base_similarity + adjustment
