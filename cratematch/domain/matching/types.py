"""Pure domain types for purchase matching and confidence scoring.

These types represent the core concepts of the matching domain and depend
only on attrs and the domain entities.
"""

from enum import Enum
from typing import Any

from attrs import define, field, validators

from cratematch.domain.entities import CandidateRelease, FormatCategory

MAX_ALTERNATIVES_LIMIT = 10


class FormatStrictness(str, Enum):
    """How heavily format agreement influences confidence."""

    STRICT = "strict"
    LOOSE = "loose"
    ANY = "any"


class MatchClassification(str, Enum):
    """How closely the key fields agree."""

    EXACT = "exact"
    NORMALIZED = "normalized"
    FUZZY = "fuzzy"

    @property
    def rank(self) -> int:
        """Tie-break rank, higher is better."""
        return _CLASSIFICATION_RANK[self]


_CLASSIFICATION_RANK = {
    MatchClassification.EXACT: 3,
    MatchClassification.NORMALIZED: 2,
    MatchClassification.FUZZY: 1,
}


class MatchStatus(str, Enum):
    """Outcome of matching one purchase."""

    MATCHED = "matched"
    REVIEW = "review"
    NO_MATCH = "no-match"


@define(frozen=True, slots=True)
class SimilarityBreakdown:
    """Per-field evidence behind a confidence score."""

    artist_score: int
    title_score: int
    format_bonus: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "artist_score": self.artist_score,
            "title_score": self.title_score,
            "format_bonus": self.format_bonus,
        }


def _clamp_confidence(value: int) -> int:
    return max(0, min(100, int(value)))


@define(frozen=True, slots=True)
class MatchCandidate:
    """A scored catalog release."""

    release: CandidateRelease
    confidence: int = field(converter=_clamp_confidence)
    classification: MatchClassification = field(converter=MatchClassification)
    breakdown: SimilarityBreakdown

    def as_dict(self) -> dict[str, Any]:
        return {
            "release_id": self.release.id,
            "artist": self.release.comparable_artist,
            "title": self.release.comparable_title,
            "year": self.release.year,
            "confidence": self.confidence,
            "classification": self.classification.value,
            "breakdown": self.breakdown.as_dict(),
        }


@define(frozen=True, slots=True)
class SearchQuery:
    """Echo of the query a purchase was matched with."""

    artist: str = ""
    title: str = ""
    format: str = ""

    def as_dict(self) -> dict[str, str]:
        return {"artist": self.artist, "title": self.title, "format": self.format}


@define(frozen=True, slots=True)
class MatchOutcome:
    """Ranked result of matching one purchase against its candidates."""

    best_match: MatchCandidate | None
    alternatives: list[MatchCandidate] = field(factory=list)
    search_query: SearchQuery = field(factory=SearchQuery)
    status: MatchStatus = field(default=MatchStatus.NO_MATCH, converter=MatchStatus)

    @classmethod
    def empty(cls, search_query: SearchQuery | None = None) -> "MatchOutcome":
        """A no-match outcome with no candidates."""
        return cls(
            best_match=None,
            alternatives=[],
            search_query=search_query or SearchQuery(),
            status=MatchStatus.NO_MATCH,
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "best_match": self.best_match.as_dict() if self.best_match else None,
            "alternatives": [alt.as_dict() for alt in self.alternatives],
            "search_query": self.search_query.as_dict(),
            "status": self.status.value,
        }


_CAMEL_CASE_KEYS = {
    "includeAlternatives": "include_alternatives",
    "maxAlternatives": "max_alternatives",
    "formatStrictness": "format_strictness",
    "minConfidence": "min_confidence",
    "timeoutMs": "timeout_ms",
}


@define(frozen=True, slots=True)
class MatchOptions:
    """Caller-tunable matching options.

    Out-of-range values raise ``ValueError`` at construction.
    """

    include_alternatives: bool = field(
        default=True, validator=validators.instance_of(bool)
    )
    max_alternatives: int = field(
        default=3,
        validator=[
            validators.instance_of(int),
            validators.ge(0),
            validators.le(MAX_ALTERNATIVES_LIMIT),
        ],
    )
    format_strictness: FormatStrictness = field(
        default=FormatStrictness.LOOSE, converter=FormatStrictness
    )
    min_confidence: int = field(
        default=0,
        validator=[validators.instance_of(int), validators.ge(0), validators.le(100)],
    )
    timeout_ms: int = field(
        default=5000,
        validator=[
            validators.instance_of(int),
            validators.ge(1000),
            validators.le(30000),
        ],
    )

    @classmethod
    def from_mapping(cls, data: dict[str, Any] | None) -> "MatchOptions":
        """Build options from snake_case or camelCase keys, ignoring unknown keys."""
        if not data:
            return cls()
        kwargs = {}
        for key, value in data.items():
            name = _CAMEL_CASE_KEYS.get(key, key)
            if name in _OPTION_FIELDS:
                kwargs[name] = value
        return cls(**kwargs)

    def as_dict(self) -> dict[str, Any]:
        return {
            "include_alternatives": self.include_alternatives,
            "max_alternatives": self.max_alternatives,
            "format_strictness": self.format_strictness.value,
            "min_confidence": self.min_confidence,
            "timeout_ms": self.timeout_ms,
        }


_OPTION_FIELDS = frozenset(_CAMEL_CASE_KEYS.values())


def search_query_for(artist: Any, title: Any, fmt: Any) -> SearchQuery:
    """Build a query echo from whatever values are usable as text."""

    def _text(value: Any) -> str:
        if isinstance(value, FormatCategory):
            return value.value
        return value if isinstance(value, str) else ""

    return SearchQuery(artist=_text(artist), title=_text(title), format=_text(fmt))
