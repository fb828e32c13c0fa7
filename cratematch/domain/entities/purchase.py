"""Purchase-related domain entities.

Pure purchase representations with zero external dependencies beyond attrs.
"""

from datetime import datetime
from enum import Enum
import re

from attrs import define, field, validators


class FormatCategory(str, Enum):
    """Physical or digital category of a purchased item."""

    DIGITAL = "Digital"
    VINYL = "Vinyl"
    CD = "CD"
    CASSETTE = "Cassette"
    OTHER = "Other"

    @classmethod
    def from_label(cls, label: str | None) -> "FormatCategory":
        """Map a raw storefront format label onto a category.

        Labels such as ``12" Vinyl``, ``Compact Disc`` or ``FLAC`` resolve to
        their category; anything unrecognised falls back to ``Other``.
        """
        if not label or not isinstance(label, str):
            return cls.OTHER

        normalized = label.lower().strip()

        for category, pattern in _LABEL_PATTERNS:
            if pattern.search(normalized):
                return category

        return cls.OTHER


@define(frozen=True, slots=True)
class PurchaseRecord:
    """Immutable record of an item the user owns.

    The source URL identifies the purchase; artist and title are the fields
    compared against catalog candidates.
    """

    artist: str = field(validator=validators.instance_of(str))
    title: str = field(validator=validators.instance_of(str))
    url: str = field(default="", validator=validators.instance_of(str))
    purchase_date: datetime | None = field(default=None)
    format: FormatCategory = field(
        default=FormatCategory.DIGITAL,
        converter=FormatCategory,
    )
    raw_format: str = field(default="")


# Checked in order; markers are whole tokens so "SACD" is not read as "CD"
_LABEL_PATTERNS = (
    (
        FormatCategory.DIGITAL,
        re.compile(r"\b(?:digital|download|streaming|flac|mp3|wav|aac|alac)\b"),
    ),
    (
        FormatCategory.VINYL,
        re.compile(r'\bvinyls?\b|\b(?:\d+x)?lps?\b|\brecords?\b|\b(?:7|10|12)"'),
    ),
    (
        FormatCategory.CD,
        re.compile(r"\b(?:\d+x)?cd(?:r|s)?\b|\bcompact dis[ck]\b"),
    ),
    (
        FormatCategory.CASSETTE,
        re.compile(r"\b(?:\d+x)?cassettes?\b|\btapes?\b|\bcs\b"),
    ),
)
