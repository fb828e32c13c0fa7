"""Named option presets for common matching scenarios."""

import re
from typing import Any

import attrs

from cratematch.domain.entities import FormatCategory, PurchaseRecord
from cratematch.domain.errors import UnknownPresetError

from .types import FormatStrictness, MatchOptions

MATCHING_PRESETS: dict[str, MatchOptions] = {
    # Balanced accuracy and performance
    "default": MatchOptions(
        include_alternatives=True,
        max_alternatives=3,
        format_strictness=FormatStrictness.LOOSE,
        min_confidence=0,
    ),
    # High precision, may miss some matches
    "strict": MatchOptions(
        include_alternatives=True,
        max_alternatives=5,
        format_strictness=FormatStrictness.STRICT,
        min_confidence=80,
    ),
    # High recall, may include false positives
    "fuzzy": MatchOptions(
        include_alternatives=True,
        max_alternatives=10,
        format_strictness=FormatStrictness.ANY,
        min_confidence=50,
    ),
    "fast": MatchOptions(
        include_alternatives=False,
        max_alternatives=0,
        format_strictness=FormatStrictness.ANY,
        min_confidence=70,
    ),
    # Various Artists releases
    "compilation": MatchOptions(
        include_alternatives=True,
        max_alternatives=5,
        format_strictness=FormatStrictness.ANY,
        min_confidence=60,
    ),
    "vinyl": MatchOptions(
        include_alternatives=True,
        max_alternatives=3,
        format_strictness=FormatStrictness.STRICT,
        min_confidence=70,
    ),
    "digital": MatchOptions(
        include_alternatives=True,
        max_alternatives=3,
        format_strictness=FormatStrictness.ANY,
        min_confidence=0,
    ),
}

_EDITION_TITLE = re.compile(r"\(.*edition.*\)", re.IGNORECASE)


def get_preset(name: str) -> MatchOptions:
    """Look up a preset by name.

    Raises:
        UnknownPresetError: If no preset has that name
    """
    try:
        return MATCHING_PRESETS[name]
    except KeyError:
        raise UnknownPresetError(
            f"Unknown preset '{name}'. Available: {', '.join(MATCHING_PRESETS)}"
        ) from None


def merge_with_preset(name: str, **overrides: Any) -> MatchOptions:
    """Preset options with selected fields replaced."""
    return attrs.evolve(get_preset(name), **overrides)


def suggest_preset(purchase: PurchaseRecord) -> str:
    """Pick a preset name from the purchase's artist, format and title."""
    if "various" in purchase.artist.lower():
        return "compilation"

    if purchase.format == FormatCategory.VINYL:
        return "vinyl"
    if purchase.format == FormatCategory.DIGITAL:
        return "digital"

    if _EDITION_TITLE.search(purchase.title):
        return "strict"

    return "default"
