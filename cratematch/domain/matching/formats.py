"""Purchase format to catalog format vocabulary mapping."""

from collections.abc import Sequence

from cratematch.domain.entities import FormatCategory, FormatDescriptor

from .types import FormatStrictness

CATALOG_FORMATS: dict[FormatCategory, tuple[str, ...]] = {
    FormatCategory.VINYL: (
        "LP", "Album", '12"', '10"', '7"', "Single", "EP", "Mini-Album",
        "Maxi-Single", "Flexi-disc", "Picture Disc", "Test Pressing",
        "White Label", "Promo", "Reissue", "Repress", "Compilation", "Vinyl",
    ),
    FormatCategory.CD: (
        "CD", "CDr", "CD-ROM", "HDCD", "MiniCD", "CD+DVD", "CD+Blu-ray",
        "Enhanced", "Single", "EP", "Album", "Compilation", "Box Set",
    ),
    FormatCategory.CASSETTE: (
        "Cassette", "Cass", "Mixtape", "Demo", "Promo", "Album",
        "Single", "EP", "Compilation",
    ),
    FormatCategory.DIGITAL: (
        "File", "MP3", "FLAC", "WAV", "AIFF", "AAC", "OGG", "WMA",
        "Digital", "Download", "Streaming",
    ),
    FormatCategory.OTHER: (
        "DVD", "Blu-ray", "VHS", "Betamax", "Laserdisc", "MiniDisc",
        "8-Track", "Reel-To-Reel", "DAT", "DCC", "SACD", "DVD-Audio",
    ),
}  # fmt: skip

# (match bonus, mismatch penalty) per strictness
FORMAT_BONUSES: dict[FormatStrictness, tuple[int, int]] = {
    FormatStrictness.STRICT: (10, -10),
    FormatStrictness.LOOSE: (5, -2),
    FormatStrictness.ANY: (0, 0),
}


def catalog_formats_for(category: FormatCategory) -> tuple[str, ...]:
    """Catalog format-name fragments acceptable for a purchase category."""
    return CATALOG_FORMATS.get(FormatCategory(category), ())


def format_matches(category: FormatCategory, catalog_format: str) -> bool:
    """Whether a catalog format name fits the purchase category."""
    if category == FormatCategory.DIGITAL:
        return True

    name = catalog_format.lower()
    return any(fragment.lower() in name for fragment in catalog_formats_for(category))


def format_bonus(
    category: FormatCategory,
    formats: Sequence[FormatDescriptor] | None,
    strictness: FormatStrictness = FormatStrictness.LOOSE,
) -> int:
    """Signed confidence adjustment for format agreement.

    Digital purchases and candidates without format data are neutral.
    """
    strictness = FormatStrictness(strictness)
    if strictness == FormatStrictness.ANY:
        return 0
    if category == FormatCategory.DIGITAL:
        return 0
    if not formats:
        return 0

    bonus, penalty = FORMAT_BONUSES[strictness]
    if any(format_matches(category, descriptor.name) for descriptor in formats):
        return bonus
    return penalty
