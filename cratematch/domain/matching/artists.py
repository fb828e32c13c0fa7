"""Artist credit variants used when comparing artist names.

Storefront and catalog credits spell the same act differently: collaboration
credits list several artists, catalog sort names read "Last, First", and DJ
names vary in punctuation. Each helper here produces an alternative spelling
that artist similarity can be scored against.
"""

from collections.abc import Iterator
import itertools
import re

_CREDIT_SEPARATOR = re.compile(
    r"\s+(?:/|&|and|feat\.|featuring|with|vs\.?)\s+", re.IGNORECASE
)
_LAST_FIRST = re.compile(r"^(.+),\s*(.+)$")
_DJ_PREFIX = re.compile(r"\bD\.?J\.?\s+", re.IGNORECASE)


def extract_split_artists(artist: str) -> list[str]:
    """Split a collaboration credit into its individual artists.

    Example:
        >>> extract_split_artists("Artist1 feat. Artist2 & Artist3")
        ['Artist1', 'Artist2', 'Artist3']
    """
    parts = (part.strip() for part in _CREDIT_SEPARATOR.split(artist))
    return [part for part in parts if part]


def reorder_last_first(artist: str) -> str:
    """Turn a "Last, First" credit into "First Last"."""
    match = _LAST_FIRST.match(artist.strip())
    if not match:
        return artist
    return f"{match.group(2).strip()} {match.group(1).strip()}"


def canonical_dj_prefix(artist: str) -> str:
    """Spell any "D.J." style prefix as "DJ"."""
    return _DJ_PREFIX.sub("DJ ", artist)


def credit_variants(artist: str) -> list[str]:
    """The credit itself followed by its distinct whole-credit respellings."""
    variants = [artist]
    for variant in (reorder_last_first(artist), canonical_dj_prefix(artist)):
        if variant and variant not in variants:
            variants.append(variant)
    return variants


def credit_pairs(artist_a: str, artist_b: str) -> Iterator[tuple[str, str]]:
    """Credit spellings worth comparing between two artists.

    Whole-credit variants are compared with each other, and the members of a
    collaboration credit are compared with the other side's whole credit.
    Members of two collaboration credits are never paired with each other.
    """
    variants_a = credit_variants(artist_a)
    variants_b = credit_variants(artist_b)
    members_a = extract_split_artists(artist_a)
    members_b = extract_split_artists(artist_b)

    yield from itertools.product(variants_a, variants_b)
    if len(members_a) > 1:
        yield from itertools.product(members_a, variants_b)
    if len(members_b) > 1:
        yield from itertools.product(variants_a, members_b)
