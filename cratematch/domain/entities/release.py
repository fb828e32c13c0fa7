"""Catalog release entities returned by the external lookup service."""

from typing import Any

from attrs import define, field, validators

# Separator used by catalog search results that fold the artist into the title
_TITLE_ARTIST_SEPARATOR = " - "


@define(frozen=True, slots=True)
class FormatDescriptor:
    """A single catalog format entry, e.g. ``{"name": "Vinyl", "qty": "2"}``."""

    name: str = field(validator=validators.instance_of(str))
    qty: str | None = field(default=None)
    descriptions: list[str] = field(factory=list)


def _to_format_descriptors(value: Any) -> list[FormatDescriptor]:
    """Accept descriptors, plain mappings or bare names."""
    if not value:
        return []
    descriptors = []
    for item in value:
        if isinstance(item, FormatDescriptor):
            descriptors.append(item)
        elif isinstance(item, dict):
            descriptors.append(
                FormatDescriptor(
                    name=str(item.get("name", "")),
                    qty=item.get("qty"),
                    descriptions=list(item.get("descriptions") or []),
                )
            )
        else:
            descriptors.append(FormatDescriptor(name=str(item)))
    return descriptors


@define(frozen=True, slots=True)
class CandidateRelease:
    """Catalog entry that may correspond to a purchase."""

    id: int = field(validator=validators.instance_of(int))
    title: str = field(validator=validators.instance_of(str))
    artist: str = field(default="", validator=validators.instance_of(str))
    year: int | None = field(default=None)
    formats: list[FormatDescriptor] = field(
        factory=list, converter=_to_format_descriptors
    )
    uri: str = field(default="")
    resource_url: str = field(default="")

    @property
    def comparable_artist(self) -> str:
        """Artist credit, recovered from an ``Artist - Title`` title if missing."""
        if self.artist:
            return self.artist
        if _TITLE_ARTIST_SEPARATOR in self.title:
            return self.title.split(_TITLE_ARTIST_SEPARATOR, 1)[0].strip()
        return ""

    @property
    def comparable_title(self) -> str:
        """Title with a folded-in artist prefix removed when the credit is missing."""
        if not self.artist and _TITLE_ARTIST_SEPARATOR in self.title:
            return self.title.split(_TITLE_ARTIST_SEPARATOR, 1)[1].strip()
        return self.title

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "CandidateRelease":
        """Build a release from a catalog API payload.

        Accepts the catalog's ``artists_sort`` key as well as ``artist``.
        """
        return cls(
            id=data["id"],
            title=data["title"],
            artist=data.get("artist") or data.get("artists_sort") or "",
            year=data.get("year") or None,
            formats=data.get("formats") or [],
            uri=data.get("uri") or "",
            resource_url=data.get("resource_url") or "",
        )
