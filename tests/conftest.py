"""Shared test fixtures - purchases, releases and controllable clocks.

Fixtures are plain domain objects, function-scoped for isolation.
"""

from datetime import UTC, datetime

import pytest

from cratematch.domain.entities import (
    CandidateRelease,
    FormatCategory,
    FormatDescriptor,
    PurchaseRecord,
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    """Clock that only moves when a test advances it."""
    return FakeClock()


@pytest.fixture
def purchase():
    """CD purchase with an exact catalog counterpart."""
    return PurchaseRecord(
        artist="Radiohead",
        title="OK Computer",
        url="https://radiohead.example/album/ok-computer",
        purchase_date=datetime(2023, 5, 12, tzinfo=UTC),
        format=FormatCategory.CD,
        raw_format="Compact Disc",
    )


@pytest.fixture
def release():
    """Catalog release matching the purchase fixture exactly."""
    return CandidateRelease(
        id=1001,
        title="OK Computer",
        artist="Radiohead",
        year=1997,
        formats=[FormatDescriptor(name="CD", qty="1")],
    )


@pytest.fixture
def make_release():
    """Factory for catalog releases with sensible defaults."""

    def _make(
        release_id: int = 1,
        title: str = "OK Computer",
        artist: str = "Radiohead",
        year: int | None = 1997,
        formats: list[str] | None = None,
    ) -> CandidateRelease:
        return CandidateRelease(
            id=release_id,
            title=title,
            artist=artist,
            year=year,
            formats=formats if formats is not None else ["CD"],
        )

    return _make


@pytest.fixture
def purchase_payload():
    """Purchase as it arrives in a request body."""
    return {
        "artist": "Radiohead",
        "title": "OK Computer",
        "format": "CD",
        "url": "https://radiohead.example/album/ok-computer",
    }


@pytest.fixture
def release_payloads():
    """Catalog search results as raw mappings."""
    return [
        {
            "id": 1001,
            "title": "OK Computer",
            "artists_sort": "Radiohead",
            "year": 1997,
            "formats": [{"name": "CD", "qty": "1"}],
        },
        {
            "id": 1002,
            "title": "OK Computer OKNOTOK 1997 2017",
            "artists_sort": "Radiohead",
            "year": 2017,
            "formats": [{"name": "Vinyl", "qty": "3"}],
        },
    ]
