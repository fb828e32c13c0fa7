"""Protocols for collaborators of the matching service.

These protocols define contracts without depending on external
implementations, following the dependency inversion principle.
"""

from typing import Protocol

from cratematch.domain.entities import CandidateRelease, PurchaseRecord


class CandidateFetcher(Protocol):
    """Catalog lookup that returns candidate releases for a purchase."""

    async def __call__(self, purchase: PurchaseRecord) -> list[CandidateRelease]:
        """Fetch candidates for a purchase.

        Args:
            purchase: Purchase whose artist, title and format form the query

        Returns:
            Ordered candidate releases, best guesses first

        Raises:
            Exception: Lookup failures; the batch executor isolates them per item.
        """
        ...
