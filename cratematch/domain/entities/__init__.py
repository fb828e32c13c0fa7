"""Domain entities for purchases and catalog releases."""

from .purchase import FormatCategory, PurchaseRecord
from .release import CandidateRelease, FormatDescriptor

__all__ = [
    "CandidateRelease",
    "FormatCategory",
    "FormatDescriptor",
    "PurchaseRecord",
]
