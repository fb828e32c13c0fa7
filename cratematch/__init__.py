"""Match owned purchases against catalog releases."""

from cratematch.application.services.matching_service import (
    SafeMatcher,
    compute_match_batch,
    compute_match_safe,
)
from cratematch.application.utilities.results import (
    ErrorKind,
    MatchError,
    is_match_error,
)
from cratematch.domain.entities import CandidateRelease, FormatCategory, PurchaseRecord
from cratematch.domain.matching import MatchOptions, MatchOutcome, compute_match

__all__ = [
    "CandidateRelease",
    "ErrorKind",
    "FormatCategory",
    "MatchError",
    "MatchOptions",
    "MatchOutcome",
    "PurchaseRecord",
    "SafeMatcher",
    "compute_match",
    "compute_match_batch",
    "compute_match_safe",
    "is_match_error",
]
