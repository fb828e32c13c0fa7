"""Application services - resilient matching entry points."""

from .matching_service import (
    SafeMatcher,
    compute_match_batch,
    compute_match_safe,
    get_default_matcher,
)

__all__ = [
    "SafeMatcher",
    "compute_match_batch",
    "compute_match_safe",
    "get_default_matcher",
]
