"""Match resolution and two-pass diff classification."""

from .classifier import classify
from .matching import resolve_match
from .models import Classification, NewBucket, OldBucket, SourceStatus

__all__ = [
    "Classification",
    "NewBucket",
    "OldBucket",
    "SourceStatus",
    "classify",
    "resolve_match",
]
