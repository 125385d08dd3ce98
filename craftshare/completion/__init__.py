"""Project completion rollup."""

from craftshare.completion.models import CompletionStatus
from craftshare.completion.service import get_completion, is_complete, recompute_completion

__all__ = [
    "CompletionStatus",
    "get_completion",
    "is_complete",
    "recompute_completion",
]
