"""Atomic multi-destination settings replication."""

from toonsettings.copying.engine import CopyEngine, SourceUnreadable
from toonsettings.copying.models import (
    GAME_CLIENT_ADVISORY,
    CopyFailureReason,
    CopyOutcome,
    CopyRequest,
    CopySummary,
    summarize,
)

__all__ = [
    "CopyEngine",
    "CopyRequest",
    "CopyOutcome",
    "CopyFailureReason",
    "CopySummary",
    "SourceUnreadable",
    "summarize",
    "GAME_CLIENT_ADVISORY",
]
