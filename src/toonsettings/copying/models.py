"""Copy request and outcome models."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from toonsettings.core.identity import CharacterId
from toonsettings.scanning.models import SettingsFile

GAME_CLIENT_ADVISORY = (
    "Close the EVE client before copying settings. A running client may overwrite "
    "the copied files when it exits."
)
"""Message for hosts to show before a copy. Files are not locked during the copy."""


class CopyFailureReason(Enum):
    """Why a single destination was not written."""

    SAME_FILE = "same_file"
    """Destination is the source itself; skipped."""

    WRITE_FAILED = "write_failed"
    """Temp file write, sync or rename failed."""

    PERMISSION_DENIED = "permission_denied"
    """Destination directory or file is not writable."""

    DESTINATION_UNREACHABLE = "destination_unreachable"
    """Destination directory is missing or not a directory."""


@dataclass(frozen=True, slots=True)
class CopyRequest:
    """One source file to replicate onto an ordered list of destinations.

    Attributes:
        source: File whose bytes are copied.
        destinations: Files to overwrite, in the order outcomes are reported.
    """

    source: SettingsFile
    destinations: Sequence[SettingsFile]

    def __post_init__(self) -> None:
        # Freeze caller's list so the request cannot change mid-copy
        object.__setattr__(self, "destinations", tuple(self.destinations))
        if not self.destinations:
            raise ValueError("CopyRequest needs at least one destination")


@dataclass(frozen=True, slots=True)
class CopyOutcome:
    """Result of copying onto one destination.

    Attributes:
        destination_id: Character whose file was targeted.
        destination: Path of the targeted file.
        reason: None on success, otherwise why the destination was left untouched.
        detail: Human-readable error text for failures.
    """

    destination_id: CharacterId
    destination: Path
    reason: CopyFailureReason | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.reason is None

    @classmethod
    def success(cls, destination: SettingsFile) -> CopyOutcome:
        return cls(destination_id=destination.id, destination=destination.path)

    @classmethod
    def failure(
        cls, destination: SettingsFile, reason: CopyFailureReason, detail: str = ""
    ) -> CopyOutcome:
        return cls(
            destination_id=destination.id,
            destination=destination.path,
            reason=reason,
            detail=detail,
        )


@dataclass(slots=True)
class CopySummary:
    """Aggregate view of a copy's outcomes for user-facing messages."""

    succeeded: list[CopyOutcome] = field(default_factory=list)
    failed: list[CopyOutcome] = field(default_factory=list)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed

    @property
    def message(self) -> str:
        if not self.failed:
            return f"Successfully copied settings to {len(self.succeeded)} character(s)"
        errors = ", ".join(
            f"{o.destination_id}: {o.detail or o.reason.value}"  # type: ignore[union-attr]
            for o in self.failed
        )
        return (
            f"Copied to {len(self.succeeded)} character(s), but {len(self.failed)} "
            f"failed: {errors}"
        )


def summarize(outcomes: Sequence[CopyOutcome]) -> CopySummary:
    """Split outcomes into successes and failures, preserving order."""
    summary = CopySummary()
    for outcome in outcomes:
        (summary.succeeded if outcome.ok else summary.failed).append(outcome)
    return summary
