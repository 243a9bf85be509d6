"""Identity cache records."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from toonsettings.core.identity import CharacterId


class ResolutionState(Enum):
    """Lifecycle of a character name lookup."""

    UNRESOLVED = "unresolved"
    """Known id, no lookup finished yet (presentation shows a loading state)."""

    RESOLVED = "resolved"
    """Name obtained from the lookup service."""

    FAILED = "failed"
    """Last lookup failed; label falls back to the numeric id."""


class FailureKind(Enum):
    """Why the last lookup for an id failed."""

    NOT_FOUND = "not_found"
    NETWORK_UNAVAILABLE = "network_unavailable"
    SERVICE_ERROR = "service_error"
    MALFORMED_RESPONSE = "malformed_response"


@dataclass(frozen=True, slots=True)
class IdentityRecord:
    """Cached resolution state for one character.

    Attributes:
        id: Character the record describes.
        state: Current resolution state.
        name: Display name when RESOLVED, otherwise None.
        resolved_at: POSIX time the name was obtained (RESOLVED only).
        failure: Failure category when FAILED.
        status: HTTP status for SERVICE_ERROR failures.
        attempted_at: POSIX time of the most recent finished lookup attempt.
    """

    id: CharacterId
    state: ResolutionState = ResolutionState.UNRESOLVED
    name: str | None = None
    resolved_at: float | None = None
    failure: FailureKind | None = None
    status: int | None = None
    attempted_at: float | None = None

    @classmethod
    def unresolved(cls, character_id: CharacterId) -> IdentityRecord:
        return cls(id=character_id)

    @classmethod
    def resolved(cls, character_id: CharacterId, name: str, at: float) -> IdentityRecord:
        return cls(
            id=character_id,
            state=ResolutionState.RESOLVED,
            name=name,
            resolved_at=at,
            attempted_at=at,
        )

    @classmethod
    def failed(
        cls,
        character_id: CharacterId,
        failure: FailureKind,
        at: float,
        status: int | None = None,
    ) -> IdentityRecord:
        return cls(
            id=character_id,
            state=ResolutionState.FAILED,
            failure=failure,
            status=status,
            attempted_at=at,
        )

    @property
    def label(self) -> str:
        """Display label: the resolved name, else the numeric id."""
        if self.state is ResolutionState.RESOLVED and self.name:
            return self.name
        return str(self.id)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "id": self.id.value,
            "state": self.state.value,
            "name": self.name,
            "resolved_at": self.resolved_at,
            "failure": self.failure.value if self.failure else None,
            "status": self.status,
            "attempted_at": self.attempted_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IdentityRecord:
        """Create from dictionary (for deserialization)."""
        failure = data.get("failure")
        return cls(
            id=CharacterId(data["id"]),
            state=ResolutionState(data["state"]),
            name=data.get("name"),
            resolved_at=data.get("resolved_at"),
            failure=FailureKind(failure) if failure else None,
            status=data.get("status"),
            attempted_at=data.get("attempted_at"),
        )
