"""Identity cache protocol for swappable backends.

The cache is the only shared mutable state in the package. It is owned by
the host (usually through SettingsManager) and injected into the resolver,
so tests get isolation by constructing a fresh instance.

Usage:
    cache = LocalIdentityCache()
    resolver = IdentityResolver(transport, cache=cache)
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from toonsettings.core.identity import CharacterId
from toonsettings.storage.models import IdentityRecord


@runtime_checkable
class IdentityCache(Protocol):
    """Maps CharacterId -> IdentityRecord, at most one record per id.

    Thread Safety:
        Implementations must tolerate reads from other threads while the
        resolver writes.
    """

    def get(self, character_id: CharacterId) -> IdentityRecord | None:
        """Get the record for an id, or None if never seen."""
        ...

    def put(self, record: IdentityRecord) -> None:
        """Store a record, replacing any existing record for the same id."""
        ...

    def is_stale(self, record: IdentityRecord, max_age: float) -> bool:
        """Check whether a record is eligible for (re-)resolution.

        RESOLVED records are stale once older than ``max_age`` seconds.
        UNRESOLVED and FAILED records are always eligible.
        """
        ...

    def clear(self) -> None:
        """Drop every record (process-wide reset)."""
        ...

    def __len__(self) -> int:
        """Number of records currently held."""
        ...
