"""Local in-memory identity cache.

Dict-based storage for the lifetime of the process, with optional JSON
snapshots so a host can keep resolved names between runs.

Usage:
    cache = LocalIdentityCache()
    cache.put(IdentityRecord.resolved(CharacterId(1), "Pilot", at=time.time()))
    cache.get(CharacterId(1)).label  # "Pilot"
"""

from __future__ import annotations

import json
import threading
import time
from collections.abc import Callable, Iterator
from typing import Any

from toonsettings.core.identity import CharacterId
from toonsettings.storage.models import IdentityRecord, ResolutionState

SNAPSHOT_VERSION = 1


class LocalIdentityCache:
    """In-memory IdentityCache guarded by a lock.

    Structure:
        _records[character_id] = IdentityRecord

    Args:
        clock: Time source used by is_stale() (POSIX seconds).
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._records: dict[CharacterId, IdentityRecord] = {}

    def get(self, character_id: CharacterId) -> IdentityRecord | None:
        with self._lock:
            return self._records.get(character_id)

    def put(self, record: IdentityRecord) -> None:
        with self._lock:
            self._records[record.id] = record

    def is_stale(self, record: IdentityRecord, max_age: float) -> bool:
        if record.state is not ResolutionState.RESOLVED:
            return True
        if record.resolved_at is None:
            return True
        return self._clock() - record.resolved_at > max_age

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __iter__(self) -> Iterator[IdentityRecord]:
        with self._lock:
            records = list(self._records.values())
        return iter(records)

    def snapshot(self) -> bytes:
        """Serialize resolved records to JSON.

        Failed and unresolved records are transient and left out.
        """
        with self._lock:
            records = [
                record.to_dict()
                for record in self._records.values()
                if record.state is ResolutionState.RESOLVED
            ]
        payload: dict[str, Any] = {"version": SNAPSHOT_VERSION, "records": records}
        return json.dumps(payload, sort_keys=True).encode("utf-8")

    def restore(self, data: bytes) -> int:
        """Load records from a snapshot, replacing entries with the same id.

        Returns:
            Number of records loaded.

        Raises:
            ValueError: If the snapshot is not valid JSON or has the wrong shape.
        """
        try:
            payload = json.loads(data.decode("utf-8"))
            if payload.get("version") != SNAPSHOT_VERSION:
                raise ValueError(f"Unsupported snapshot version: {payload.get('version')!r}")
            records = [IdentityRecord.from_dict(item) for item in payload["records"]]
        except (UnicodeDecodeError, json.JSONDecodeError, AttributeError, KeyError, TypeError) as e:
            raise ValueError(f"Invalid identity cache snapshot: {e}") from e

        with self._lock:
            for record in records:
                self._records[record.id] = record
        return len(records)
