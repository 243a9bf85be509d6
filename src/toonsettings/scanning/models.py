"""Discovered settings file records."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from toonsettings.core.identity import CharacterId


@dataclass(frozen=True, slots=True)
class SettingsFile:
    """One character settings file found by a scan.

    Attributes:
        id: Character identifier decoded from the filename.
        path: Absolute path to the file.
        size: Size in bytes at scan time.
        modified_at: POSIX modification timestamp at scan time.
    """

    id: CharacterId
    path: Path
    size: int
    modified_at: float

    @property
    def filename(self) -> str:
        return self.path.name
