"""Directory listing shared by the scanner and profile discovery."""

from __future__ import annotations

import os
from pathlib import Path

from toonsettings.errors import ToonSettingsError


class DirectoryUnavailable(ToonSettingsError):
    """Raised when a scan directory is missing or cannot be listed.

    Indicates misconfiguration; callers should surface it rather than retry.
    """

    def __init__(self, directory: str | os.PathLike[str], reason: str) -> None:
        super().__init__(f"Settings directory {os.fspath(directory)!r} {reason}")
        self.directory = Path(directory)
        self.reason = reason


def list_directory(directory: Path) -> list[os.DirEntry[str]]:
    """List direct children, translating OS errors into DirectoryUnavailable."""
    try:
        with os.scandir(directory) as entries:
            return list(entries)
    except FileNotFoundError as e:
        raise DirectoryUnavailable(directory, "does not exist") from e
    except NotADirectoryError as e:
        raise DirectoryUnavailable(directory, "is not a directory") from e
    except PermissionError as e:
        raise DirectoryUnavailable(directory, "is not readable") from e
    except OSError as e:
        raise DirectoryUnavailable(directory, f"cannot be listed: {e.strerror or e}") from e
