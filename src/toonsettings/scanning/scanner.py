"""Settings file discovery.

Usage:
    scanner = FileScanner()
    files = scanner.scan("/path/to/EVE/c_eve_sharedcache_tq_tranquility/settings_Default")

    # Walk every settings_* profile under the EVE root
    profiles = scanner.scan_profiles(default_settings_root())
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from pathlib import Path

from toonsettings.core.identity import NotASettingsFile, decode
from toonsettings.core.identity.codec import is_temp_filename
from toonsettings.scanning.listing import DirectoryUnavailable, list_directory
from toonsettings.scanning.models import SettingsFile
from toonsettings.scanning.paths import discover_profile_directories

logger = logging.getLogger(__name__)

DEFAULT_ORPHAN_GRACE = 3600.0
"""Seconds a temporary file must be left alone before a scan may delete it."""


class FileScanner:
    """Lists a directory and returns its character settings files.

    Scans are non-recursive and read metadata only, never file contents.
    Each call returns a fresh list; nothing is remembered between scans.

    Args:
        cleanup_orphans: Delete leftover atomic-copy temp files found while scanning.
        orphan_grace: Minimum age in seconds before a temp file counts as orphaned.
        clock: Time source for orphan age checks (POSIX seconds).
    """

    def __init__(
        self,
        cleanup_orphans: bool = False,
        orphan_grace: float = DEFAULT_ORPHAN_GRACE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._cleanup_orphans = cleanup_orphans
        self._orphan_grace = orphan_grace
        self._clock = clock

    def scan(self, directory: str | os.PathLike[str]) -> list[SettingsFile]:
        """Find settings files directly inside ``directory``.

        Non-matching names (account files, caches, subdirectories) are skipped.

        Args:
            directory: Directory to list.

        Returns:
            SettingsFile records sorted by character id.

        Raises:
            DirectoryUnavailable: If the directory does not exist or is unreadable.
        """
        path = Path(directory).expanduser().absolute()
        entries = list_directory(path)

        files: list[SettingsFile] = []
        for entry in entries:
            name = entry.name

            if is_temp_filename(name):
                if self._cleanup_orphans:
                    self._remove_orphan(entry)
                continue

            try:
                character_id = decode(name)
            except NotASettingsFile:
                logger.debug("Skipping non-character file %s", name)
                continue

            try:
                if not entry.is_file():
                    logger.debug("Skipping %s: not a regular file", name)
                    continue
                stat_info = entry.stat()
            except FileNotFoundError:
                # Removed between listing and stat
                logger.debug("Skipping %s: vanished during scan", name)
                continue
            except OSError as e:
                logger.warning("Skipping %s: cannot read metadata (%s)", name, e)
                continue

            files.append(
                SettingsFile(
                    id=character_id,
                    path=path / name,
                    size=stat_info.st_size,
                    modified_at=stat_info.st_mtime,
                )
            )

        files.sort(key=lambda f: f.id)
        logger.info("Found %d character settings files in %s", len(files), path)
        return files

    def scan_profiles(self, root: str | os.PathLike[str]) -> dict[Path, list[SettingsFile]]:
        """Scan every ``<root>/<install>/settings_*`` profile directory.

        A profile that cannot be listed is logged and left out.

        Raises:
            DirectoryUnavailable: If ``root`` itself is unusable.
        """
        results: dict[Path, list[SettingsFile]] = {}
        for profile in discover_profile_directories(root):
            try:
                results[profile] = self.scan(profile)
            except DirectoryUnavailable as e:
                logger.warning("Skipping profile: %s", e)
        return results

    def scan_tree(self, root: str | os.PathLike[str]) -> list[SettingsFile]:
        """Scan every profile under an EVE settings root into one list.

        A character that has files in several profiles appears once per
        profile; records are sorted by character id, then path.

        Raises:
            DirectoryUnavailable: If ``root`` itself is unusable.
        """
        files = [f for profile in self.scan_profiles(root).values() for f in profile]
        files.sort(key=lambda f: (f.id, f.path))
        return files

    def _remove_orphan(self, entry: os.DirEntry[str]) -> None:
        """Delete a stale temp file left behind by an interrupted copy."""
        try:
            age = self._clock() - entry.stat().st_mtime
            if age < self._orphan_grace:
                return
            os.unlink(entry.path)
        except FileNotFoundError:
            return
        except OSError as e:
            logger.warning("Could not remove orphaned temp file %s: %s", entry.path, e)
            return
        logger.info("Removed orphaned temp file %s", entry.path)
