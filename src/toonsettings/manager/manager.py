"""SettingsManager: the surface a presentation layer talks to.

Usage:
    with SettingsManager() as manager:
        files = manager.scan()                           # every profile under base_directory
        labels = manager.resolve_all({f.id for f in files})
        outcomes = manager.copy(CopyRequest(source=files[0], destinations=files[1:]))

    # Async hosts use the *_async variants from their own event loop instead
    # of the blocking ones; do not mix both styles on one manager.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from toonsettings.config import ToonSettingsConfig
from toonsettings.copying.engine import CopyEngine
from toonsettings.copying.models import CopyOutcome, CopyRequest
from toonsettings.core.identity import CharacterId
from toonsettings.manager.sync_runner import SyncRunner
from toonsettings.resolution.resolver import IdentityResolver
from toonsettings.resolution.transport import EsiTransport, LookupTransport
from toonsettings.scanning.models import SettingsFile
from toonsettings.scanning.scanner import FileScanner
from toonsettings.storage.local import LocalIdentityCache
from toonsettings.storage.models import IdentityRecord
from toonsettings.storage.protocol import IdentityCache

logger = logging.getLogger(__name__)


class SettingsManager:
    """Owns the cache, transport, scanner and copy engine for one host process.

    Every collaborator can be injected; anything omitted is built from
    ``config``.

    Args:
        config: Package configuration (loaded from the environment if None).
        cache: Identity cache shared by all resolutions.
        transport: Lookup transport (EsiTransport from config if None).
        scanner: File scanner.
        engine: Copy engine.
        clock: Time source for cache timestamps.
    """

    def __init__(
        self,
        config: ToonSettingsConfig | None = None,
        cache: IdentityCache | None = None,
        transport: LookupTransport | None = None,
        scanner: FileScanner | None = None,
        engine: CopyEngine | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config or ToonSettingsConfig()
        self._cache = cache if cache is not None else LocalIdentityCache(clock=clock)
        self._transport = transport or EsiTransport.from_settings(self._config)
        self._scanner = scanner or self._config.build_scanner()
        self._engine = engine or self._config.build_engine()
        self._resolver = IdentityResolver(
            self._transport,
            cache=self._cache,
            config=self._config.resolver_config(),
            clock=clock,
        )
        self._runner = SyncRunner()
        self._closed = False
        self.load_cache()

    @property
    def config(self) -> ToonSettingsConfig:
        return self._config

    @property
    def cache(self) -> IdentityCache:
        return self._cache

    @property
    def resolver(self) -> IdentityResolver:
        return self._resolver

    # Discovery

    def scan(self, directory: str | os.PathLike[str] | None = None) -> list[SettingsFile]:
        """Find character settings files.

        Args:
            directory: Profile directory to scan. If None, the configured
                profile_directory is scanned, or else every profile under
                base_directory.

        Raises:
            DirectoryUnavailable: If the directory is missing or unreadable.
        """
        if directory is not None:
            return self._scanner.scan(directory)
        if self._config.profile_directory is not None:
            return self._scanner.scan(self._config.profile_directory)
        return self._scanner.scan_tree(self._config.base_directory)

    async def scan_async(
        self, directory: str | os.PathLike[str] | None = None
    ) -> list[SettingsFile]:
        """Async variant of scan(); filesystem work runs in a worker thread."""
        return await asyncio.to_thread(self.scan, directory)

    def scan_profiles(
        self, root: str | os.PathLike[str] | None = None
    ) -> dict[Path, list[SettingsFile]]:
        """Scan every settings_* profile under an EVE root (default: base_directory)."""
        target = root if root is not None else self._config.base_directory
        return self._scanner.scan_profiles(target)

    # Resolution

    async def resolve_all_async(self, ids: Iterable[CharacterId]) -> dict[CharacterId, str]:
        """Resolve display labels; never raises for lookup failures."""
        return await self._resolver.resolve_all(ids)

    def resolve_all(self, ids: Iterable[CharacterId]) -> dict[CharacterId, str]:
        """Blocking wrapper for resolve_all_async(), run on the background loop."""
        return self._runner.run(self._resolver.resolve_all(list(ids)))

    def label_for(self, character_id: CharacterId) -> str:
        """Current label for an id without network I/O."""
        return self._resolver.label_for(character_id)

    def record_for(self, character_id: CharacterId) -> IdentityRecord | None:
        return self._resolver.record_for(character_id)

    # Copying

    async def copy_async(self, request: CopyRequest) -> list[CopyOutcome]:
        """Copy source onto destinations; see CopyEngine.copy().

        Raises:
            SourceUnreadable: If the source cannot be read.
        """
        return await self._engine.copy(request)

    def copy(self, request: CopyRequest) -> list[CopyOutcome]:
        """Blocking wrapper for copy_async()."""
        return self._runner.run(self._engine.copy(request))

    # Cache persistence

    def load_cache(self) -> int:
        """Load resolved names from config.cache_file, if configured.

        A missing or corrupt file is logged and ignored.

        Returns:
            Number of records loaded.
        """
        path = self._config.cache_file
        if path is None or not isinstance(self._cache, LocalIdentityCache):
            return 0
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return 0
        except OSError as e:
            logger.warning("Cannot read name cache %s: %s", path, e)
            return 0
        try:
            loaded = self._cache.restore(data)
        except ValueError as e:
            logger.warning("Ignoring corrupt name cache %s: %s", path, e)
            return 0
        logger.debug("Loaded %d cached character names from %s", loaded, path)
        return loaded

    def save_cache(self) -> bool:
        """Write resolved names to config.cache_file, if configured.

        Returns:
            True if the cache was written.
        """
        path = self._config.cache_file
        if path is None or not isinstance(self._cache, LocalIdentityCache):
            return False
        temp_path = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_bytes(self._cache.snapshot())
            os.replace(temp_path, path)
        except OSError as e:
            logger.warning("Cannot write name cache %s: %s", path, e)
            return False
        return True

    # Lifecycle

    def close(self) -> None:
        """Persist the cache, close the transport and stop the background loop."""
        if self._closed:
            return
        self._closed = True
        self.save_cache()
        if self._runner.running:
            self._runner.run(self._transport.aclose())
            self._runner.stop()
        else:
            asyncio.run(self._transport.aclose())

    async def aclose(self) -> None:
        """Async variant of close() for hosts using the *_async methods."""
        if self._closed:
            return
        self._closed = True
        self.save_cache()
        await self._transport.aclose()
        self._runner.stop()

    def __enter__(self) -> SettingsManager:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    async def __aenter__(self) -> SettingsManager:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
