"""Shared test fixtures."""

import asyncio
import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

from toonsettings import CharacterId, LocalIdentityCache, SettingsFile, encode


class FakeTransport:
    """In-memory LookupTransport with call recording.

    Ids missing from ``names`` are reported as "not found" (None) unless listed
    in ``omit``, in which case they are left out of the response entirely.
    Queued ``errors`` are raised by successive calls before any lookup.
    """

    def __init__(
        self,
        names: Mapping[int, str] | None = None,
        max_batch_size: int = 1000,
        delay: float = 0.0,
        omit: Sequence[int] = (),
    ) -> None:
        self.names = {CharacterId(k): v for k, v in (names or {}).items()}
        self.max_batch_size = max_batch_size
        self.delay = delay
        self.omit = {CharacterId(k) for k in omit}
        self.errors: list[Exception] = []
        self.calls: list[list[CharacterId]] = []
        self.active = 0
        self.peak = 0
        self.closed = False

    @property
    def requested(self) -> list[CharacterId]:
        return [cid for call in self.calls for cid in call]

    async def lookup(self, ids: Sequence[CharacterId]) -> dict[CharacterId, str | None]:
        self.calls.append(list(ids))
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.delay)
            if self.errors:
                raise self.errors.pop(0)
            # Answer in reverse order: callers must match by id
            return {
                cid: self.names.get(cid) for cid in reversed(list(ids)) if cid not in self.omit
            }
        finally:
            self.active -= 1

    async def aclose(self) -> None:
        self.closed = True


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_transport_cls() -> type[FakeTransport]:
    return FakeTransport


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> LocalIdentityCache:
    """Fresh identity cache on the fake clock."""
    return LocalIdentityCache(clock=clock)


@pytest.fixture
def write_settings() -> Callable[..., SettingsFile]:
    """Create a core_char_<id>.dat file and return its SettingsFile record."""

    def _write(directory: Path, character_id: int, content: bytes = b"") -> SettingsFile:
        directory.mkdir(parents=True, exist_ok=True)
        cid = CharacterId(character_id)
        path = directory / encode(cid)
        path.write_bytes(content)
        stat_info = path.stat()
        return SettingsFile(
            id=cid, path=path, size=stat_info.st_size, modified_at=stat_info.st_mtime
        )

    return _write
