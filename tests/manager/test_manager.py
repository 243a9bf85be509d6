"""Tests for SettingsManager and SyncRunner."""

import asyncio
import logging
import threading

import pytest

from toonsettings import (
    CharacterId,
    CopyRequest,
    DirectoryUnavailable,
    SettingsManager,
    summarize,
)
from toonsettings.config import ToonSettingsConfig
from toonsettings.manager import SyncRunner


@pytest.fixture
def config(tmp_path):
    return ToonSettingsConfig(
        base_directory=tmp_path / "EVE",
        profile_directory=tmp_path / "EVE" / "tq" / "settings_Default",
        cache_file=tmp_path / "state" / "names.json",
        retry_attempts=1,
    )


@pytest.fixture
def transport(fake_transport_cls):
    return fake_transport_cls({1: "Main Pilot", 2: "Alt One", 3: "Alt Two"})


def test_scan_resolve_copy_blocking(config, transport, clock, write_settings):
    """Synchronous host flow: scan, label, copy."""
    profile = config.profile_directory
    write_settings(profile, 1, b"main layout")
    write_settings(profile, 2, b"alt")
    write_settings(profile, 3, b"alt")

    with SettingsManager(config=config, transport=transport, clock=clock) as manager:
        files = manager.scan()
        labels = manager.resolve_all({f.id for f in files})
        source, *destinations = files
        outcomes = manager.copy(CopyRequest(source=source, destinations=destinations))

    assert [f.id.value for f in files] == [1, 2, 3]
    assert labels == {
        CharacterId(1): "Main Pilot",
        CharacterId(2): "Alt One",
        CharacterId(3): "Alt Two",
    }
    assert summarize(outcomes).all_succeeded
    assert (profile / "core_char_3.dat").read_bytes() == b"main layout"
    assert transport.closed


@pytest.mark.asyncio
async def test_async_flow(config, transport, clock, write_settings):
    profile = config.profile_directory
    write_settings(profile, 1, b"main")
    write_settings(profile, 2, b"alt")

    async with SettingsManager(config=config, transport=transport, clock=clock) as manager:
        files = await manager.scan_async()
        labels = await manager.resolve_all_async(f.id for f in files)
        outcomes = await manager.copy_async(CopyRequest(source=files[0], destinations=files[1:]))

    assert labels[CharacterId(2)] == "Alt One"
    assert outcomes[0].ok
    assert transport.closed


def test_scan_missing_directory_raises(config, transport, clock):
    with SettingsManager(config=config, transport=transport, clock=clock) as manager:
        with pytest.raises(DirectoryUnavailable):
            manager.scan()


def test_unreachable_service_still_labels(config, fake_transport_cls, clock):
    from toonsettings.resolution import NetworkUnavailable

    offline = fake_transport_cls({1: "Main Pilot"})
    offline.errors = [NetworkUnavailable("offline")]

    with SettingsManager(config=config, transport=offline, clock=clock) as manager:
        labels = manager.resolve_all([CharacterId(1), CharacterId(2)])
        assert manager.label_for(CharacterId(1)) == "1"

    assert labels == {CharacterId(1): "1", CharacterId(2): "2"}


def test_scan_profiles_uses_base_directory(tmp_path, transport, clock, write_settings):
    root = tmp_path / "EVE"
    profile = root / "c_eve_sharedcache_tq_tranquility" / "settings_Default"
    write_settings(profile, 7)
    config = ToonSettingsConfig(base_directory=root)

    with SettingsManager(config=config, transport=transport, clock=clock) as manager:
        results = manager.scan_profiles()

    assert [f.id.value for f in results[profile.absolute()]] == [7]


def test_default_scan_walks_every_profile(tmp_path, transport, clock, write_settings):
    """Without a profile_directory, scan() covers every profile under the EVE root."""
    root = tmp_path / "EVE"
    tq_default = root / "c_eve_sharedcache_tq_tranquility" / "settings_Default"
    tq_pvp = root / "c_eve_sharedcache_tq_tranquility" / "settings_PvP"
    sisi = root / "c_eve_sharedcache_sisi_singularity" / "settings_Default"
    write_settings(tq_default, 3, b"main")
    write_settings(tq_default, 1)
    write_settings(tq_pvp, 2)
    write_settings(sisi, 1)
    (root / "core_char_9.dat").write_bytes(b"not in a profile")
    config = ToonSettingsConfig(base_directory=root)

    with SettingsManager(config=config, transport=transport, clock=clock) as manager:
        files = manager.scan()
        labels = manager.resolve_all({f.id for f in files})

    assert [(f.id.value, f.path.parent.name) for f in files] == [
        (1, "settings_Default"),
        (1, "settings_Default"),
        (2, "settings_PvP"),
        (3, "settings_Default"),
    ]
    assert {f.path.parent.parent.name for f in files if f.id.value == 1} == {
        "c_eve_sharedcache_tq_tranquility",
        "c_eve_sharedcache_sisi_singularity",
    }
    assert labels[CharacterId(2)] == "Alt One"


def test_default_scan_missing_root_raises(tmp_path, transport, clock):
    config = ToonSettingsConfig(base_directory=tmp_path / "no-eve-here")

    with SettingsManager(config=config, transport=transport, clock=clock) as manager:
        with pytest.raises(DirectoryUnavailable):
            manager.scan()


def test_explicit_directory_overrides_config(config, tmp_path, transport, clock, write_settings):
    other = tmp_path / "elsewhere"
    write_settings(other, 42)

    with SettingsManager(config=config, transport=transport, clock=clock) as manager:
        assert [f.id.value for f in manager.scan(other)] == [42]


# Cache persistence


def test_resolved_names_survive_restart(config, fake_transport_cls, transport, clock):
    with SettingsManager(config=config, transport=transport, clock=clock) as manager:
        manager.resolve_all([CharacterId(1), CharacterId(99)])

    assert config.cache_file.exists()

    fresh_transport = fake_transport_cls({})
    with SettingsManager(config=config, transport=fresh_transport, clock=clock) as manager:
        assert manager.label_for(CharacterId(1)) == "Main Pilot"
        # Failures are not persisted
        assert manager.record_for(CharacterId(99)) is None
        assert manager.resolve_all([CharacterId(1)]) == {CharacterId(1): "Main Pilot"}

    assert fresh_transport.calls == []


def test_corrupt_cache_file_is_ignored(config, transport, clock, caplog):
    config.cache_file.parent.mkdir(parents=True)
    config.cache_file.write_bytes(b"{not json")

    with caplog.at_level(logging.WARNING, logger="toonsettings.manager.manager"):
        manager = SettingsManager(config=config, transport=transport, clock=clock)

    assert len(manager.cache) == 0
    assert "corrupt name cache" in caplog.text
    manager.close()


def test_no_cache_file_means_memory_only(tmp_path, transport, clock):
    config = ToonSettingsConfig(base_directory=tmp_path)
    manager = SettingsManager(config=config, transport=transport, clock=clock)

    assert manager.save_cache() is False
    manager.close()
    assert list(tmp_path.iterdir()) == []


def test_close_is_idempotent(config, transport, clock):
    manager = SettingsManager(config=config, transport=transport, clock=clock)
    manager.resolve_all([CharacterId(1)])
    manager.close()
    manager.close()
    assert transport.closed


# SyncRunner


def test_sync_runner_runs_on_background_thread():
    runner = SyncRunner()

    async def where() -> str:
        await asyncio.sleep(0)
        return threading.current_thread().name

    try:
        assert runner.run(where()) == "toonsettings-loop"
        assert runner.running
    finally:
        runner.stop()
    assert not runner.running


def test_sync_runner_propagates_exceptions():
    runner = SyncRunner()

    async def fail() -> None:
        raise KeyError("boom")

    try:
        with pytest.raises(KeyError):
            runner.run(fail())
    finally:
        runner.stop()


def test_sync_runner_restarts_after_stop():
    runner = SyncRunner()

    async def answer() -> int:
        return 42

    runner.run(answer())
    runner.stop()
    runner.stop()
    try:
        assert runner.run(answer()) == 42
    finally:
        runner.stop()
