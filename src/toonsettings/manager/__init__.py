"""Host-facing facade and sync/async bridging.

Architecture Note:
    manager/ is the stateful service layer. It owns the identity cache and
    network transport for the process lifetime and exposes scan, resolve and
    copy to the presentation layer.
"""

from toonsettings.manager.manager import SettingsManager
from toonsettings.manager.sync_runner import SyncRunner

__all__ = [
    "SettingsManager",
    "SyncRunner",
]
