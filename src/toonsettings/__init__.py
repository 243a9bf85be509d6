"""ToonSettings: discover, label and copy EVE Online character settings files.

Usage:
    from toonsettings import CopyRequest, SettingsManager, summarize

    with SettingsManager() as manager:
        files = manager.scan("/path/to/EVE/c_eve_sharedcache_tq_tranquility/settings_Default")
        labels = manager.resolve_all({f.id for f in files})

        source, *destinations = files
        outcomes = manager.copy(CopyRequest(source=source, destinations=destinations))
        print(summarize(outcomes).message)
"""

__version__ = "1.0.0"

# Core primitives
from toonsettings.core import (
    CharacterId,
    NotASettingsFile,
    decode,
    encode,
)

# Copying
from toonsettings.copying import (
    GAME_CLIENT_ADVISORY,
    CopyEngine,
    CopyFailureReason,
    CopyOutcome,
    CopyRequest,
    SourceUnreadable,
    summarize,
)
from toonsettings.errors import ToonSettingsError

# Facade
from toonsettings.manager import SettingsManager

# Resolution
from toonsettings.resolution import (
    EsiTransport,
    IdentityResolver,
    LookupTransport,
    ResolverConfig,
    RetryPolicy,
)

# Discovery
from toonsettings.scanning import (
    DirectoryUnavailable,
    FileScanner,
    SettingsFile,
)

# Storage
from toonsettings.storage import (
    IdentityCache,
    IdentityRecord,
    LocalIdentityCache,
    ResolutionState,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "CharacterId",
    "NotASettingsFile",
    "decode",
    "encode",
    "ToonSettingsError",
    # Discovery
    "SettingsFile",
    "FileScanner",
    "DirectoryUnavailable",
    # Storage
    "IdentityCache",
    "LocalIdentityCache",
    "IdentityRecord",
    "ResolutionState",
    # Resolution
    "IdentityResolver",
    "ResolverConfig",
    "RetryPolicy",
    "LookupTransport",
    "EsiTransport",
    # Copying
    "CopyEngine",
    "CopyRequest",
    "CopyOutcome",
    "CopyFailureReason",
    "SourceUnreadable",
    "summarize",
    "GAME_CLIENT_ADVISORY",
    # Facade
    "SettingsManager",
]
