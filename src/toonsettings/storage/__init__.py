"""Identity cache backends."""

from toonsettings.storage.local import LocalIdentityCache
from toonsettings.storage.models import FailureKind, IdentityRecord, ResolutionState
from toonsettings.storage.protocol import IdentityCache

__all__ = [
    "IdentityCache",
    "LocalIdentityCache",
    "IdentityRecord",
    "ResolutionState",
    "FailureKind",
]
