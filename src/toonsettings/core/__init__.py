"""Core functionalities: stateless primitives.

Architecture Note:
    core/ holds pure identity types and the filename codec. Nothing here
    touches the filesystem or network. For stateful services, see
    scanning/, storage/, resolution/ and copying/.
"""

from toonsettings.core.identity import (
    MAX_CHARACTER_ID,
    CharacterId,
    NotASettingsFile,
    decode,
    encode,
    is_settings_filename,
)

__all__ = [
    "CharacterId",
    "MAX_CHARACTER_ID",
    "NotASettingsFile",
    "decode",
    "encode",
    "is_settings_filename",
]
