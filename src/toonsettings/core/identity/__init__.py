"""Character identity: identifiers and the settings filename codec."""

from toonsettings.core.identity.codec import (
    FILENAME_PREFIX,
    FILENAME_SUFFIX,
    NotASettingsFile,
    decode,
    encode,
    is_settings_filename,
)
from toonsettings.core.identity.models import MAX_CHARACTER_ID, CharacterId

__all__ = [
    "CharacterId",
    "MAX_CHARACTER_ID",
    "FILENAME_PREFIX",
    "FILENAME_SUFFIX",
    "NotASettingsFile",
    "decode",
    "encode",
    "is_settings_filename",
]
