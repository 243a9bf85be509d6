"""Filename <-> CharacterId conversion for per-character settings files.

Settings files are named ``core_char_<id>.dat``. Account-level files
(``core_user_<id>.dat``) and anything else are rejected.

Usage:
    decode("core_char_90000001.dat")  # CharacterId(90000001)
    encode(CharacterId(90000001))     # "core_char_90000001.dat"
"""

from __future__ import annotations

import re

from toonsettings.core.identity.models import MAX_CHARACTER_ID, CharacterId
from toonsettings.errors import ToonSettingsError

FILENAME_PREFIX = "core_char_"
FILENAME_SUFFIX = ".dat"

# Canonical decimal only: no sign, no leading zeros, ASCII digits
_FILENAME_PATTERN = re.compile(
    re.escape(FILENAME_PREFIX) + r"(0|[1-9][0-9]*)" + re.escape(FILENAME_SUFFIX),
    re.ASCII,
)


class NotASettingsFile(ToonSettingsError, ValueError):
    """Raised when a filename does not follow the character settings convention."""

    def __init__(self, filename: str, reason: str = "does not match core_char_<id>.dat") -> None:
        super().__init__(f"{filename!r} {reason}")
        self.filename = filename


def decode(filename: str) -> CharacterId:
    """Extract the character identifier embedded in a settings filename.

    Args:
        filename: Bare filename (no directory component).

    Returns:
        The parsed CharacterId.

    Raises:
        NotASettingsFile: If the name does not match or the number is out of range.
    """
    match = _FILENAME_PATTERN.fullmatch(filename)
    if match is None:
        raise NotASettingsFile(filename)

    digits = match.group(1)
    # Cheap length check first so huge digit runs never become huge ints
    if len(digits) > len(str(MAX_CHARACTER_ID)):
        raise NotASettingsFile(filename, "has an identifier wider than 63 bits")
    value = int(digits)
    if value >= MAX_CHARACTER_ID:
        raise NotASettingsFile(filename, "has an identifier wider than 63 bits")
    return CharacterId(value)


def encode(character_id: CharacterId) -> str:
    """Build the settings filename for a character. Inverse of decode()."""
    return f"{FILENAME_PREFIX}{character_id.value}{FILENAME_SUFFIX}"


def is_settings_filename(filename: str) -> bool:
    """Check whether decode() would accept a filename."""
    try:
        decode(filename)
    except NotASettingsFile:
        return False
    return True


# Temporary files written next to a destination during an atomic copy:
#   .core_char_<id>.dat.<random>.tmp
TEMP_SUFFIX = ".tmp"
_TEMP_PATTERN = re.compile(
    r"\." + _FILENAME_PATTERN.pattern + r"\.[^/\\]+" + re.escape(TEMP_SUFFIX),
    re.ASCII,
)


def temp_prefix(filename: str) -> str:
    """Prefix for a temporary file that will replace ``filename``."""
    return f".{filename}."


def is_temp_filename(filename: str) -> bool:
    """Check whether a name looks like a leftover atomic-copy temporary file."""
    return _TEMP_PATTERN.fullmatch(filename) is not None
