"""Filesystem discovery of character settings files."""

from toonsettings.scanning.listing import DirectoryUnavailable
from toonsettings.scanning.models import SettingsFile
from toonsettings.scanning.paths import default_settings_root, discover_profile_directories
from toonsettings.scanning.scanner import FileScanner

__all__ = [
    "SettingsFile",
    "FileScanner",
    "DirectoryUnavailable",
    "default_settings_root",
    "discover_profile_directories",
]
