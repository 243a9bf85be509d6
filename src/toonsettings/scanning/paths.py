"""Locating EVE settings profiles on disk.

The client keeps one directory per install/server under its settings root,
each holding ``settings_<profile>`` folders with the character files:

    <root>/c_eve_sharedcache_tq_tranquility/settings_Default/core_char_<id>.dat
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from toonsettings.scanning.listing import DirectoryUnavailable, list_directory

logger = logging.getLogger(__name__)

PROFILE_PREFIX = "settings_"

# Steam Play (Proton) prefix for app 8500
_PROTON_SUBPATH = (
    ".steam/steam/steamapps/compatdata/8500/pfx/drive_c/users/steamuser/AppData/Local/CCP/EVE"
)


def default_settings_root() -> Path:
    """Best guess at the EVE settings root for the current platform."""
    if sys.platform == "win32":
        local_appdata = os.environ.get("LOCALAPPDATA")
        if local_appdata:
            return Path(local_appdata) / "CCP" / "EVE"
        return Path.home() / "AppData" / "Local" / "CCP" / "EVE"
    return Path.home() / _PROTON_SUBPATH


def discover_profile_directories(root: str | os.PathLike[str]) -> list[Path]:
    """Find ``settings_*`` profile directories one level below each install directory.

    Args:
        root: EVE settings root.

    Returns:
        Profile directories in sorted order.

    Raises:
        DirectoryUnavailable: If ``root`` does not exist or cannot be listed.
    """
    root_path = Path(root).expanduser().absolute()
    profiles: list[Path] = []

    for install in list_directory(root_path):
        if not install.is_dir():
            continue
        try:
            children = list_directory(Path(install.path))
        except DirectoryUnavailable as e:
            logger.warning("Skipping install directory: %s", e)
            continue
        for child in children:
            if child.name.startswith(PROFILE_PREFIX) and child.is_dir():
                profiles.append(Path(child.path))

    profiles.sort()
    logger.debug("Discovered %d settings profiles under %s", len(profiles), root_path)
    return profiles
