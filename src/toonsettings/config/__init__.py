"""Configuration module using Pydantic Settings.

Usage:
    from toonsettings.config import ToonSettingsConfig

    config = ToonSettingsConfig(failure_cooldown=60)
"""

from toonsettings.config.settings import ToonSettingsConfig

__all__ = [
    "ToonSettingsConfig",
]
