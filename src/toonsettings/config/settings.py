"""Configuration settings using Pydantic Settings.

Provides typed configuration with environment variable support.

Usage:
    from toonsettings.config import ToonSettingsConfig

    # Load from environment variables (TOONSETTINGS_*) and .env
    config = ToonSettingsConfig()

    # Or override with explicit values
    config = ToonSettingsConfig(profile_directory="/games/EVE/tq/settings_Default")
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from toonsettings.copying.engine import CopyEngine
from toonsettings.resolution.models import (
    DEFAULT_FAILURE_COOLDOWN,
    DEFAULT_MAX_AGE,
    ResolverConfig,
    RetryPolicy,
)
from toonsettings.resolution.transport import (
    DEFAULT_DATASOURCE,
    DEFAULT_ESI_URL,
    DEFAULT_USER_AGENT,
    ESI_NAMES_BATCH_LIMIT,
)
from toonsettings.scanning.paths import default_settings_root
from toonsettings.scanning.scanner import FileScanner


class ToonSettingsConfig(BaseSettings):
    """Configuration for scanning, name lookups and copying.

    Attributes:
        base_directory: EVE settings root holding <install>/settings_* profiles.
        profile_directory: Single profile scanned by default instead of every profile.
        esi_base_url: ESI root URL including version segment.
        esi_datasource: ESI datasource (server).
        user_agent: User-Agent sent to ESI.
        request_timeout: Per-request timeout in seconds.
        lookup_batch_size: Max ids per lookup call.
        max_concurrent_lookups: Max lookup batches in flight.
        max_concurrent_writes: Max destination writes in flight.
        name_max_age: Seconds before a resolved name is refreshed.
        failure_cooldown: Seconds before a failed lookup is retried.
        retry_attempts: Attempts per batch for transient failures.
        retry_backoff: Backoff between retry attempts.
        retry_base_delay: Base delay for backoff in seconds.
        cleanup_orphans: Delete stale copy temp files while scanning.
        cache_file: JSON file for persisting resolved names (None = memory only).

    Environment Variables:
        TOONSETTINGS_BASE_DIRECTORY
        TOONSETTINGS_PROFILE_DIRECTORY
        TOONSETTINGS_ESI_BASE_URL
        TOONSETTINGS_REQUEST_TIMEOUT
        TOONSETTINGS_CACHE_FILE
        ... one per attribute
    """

    model_config = SettingsConfigDict(
        env_prefix="TOONSETTINGS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_directory: Path = Field(default_factory=default_settings_root)
    profile_directory: Path | None = None
    esi_base_url: str = DEFAULT_ESI_URL
    esi_datasource: str = DEFAULT_DATASOURCE
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: float = Field(default=10.0, gt=0)
    lookup_batch_size: int = Field(default=ESI_NAMES_BATCH_LIMIT, ge=1)
    max_concurrent_lookups: int = Field(default=4, ge=1)
    max_concurrent_writes: int = Field(default=4, ge=1)
    name_max_age: float = Field(default=DEFAULT_MAX_AGE, ge=0)
    failure_cooldown: float = Field(default=DEFAULT_FAILURE_COOLDOWN, ge=0)
    retry_attempts: int = Field(default=2, ge=1)
    retry_backoff: Literal["none", "linear", "exponential"] = "exponential"
    retry_base_delay: float = Field(default=0.5, ge=0)
    cleanup_orphans: bool = True
    cache_file: Path | None = None

    def resolver_config(self) -> ResolverConfig:
        """Build the resolver configuration from these settings."""
        return ResolverConfig(
            max_age=self.name_max_age,
            failure_cooldown=self.failure_cooldown,
            batch_size=self.lookup_batch_size,
            max_concurrent=self.max_concurrent_lookups,
            retry_policy=RetryPolicy(
                max_attempts=self.retry_attempts,
                backoff=self.retry_backoff,
                base_delay=self.retry_base_delay,
            ),
        )

    def build_scanner(self) -> FileScanner:
        return FileScanner(cleanup_orphans=self.cleanup_orphans)

    def build_engine(self) -> CopyEngine:
        return CopyEngine(max_concurrent=self.max_concurrent_writes)
