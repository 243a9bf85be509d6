"""Resolver configuration models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

DEFAULT_MAX_AGE = 24 * 60 * 60.0
DEFAULT_FAILURE_COOLDOWN = 30.0


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Configuration for retrying transient lookup failures.

    Only network errors and retryable service statuses (5xx, 420, 429) are
    retried; "not found" and malformed payloads never are.
    """

    max_attempts: int = 2
    """Maximum attempts per batch (1 = no retry)."""

    backoff: Literal["none", "linear", "exponential"] = "exponential"
    """Backoff strategy between retries."""

    base_delay: float = 0.5
    """Base delay in seconds for backoff calculation."""


@dataclass(frozen=True, slots=True)
class ResolverConfig:
    """Configuration for IdentityResolver.

    Passed to the resolver at construction or built from ToonSettingsConfig.
    """

    max_age: float = DEFAULT_MAX_AGE
    """Seconds a resolved name stays fresh before it is looked up again."""

    failure_cooldown: float = DEFAULT_FAILURE_COOLDOWN
    """Seconds to wait before retrying an id whose last lookup failed. 0 = next pass."""

    batch_size: int = 1000
    """Upper bound on ids per lookup call (also capped by the transport)."""

    max_concurrent: int = 4
    """Max lookup batches in flight at once."""

    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    """Retry policy for transient transport failures."""

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {self.max_concurrent}")
