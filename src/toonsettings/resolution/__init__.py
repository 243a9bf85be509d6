"""Character name resolution: resolver, transports and configuration."""

from toonsettings.resolution.models import ResolverConfig, RetryPolicy
from toonsettings.resolution.resolver import IdentityResolver
from toonsettings.resolution.transport import (
    EsiTransport,
    LookupTransport,
    MalformedResponse,
    NetworkUnavailable,
    ServiceError,
    TransportError,
)

__all__ = [
    # Resolver
    "IdentityResolver",
    "ResolverConfig",
    "RetryPolicy",
    # Transports
    "LookupTransport",
    "EsiTransport",
    # Failures
    "TransportError",
    "NetworkUnavailable",
    "ServiceError",
    "MalformedResponse",
]
