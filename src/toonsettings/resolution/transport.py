"""Remote character lookup transports.

LookupTransport is the seam between the resolver and the network.
EsiTransport talks to EVE's public ESI API with httpx.

Usage:
    async with EsiTransport() as transport:
        names = await transport.lookup([CharacterId(2112625428)])
        # {CharacterId(2112625428): "Some Pilot"} or {...: None} if not found
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx

from toonsettings.core.identity import CharacterId
from toonsettings.errors import ToonSettingsError
from toonsettings.storage.models import FailureKind

if TYPE_CHECKING:
    from toonsettings.config import ToonSettingsConfig

logger = logging.getLogger(__name__)

DEFAULT_ESI_URL = "https://esi.evetech.net/latest"
DEFAULT_DATASOURCE = "tranquility"
DEFAULT_USER_AGENT = "toonsettings/1.0.0"
ESI_NAMES_BATCH_LIMIT = 1000

# Statuses worth retrying: ESI error-limit (420), rate limit, server errors
RETRYABLE_STATUSES = frozenset({420, 429})


class TransportError(ToonSettingsError):
    """Base for lookup failures. Absorbed by the resolver, never shown to callers."""

    kind: FailureKind = FailureKind.NETWORK_UNAVAILABLE
    transient: bool = False


class NetworkUnavailable(TransportError):
    """Service unreachable: DNS, connect, timeout or dropped connection."""

    kind = FailureKind.NETWORK_UNAVAILABLE
    transient = True


class ServiceError(TransportError):
    """Service answered with a non-success HTTP status."""

    kind = FailureKind.SERVICE_ERROR

    def __init__(self, status: int, message: str = "") -> None:
        super().__init__(f"HTTP {status}" + (f": {message}" if message else ""))
        self.status = status
        self.transient = status >= 500 or status in RETRYABLE_STATUSES


class MalformedResponse(TransportError):
    """Service answered but the payload could not be understood."""

    kind = FailureKind.MALFORMED_RESPONSE


@runtime_checkable
class LookupTransport(Protocol):
    """Protocol for resolving character ids to names in bulk.

    Implementations must answer with a mapping keyed by the requested ids so
    callers never rely on response order. A value of None means the service
    explicitly reported the id as unknown.
    """

    max_batch_size: int
    """Largest number of ids accepted by one lookup() call."""

    async def lookup(self, ids: Sequence[CharacterId]) -> Mapping[CharacterId, str | None]:
        """Look up names for up to max_batch_size ids.

        Raises:
            NetworkUnavailable: Service could not be reached.
            ServiceError: Service returned an error status.
            MalformedResponse: Payload could not be decoded.
        """
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        ...


class EsiTransport:
    """LookupTransport backed by the EVE Swagger Interface.

    Bulk lookups go through ``POST /universe/names/``. ESI rejects the whole
    batch with 404 when any id is unknown, so that case falls back to
    ``GET /characters/{id}/`` per id to tell found from not-found.

    Args:
        base_url: ESI root including version segment.
        datasource: ESI datasource (server) name.
        timeout: Per-request timeout in seconds.
        user_agent: User-Agent header sent with every request.
        client: Pre-built AsyncClient (tests, shared pools). Not closed by aclose().
        fallback_concurrency: Parallel per-id requests during the 404 fallback.
    """

    max_batch_size = ESI_NAMES_BATCH_LIMIT

    def __init__(
        self,
        base_url: str = DEFAULT_ESI_URL,
        datasource: str = DEFAULT_DATASOURCE,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        client: httpx.AsyncClient | None = None,
        fallback_concurrency: int = 4,
    ) -> None:
        self._params = {"datasource": datasource}
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"User-Agent": user_agent, "Accept": "application/json"},
        )
        self._fallback_concurrency = fallback_concurrency

    @classmethod
    def from_settings(cls, settings: ToonSettingsConfig) -> EsiTransport:
        """Create a transport from package configuration."""
        return cls(
            base_url=settings.esi_base_url,
            datasource=settings.esi_datasource,
            timeout=settings.request_timeout,
            user_agent=settings.user_agent,
        )

    async def __aenter__(self) -> EsiTransport:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def lookup(self, ids: Sequence[CharacterId]) -> Mapping[CharacterId, str | None]:
        if not ids:
            return {}
        if len(ids) > self.max_batch_size:
            raise ValueError(f"At most {self.max_batch_size} ids per lookup, got {len(ids)}")

        response = await self._send("POST", "/universe/names/", json=[cid.value for cid in ids])
        if response.status_code == 404:
            logger.debug("Bulk name lookup rejected a batch of %d, resolving one by one", len(ids))
            return await self._lookup_individually(ids)
        _raise_for_status(response)

        payload = _decode_json(response)
        if not isinstance(payload, list):
            raise MalformedResponse(f"Expected a list from /universe/names/, got {type(payload)}")

        names: dict[int, str] = {}
        for item in payload:
            if not isinstance(item, dict):
                raise MalformedResponse(f"Unexpected entry in name lookup: {item!r}")
            entity_id, name = item.get("id"), item.get("name")
            if not isinstance(entity_id, int) or not isinstance(name, str):
                raise MalformedResponse(f"Unexpected entry in name lookup: {item!r}")
            # Same id space is shared with corporations, alliances, etc.
            if item.get("category") == "character":
                names[entity_id] = name

        return {cid: names.get(cid.value) for cid in ids}

    async def _lookup_individually(
        self, ids: Sequence[CharacterId]
    ) -> dict[CharacterId, str | None]:
        semaphore = asyncio.Semaphore(self._fallback_concurrency)

        async def limited(cid: CharacterId) -> str | None:
            async with semaphore:
                return await self._lookup_one(cid)

        names = await asyncio.gather(*(limited(cid) for cid in ids))
        return dict(zip(ids, names))

    async def _lookup_one(self, character_id: CharacterId) -> str | None:
        response = await self._send("GET", f"/characters/{character_id.value}/")
        if response.status_code == 404:
            return None
        _raise_for_status(response)

        payload = _decode_json(response)
        name = payload.get("name") if isinstance(payload, dict) else None
        if not isinstance(name, str):
            raise MalformedResponse(f"No character name in response for {character_id}")
        return name

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, url, params=self._params, **kwargs)
        except httpx.TimeoutException as e:
            raise NetworkUnavailable(f"Timed out contacting ESI: {e}") from e
        except httpx.DecodingError as e:
            raise MalformedResponse(f"Undecodable response body from ESI: {e}") from e
        except httpx.RequestError as e:
            raise NetworkUnavailable(f"Cannot reach ESI: {e}") from e


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    message = ""
    try:
        body = response.json()
        if isinstance(body, dict):
            message = str(body.get("error", ""))
    except ValueError:
        logger.debug("HTTP %d response from ESI has no JSON error body", response.status_code)
    raise ServiceError(response.status_code, message)


def _decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise MalformedResponse(f"Invalid JSON from ESI: {e}") from e
