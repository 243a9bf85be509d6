"""Character name resolution with caching and graceful degradation.

Usage:
    resolver = IdentityResolver(EsiTransport(), cache=LocalIdentityCache())
    labels = await resolver.resolve_all({CharacterId(2112625428), CharacterId(90000001)})
    # {CharacterId(2112625428): "Some Pilot", CharacterId(90000001): "90000001"}

Labels fall back to the numeric id whenever a lookup fails; resolve_all()
never raises for network or service problems.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable, Mapping, Sequence

import tenacity

from toonsettings.core.identity import CharacterId
from toonsettings.resolution.models import ResolverConfig, RetryPolicy
from toonsettings.resolution.transport import LookupTransport, TransportError
from toonsettings.storage.local import LocalIdentityCache
from toonsettings.storage.models import FailureKind, IdentityRecord, ResolutionState
from toonsettings.storage.protocol import IdentityCache

logger = logging.getLogger(__name__)


def _is_transient(error: BaseException) -> bool:
    return isinstance(error, TransportError) and error.transient


def _chunk(ids: Sequence[CharacterId], size: int) -> list[list[CharacterId]]:
    return [list(ids[i : i + size]) for i in range(0, len(ids), size)]


class IdentityResolver:
    """Resolves character ids to display labels through a cache and a transport.

    Stale or unknown ids are batched, looked up concurrently (bounded by
    ``config.max_concurrent``) and written back to the cache. Concurrent
    resolve_all() calls asking for the same id share one in-flight lookup,
    so each cache entry has a single writer at a time.

    Args:
        transport: Remote lookup implementation.
        cache: Identity cache (fresh LocalIdentityCache if None).
        config: Resolver configuration.
        clock: Time source for record timestamps (POSIX seconds).
    """

    def __init__(
        self,
        transport: LookupTransport,
        cache: IdentityCache | None = None,
        config: ResolverConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._transport = transport
        self._cache = cache if cache is not None else LocalIdentityCache(clock=clock)
        self._config = config or ResolverConfig()
        self._clock = clock
        self._inflight: dict[CharacterId, asyncio.Future[None]] = {}

    @property
    def cache(self) -> IdentityCache:
        return self._cache

    @property
    def config(self) -> ResolverConfig:
        return self._config

    def record_for(self, character_id: CharacterId) -> IdentityRecord | None:
        """Current cached record for an id, without network I/O."""
        return self._cache.get(character_id)

    def label_for(self, character_id: CharacterId) -> str:
        """Current display label for an id, without network I/O."""
        record = self._cache.get(character_id)
        return record.label if record is not None else str(character_id)

    async def resolve_all(self, ids: Iterable[CharacterId]) -> dict[CharacterId, str]:
        """Resolve labels for every requested id.

        Args:
            ids: Character ids to label (duplicates are ignored).

        Returns:
            Exactly one label per distinct id: the resolved name, or the
            numeric id when resolution failed.
        """
        requested = set(ids)
        now = self._clock()

        pending: list[CharacterId] = []
        waiting: list[asyncio.Future[None]] = []
        loop = asyncio.get_running_loop()

        for character_id in requested:
            record = self._cache.get(character_id)
            if record is None:
                self._cache.put(IdentityRecord.unresolved(character_id))
            elif not self._needs_lookup(record, now):
                continue

            inflight = self._inflight.get(character_id)
            if inflight is not None:
                waiting.append(inflight)
                continue

            self._inflight[character_id] = loop.create_future()
            pending.append(character_id)

        if pending:
            batch_size = min(self._config.batch_size, self._transport.max_batch_size)
            batches = _chunk(sorted(pending), batch_size)
            logger.debug(
                "Resolving %d character ids in %d batch(es)", len(pending), len(batches)
            )
            semaphore = asyncio.Semaphore(self._config.max_concurrent)
            await asyncio.gather(*(self._resolve_batch(batch, semaphore) for batch in batches))

        if waiting:
            await asyncio.gather(*waiting)

        return {character_id: self.label_for(character_id) for character_id in requested}

    def _needs_lookup(self, record: IdentityRecord, now: float) -> bool:
        """Decide whether a cached record should be looked up again."""
        if record.state is ResolutionState.FAILED:
            cooldown = self._config.failure_cooldown
            if cooldown > 0 and record.attempted_at is not None:
                if now - record.attempted_at < cooldown:
                    return False
        return self._cache.is_stale(record, self._config.max_age)

    async def _resolve_batch(self, batch: list[CharacterId], semaphore: asyncio.Semaphore) -> None:
        try:
            async with semaphore:
                try:
                    response = await self._lookup_with_retry(batch)
                except TransportError as e:
                    self._record_failure(batch, e)
                else:
                    self._record_response(batch, response)
        finally:
            for character_id in batch:
                future = self._inflight.pop(character_id, None)
                if future is not None and not future.done():
                    future.set_result(None)

    async def _lookup_with_retry(
        self, batch: list[CharacterId]
    ) -> Mapping[CharacterId, str | None]:
        """Run one transport lookup, retrying transient failures per policy."""
        policy = self._config.retry_policy

        if policy.max_attempts <= 1:
            return await self._transport.lookup(batch)

        retryer = self._build_retryer(policy)
        async for attempt in retryer:
            with attempt:
                return await self._transport.lookup(batch)

        raise RuntimeError("retry loop exited without a result")  # pragma: no cover

    def _build_retryer(self, policy: RetryPolicy) -> tenacity.AsyncRetrying:
        """Build a tenacity retryer from RetryPolicy configuration."""
        stop = tenacity.stop_after_attempt(policy.max_attempts)

        wait: tenacity.wait.wait_base
        if policy.backoff == "exponential":
            wait = tenacity.wait_exponential(multiplier=policy.base_delay, min=policy.base_delay)
        elif policy.backoff == "linear":
            wait = tenacity.wait_incrementing(start=policy.base_delay, increment=policy.base_delay)
        else:
            wait = tenacity.wait_none()

        return tenacity.AsyncRetrying(
            stop=stop,
            wait=wait,
            retry=tenacity.retry_if_exception(_is_transient),
            before_sleep=tenacity.before_sleep_log(logger, logging.INFO),
            reraise=True,
        )

    def _record_response(
        self, batch: list[CharacterId], response: Mapping[CharacterId, str | None]
    ) -> None:
        now = self._clock()
        resolved = 0
        for character_id in batch:
            if character_id not in response:
                logger.warning("Lookup response omitted character %s", character_id)
                self._cache.put(
                    IdentityRecord.failed(character_id, FailureKind.MALFORMED_RESPONSE, now)
                )
                continue

            name = response[character_id]
            if name is None:
                logger.info("Character %s not found by lookup service", character_id)
                self._cache.put(IdentityRecord.failed(character_id, FailureKind.NOT_FOUND, now))
            elif not isinstance(name, str) or not name.strip():
                logger.warning("Lookup returned an unusable name for %s: %r", character_id, name)
                self._cache.put(
                    IdentityRecord.failed(character_id, FailureKind.MALFORMED_RESPONSE, now)
                )
            else:
                self._cache.put(IdentityRecord.resolved(character_id, name, now))
                resolved += 1

        logger.debug("Resolved %d/%d character names in batch", resolved, len(batch))

    def _record_failure(self, batch: list[CharacterId], error: TransportError) -> None:
        now = self._clock()
        status = getattr(error, "status", None)
        logger.warning(
            "Name lookup failed for %d character(s) (%s): %s",
            len(batch),
            error.kind.value,
            error,
        )
        for character_id in batch:
            self._cache.put(IdentityRecord.failed(character_id, error.kind, now, status=status))
