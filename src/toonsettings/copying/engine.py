"""Source-to-many settings replication with atomic per-destination writes.

Usage:
    engine = CopyEngine()
    outcomes = await engine.copy(CopyRequest(source=main, destinations=[alt1, alt2]))
    print(summarize(outcomes).message)

Each destination is written to a temporary file in its own directory and
renamed over the original, so a destination is always either fully old or
fully new. Destinations succeed or fail independently; there is no rollback
across destinations.
"""

from __future__ import annotations

import asyncio
import errno
import logging
import os
import stat
import tempfile
from pathlib import Path

from toonsettings.core.identity.codec import TEMP_SUFFIX, temp_prefix
from toonsettings.copying.models import CopyFailureReason, CopyOutcome, CopyRequest, summarize
from toonsettings.errors import ToonSettingsError
from toonsettings.scanning.models import SettingsFile

logger = logging.getLogger(__name__)


class SourceUnreadable(ToonSettingsError):
    """Raised when the copy source cannot be read. Aborts the whole request."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot read source settings file {str(path)!r}: {reason}")
        self.path = path
        self.reason = reason


def _read_source(path: Path) -> bytes:
    """Read the full source once; the bytes are shared by every destination."""
    try:
        with open(path, "rb") as handle:
            return handle.read()
    except FileNotFoundError as e:
        raise SourceUnreadable(path, "file does not exist") from e
    except IsADirectoryError as e:
        raise SourceUnreadable(path, "not a regular file") from e
    except PermissionError as e:
        raise SourceUnreadable(path, "permission denied") from e
    except OSError as e:
        raise SourceUnreadable(path, e.strerror or str(e)) from e


def _same_file(source: Path, destination: Path) -> bool:
    try:
        if source.resolve() == destination.resolve():
            return True
        return os.path.samefile(source, destination)
    except OSError:
        # Unreachable destinations are reported by the write itself
        return False


def _classify(error: OSError, creating: bool = False) -> CopyFailureReason:
    """Map an OS error to a failure reason.

    Args:
        error: The error raised while writing.
        creating: True if raised while creating the temp file in the destination directory.
    """
    if isinstance(error, PermissionError) or error.errno == errno.EROFS:
        return CopyFailureReason.PERMISSION_DENIED
    if creating and (
        isinstance(error, (FileNotFoundError, NotADirectoryError))
        or error.errno in (errno.ENAMETOOLONG, errno.ELOOP)
    ):
        return CopyFailureReason.DESTINATION_UNREACHABLE
    return CopyFailureReason.WRITE_FAILED


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not remove temp file %s: %s", path, e)


def _write_destination(data: bytes, destination: SettingsFile) -> CopyOutcome:
    """Atomically replace one destination with ``data``. Never raises OSError."""
    target = destination.path

    try:
        read_only = target.exists() and not os.access(target, os.W_OK)
    except OSError as e:
        reason = _classify(e, creating=True)
        if reason is CopyFailureReason.WRITE_FAILED:
            reason = CopyFailureReason.DESTINATION_UNREACHABLE
        return CopyOutcome.failure(destination, reason, str(e))
    if read_only:
        return CopyOutcome.failure(
            destination, CopyFailureReason.PERMISSION_DENIED, "destination file is read-only"
        )

    try:
        fd, temp_name = tempfile.mkstemp(
            prefix=temp_prefix(target.name), suffix=TEMP_SUFFIX, dir=target.parent
        )
    except OSError as e:
        return CopyOutcome.failure(destination, _classify(e, creating=True), str(e))

    temp_path = Path(temp_name)
    committed = False
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        try:
            os.chmod(temp_path, stat.S_IMODE(os.stat(target).st_mode))
        except FileNotFoundError:
            pass
        os.replace(temp_path, target)
        committed = True
    except OSError as e:
        return CopyOutcome.failure(destination, _classify(e), str(e))
    finally:
        if not committed:
            _discard(temp_path)

    return CopyOutcome.success(destination)


class CopyEngine:
    """Replicates one settings file onto many.

    The engine takes no file locks. If the game client is running it may
    rewrite destinations after the copy; hosts should show
    GAME_CLIENT_ADVISORY before copying.

    Args:
        max_concurrent: Max destination writes running at once.
    """

    def __init__(self, max_concurrent: int = 4) -> None:
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {max_concurrent}")
        self._max_concurrent = max_concurrent

    async def copy(self, request: CopyRequest) -> list[CopyOutcome]:
        """Copy the request's source onto each destination.

        Args:
            request: Source and ordered destinations.

        Returns:
            One outcome per destination, in the request's destination order.

        Raises:
            SourceUnreadable: If the source cannot be read. No destination is touched.
        """
        source_path = request.source.path
        data = await asyncio.to_thread(_read_source, source_path)
        logger.info(
            "Copying %s (%d bytes) to %d destination(s)",
            source_path.name,
            len(data),
            len(request.destinations),
        )

        semaphore = asyncio.Semaphore(self._max_concurrent)

        async def copy_one(destination: SettingsFile) -> CopyOutcome:
            if _same_file(source_path, destination.path):
                return CopyOutcome.failure(
                    destination, CopyFailureReason.SAME_FILE, "destination is the source file"
                )
            async with semaphore:
                return await asyncio.to_thread(_write_destination, data, destination)

        outcomes = list(await asyncio.gather(*(copy_one(d) for d in request.destinations)))

        for outcome in outcomes:
            if outcome.ok:
                logger.info("Copied settings to %s", outcome.destination)
            else:
                logger.warning(
                    "Copy to %s failed (%s): %s",
                    outcome.destination,
                    outcome.reason.value,  # type: ignore[union-attr]
                    outcome.detail,
                )
        logger.info(summarize(outcomes).message)
        return outcomes
