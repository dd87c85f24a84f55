"""
VaultWriter — Single-writer save queue for a VaultSession.

Rapid successive save requests are coalesced: only the newest plaintext is
kept while a write is pending, and at most one write is in flight at a time.
After each save the new record is handed to an optional ``store`` coroutine,
which is where the caller persists it. ``close()`` writes whatever is still
queued and then refuses further requests.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

from ..exceptions import LockedStateError, VaultStateError
from .record import VaultRecord
from .session_vault import VaultSession

logger = logging.getLogger("securevault.vault")

StoreCallback = Callable[[VaultRecord], Awaitable[None]]


class VaultWriter:
    """Serializes and coalesces ``save_vault`` calls for one session."""

    def __init__(
        self,
        session: VaultSession,
        store: Optional[StoreCallback] = None,
        delay: Optional[float] = None,
    ):
        self._session = session
        self._store = store
        self._delay = session.config.save_delay if delay is None else delay
        self._pending: Optional[bytes] = None
        self._task: Optional[asyncio.Task] = None
        self._error: Optional[Exception] = None
        self._closed = False
        self.writes = 0

    @property
    def pending(self) -> bool:
        return self._pending is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def request_save(self, plaintext: bytes) -> None:
        """Queue a save, superseding any queued plaintext not yet written.

        Raises:
            LockedStateError: If the vault is locked.
            VaultStateError: If the writer has been closed.
        """
        if self._closed:
            raise VaultStateError("Vault writer is closed")
        if not self._session.is_unlocked:
            raise LockedStateError("Cannot save while the vault is locked")
        self._pending = plaintext
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        while self._pending is not None:
            if self._delay:
                await asyncio.sleep(self._delay)
            plaintext, self._pending = self._pending, None
            try:
                record = await self._session.save_vault(plaintext)
                if self._store is not None:
                    await self._store(record)
            except Exception as err:
                logger.error("Vault save failed: %s", err)
                self._error = err
                continue
            self.writes += 1

    async def flush(self) -> None:
        """Wait until every queued save has been written.

        Raises:
            Exception: The last error raised by a queued save, if any.
        """
        while self._task is not None and not self._task.done():
            await self._task
        if self._error is not None:
            err, self._error = self._error, None
            raise err

    async def close(self) -> None:
        """Write any queued save, then stop accepting requests.

        Safe to call more than once.

        Raises:
            Exception: The last error raised by a queued save, if any.
        """
        self._closed = True
        try:
            await self.flush()
        finally:
            task, self._task = self._task, None
            if task is not None and not task.done():
                task.cancel()
            logger.debug("Vault writer closed")
