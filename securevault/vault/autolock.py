"""AutoLockMonitor — Locks an idle vault session."""
import asyncio
import logging
from contextlib import suppress
from typing import Optional

from .session_vault import VaultSession

logger = logging.getLogger("securevault.vault")


class AutoLockMonitor:
    """Polls a VaultSession and locks it after ``auto_lock_timeout`` idle seconds.

    Activity reports are coalesced to at most one per ``activity_interval``
    so high-frequency input events do not churn the activity clock.
    Idle time is always measured on the wall clock when a check runs, so a
    process that was suspended past the timeout locks on its first check
    after waking, whether or not a poll fired on schedule.
    """

    def __init__(
        self,
        session: VaultSession,
        poll_interval: Optional[float] = None,
        activity_interval: Optional[float] = None,
    ):
        config = session.config
        self._session = session
        self._clock = session.clock
        self._poll_interval = (
            config.poll_interval if poll_interval is None else poll_interval
        )
        self._activity_interval = (
            config.activity_interval if activity_interval is None else activity_interval
        )
        self._last_report: Optional[float] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def report_activity(self) -> bool:
        """Report user activity.

        Returns:
            True if the activity clock was updated, False if the report was
            coalesced into a recent one or the vault is locked.
        """
        if not self._session.is_unlocked:
            return False
        now = self._clock()
        if (
            self._last_report is not None
            and now - self._last_report < self._activity_interval
        ):
            return False
        self._last_report = now
        self._session.touch(now)
        return True

    def check(self) -> bool:
        """Run one idle check. Returns True if the vault was locked."""
        return self._session.check_auto_lock(self._clock())

    def resume(self) -> bool:
        """Handle wake-up after the process was suspended or backgrounded.

        Checks immediately; if the vault survived, the wake-up counts as
        activity.

        Returns:
            True if the vault was locked.
        """
        if self.check():
            return True
        self._last_report = None
        self.report_activity()
        return False

    async def _run(self) -> None:
        logger.debug("Auto-lock monitor started (poll every %ss)", self._poll_interval)
        while self._session.is_unlocked:
            await asyncio.sleep(self._poll_interval)
            if self.check():
                break
        logger.debug("Auto-lock monitor stopped")

    def start(self) -> None:
        """Start polling on the running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        """Stop polling."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
