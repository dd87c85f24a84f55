"""Tests for the single-writer save queue."""
import asyncio

import pytest

from securevault.exceptions import LockedStateError, VaultStateError
from securevault.vault import VaultSession, VaultWriter


PASSWORD = "correct horse battery staple"


async def unlocked(config, clock) -> VaultSession:
    session = VaultSession(config=config, clock=clock)
    await session.create_vault(PASSWORD)
    return session


class RecordingStore:
    """Collects records the writer hands over for persistence."""

    def __init__(self):
        self.records = []

    async def __call__(self, record):
        self.records.append(record)


class TestVaultWriter:
    """Tests for VaultWriter."""

    @pytest.mark.asyncio
    async def test_rapid_requests_coalesce(self, config, clock):
        """Several quick requests become one write of the newest plaintext."""
        session = await unlocked(config, clock)
        store = RecordingStore()
        writer = VaultWriter(session, store=store)

        writer.request_save(b"one")
        writer.request_save(b"two")
        writer.request_save(b"three")
        assert writer.pending
        await writer.flush()

        assert writer.writes == 1
        assert store.records == [session.record]
        session.lock_vault()
        assert await session.unlock_vault(PASSWORD) == b"three"

    @pytest.mark.asyncio
    async def test_sequential_requests(self, config, clock):
        """Requests separated by a flush are each written."""
        session = await unlocked(config, clock)
        writer = VaultWriter(session)
        writer.request_save(b"first")
        await writer.flush()
        writer.request_save(b"second")
        await writer.flush()
        assert writer.writes == 2
        assert writer.pending is False

    @pytest.mark.asyncio
    async def test_request_while_locked(self, config, clock):
        session = await unlocked(config, clock)
        session.lock_vault()
        writer = VaultWriter(session)
        with pytest.raises(LockedStateError):
            writer.request_save(b"data")

    @pytest.mark.asyncio
    async def test_lock_before_write_surfaces_error(self, config, clock):
        """A save that finds the vault locked is reported by flush."""
        session = await unlocked(config, clock)
        store = RecordingStore()
        writer = VaultWriter(session, store=store, delay=0.05)
        writer.request_save(b"data")
        session.lock_vault()
        with pytest.raises(LockedStateError):
            await writer.flush()
        assert writer.writes == 0
        assert store.records == []

    @pytest.mark.asyncio
    async def test_flush_without_requests(self, config, clock):
        session = await unlocked(config, clock)
        writer = VaultWriter(session)
        await writer.flush()
        assert writer.writes == 0

    @pytest.mark.asyncio
    async def test_request_during_write(self, config, clock):
        """A request arriving mid-write is written after it, not dropped."""
        session = await unlocked(config, clock)
        writer = VaultWriter(session, delay=0)
        writer.request_save(b"first")
        await asyncio.sleep(0)
        writer.request_save(b"second")
        await writer.flush()
        session.lock_vault()
        assert await session.unlock_vault(PASSWORD) == b"second"

    @pytest.mark.asyncio
    async def test_close_writes_queued_save(self, config, clock):
        """Closing writes the queued plaintext before stopping."""
        session = await unlocked(config, clock)
        store = RecordingStore()
        writer = VaultWriter(session, store=store)
        writer.request_save(b"last words")
        await writer.close()

        assert writer.closed
        assert writer.writes == 1
        assert writer.pending is False
        assert store.records == [session.record]
        session.lock_vault()
        assert await session.unlock_vault(PASSWORD) == b"last words"

    @pytest.mark.asyncio
    async def test_request_after_close(self, config, clock):
        """A closed writer refuses new saves."""
        session = await unlocked(config, clock)
        writer = VaultWriter(session)
        await writer.close()
        with pytest.raises(VaultStateError):
            writer.request_save(b"data")
        assert writer.writes == 0

    @pytest.mark.asyncio
    async def test_close_twice(self, config, clock):
        session = await unlocked(config, clock)
        writer = VaultWriter(session)
        writer.request_save(b"data")
        await writer.close()
        await writer.close()
        assert writer.writes == 1

    @pytest.mark.asyncio
    async def test_close_surfaces_save_error(self, config, clock):
        """A failed queued save is reported by close, which still stops."""
        session = await unlocked(config, clock)
        writer = VaultWriter(session, delay=0.05)
        writer.request_save(b"data")
        session.lock_vault()
        with pytest.raises(LockedStateError):
            await writer.close()
        assert writer.closed
        await session.unlock_vault(PASSWORD)
        with pytest.raises(VaultStateError):
            writer.request_save(b"again")
