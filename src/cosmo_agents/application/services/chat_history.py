"""
application.services.chat_history - Remote conversation persistence.

Mirrors transcript text turns to the backend history endpoint through an
explicit write-behind queue: record() never waits on the network, a single
background worker drains the queue in order, and flush() waits until every
queued write has been attempted.

Delivery is at-most-once. A failed write is logged and dropped — a broken
history endpoint must never break a conversation.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from cosmo_agents.domain.models import HistoryItem
from cosmo_agents.domain.ports import ContextStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _PendingWrite:
    session_id: str
    role: str
    content: str
    tools_used: Optional[list[str]] = None
    contact_id: Optional[str] = None


@dataclass
class HistoryStats:
    """Counters for writes handled by the worker."""
    delivered: int = 0
    dropped: int = 0


class ChatHistoryService:
    """Persists and retrieves conversation messages."""

    def __init__(self, store: ContextStore):
        self._store = store
        self._queue: Optional[asyncio.Queue[_PendingWrite]] = None
        self._worker: Optional[asyncio.Task] = None
        self.stats = HistoryStats()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def record(
        self,
        session_id: str,
        role: str,
        content: str,
        tools_used: Optional[list[str]] = None,
        contact_id: Optional[str] = None,
    ) -> None:
        """Queue one message for persistence and return immediately.

        Must be called from inside a running event loop.
        """
        self._ensure_worker()
        self._queue.put_nowait(_PendingWrite(
            session_id=session_id,
            role=role,
            content=content,
            tools_used=list(tools_used) if tools_used else None,
            contact_id=contact_id,
        ))

    async def flush(self) -> None:
        """Wait until every queued write has been attempted."""
        if self._queue is not None:
            await self._queue.join()

    async def aclose(self) -> None:
        """Flush pending writes and stop the background worker."""
        await self.flush()
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None
            self._queue = None

    def _ensure_worker(self) -> None:
        if self._queue is None:
            self._queue = asyncio.Queue()
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_event_loop().create_task(self._drain())

    async def _drain(self) -> None:
        while True:
            item = await self._queue.get()
            try:
                await self._store.save_message(
                    item.session_id,
                    item.role,
                    item.content,
                    contact_id=item.contact_id,
                    tools_used=item.tools_used,
                )
                self.stats.delivered += 1
            except Exception as e:
                self.stats.dropped += 1
                logger.warning(
                    "Failed to persist %s message for session %s (dropped): %s",
                    item.role, item.session_id, e,
                )
            finally:
                self._queue.task_done()

    # ------------------------------------------------------------------
    # Reads / deletes
    # ------------------------------------------------------------------

    async def load(self, session_id: str, limit: int = 20) -> list[HistoryItem]:
        """Load remote history, oldest first. Failures yield an empty list.

        Pending writes are flushed first so the rows include them.
        """
        await self.flush()
        try:
            rows = await self._store.get_history(session_id, limit)
        except Exception as e:
            logger.warning("Could not load history for session %s: %s", session_id, e)
            return []
        return [HistoryItem.from_api(r) for r in rows or [] if isinstance(r, dict)]

    async def clear(self, session_id: str) -> None:
        """Delete remote history after pending writes have been attempted.

        Flushing first keeps an in-flight write from landing after the delete.
        """
        await self.flush()
        try:
            await self._store.clear_history(session_id)
            logger.info("Cleared remote history for session %s", session_id)
        except Exception as e:
            logger.warning("Could not clear history for session %s: %s", session_id, e)
