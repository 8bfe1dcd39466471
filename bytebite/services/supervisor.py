"""Supervised background syncs.

Each refresh runs as its own asyncio task. The caller keeps a handle to
cancel it or wait for its outcome, and every outcome is also published on the
supervisor's ``outcomes`` queue.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from bytebite.errors import BytebiteError, SyncError
from bytebite.models.schemas import Feed
from bytebite.services.sync import SyncEngine, SyncResult

logger = logging.getLogger(__name__)


@dataclass
class SyncOutcome:
    feed_id: int
    result: Optional[SyncResult] = None
    error: Optional[BytebiteError] = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.result is not None


class SyncHandle:
    """Handle on one running sync."""

    def __init__(self, feed_id: int, task: "asyncio.Task[SyncOutcome]"):
        self.feed_id = feed_id
        self._task = task

    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> bool:
        return self._task.cancel()

    async def wait(self) -> SyncOutcome:
        await asyncio.wait({self._task})
        if self._task.cancelled():
            return SyncOutcome(feed_id=self.feed_id, cancelled=True)
        return self._task.result()


class SyncSupervisor:
    """Starts, tracks and cancels sync tasks."""

    def __init__(self, engine: SyncEngine):
        self.engine = engine
        self.outcomes: "asyncio.Queue[SyncOutcome]" = asyncio.Queue()
        self._tasks: Dict[int, "asyncio.Task[SyncOutcome]"] = {}
        self._counter = 0

    @property
    def pending(self) -> int:
        return sum(1 for task in self._tasks.values() if not task.done())

    def submit(self, feed: Feed) -> SyncHandle:
        """Start a background sync for ``feed``."""
        self._counter += 1
        key = self._counter
        task = asyncio.create_task(self._run(feed), name=f"sync-feed-{feed.id}-{key}")
        self._tasks[key] = task
        task.add_done_callback(lambda t: self._tasks.pop(key, None))
        logger.debug(f"Dispatched sync for feed {feed.id}")
        return SyncHandle(feed.id, task)

    async def _run(self, feed: Feed) -> SyncOutcome:
        try:
            result = await self.engine.sync(feed)
            outcome = SyncOutcome(feed_id=feed.id, result=result)
        except asyncio.CancelledError:
            logger.info(f"Sync for feed {feed.id} cancelled")
            self.outcomes.put_nowait(SyncOutcome(feed_id=feed.id, cancelled=True))
            raise
        except BytebiteError as e:
            if e.recoverable:
                logger.warning(f"Sync for feed {feed.id} failed: {e}")
            else:
                logger.error(f"Sync for feed {feed.id} aborted: {e}", exc_info=True)
            outcome = SyncOutcome(feed_id=feed.id, error=e)
        except Exception as e:
            logger.error(f"Sync for feed {feed.id} crashed: {e}", exc_info=True)
            error = SyncError(f"Unexpected {type(e).__name__} while syncing feed {feed.id}: {e}")
            error.__cause__ = e
            outcome = SyncOutcome(feed_id=feed.id, error=error)

        self.outcomes.put_nowait(outcome)
        return outcome

    async def wait_all(self) -> List[SyncOutcome]:
        """Wait for every sync currently running."""
        tasks = list(self._tasks.values())
        if not tasks:
            return []
        await asyncio.wait(tasks)
        outcomes = []
        for task in tasks:
            if task.cancelled():
                continue
            outcomes.append(task.result())
        return outcomes

    async def cancel_all(self) -> None:
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.wait(tasks)
