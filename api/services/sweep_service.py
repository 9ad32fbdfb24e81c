"""
Background scheduler for the overdue sweep.

Runs OverdueSweep on a fixed interval inside the API process. Each run gets
its own DB session; the blocking sweep is pushed to a worker thread so the
event loop keeps serving requests. Runs never overlap.
"""

import asyncio
from typing import Callable, Optional

from sqlalchemy.orm import Session as DBSession

from api.config import SessionLocal
from api.services.progression_repository import SqlProgressionRepository
from api.utils.logger import configure_logging, log_request
from curriculum.core.clock import Clock, utc_now
from curriculum.sweep import OverdueSweep

logger = configure_logging()


def run_sweep_once(session_factory: Callable[[], DBSession] = SessionLocal, clock: Clock = utc_now) -> int:
    db = session_factory()
    try:
        with log_request(logger, "overdue sweep"):
            return OverdueSweep(SqlProgressionRepository(db), clock=clock).run()
    finally:
        db.close()


class SweepScheduler:
    def __init__(
        self,
        interval_seconds: float,
        session_factory: Callable[[], DBSession] = SessionLocal,
        clock: Clock = utc_now,
    ):
        self.interval_seconds = interval_seconds
        self.session_factory = session_factory
        self.clock = clock
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        logger.info("sweep scheduler start interval_s=%s", self.interval_seconds)
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("sweep scheduler stopped")

    async def tick(self) -> int:
        """Run one sweep unless one is already in flight; returns completions graded."""
        if self._lock.locked():
            logger.debug("sweep skipped: previous run still in flight")
            return 0
        async with self._lock:
            return await asyncio.to_thread(run_sweep_once, self.session_factory, self.clock)

    async def _loop(self) -> None:
        while True:
            try:
                await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception:
                # keep the schedule alive; the next tick retries
                logger.exception("sweep run failed")
            await asyncio.sleep(self.interval_seconds)
