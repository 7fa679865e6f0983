"""
Periodic queue maintenance: the minute tick (active-hours refresh and
display push) and the daily rollover.
"""
import asyncio
import logging
from datetime import datetime
from typing import Optional

from checkin_queue.core.clock import Clock
from checkin_queue.services.queue_service import QueueService

logger = logging.getLogger(__name__)


class QueueScheduler:
    """
    Cancellable ticking task driving a QueueService.

    tick() holds all the logic and takes the instant explicitly, so tests
    can advance simulated time without waiting. Missed ticks are not
    replayed.
    """

    def __init__(self, service: QueueService, clock: Optional[Clock] = None, interval_seconds: float = 60):
        self.service = service
        self.clock = clock or service.clock
        self.interval_seconds = interval_seconds
        self._stop_event: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self, now: Optional[datetime] = None) -> bool:
        """
        Run whatever is due at the given instant.

        Returns:
            True if the daily rollover fired
        """
        now = now or self.clock()
        rolled = False
        if now.date() > self.service.current_day:
            self.daily_tick(now)
            rolled = True
        self.minute_tick(now)
        return rolled

    def minute_tick(self, now: datetime) -> None:
        self.service.refresh_active_status(now)
        self.service.publish_display()

    def daily_tick(self, now: datetime) -> None:
        logger.info(f"[Scheduler] Day changed to {now.date()}, rolling over {self.service.current_day}")
        self.service.roll_over(now)

    async def start(self) -> None:
        if self.running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run())
        logger.info(f"[Scheduler] Started, ticking every {self.interval_seconds:g}s")

    async def stop(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
        if self._task is not None:
            try:
                await asyncio.wait_for(self._task, timeout=5)
            except asyncio.TimeoutError:
                self._task.cancel()
            finally:
                self._task = None
        logger.info("[Scheduler] Stopped")

    async def _run(self) -> None:
        assert self._stop_event is not None

        while not self._stop_event.is_set():
            try:
                await asyncio.to_thread(self.tick)
            except Exception as e:
                logger.error(f"[Scheduler] Tick failed: {e}", exc_info=True)
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                continue
