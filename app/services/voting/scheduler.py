"""Deadline scheduler - runs the expired-deadline sweep periodically."""

import asyncio
import contextlib
import time
from typing import Any

from loguru import logger

from app.services.voting.completion import CompletionDetector
from settings import DEADLINE_CHECK_INTERVAL, MIN_SWEEP_GAP


class DeadlineScheduler:
    """Periodic runner for `CompletionDetector.check_expired_deadlines`.

    Runs closer together than `min_gap` seconds are skipped, so a manual
    trigger right after a scheduled run is a no-op.
    """

    def __init__(
        self,
        detector: CompletionDetector,
        interval: float = DEADLINE_CHECK_INTERVAL,
        min_gap: float = MIN_SWEEP_GAP,
    ):
        self._detector = detector
        self._interval = interval
        self._min_gap = min_gap
        self._last_run: float | None = None
        self._runs = 0
        self._closed_total = 0
        self._stop = asyncio.Event()
        self._running = False

    async def run_once(self, force: bool = False) -> list[str]:
        """One sweep. Returns ids closed by it (empty if skipped)."""
        if not force and self._last_run is not None:
            elapsed = time.monotonic() - self._last_run
            if elapsed < self._min_gap:
                logger.debug("Deadline sweep skipped: last run {:.1f}s ago", elapsed)
                return []

        self._last_run = time.monotonic()
        closed = await self._detector.check_expired_deadlines()
        self._runs += 1
        self._closed_total += len(closed)
        return closed

    async def run_forever(self) -> None:
        """Sweep every `interval` seconds until `stop()`."""
        self._running = True
        self._stop.clear()
        logger.info("Deadline scheduler started (every {}s)", self._interval)
        try:
            while not self._stop.is_set():
                try:
                    await self.run_once()
                except Exception as e:
                    logger.error("Deadline sweep failed: {}", e)
                with contextlib.suppress(TimeoutError):
                    await asyncio.wait_for(self._stop.wait(), timeout=self._interval)
        finally:
            self._running = False
            logger.info("Deadline scheduler stopped after {} runs", self._runs)

    def upcoming(self, hours: float = 24) -> list[dict]:
        """Decisions whose deadline the sweep will reach within `hours`."""
        upcoming = self._detector.upcoming_deadlines(hours)
        logger.debug("{} deadlines in the next {}h", len(upcoming), hours)
        return upcoming

    def stop(self) -> None:
        self._stop.set()

    def status(self) -> dict[str, Any]:
        return {
            "running": self._running,
            "interval": self._interval,
            "runs": self._runs,
            "closed_total": self._closed_total,
            "seconds_since_last_run": (
                round(time.monotonic() - self._last_run, 1) if self._last_run is not None else None
            ),
        }
