"""APScheduler-based background runner for search index rebuilds.

Triggers are fire-and-forget: the caller gets nothing back and the rebuild
runs on a scheduler thread. Triggers inside the debounce window collapse into
one job, and a trigger arriving while a rebuild is running results in exactly
one follow-up rebuild instead of a second concurrent one.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

logger = logging.getLogger(__name__)

REBUILD_JOB_ID = "search-index-rebuild"


class RebuildScheduler:
    """Runs `rebuild` off the caller's thread with single-flight semantics."""

    def __init__(
        self,
        rebuild: Callable[[], object],
        *,
        debounce: timedelta = timedelta(seconds=3),
    ) -> None:
        self._rebuild = rebuild
        self._debounce = debounce
        self._scheduler = BackgroundScheduler(timezone="UTC")
        self._started = False
        self._start_lock = threading.Lock()

        self._lock = threading.Lock()
        self._scheduled = False
        self._running = False
        self._rerun = False
        self._idle = threading.Event()
        self._idle.set()

    def start(self) -> None:
        """Start the underlying scheduler if not already started."""
        with self._start_lock:
            if not self._started:
                self._scheduler.start(paused=False)
                self._started = True

    def shutdown(self, *, wait: bool = True) -> None:
        """Shut down the scheduler."""
        with self._start_lock:
            if self._started:
                self._scheduler.shutdown(wait=wait)
                self._started = False

    @property
    def running(self) -> bool:
        return self._running

    def trigger(self) -> None:
        """Schedule a rebuild and return immediately."""
        self.start()
        with self._lock:
            self._scheduled = True
            self._idle.clear()
        run_date = datetime.now(timezone.utc) + self._debounce
        try:
            self._scheduler.add_job(
                self._run,
                trigger=DateTrigger(run_date=run_date, timezone="UTC"),
                id=REBUILD_JOB_ID,
                replace_existing=True,
                # the single-flight guard below makes extra instances return at once
                max_instances=8,
                misfire_grace_time=None,
            )
        except Exception:
            with self._lock:
                self._scheduled = False
                if not self._running:
                    self._idle.set()
            raise

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until no rebuild is scheduled or running. Returns False on timeout."""
        return self._idle.wait(timeout)

    def _run(self) -> None:
        with self._lock:
            self._scheduled = False
            if self._running:
                self._rerun = True
                return
            self._running = True

        while True:
            try:
                self._rebuild()
            except Exception:
                logger.exception("Background search index rebuild failed")
            with self._lock:
                if self._rerun:
                    self._rerun = False
                    continue
                self._running = False
                if not self._scheduled:
                    self._idle.set()
                return
