from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler

from news_api.utils.log import app_logger


class Clock(ABC):
    """Time source plus one-shot wake-ups, keyed so a newer wake-up replaces an older one."""

    @abstractmethod
    def now(self) -> datetime:
        ...

    @abstractmethod
    def after(self, delay: timedelta, callback: Callable[[], None], key: str) -> None:
        """Run `callback` once `delay` has elapsed.

        A pending wake-up registered under the same `key` is replaced.
        """
        ...

    @abstractmethod
    def cancel(self, key: str) -> None:
        ...

    def start(self) -> None:
        pass

    def shutdown(self) -> None:
        pass


class SchedulerClock(Clock):
    """Wall-clock time with wake-ups run on an APScheduler background thread.

    Jobs live in the in-memory job store; callbacks are bound methods and
    nothing is meant to outlive the process.
    """

    JOB_PREFIX = "wakeup:"

    def __init__(self, scheduler: Optional[BackgroundScheduler] = None):
        self._scheduler = scheduler or BackgroundScheduler(timezone=timezone.utc)

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def after(self, delay: timedelta, callback: Callable[[], None], key: str) -> None:
        run_date = self.now() + max(delay, timedelta(0))
        self._scheduler.add_job(
            callback,
            'date',
            run_date=run_date,
            id=f"{self.JOB_PREFIX}{key}",
            replace_existing=True,
            misfire_grace_time=None,
        )

    def cancel(self, key: str) -> None:
        try:
            self._scheduler.remove_job(f"{self.JOB_PREFIX}{key}")
        except JobLookupError:
            pass

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()
            app_logger.info("scheduler.started")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=True)
            app_logger.info("scheduler.shutdown")
