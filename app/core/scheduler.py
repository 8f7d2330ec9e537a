from __future__ import annotations

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.services.result_cache import ResultCache

log = logging.getLogger("dashboard.cache")


class CacheSweeper:
    """周期清理结果缓存中的过期条目（与 get 时的惰性淘汰互补）。"""

    JOB_ID = "result-cache-sweep"

    def __init__(self, cache: ResultCache, interval_seconds: int = 60):
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be > 0, got {interval_seconds!r}")
        self.cache = cache
        self.interval_seconds = interval_seconds
        self._scheduler: Optional[AsyncIOScheduler] = None

    def _sweep(self) -> None:
        self.cache.sweep()

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        """需在事件循环内调用（FastAPI lifespan 中）。"""
        if self.running:
            return
        self._scheduler = AsyncIOScheduler(timezone="UTC")
        self._scheduler.add_job(
            self._sweep,
            "interval",
            seconds=self.interval_seconds,
            id=self.JOB_ID,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        log.info("cache sweeper started: every %ss", self.interval_seconds)

    def shutdown(self) -> None:
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        log.info("cache sweeper stopped")
