import pytest

from app.core.scheduler import CacheSweeper
from app.services.result_cache import ResultCache


class _Clock:
    t = 0.0

    def __call__(self) -> float:
        return self.t


def test_sweep_removes_only_expired():
    clock = _Clock()
    cache = ResultCache(default_ttl=300, clock=clock)
    cache.set("stock_levels_all", 1, ttl=10)
    cache.set("summary_metrics_all", 2, ttl=100)

    clock.t = 50
    CacheSweeper(cache)._sweep()
    assert cache.size == 1
    assert cache.get("summary_metrics_all") == 2


def test_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        CacheSweeper(ResultCache(), interval_seconds=0)


@pytest.mark.asyncio
async def test_start_and_shutdown_inside_loop():
    sweeper = CacheSweeper(ResultCache(), interval_seconds=5)
    sweeper.start()
    try:
        assert sweeper.running
        # 重复 start 不会重复注册
        sweeper.start()
        assert len(sweeper._scheduler.get_jobs()) == 1
    finally:
        sweeper.shutdown()
    assert not sweeper.running
    sweeper.shutdown()
