"""Tests for the cache maintenance scheduler."""

import asyncio
import pytest
from unittest.mock import patch
from bookstore.services.cache import CacheService
from bookstore.tasks.scheduler import purge_expired_cache, start_scheduler, stop_scheduler


def test_purge_expired_cache():
    now = [0.0]
    cache = CacheService(default_ttl=10, clock=lambda: now[0])
    cache.set("9780134190440", {"title": "Go"})
    cache.set("USD_EUR", 0.92, ttl=100)
    now[0] = 50.0

    assert purge_expired_cache(cache) == 1
    assert cache.size() == 1
    assert cache.get("USD_EUR") == 0.92


def test_purge_logs_cache_health(caplog):
    cache = CacheService(default_ttl=10)
    with caplog.at_level("INFO", logger="bookstore.tasks.scheduler"):
        purge_expired_cache(cache)
    assert "Purged 0 expired cache entries" in caplog.text


@pytest.mark.asyncio
async def test_start_and_stop_scheduler():
    cache = CacheService()
    scheduler = start_scheduler(cache, interval=3600)
    try:
        job = scheduler.get_job("purge_expired_cache")
        assert job is not None
        assert job.args == (cache,)
    finally:
        stop_scheduler(scheduler)
    # AsyncIOScheduler finishes shutting down on the next loop iteration
    await asyncio.sleep(0)
    assert not scheduler.running


@pytest.mark.asyncio
async def test_stop_scheduler_when_not_running():
    cache = CacheService()
    scheduler = start_scheduler(cache, interval=3600)
    stop_scheduler(scheduler)
    await asyncio.sleep(0)
    with patch.object(scheduler, "shutdown") as shutdown:
        stop_scheduler(scheduler)
    shutdown.assert_not_called()
