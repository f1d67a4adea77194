"""Background task scheduler for periodic cache maintenance."""

import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from bookstore.services.cache import CacheService
from bookstore.config import CACHE_SWEEP_INTERVAL

logger = logging.getLogger(__name__)


def purge_expired_cache(cache: CacheService) -> int:
    """Drop expired enrichment cache entries and log cache health."""
    purged = cache.purge_expired()
    metrics = cache.metrics
    logger.info(
        f"Purged {purged} expired cache entries, {cache.size()} remaining "
        f"(hit rate {metrics.hit_rate():.1f}%, {metrics.evictions} evictions, "
        f"{metrics.coalesced} coalesced lookups)"
    )
    return purged


def start_scheduler(cache: CacheService, interval: int = CACHE_SWEEP_INTERVAL) -> AsyncIOScheduler:
    """Start a scheduler bound to the running event loop."""
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        purge_expired_cache,
        trigger=IntervalTrigger(seconds=interval),
        args=[cache],
        id="purge_expired_cache",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(f"Scheduler started, sweeping cache every {interval}s")
    return scheduler


def stop_scheduler(scheduler: AsyncIOScheduler):
    """Stop the background scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
