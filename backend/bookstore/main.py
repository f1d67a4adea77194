"""FastAPI application entry point."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from bookstore.config import (
    BOOK_API_URL,
    CACHE_MAX_ENTRIES,
    CACHE_TTL,
    CURRENCY_API_URL,
    LISTENER_QUEUE_SIZE,
    LISTENER_SEND_TIMEOUT,
    UPSTREAM_TIMEOUT,
)
from bookstore.models.database import init_db, close_db
from bookstore.api.books import router as books_router
from bookstore.api.live import router as live_router
from bookstore.services.broadcast import BroadcastHub
from bookstore.services.cache import CacheService
from bookstore.services.enrichment import EnrichmentGateway
from bookstore.services.providers import BookMetadataProvider, CurrencyRateProvider
from bookstore.tasks.scheduler import start_scheduler, stop_scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    http_client = httpx.AsyncClient(timeout=UPSTREAM_TIMEOUT)
    cache = CacheService(default_ttl=CACHE_TTL, max_entries=CACHE_MAX_ENTRIES)
    app.state.cache = cache
    app.state.gateway = EnrichmentGateway(
        cache,
        BookMetadataProvider(http_client, BOOK_API_URL),
        CurrencyRateProvider(http_client, CURRENCY_API_URL),
        timeout=UPSTREAM_TIMEOUT,
    )
    app.state.hub = BroadcastHub(
        max_pending=LISTENER_QUEUE_SIZE, send_timeout=LISTENER_SEND_TIMEOUT
    )
    scheduler = start_scheduler(cache)
    yield
    stop_scheduler(scheduler)
    await app.state.hub.close()
    await http_client.aclose()
    await close_db()


app = FastAPI(title="Bookstore Live", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(books_router)
app.include_router(live_router)


@app.get("/api/health")
async def health_check():
    return {"status": "ok"}
