"""Application configuration."""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
DB_PATH = BASE_DIR / "data" / "bookstore.db"
DATABASE_URL = os.getenv("DATABASE_URL") or f"sqlite+aiosqlite:///{DB_PATH}"

# Enrichment cache (in-memory, per process)
CACHE_TTL = int(os.getenv("CACHE_TTL", "600"))  # seconds
CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", "1024"))
CACHE_SWEEP_INTERVAL = int(os.getenv("CACHE_SWEEP_INTERVAL", "60"))  # seconds

# External providers
BOOK_API_URL = os.getenv("BOOK_API_URL", "https://api.example.com")
CURRENCY_API_URL = os.getenv("CURRENCY_API_URL", "https://api.example.com")
UPSTREAM_TIMEOUT = float(os.getenv("UPSTREAM_TIMEOUT", "5"))  # seconds

# Live update listeners
LISTENER_QUEUE_SIZE = int(os.getenv("LISTENER_QUEUE_SIZE", "100"))
LISTENER_SEND_TIMEOUT = float(os.getenv("LISTENER_SEND_TIMEOUT", "5"))  # seconds

DEFAULT_SOURCE_CURRENCY = "NGN"

# Ensure data directory exists (only needed for local SQLite, skip if DATABASE_URL is overridden)
if not os.getenv("DATABASE_URL"):
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
