import os

# Point the application engine at an in-memory database before bookstore.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
