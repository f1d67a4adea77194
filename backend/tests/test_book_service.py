"""Tests for book CRUD service."""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from bookstore.models.database import Base
from bookstore.models.book import Book
from bookstore.services.book_store import BookService


@pytest_asyncio.fixture
async def db_session():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def book_service():
    return BookService()


def _fields(**overrides):
    fields = {
        "title": "Things Fall Apart",
        "author": "Chinua Achebe",
        "isbn": "9780385474542",
        "published_date": "1958-06-17",
        "price": 4500.0,
        "stock": 12,
    }
    fields.update(overrides)
    return fields


@pytest.mark.asyncio
async def test_add_book(db_session, book_service):
    book = await book_service.add_book(db_session, **_fields())
    assert book.id
    assert book.title == "Things Fall Apart"
    assert book.source_currency == "NGN"
    assert book.updated_at


@pytest.mark.asyncio
async def test_get_book(db_session, book_service):
    created = await book_service.add_book(db_session, **_fields())
    book = await book_service.get_book(db_session, created.id)
    assert book is not None
    assert book.isbn == "9780385474542"


@pytest.mark.asyncio
async def test_get_book_missing(db_session, book_service):
    assert await book_service.get_book(db_session, "missing") is None


@pytest.mark.asyncio
async def test_list_books_sorted_by_title(db_session, book_service):
    await book_service.add_book(db_session, **_fields(title="Purple Hibiscus"))
    await book_service.add_book(db_session, **_fields(title="Half of a Yellow Sun"))
    books = await book_service.list_books(db_session)
    assert [b.title for b in books] == ["Half of a Yellow Sun", "Purple Hibiscus"]


@pytest.mark.asyncio
async def test_update_book(db_session, book_service):
    created = await book_service.add_book(db_session, **_fields())
    updated = await book_service.update_book(
        db_session, created.id, {"price": 5000.0, "stock": 3}
    )
    assert updated.price == 5000.0
    assert updated.stock == 3
    assert updated.title == "Things Fall Apart"


@pytest.mark.asyncio
async def test_update_missing_book(db_session, book_service):
    assert await book_service.update_book(db_session, "missing", {"stock": 1}) is None


@pytest.mark.asyncio
async def test_delete_book(db_session, book_service):
    created = await book_service.add_book(db_session, **_fields())
    assert await book_service.delete_book(db_session, created.id) is True
    assert await db_session.get(Book, created.id) is None
    assert await book_service.delete_book(db_session, created.id) is False
