"""Book CRUD service."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from bookstore.models.book import Book


class BookService:
    """Manages book records in the database."""

    async def add_book(self, session: AsyncSession, **fields: Any) -> Book:
        book = Book(**fields)
        session.add(book)
        await session.commit()
        await session.refresh(book)
        return book

    async def get_book(self, session: AsyncSession, book_id: str) -> Book | None:
        return await session.get(Book, book_id)

    async def list_books(self, session: AsyncSession) -> list[Book]:
        result = await session.execute(select(Book).order_by(Book.title))
        return list(result.scalars().all())

    async def update_book(
        self, session: AsyncSession, book_id: str, fields: dict[str, Any]
    ) -> Book | None:
        """Apply ``fields`` to the book. Returns None if it does not exist."""
        book = await session.get(Book, book_id)
        if book is None:
            return None
        for name, value in fields.items():
            setattr(book, name, value)
        await session.commit()
        await session.refresh(book)
        return book

    async def delete_book(self, session: AsyncSession, book_id: str) -> bool:
        book = await session.get(Book, book_id)
        if book is None:
            return False
        await session.delete(book)
        await session.commit()
        return True


book_service = BookService()
