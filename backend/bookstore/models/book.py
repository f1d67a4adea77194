"""Book model."""

import uuid
from datetime import datetime
from sqlalchemy import String, Float, Integer
from sqlalchemy.orm import Mapped, mapped_column
from bookstore.config import DEFAULT_SOURCE_CURRENCY
from bookstore.models.database import Base


class Book(Base):
    __tablename__ = "book"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    title: Mapped[str] = mapped_column(String(200))
    author: Mapped[str] = mapped_column(String(200))
    genre: Mapped[str | None] = mapped_column(String(50), nullable=True)
    isbn: Mapped[str] = mapped_column(String(13), index=True)
    published_date: Mapped[str] = mapped_column(String(10))  # "YYYY-MM-DD"
    price: Mapped[float] = mapped_column(Float)
    source_currency: Mapped[str] = mapped_column(
        String(3), default=DEFAULT_SOURCE_CURRENCY
    )
    stock: Mapped[int] = mapped_column(Integer)
    updated_at: Mapped[str] = mapped_column(
        String(30),
        default=lambda: datetime.now().isoformat(),
        onupdate=lambda: datetime.now().isoformat(),
    )
