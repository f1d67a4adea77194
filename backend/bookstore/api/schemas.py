"""Pydantic schemas for API request/response."""

from pydantic import BaseModel, ConfigDict, Field

from bookstore.config import DEFAULT_SOURCE_CURRENCY

ISBN_PATTERN = r"^(?:\d{9}X|\d{10}|\d{13})$"
CURRENCY_PATTERN = r"^[A-Za-z]{3}$"


class BookCreateRequest(BaseModel):
    title: str = Field(min_length=1)
    author: str = Field(min_length=1)
    genre: str | None = None
    isbn: str = Field(pattern=ISBN_PATTERN)
    published_date: str
    price: float = Field(ge=0)
    source_currency: str = Field(DEFAULT_SOURCE_CURRENCY, pattern=CURRENCY_PATTERN)
    stock: int = Field(ge=0)


class BookUpdateRequest(BaseModel):
    title: str | None = Field(None, min_length=1)
    author: str | None = Field(None, min_length=1)
    genre: str | None = None
    isbn: str | None = Field(None, pattern=ISBN_PATTERN)
    published_date: str | None = None
    price: float | None = Field(None, ge=0)
    source_currency: str | None = Field(None, pattern=CURRENCY_PATTERN)
    stock: int | None = Field(None, ge=0)


class StockPriceUpdateRequest(BaseModel):
    price: float = Field(ge=0)
    stock: int = Field(ge=0)


class BookResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    author: str
    genre: str | None = None
    isbn: str
    published_date: str
    price: float
    source_currency: str
    stock: int
    updated_at: str


class ConvertedPriceResponse(BookResponse):
    converted_price: float
    currency: str
