"""Book API routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.models.database import get_db
from bookstore.api.deps import get_gateway, get_hub
from bookstore.api.schemas import (
    BookCreateRequest,
    BookUpdateRequest,
    StockPriceUpdateRequest,
    BookResponse,
    ConvertedPriceResponse,
)
from bookstore.services.book_store import book_service
from bookstore.services.broadcast import BroadcastHub, EventType, UpdateEvent
from bookstore.services.enrichment import EnrichmentGateway
from bookstore.services.errors import InvalidCurrency, UpstreamUnavailable
from bookstore.services.pricing import convert_price

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/books", tags=["books"])


def _notify(hub: BroadcastHub, event_type: EventType, book: BookResponse) -> None:
    delivered = hub.broadcast(
        UpdateEvent(event_type=event_type, payload=book.model_dump(mode="json"))
    )
    logger.info(f"Broadcast {event_type.value} for book {book.id} to {delivered} listeners")


async def _get_book_or_404(db: AsyncSession, book_id: str):
    book = await book_service.get_book(db, book_id)
    if book is None:
        raise HTTPException(status_code=404, detail="Book not found")
    return book


@router.post("", response_model=BookResponse, status_code=201)
async def create_book(
    req: BookCreateRequest,
    db: AsyncSession = Depends(get_db),
    hub: BroadcastHub = Depends(get_hub),
):
    fields = req.model_dump()
    fields["source_currency"] = req.source_currency.upper()
    book = await book_service.add_book(db, **fields)
    response = BookResponse.model_validate(book)
    _notify(hub, EventType.CREATE, response)
    return response


@router.get("", response_model=list[BookResponse])
async def list_books(db: AsyncSession = Depends(get_db)):
    books = await book_service.list_books(db)
    return [BookResponse.model_validate(b) for b in books]


@router.get("/{book_id}", response_model=BookResponse)
async def get_book(book_id: str, db: AsyncSession = Depends(get_db)):
    book = await _get_book_or_404(db, book_id)
    return BookResponse.model_validate(book)


@router.put("/sp/{book_id}", response_model=BookResponse)
async def update_stock_and_price(
    book_id: str,
    req: StockPriceUpdateRequest,
    db: AsyncSession = Depends(get_db),
    hub: BroadcastHub = Depends(get_hub),
):
    """Update the stock and price of a book and notify live listeners."""
    book = await book_service.update_book(db, book_id, req.model_dump())
    if book is None:
        raise HTTPException(status_code=404, detail="Book not found")
    response = BookResponse.model_validate(book)
    _notify(hub, EventType.UPDATE, response)
    return response


@router.put("/{book_id}", response_model=BookResponse)
async def update_book(
    book_id: str,
    req: BookUpdateRequest,
    db: AsyncSession = Depends(get_db),
    hub: BroadcastHub = Depends(get_hub),
):
    # genre is the only nullable column; null elsewhere means "leave unchanged"
    fields = {
        name: value
        for name, value in req.model_dump(exclude_unset=True).items()
        if value is not None or name == "genre"
    }
    if "source_currency" in fields:
        fields["source_currency"] = fields["source_currency"].upper()
    book = await book_service.update_book(db, book_id, fields)
    if book is None:
        raise HTTPException(status_code=404, detail="Book not found")
    response = BookResponse.model_validate(book)
    _notify(hub, EventType.UPDATE, response)
    return response


@router.delete("/{book_id}")
async def delete_book(
    book_id: str,
    db: AsyncSession = Depends(get_db),
    hub: BroadcastHub = Depends(get_hub),
):
    book = await _get_book_or_404(db, book_id)
    snapshot = BookResponse.model_validate(book)
    await book_service.delete_book(db, book_id)
    _notify(hub, EventType.DELETE, snapshot)
    return {"id": book_id, "status": "deleted"}


@router.get("/{book_id}/external")
async def get_external_details(
    book_id: str,
    db: AsyncSession = Depends(get_db),
    gateway: EnrichmentGateway = Depends(get_gateway),
):
    """Return the stored book merged with metadata from the ISBN service."""
    book = await _get_book_or_404(db, book_id)
    try:
        details = await gateway.fetch_book_details(book.isbn)
    except UpstreamUnavailable:
        raise HTTPException(status_code=503, detail="Book details service unavailable")
    return {**BookResponse.model_validate(book).model_dump(), **details}


@router.get("/{book_id}/convert/{currency}", response_model=ConvertedPriceResponse)
async def convert_book_price(
    book_id: str,
    currency: str,
    db: AsyncSession = Depends(get_db),
    gateway: EnrichmentGateway = Depends(get_gateway),
):
    book = await _get_book_or_404(db, book_id)
    try:
        rate = await gateway.fetch_conversion_rate(book.source_currency, currency)
    except InvalidCurrency:
        raise HTTPException(status_code=400, detail="Invalid currency")
    except UpstreamUnavailable:
        raise HTTPException(status_code=503, detail="Currency service unavailable")

    return ConvertedPriceResponse(
        **BookResponse.model_validate(book).model_dump(),
        converted_price=convert_price(book.price, rate),
        currency=currency.upper(),
    )
