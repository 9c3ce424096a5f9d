from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from bos.business.quotes.schemas import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    QuoteCreate,
    QuoteRead,
    QuoteSortField,
    QuoteStatus,
    QuoteUpdate,
    SortOrder,
)
from bos.business.quotes.service import quote_service
from bos.core.auth import AuthUser, require_permissions
from bos.core.database import get_db


router = APIRouter(prefix="/api/quotes", tags=["quotes"])


@router.post("", response_model=QuoteRead, status_code=status.HTTP_201_CREATED)
def create_quote(
    payload: QuoteCreate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_permissions("quote.all.create")),
) -> QuoteRead:
    return quote_service.create_quote(db, payload, actor_user_id=user.sub)


@router.get("", response_model=list[QuoteRead])
def list_quotes(
    company_id: uuid.UUID | None = Query(default=None),
    status_filter: QuoteStatus | None = Query(default=None, alias="status"),
    owner_id: str | None = Query(default=None),
    quote_number: str | None = Query(default=None),
    search: str | None = Query(default=None),
    sort_by: QuoteSortField = Query(default="quote_date"),
    sort_order: SortOrder = Query(default="desc"),
    page: int = Query(default=1, ge=1),
    take: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    _: AuthUser = Depends(require_permissions("quote.all.view")),
) -> list[QuoteRead]:
    return quote_service.list_quotes(
        db,
        company_id=company_id,
        status_filter=status_filter,
        owner_id=owner_id,
        quote_number=quote_number,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        take=take,
    )


@router.get("/{quote_id}", response_model=QuoteRead)
def get_quote(
    quote_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: AuthUser = Depends(require_permissions("quote.all.view")),
) -> QuoteRead:
    return quote_service.get_quote(db, quote_id)


@router.patch("/{quote_id}", response_model=QuoteRead)
def update_quote(
    quote_id: uuid.UUID,
    payload: QuoteUpdate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_permissions("quote.all.edit")),
) -> QuoteRead:
    return quote_service.update_quote(db, quote_id, payload, actor_user_id=user.sub)


@router.delete("/{quote_id}")
def delete_quote(
    quote_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_permissions("quote.all.delete")),
) -> dict[str, str]:
    return quote_service.delete_quote(db, quote_id, actor_user_id=user.sub)
