from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from bos import audit, events
from bos.business.companies.models import Company
from bos.business.quotes.calculator import calculate_item_totals, calculate_quote_totals
from bos.business.quotes.models import Quote, QuoteItem
from bos.business.quotes.schemas import (
    DEFAULT_PAGE_SIZE,
    QuoteCreate,
    QuoteItemCreate,
    QuoteRead,
    QuoteSortField,
    QuoteUpdate,
    SortOrder,
)
from bos.platform.numbering import BusinessIdAllocator, OptionCounterStore
from bos.platform.options.schemas import OptionKey


NON_NULLABLE_UPDATE_FIELDS = {"status", "quote_date", "company_id", "quote_items"}

QUOTE_SORT_COLUMNS = {
    "created_at": Quote.created_at,
    "updated_at": Quote.updated_at,
    "quote_date": Quote.quote_date,
    "quote_number": Quote.quote_number,
    "total": Quote.total,
}


@dataclass(slots=True)
class QuoteService:
    clock: Callable[[], date] = date.today

    def create_quote(self, session: Session, payload: QuoteCreate, *, actor_user_id: str) -> QuoteRead:
        self._require_company(session, payload.company_id)

        data = payload.model_dump(mode="python", exclude={"quote_items"})
        items = self._build_items(payload.quote_items)
        allocator = BusinessIdAllocator(OptionCounterStore(session), clock=self.clock)
        data["quote_number"] = allocator.allocate(OptionKey.QUOTE_ID_COUNTER, OptionKey.QUOTE_ID_SCHEMA)

        quote = Quote(**data, items=items)
        self._apply_totals(quote)
        session.add(quote)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="quote number already exists")
        session.refresh(quote)

        result = QuoteRead.model_validate(quote)
        audit.record(
            actor_user_id=actor_user_id,
            entity_type="quote",
            entity_id=str(quote.id),
            action="quote.created",
            before=None,
            after=self._totals_snapshot(quote),
        )
        events.publish(
            {
                "event_type": "quote.created",
                "quote_id": str(quote.id),
                "quote_number": quote.quote_number,
                "company_id": str(quote.company_id),
                "total": str(quote.total),
            }
        )
        return result

    def get_quote(self, session: Session, quote_id: uuid.UUID) -> QuoteRead:
        return QuoteRead.model_validate(self._get(session, quote_id))

    def list_quotes(
        self,
        session: Session,
        *,
        company_id: uuid.UUID | None = None,
        status_filter: str | None = None,
        owner_id: str | None = None,
        quote_number: str | None = None,
        search: str | None = None,
        sort_by: QuoteSortField = "quote_date",
        sort_order: SortOrder = "desc",
        page: int = 1,
        take: int = DEFAULT_PAGE_SIZE,
    ) -> list[QuoteRead]:
        """List quotes one page at a time.

        ``search`` matches the quote number, the title and the company's name or
        customer number, case-insensitively. Rows tied on ``sort_by`` fall back
        to newest first.
        """

        stmt = select(Quote).options(selectinload(Quote.items))
        if company_id is not None:
            stmt = stmt.where(Quote.company_id == company_id)
        if status_filter is not None:
            stmt = stmt.where(Quote.status == status_filter)
        if owner_id is not None:
            stmt = stmt.where(Quote.owner_id == owner_id)
        if quote_number is not None:
            stmt = stmt.where(Quote.quote_number == quote_number)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.join(Company, Company.id == Quote.company_id).where(
                or_(
                    Quote.quote_number.ilike(pattern),
                    Quote.title.ilike(pattern),
                    Company.name.ilike(pattern),
                    Company.customer_number.ilike(pattern),
                )
            )

        column = QUOTE_SORT_COLUMNS[sort_by]
        primary = column.asc() if sort_order == "asc" else column.desc()
        stmt = stmt.order_by(primary, Quote.created_at.desc(), Quote.id).offset((page - 1) * take).limit(take)
        return [QuoteRead.model_validate(row) for row in session.scalars(stmt).all()]

    def update_quote(
        self,
        session: Session,
        quote_id: uuid.UUID,
        payload: QuoteUpdate,
        *,
        actor_user_id: str,
    ) -> QuoteRead:
        quote = self._get(session, quote_id)
        before = self._totals_snapshot(quote)
        changes = payload.model_dump(mode="python", exclude_unset=True)

        for field_name in NON_NULLABLE_UPDATE_FIELDS:
            if field_name in changes and changes[field_name] is None:
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail=f"{field_name} cannot be null",
                )

        if "company_id" in changes and changes["company_id"] != quote.company_id:
            self._require_company(session, changes["company_id"])

        item_payloads = changes.pop("quote_items", None)
        for field_name, value in changes.items():
            setattr(quote, field_name, value)

        if item_payloads is not None:
            quote.items.clear()
            session.flush()
            quote.items.extend(self._build_items(payload.quote_items or []))
            self._apply_totals(quote)

        session.add(quote)
        session.commit()
        session.refresh(quote)

        result = QuoteRead.model_validate(quote)
        audit.record(
            actor_user_id=actor_user_id,
            entity_type="quote",
            entity_id=str(quote.id),
            action="quote.updated",
            before=before,
            after=self._totals_snapshot(quote),
        )
        events.publish(
            {
                "event_type": "quote.updated",
                "quote_id": str(quote.id),
                "quote_number": quote.quote_number,
                "fields": sorted(payload.model_fields_set),
            }
        )
        return result

    def delete_quote(self, session: Session, quote_id: uuid.UUID, *, actor_user_id: str) -> dict[str, str]:
        quote = self._get(session, quote_id)
        before = self._totals_snapshot(quote)
        quote_number = quote.quote_number
        session.delete(quote)
        session.commit()

        audit.record(
            actor_user_id=actor_user_id,
            entity_type="quote",
            entity_id=str(quote_id),
            action="quote.deleted",
            before=before,
            after=None,
        )
        events.publish({"event_type": "quote.deleted", "quote_id": str(quote_id), "quote_number": quote_number})
        return {"message": "OK"}

    def recalculate_quote_totals(self, session: Session, quote_id: uuid.UUID) -> bool:
        """Recompute every derived amount from the stored quantities, prices and rates.

        Returns True when any stored figure differed and was rewritten. Running
        it twice leaves the second call with nothing to change.
        """

        quote = self._get(session, quote_id)
        changed = False
        for item in quote.items:
            totals = calculate_item_totals(item.quantity, item.price, item.tax_rate)
            if (item.subtotal, item.tax, item.total) != (totals.subtotal, totals.tax, totals.total):
                item.subtotal, item.tax, item.total = totals.subtotal, totals.tax, totals.total
                changed = True

        totals = calculate_quote_totals(quote.items)
        if (quote.subtotal, quote.tax, quote.total) != (totals.subtotal, totals.tax, totals.total):
            quote.subtotal, quote.tax, quote.total = totals.subtotal, totals.tax, totals.total
            changed = True

        if changed:
            session.add(quote)
            session.commit()
        return changed

    def _get(self, session: Session, quote_id: uuid.UUID) -> Quote:
        quote = session.scalar(select(Quote).where(Quote.id == quote_id).options(selectinload(Quote.items)))
        if quote is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="quote not found")
        return quote

    @staticmethod
    def _require_company(session: Session, company_id: uuid.UUID) -> None:
        if session.get(Company, company_id) is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="company not found")

    @staticmethod
    def _build_items(payloads: Iterable[QuoteItemCreate]) -> list[QuoteItem]:
        items: list[QuoteItem] = []
        for payload in payloads:
            totals = calculate_item_totals(payload.quantity, payload.price, payload.tax_rate)
            items.append(
                QuoteItem(
                    **payload.model_dump(mode="python"),
                    subtotal=totals.subtotal,
                    tax=totals.tax,
                    total=totals.total,
                )
            )
        return items

    @staticmethod
    def _apply_totals(quote: Quote) -> None:
        totals = calculate_quote_totals(quote.items)
        quote.subtotal = totals.subtotal
        quote.tax = totals.tax
        quote.total = totals.total

    @staticmethod
    def _totals_snapshot(quote: Quote) -> dict[str, Any]:
        return {
            "quote_number": quote.quote_number,
            "status": quote.status,
            "subtotal": str(quote.subtotal),
            "tax": str(quote.tax),
            "total": str(quote.total),
            "item_count": len(quote.items),
        }


quote_service = QuoteService()
