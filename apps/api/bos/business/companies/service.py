from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from fastapi import HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bos import audit, events
from bos.business.companies.models import Company
from bos.business.companies.schemas import DEFAULT_PAGE_SIZE, CompanyCreate, CompanyRead, CompanyUpdate
from bos.business.quotes.models import Quote
from bos.platform.numbering import BusinessIdAllocator, OptionCounterStore
from bos.platform.options.schemas import OptionKey


@dataclass(slots=True)
class CompanyService:
    clock: Callable[[], date] = date.today

    def create_company(self, session: Session, payload: CompanyCreate, *, actor_user_id: str) -> CompanyRead:
        data = payload.model_dump(mode="python")
        if not data.get("customer_number"):
            allocator = BusinessIdAllocator(OptionCounterStore(session), clock=self.clock)
            data["customer_number"] = allocator.allocate(OptionKey.CUSTOMER_ID_COUNTER, OptionKey.CUSTOMER_ID_SCHEMA)

        company = Company(**data)
        session.add(company)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="customer number already exists")
        session.refresh(company)

        result = CompanyRead.model_validate(company)
        audit.record(
            actor_user_id=actor_user_id,
            entity_type="company",
            entity_id=str(company.id),
            action="company.created",
            before=None,
            after=result.model_dump(mode="json"),
        )
        events.publish(
            {
                "event_type": "company.created",
                "company_id": str(company.id),
                "customer_number": company.customer_number,
            }
        )
        return result

    def get_company(self, session: Session, company_id: uuid.UUID) -> CompanyRead:
        return CompanyRead.model_validate(self._get(session, company_id))

    def list_companies(
        self,
        session: Session,
        *,
        search: str | None = None,
        page: int = 1,
        take: int = DEFAULT_PAGE_SIZE,
    ) -> list[CompanyRead]:
        stmt = select(Company)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    Company.customer_number.ilike(pattern),
                    Company.external_id.ilike(pattern),
                    Company.name.ilike(pattern),
                    Company.name2.ilike(pattern),
                    Company.tax_id.ilike(pattern),
                    Company.vat_id.ilike(pattern),
                )
            )
        stmt = stmt.order_by(Company.customer_number.asc()).offset((page - 1) * take).limit(take)
        return [CompanyRead.model_validate(row) for row in session.scalars(stmt).all()]

    def update_company(
        self,
        session: Session,
        company_id: uuid.UUID,
        payload: CompanyUpdate,
        *,
        actor_user_id: str,
    ) -> CompanyRead:
        company = self._get(session, company_id)
        changes = payload.model_dump(mode="python", exclude_unset=True)
        if "customer_number" in changes and changes["customer_number"] is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="customer_number cannot be null",
            )
        if not changes:
            return CompanyRead.model_validate(company)

        before = CompanyRead.model_validate(company).model_dump(mode="json")
        for field_name, value in changes.items():
            setattr(company, field_name, value)
        session.add(company)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="customer number already exists")
        session.refresh(company)

        result = CompanyRead.model_validate(company)
        audit.record(
            actor_user_id=actor_user_id,
            entity_type="company",
            entity_id=str(company.id),
            action="company.updated",
            before=before,
            after=result.model_dump(mode="json"),
        )
        events.publish(
            {
                "event_type": "company.updated",
                "company_id": str(company.id),
                "customer_number": company.customer_number,
                "fields": sorted(changes),
            }
        )
        return result

    def delete_company(self, session: Session, company_id: uuid.UUID, *, actor_user_id: str) -> dict[str, str]:
        company = self._get(session, company_id)
        if session.scalar(select(Quote.id).where(Quote.company_id == company_id).limit(1)) is not None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="company has quotes")

        before = CompanyRead.model_validate(company).model_dump(mode="json")
        session.delete(company)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="company has quotes")

        audit.record(
            actor_user_id=actor_user_id,
            entity_type="company",
            entity_id=str(company_id),
            action="company.deleted",
            before=before,
            after=None,
        )
        events.publish(
            {
                "event_type": "company.deleted",
                "company_id": str(company_id),
                "customer_number": before["customer_number"],
            }
        )
        return {"message": "OK"}

    @staticmethod
    def _get(session: Session, company_id: uuid.UUID) -> Company:
        company = session.get(Company, company_id)
        if company is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="company not found")
        return company


company_service = CompanyService()
