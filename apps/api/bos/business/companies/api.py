from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from bos.business.companies.schemas import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, CompanyCreate, CompanyRead, CompanyUpdate
from bos.business.companies.service import company_service
from bos.core.auth import AuthUser, require_permissions
from bos.core.database import get_db


router = APIRouter(prefix="/api/companies", tags=["companies"])


@router.post("", response_model=CompanyRead, status_code=status.HTTP_201_CREATED)
def create_company(
    payload: CompanyCreate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_permissions("contact.all.create")),
) -> CompanyRead:
    return company_service.create_company(db, payload, actor_user_id=user.sub)


@router.get("", response_model=list[CompanyRead])
def list_companies(
    search: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    take: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    _: AuthUser = Depends(require_permissions("contact.all.view")),
) -> list[CompanyRead]:
    return company_service.list_companies(db, search=search, page=page, take=take)


@router.get("/{company_id}", response_model=CompanyRead)
def get_company(
    company_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: AuthUser = Depends(require_permissions("contact.all.view")),
) -> CompanyRead:
    return company_service.get_company(db, company_id)


@router.patch("/{company_id}", response_model=CompanyRead)
def update_company(
    company_id: uuid.UUID,
    payload: CompanyUpdate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_permissions("contact.all.create")),
) -> CompanyRead:
    return company_service.update_company(db, company_id, payload, actor_user_id=user.sub)


@router.delete("/{company_id}")
def delete_company(
    company_id: uuid.UUID,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_permissions("contact.all.delete")),
) -> dict[str, str]:
    return company_service.delete_company(db, company_id, actor_user_id=user.sub)
