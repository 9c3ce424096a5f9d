from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bos.core.auth import AuthUser, require_permissions
from bos.core.database import get_db
from bos.platform.options.schemas import OptionKey, OptionRead, OptionUpdate
from bos.platform.options.service import option_service


router = APIRouter(prefix="/api/options", tags=["options"])


@router.get("", response_model=list[OptionRead])
def list_options(
    db: Session = Depends(get_db),
    _: AuthUser = Depends(require_permissions("option.all.view")),
) -> list[OptionRead]:
    return option_service.list_options(db)


@router.get("/{key}", response_model=OptionRead)
def get_option(
    key: OptionKey,
    db: Session = Depends(get_db),
    _: AuthUser = Depends(require_permissions("option.all.view")),
) -> OptionRead:
    return option_service.get_option(db, key)


@router.patch("/{key}", response_model=OptionRead)
def update_option(
    key: OptionKey,
    payload: OptionUpdate,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_permissions("option.all.edit")),
) -> OptionRead:
    return option_service.update_option(db, key, payload.value, actor_user_id=user.sub)
