from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from bos import audit
from bos.platform.options.models import Option
from bos.platform.options.schemas import OptionKey, OptionRead, OptionSet


logger = logging.getLogger("bos.options")

DEFAULT_OPTIONS: tuple[OptionSet, ...] = (
    OptionSet(key=OptionKey.CUSTOMER_ID_COUNTER, value={"counter": 100001}),
    OptionSet(key=OptionKey.CUSTOMER_ID_SCHEMA, value={"schema": "C%YYYY%COUNTER"}),
    OptionSet(key=OptionKey.QUOTE_ID_COUNTER, value={"counter": 10001}),
    OptionSet(key=OptionKey.QUOTE_ID_SCHEMA, value={"schema": "Q%YYYY%MM%COUNTER"}),
)

_COUNTER_KEYS = {OptionKey.CUSTOMER_ID_COUNTER, OptionKey.QUOTE_ID_COUNTER}
_SCHEMA_KEYS = {OptionKey.CUSTOMER_ID_SCHEMA, OptionKey.QUOTE_ID_SCHEMA}


class OptionService:
    def get_options(self, session: Session, keys: Iterable[OptionKey]) -> list[OptionSet]:
        wanted = [str(key) for key in keys]
        rows = session.scalars(select(Option).where(Option.key.in_(wanted))).all()
        return [OptionSet(key=row.key, value=row.value) for row in rows]

    def set_options(self, session: Session, sets: Iterable[OptionSet]) -> None:
        for item in sets:
            option = session.get(Option, str(item.key))
            if option is None:
                session.add(Option(key=str(item.key), value=item.value))
            else:
                option.value = item.value
                session.add(option)
        session.commit()

    def list_options(self, session: Session) -> list[OptionRead]:
        rows = session.scalars(select(Option).order_by(Option.key.asc())).all()
        return [OptionRead.model_validate(row) for row in rows if row.key in OptionKey.__members__]

    def get_option(self, session: Session, key: OptionKey) -> OptionRead:
        return OptionRead.model_validate(self._get(session, key))

    def update_option(self, session: Session, key: OptionKey, value: Any, *, actor_user_id: str) -> OptionRead:
        option = self._get(session, key)
        self._validate_value(key, value)

        before = option.value
        option.value = value
        session.add(option)
        session.commit()
        session.refresh(option)

        audit.record(
            actor_user_id=actor_user_id,
            entity_type="option",
            entity_id=str(key),
            action="option.updated",
            before={"value": before},
            after={"value": option.value},
        )
        logger.info("option.updated", extra={"option_key": str(key)})
        return OptionRead.model_validate(option)

    def seed_default_options(self, session: Session) -> list[OptionKey]:
        created: list[OptionKey] = []
        for item in DEFAULT_OPTIONS:
            if session.get(Option, str(item.key)) is not None:
                continue
            session.add(Option(key=str(item.key), value=dict(item.value)))
            created.append(item.key)
        if created:
            session.commit()
            logger.info("options.seeded", extra={"option_key": ",".join(str(key) for key in created)})
        return created

    @staticmethod
    def _get(session: Session, key: OptionKey) -> Option:
        option = session.get(Option, str(key))
        if option is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="option not found")
        return option

    @staticmethod
    def _validate_value(key: OptionKey, value: Any) -> None:
        if key in _COUNTER_KEYS:
            counter = value.get("counter") if isinstance(value, dict) else None
            if not isinstance(counter, int) or isinstance(counter, bool) or counter < 0:
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail="counter option requires a non-negative integer 'counter'",
                )
        if key in _SCHEMA_KEYS:
            schema = value.get("schema") if isinstance(value, dict) else None
            if not isinstance(schema, str) or not schema.strip():
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail="schema option requires a non-empty 'schema'",
                )


option_service = OptionService()
