from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi import HTTPException
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from bos import audit
from bos.core.database import Base
from bos.platform.options.models import Option
from bos.platform.options.schemas import OptionKey, OptionSet
from bos.platform.options.service import option_service


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clear_audit() -> Generator[None, None, None]:
    audit.audit_entries.clear()
    yield
    audit.audit_entries.clear()


def test_get_options_returns_only_existing_keys(db_session: Session) -> None:
    option_service.set_options(db_session, [OptionSet(key=OptionKey.QUOTE_ID_COUNTER, value={"counter": 5})])

    found = option_service.get_options(db_session, [OptionKey.QUOTE_ID_COUNTER, OptionKey.QUOTE_ID_SCHEMA])

    assert [(item.key, item.value) for item in found] == [(OptionKey.QUOTE_ID_COUNTER, {"counter": 5})]


def test_set_options_upserts(db_session: Session) -> None:
    option_service.set_options(db_session, [OptionSet(key=OptionKey.QUOTE_ID_SCHEMA, value={"schema": "Q%COUNTER"})])
    option_service.set_options(
        db_session,
        [
            OptionSet(key=OptionKey.QUOTE_ID_SCHEMA, value={"schema": "QT-%YY-%COUNTER"}),
            OptionSet(key=OptionKey.QUOTE_ID_COUNTER, value={"counter": 1}),
        ],
    )

    schema = db_session.get(Option, "QUOTE_ID_SCHEMA")
    assert schema is not None
    assert schema.value == {"schema": "QT-%YY-%COUNTER"}
    assert db_session.get(Option, "QUOTE_ID_COUNTER") is not None


def test_seed_default_options_is_idempotent(db_session: Session) -> None:
    created = option_service.seed_default_options(db_session)
    assert set(created) == set(OptionKey)

    option_service.set_options(db_session, [OptionSet(key=OptionKey.CUSTOMER_ID_COUNTER, value={"counter": 900})])
    assert option_service.seed_default_options(db_session) == []

    counter = db_session.get(Option, "CUSTOMER_ID_COUNTER")
    assert counter is not None
    assert counter.value == {"counter": 900}


def test_list_options_ordered_by_key(db_session: Session) -> None:
    option_service.seed_default_options(db_session)

    keys = [item.key for item in option_service.list_options(db_session)]

    assert keys == sorted(keys)
    assert len(keys) == 4


def test_update_option_validates_and_audits(db_session: Session) -> None:
    option_service.seed_default_options(db_session)

    updated = option_service.update_option(
        db_session,
        OptionKey.QUOTE_ID_COUNTER,
        {"counter": 20001},
        actor_user_id="admin-1",
    )

    assert updated.value == {"counter": 20001}
    assert audit.audit_entries[-1]["action"] == "option.updated"
    assert audit.audit_entries[-1]["before"] == {"value": {"counter": 10001}}


@pytest.mark.parametrize(
    ("key", "value"),
    [
        (OptionKey.QUOTE_ID_COUNTER, {"counter": "ten"}),
        (OptionKey.QUOTE_ID_COUNTER, {"counter": -1}),
        (OptionKey.CUSTOMER_ID_COUNTER, 17),
        (OptionKey.CUSTOMER_ID_SCHEMA, {"schema": "   "}),
        (OptionKey.QUOTE_ID_SCHEMA, {"pattern": "Q%COUNTER"}),
    ],
)
def test_update_option_rejects_malformed_value(db_session: Session, key: OptionKey, value: object) -> None:
    option_service.seed_default_options(db_session)

    with pytest.raises(HTTPException) as exc_info:
        option_service.update_option(db_session, key, value, actor_user_id="admin-1")

    assert exc_info.value.status_code == 422


def test_update_missing_option_is_404(db_session: Session) -> None:
    with pytest.raises(HTTPException) as exc_info:
        option_service.update_option(db_session, OptionKey.QUOTE_ID_SCHEMA, {"schema": "Q"}, actor_user_id="admin-1")

    assert exc_info.value.status_code == 404
