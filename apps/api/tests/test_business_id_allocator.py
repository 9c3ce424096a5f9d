from __future__ import annotations

import logging
from collections.abc import Generator
from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from bos.core.database import Base
from bos.platform.numbering import BusinessIdAllocator, InMemoryCounterStore, MissingOptionError, OptionCounterStore
from bos.platform.options.models import Option
from bos.platform.options.schemas import OptionKey
from bos.platform.options.service import option_service


TODAY = date(2026, 1, 15)


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


def _memory_allocator(counter: int = 100001) -> tuple[BusinessIdAllocator, InMemoryCounterStore]:
    store = InMemoryCounterStore(
        counters={"CUSTOMER_ID_COUNTER": counter},
        schemas={"CUSTOMER_ID_SCHEMA": "C%YYYY%COUNTER"},
    )
    return BusinessIdAllocator(store, clock=lambda: TODAY), store


def test_preview_does_not_advance_counter() -> None:
    allocator, store = _memory_allocator()

    first = allocator.get_next_available_id("CUSTOMER_ID_COUNTER", "CUSTOMER_ID_SCHEMA")
    second = allocator.get_next_available_id("CUSTOMER_ID_COUNTER", "CUSTOMER_ID_SCHEMA")

    assert first == second == "C2026100001"
    assert store.get_counter("CUSTOMER_ID_COUNTER") == 100001


def test_increase_counter_moves_preview_forward() -> None:
    allocator, store = _memory_allocator()

    allocator.increase_counter("CUSTOMER_ID_COUNTER")

    assert store.get_counter("CUSTOMER_ID_COUNTER") == 100002
    assert allocator.get_next_available_id("CUSTOMER_ID_COUNTER", "CUSTOMER_ID_SCHEMA") == "C2026100002"


def test_allocate_claims_current_value_and_advances() -> None:
    allocator, store = _memory_allocator()

    assert allocator.allocate("CUSTOMER_ID_COUNTER", "CUSTOMER_ID_SCHEMA") == "C2026100001"
    assert allocator.allocate("CUSTOMER_ID_COUNTER", "CUSTOMER_ID_SCHEMA") == "C2026100002"
    assert store.get_counter("CUSTOMER_ID_COUNTER") == 100003


def test_allocate_logs_business_id(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)
    allocator, _ = _memory_allocator()

    allocator.allocate("CUSTOMER_ID_COUNTER", "CUSTOMER_ID_SCHEMA")

    records = [record for record in caplog.records if record.name == "bos.numbering"]
    assert any(
        record.getMessage() == "business_id.allocated"
        and getattr(record, "counter_key", None) == "CUSTOMER_ID_COUNTER"
        and getattr(record, "business_id", None) == "C2026100001"
        for record in records
    )


def test_missing_counter_raises() -> None:
    allocator = BusinessIdAllocator(
        InMemoryCounterStore(schemas={"CUSTOMER_ID_SCHEMA": "C%COUNTER"}),
        clock=lambda: TODAY,
    )

    with pytest.raises(MissingOptionError) as exc_info:
        allocator.get_next_available_id("CUSTOMER_ID_COUNTER", "CUSTOMER_ID_SCHEMA")
    assert exc_info.value.key == "CUSTOMER_ID_COUNTER"

    with pytest.raises(MissingOptionError):
        allocator.increase_counter("CUSTOMER_ID_COUNTER")


def test_missing_schema_does_not_consume_counter() -> None:
    store = InMemoryCounterStore(counters={"QUOTE_ID_COUNTER": 10001})
    allocator = BusinessIdAllocator(store, clock=lambda: TODAY)

    with pytest.raises(MissingOptionError) as exc_info:
        allocator.allocate("QUOTE_ID_COUNTER", "QUOTE_ID_SCHEMA")

    assert exc_info.value.key == "QUOTE_ID_SCHEMA"
    assert store.get_counter("QUOTE_ID_COUNTER") == 10001


def test_concurrent_allocations_are_unique() -> None:
    allocator, store = _memory_allocator(counter=1)

    with ThreadPoolExecutor(max_workers=8) as pool:
        allocated = list(
            pool.map(lambda _: allocator.allocate("CUSTOMER_ID_COUNTER", "CUSTOMER_ID_SCHEMA"), range(200))
        )

    assert len(set(allocated)) == 200
    assert set(allocated) == {f"C2026{value}" for value in range(1, 201)}
    assert store.get_counter("CUSTOMER_ID_COUNTER") == 201


def test_option_store_reads_seeded_defaults(db_session: Session) -> None:
    option_service.seed_default_options(db_session)
    allocator = BusinessIdAllocator(OptionCounterStore(db_session), clock=lambda: TODAY)

    assert allocator.get_next_available_id(OptionKey.QUOTE_ID_COUNTER, OptionKey.QUOTE_ID_SCHEMA) == "Q20260110001"
    assert allocator.allocate(OptionKey.QUOTE_ID_COUNTER, OptionKey.QUOTE_ID_SCHEMA) == "Q20260110001"
    db_session.commit()

    stored = db_session.get(Option, "QUOTE_ID_COUNTER")
    assert stored is not None
    assert stored.value == {"counter": 10002}


def test_option_store_advance_is_undone_by_rollback(db_session: Session) -> None:
    option_service.seed_default_options(db_session)
    allocator = BusinessIdAllocator(OptionCounterStore(db_session), clock=lambda: TODAY)

    allocator.allocate(OptionKey.CUSTOMER_ID_COUNTER, OptionKey.CUSTOMER_ID_SCHEMA)
    db_session.rollback()

    assert OptionCounterStore(db_session).get_counter(OptionKey.CUSTOMER_ID_COUNTER) == 100001


def test_option_store_rejects_malformed_values(db_session: Session) -> None:
    db_session.add(Option(key="QUOTE_ID_COUNTER", value={"count": 3}))
    db_session.add(Option(key="QUOTE_ID_SCHEMA", value={"template": "Q%COUNTER"}))
    db_session.commit()
    store = OptionCounterStore(db_session)

    with pytest.raises(MissingOptionError):
        store.get_counter("QUOTE_ID_COUNTER")
    with pytest.raises(MissingOptionError):
        store.get_schema("QUOTE_ID_SCHEMA")
    with pytest.raises(MissingOptionError):
        store.get_counter("CUSTOMER_ID_COUNTER")


@pytest.mark.parametrize("raw", [10001.7, "10001.7", "abc", -1, True, None])
def test_option_store_rejects_non_integral_counters(db_session: Session, raw: object) -> None:
    db_session.add(Option(key="QUOTE_ID_COUNTER", value={"counter": raw}))
    db_session.commit()

    with pytest.raises(MissingOptionError) as exc_info:
        OptionCounterStore(db_session).get_counter("QUOTE_ID_COUNTER")
    assert exc_info.value.key == "QUOTE_ID_COUNTER"


@pytest.mark.parametrize("raw", [10001, 10001.0, "10001"])
def test_option_store_accepts_integral_counters(db_session: Session, raw: object) -> None:
    db_session.add(Option(key="QUOTE_ID_COUNTER", value={"counter": raw}))
    db_session.commit()

    assert OptionCounterStore(db_session).get_counter("QUOTE_ID_COUNTER") == 10001
