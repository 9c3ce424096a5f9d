from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from bos.core.auth import AuthUser, get_current_user
from bos.core.config import get_settings
from bos.core.database import Base, get_db
from bos.main import app


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
def configure_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    monkeypatch.setenv("METRICS_ENABLED", "true")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    def override_auth_user() -> AuthUser:
        return AuthUser(
            sub="metrics-admin",
            roles=["system.metrics.read", "contact.all.create", "contact.all.view", "quote.all.create", "quote.all.view"],
        )

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_auth_user

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def test_metrics_endpoint_exposes_http_and_allocation_metrics(client: TestClient) -> None:
    health = client.get("/health")
    assert health.status_code == 200

    company = client.post("/api/companies", json={"name": "Metrics Company"})
    assert company.status_code == 201

    quote = client.post(
        "/api/quotes",
        json={
            "company_id": company.json()["id"],
            "quote_date": "2026-01-15",
            "quote_items": [{"quote_position": 1, "title": "x", "quantity": 1, "price": 1, "tax_rate": 0}],
        },
    )
    assert quote.status_code == 201
    assert client.get(f"/api/quotes/{quote.json()['id']}").status_code == 200

    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    body = metrics.text

    assert "http_requests_total" in body
    assert "http_request_duration_seconds" in body
    assert "business_ids_allocated_total" in body

    assert 'path="/health"' in body
    assert 'path="/api/quotes/{id}"' in body
    assert 'counter_key="CUSTOMER_ID_COUNTER"' in body
    assert 'counter_key="QUOTE_ID_COUNTER"' in body


def test_metrics_require_permission(client: TestClient) -> None:
    app.dependency_overrides[get_current_user] = lambda: AuthUser(sub="someone", roles=["user"])

    response = client.get("/metrics")

    assert response.status_code == 403


def test_metrics_hidden_when_disabled(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("METRICS_ENABLED", "false")
    get_settings.cache_clear()

    response = client.get("/metrics")

    assert response.status_code == 404
