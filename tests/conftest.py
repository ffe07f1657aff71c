"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timezone
from typing import Generator, List
from fastapi.testclient import TestClient

from split_ledger.api.main import create_app
from split_ledger.domain.ledger import build_seed_entries
from split_ledger.domain.models import LedgerEntry
from split_ledger.infrastructure.database.session import build_engine, build_session_factory
from split_ledger.infrastructure.store.idempotency import IdempotencyCache
from split_ledger.infrastructure.store.memory import InMemoryEntryStore
from split_ledger.infrastructure.store.sql import SqlEntryStore
from split_ledger.services.ledger_service import LedgerService

FIXED_NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store() -> InMemoryEntryStore:
    return InMemoryEntryStore()


@pytest.fixture
def sql_store(tmp_path) -> Generator[SqlEntryStore, None, None]:
    """SQLite-backed store in a throwaway file"""
    engine = build_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    yield SqlEntryStore(build_session_factory(engine))
    engine.dispose()


@pytest.fixture
def service(store: InMemoryEntryStore) -> LedgerService:
    """Ledger service over an empty in-memory store"""
    return LedgerService(store=store, idempotency=IdempotencyCache())


@pytest.fixture
def seeded_service(service: LedgerService) -> LedgerService:
    """Ledger service with both wallets at 500.00"""
    service.seed_wallets(50_000, 50_000)
    return service


@pytest.fixture
def seed_entries() -> List[LedgerEntry]:
    return build_seed_entries(50_000, 50_000, now=FIXED_NOW)


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """FastAPI test client over an isolated in-memory ledger"""
    app = create_app(store=InMemoryEntryStore())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def seeded_client(client: TestClient) -> TestClient:
    response = client.post("/seed/init", json={"walletA": 500, "walletB": 500})
    assert response.status_code == 200
    return client
