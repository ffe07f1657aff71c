"""Integration tests for API endpoints"""

import json
import logging

import pytest
from fastapi.testclient import TestClient

from split_ledger.api.main import create_app
from split_ledger.config import Settings
from split_ledger.infrastructure.observability.logging import CustomJsonFormatter
from split_ledger.infrastructure.store.memory import InMemoryEntryStore

pytestmark = pytest.mark.integration

EMPTY_BUDGET = {"food": "0.00", "groceries": "0.00", "transport": "0.00", "entertainment": "0.00", "other": "0.00"}


def post_expense(client, payer="A", amount="120.00", category="food", headers=None):
    return client.post(
        "/transactions",
        json={"payerId": payer, "amount": amount, "category": category},
        headers=headers or {},
    )


def post_settle(client, from_user="B", to_user="A", amount="60.00", headers=None):
    return client.post(
        "/settle",
        json={"fromUserId": from_user, "toUserId": to_user, "amount": amount},
        headers=headers or {},
    )


def test_health_endpoint(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "X-Request-ID" in response.headers


def test_inbound_request_id_is_echoed(client: TestClient):
    response = client.get("/users", headers={"X-Request-ID": "trace-123"})
    assert response.headers["X-Request-ID"] == "trace-123"


def test_metrics_endpoint(client: TestClient):
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "http_request_duration_seconds" in response.text


def test_seed_init_defaults(client: TestClient):
    response = client.post("/seed/init")

    assert response.status_code == 200
    data = response.json()
    assert [u["walletBalance"] for u in data["users"]] == ["500.00", "500.00"]
    assert data["users"][0]["budgetByCategory"] == EMPTY_BUDGET
    assert data["netDue"] == {"owes": None, "amount": "0.00"}


def test_seed_init_demo(client: TestClient):
    response = client.post("/seed/init?demo=true", json={"walletA": 500, "walletB": 500})

    assert response.status_code == 200
    assert response.json()["netDue"] == {"owes": "B", "amount": "45.00"}
    assert len(client.get("/transactions").json()) == 3


def test_seed_init_rejects_negative_wallet(client: TestClient):
    response = client.post("/seed/init", json={"walletA": -1, "walletB": 500})
    assert response.status_code == 422
    assert response.headers["content-type"].startswith("application/problem+json")


def test_expense_then_settlement_scenario(seeded_client: TestClient):
    response = post_expense(seeded_client)
    assert response.status_code == 201
    data = response.json()

    assert data["transaction"]["type"] == "GROUP"
    assert data["transaction"]["perUserShare"] == "60.00"
    assert data["transaction"]["remainder"] == "0.00"
    users = {u["userId"]: u for u in data["summary"]["users"]}
    assert users["A"]["walletBalance"] == "380.00"
    assert users["B"]["walletBalance"] == "500.00"
    assert users["A"]["budgetByCategory"]["food"] == "60.00"
    assert users["B"]["budgetByCategory"]["food"] == "60.00"
    assert data["summary"]["netDue"] == {"owes": "B", "amount": "60.00"}

    response = post_settle(seeded_client)
    assert response.status_code == 201
    data = response.json()
    assert data["settlement"]["type"] == "SETTLEMENT"
    users = {u["userId"]: u for u in data["summary"]["users"]}
    assert users["A"]["walletBalance"] == "440.00"
    assert users["B"]["walletBalance"] == "440.00"
    assert data["summary"]["netDue"] == {"owes": None, "amount": "0.00"}


def test_routes_also_served_under_v1(seeded_client: TestClient):
    response = seeded_client.get("/v1/users")
    assert response.status_code == 200
    assert len(response.json()["users"]) == 2


def test_users_for_single_party(seeded_client: TestClient):
    post_expense(seeded_client, payer="B", amount="80.00", category="groceries")

    response = seeded_client.get("/users?userId=A")

    assert response.status_code == 200
    assert response.json() == {
        "userId": "A",
        "walletBalance": "500.00",
        "budgetByCategory": {**EMPTY_BUDGET, "groceries": "40.00"},
    }


def test_users_rejects_unknown_party(seeded_client: TestClient):
    response = seeded_client.get("/users?userId=C")
    assert response.status_code == 422


def test_users_cents(seeded_client: TestClient):
    post_expense(seeded_client, amount="20.00", category="food")
    post_expense(seeded_client, amount="20.01", category="groceries")

    users = seeded_client.get("/users-cents").json()["users"]
    a, b = users

    assert a["wallet"]["balanceCents"] == 45999
    assert {c["name"]: c["spentCents"] for c in a["spendByCategory"]}["Groceries"] == 1001
    assert a["netBetweenUsersCents"] == {"owes": 0, "isOwed": 2000}
    assert b["netBetweenUsersCents"] == {"owes": 2000, "isOwed": 0}


def test_compact_summary(seeded_client: TestClient):
    post_expense(seeded_client, amount="50.00", category="transport")

    data = seeded_client.get("/summary?userId=B").json()

    assert data["userId"] == "B"
    assert data["budgetByCategory"]["transport"] == "25.00"
    assert data["netPosition"] == {"owes": "A", "amount": "25.00"}


def test_compact_summary_requires_user(seeded_client: TestClient):
    assert seeded_client.get("/summary").status_code == 422


def test_who_owes_who(seeded_client: TestClient):
    assert seeded_client.get("/who-owes-who").json() == {"owes": None, "to": None, "amount": "0.00"}

    post_expense(seeded_client, payer="B", amount="30.00")

    assert seeded_client.get("/who-owes-who").json() == {"owes": "A", "to": "B", "amount": "15.00"}


def test_list_and_get_transactions(seeded_client: TestClient):
    created = post_expense(seeded_client, amount="10.01").json()["transaction"]
    post_settle(seeded_client, amount="5.00")

    listed = seeded_client.get("/transactions").json()
    assert [t["type"] for t in listed] == ["GROUP", "SETTLEMENT"]

    detail = seeded_client.get(f"/transactions/{created['id']}").json()
    assert detail["transaction"]["id"] == created["id"]
    assert len(detail["entries"]) == 5
    assert {e["account"] for e in detail["entries"]} == {
        "CASH:A",
        "EXPENSE:A:food",
        "EXPENSE:B:food",
        "DUE_FROM:A->B",
        "DUE_TO:B->A",
    }


def test_get_transaction_not_found(seeded_client: TestClient):
    response = seeded_client.get("/transactions/does-not-exist")

    assert response.status_code == 404
    assert response.json()["type"] == "not-found"


@pytest.mark.parametrize("amount", ["120", "120.0", "120.001", "-1.00", "0.00", "abc"])
def test_expense_rejects_bad_amount_format(seeded_client: TestClient, amount):
    response = post_expense(seeded_client, amount=amount)

    assert response.status_code == 422
    assert response.json()["type"] == "validation-error"
    assert seeded_client.get("/transactions").json() == []


@pytest.mark.parametrize("amount", ["1000000.01", "12345678901234567890123456789.00"])
def test_expense_rejects_amount_over_maximum(seeded_client: TestClient, amount):
    response = post_expense(seeded_client, amount=amount)

    assert response.status_code == 422
    assert response.json()["type"] == "invalid-amount"
    assert seeded_client.get("/transactions").json() == []


def test_expense_rejects_unknown_category(seeded_client: TestClient):
    assert post_expense(seeded_client, category="rent").status_code == 422


def test_self_settlement(seeded_client: TestClient):
    post_expense(seeded_client)

    response = post_settle(seeded_client, from_user="A", to_user="A", amount="10.00")

    assert response.status_code == 422
    body = response.json()
    assert body["type"] == "self-settlement"
    assert body["status"] == 422
    assert seeded_client.get("/who-owes-who").json()["amount"] == "60.00"


def test_over_settlement_boundary(seeded_client: TestClient):
    post_expense(seeded_client, amount="100.00")

    response = post_settle(seeded_client, amount="50.01")
    assert response.status_code == 422
    assert response.json()["type"] == "over-settlement"
    assert len(seeded_client.get("/transactions").json()) == 1

    response = post_settle(seeded_client, amount="50.00")
    assert response.status_code == 201
    assert response.json()["summary"]["netDue"] == {"owes": None, "amount": "0.00"}


def test_settlement_wrong_direction(seeded_client: TestClient):
    post_expense(seeded_client, amount="100.00")

    response = post_settle(seeded_client, from_user="A", to_user="B", amount="10.00")

    assert response.status_code == 422
    assert "does not owe" in response.json()["detail"]


def test_idempotent_expense(seeded_client: TestClient):
    headers = {"Idempotency-Key": "expense-1"}

    first = post_expense(seeded_client, headers=headers)
    second = post_expense(seeded_client, headers=headers)

    assert first.status_code == 201
    assert second.status_code == 200
    assert second.json() == first.json()
    assert len(seeded_client.get("/transactions").json()) == 1


def test_idempotency_conflict(seeded_client: TestClient):
    headers = {"Idempotency-Key": "expense-1"}
    post_expense(seeded_client, headers=headers)

    response = post_expense(seeded_client, amount="99.00", headers=headers)

    assert response.status_code == 409
    assert response.json()["type"] == "idempotency-conflict"


def test_idempotent_settlement(seeded_client: TestClient):
    post_expense(seeded_client)
    headers = {"Idempotency-Key": "settle-1"}

    first = post_settle(seeded_client, amount="30.00", headers=headers)
    second = post_settle(seeded_client, amount="30.00", headers=headers)

    assert first.status_code == 201
    assert second.status_code == 200
    assert seeded_client.get("/who-owes-who").json()["amount"] == "30.00"


def test_seed_init_clears_idempotency_keys(seeded_client: TestClient):
    headers = {"Idempotency-Key": "expense-1"}
    post_expense(seeded_client, headers=headers)

    seeded_client.post("/seed/init", json={"walletA": 500, "walletB": 500})

    assert post_expense(seeded_client, amount="99.00", headers=headers).status_code == 201


def test_unknown_route_is_problem_json(client: TestClient):
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.headers["content-type"].startswith("application/problem+json")


def test_sql_backend_end_to_end(tmp_path):
    config = Settings(store_backend="sql", database_url=f"sqlite:///{tmp_path / 'api.db'}")

    with TestClient(create_app(config)) as sql_client:
        sql_client.post("/seed/init", json={"walletA": 500, "walletB": 500})
        post_expense(sql_client, amount="120.00")
        post_settle(sql_client, amount="60.00")

        summary = sql_client.get("/users").json()

    assert [u["walletBalance"] for u in summary["users"]] == ["440.00", "440.00"]
    assert summary["netDue"] == {"owes": None, "amount": "0.00"}


@pytest.fixture
def small_client():
    """App built with non-default limits, independent of the process-wide settings"""
    config = Settings(
        service_name="ledger-small",
        default_wallet_cents=1_000,
        max_amount_cents=10_000,
        idempotency_key_max_length=8,
    )
    with TestClient(create_app(config, store=InMemoryEntryStore())) as test_client:
        yield test_client


def test_seed_default_comes_from_app_settings(small_client: TestClient):
    response = small_client.post("/seed/init")

    assert [u["walletBalance"] for u in response.json()["users"]] == ["10.00", "10.00"]


def test_maximum_amount_comes_from_app_settings(small_client: TestClient):
    small_client.post("/seed/init")

    rejected = post_expense(small_client, amount="100.01")
    assert rejected.status_code == 422
    assert rejected.json()["type"] == "invalid-amount"

    assert post_expense(small_client, amount="100.00").status_code == 201


def test_idempotency_key_length_comes_from_app_settings(small_client: TestClient):
    small_client.post("/seed/init")

    too_long = post_expense(small_client, amount="1.00", headers={"Idempotency-Key": "123456789"})
    assert too_long.status_code == 422
    assert too_long.json()["type"] == "validation-error"

    assert post_expense(small_client, amount="1.00", headers={"Idempotency-Key": "12345678"}).status_code == 201


def test_logs_stamped_with_app_service_name(small_client: TestClient):
    formatters = [h.formatter for h in logging.getLogger().handlers]
    assert any(isinstance(f, CustomJsonFormatter) and f.service_name == "ledger-small" for f in formatters)


def test_json_formatter_fields():
    formatter = CustomJsonFormatter("%(message)s", service_name="ledger-test")
    record = logging.LogRecord("split_ledger.test", logging.INFO, __file__, 1, "hello", None, None)

    body = json.loads(formatter.format(record))

    assert body["message"] == "hello"
    assert body["service"] == "ledger-test"
    assert body["level"] == "INFO"
    assert "timestamp" in body


def test_metrics_label_requests_by_route_template(client: TestClient):
    client.get("/definitely/not/a/route-qqz")
    client.get("/transactions/tx-qqz")

    text = client.get("/metrics").text

    assert 'endpoint="unmatched"' in text
    assert 'endpoint="/transactions/{transaction_id}"' in text
    assert "qqz" not in text


def test_openapi_documents_problem_responses(client: TestClient):
    spec = client.get("/openapi.json").json()

    assert "ProblemDetail" in spec["components"]["schemas"]
    responses = spec["paths"]["/transactions"]["post"]["responses"]
    assert "ProblemDetail" in json.dumps(responses["422"])
    assert "ProblemDetail" in json.dumps(responses["409"])
