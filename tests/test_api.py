"""
test_api.py - HTTP surface

Runs the FastAPI app against a MemoryBackend ledger (no database, no
startup hooks) and checks status codes and payloads end to end.
"""

import json
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from conftest import WORKING_DATE
from main import app
from wealthshare.ledger.facade import Ledger
from wealthshare.persistence.backend import EntityKind, MemoryBackend
from wealthshare.utils.dependencies import get_ledger


def amount(value) -> Decimal:
    return Decimal(str(value))


@pytest.fixture
def store():
    return MemoryBackend()


@pytest.fixture
def api_ledger(store):
    return Ledger(store, working_date=WORKING_DATE, seed_default_accounts=False)


@pytest.fixture
def client(api_ledger):
    app.dependency_overrides[get_ledger] = lambda: api_ledger
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def funded(client):
    """Cash account with 5000 principal and 300 interest, plus one member."""
    cash = client.post("/accounts", json={"name": "Cash", "kind": "CASH"}).json()
    for fund, value in (("PRINCIPAL", "5000"), ("INTEREST", "300")):
        client.post("/transactions/opening-balances", json={
            "account_id": cash["id"], "amount": value, "fund_type": fund, "txn_date": "2024-03-01",
        })
    member = client.post("/members", json={"name": "  Alice  "}).json()
    return cash, member


class TestMembersAndAccounts:

    def test_create_member(self, client, store):
        res = client.post("/members", json={"name": "Alice", "starting_credit": "25"})

        assert res.status_code == 201
        body = res.json()
        assert body["name"] == "Alice"
        assert amount(body["carried_credit"]) == Decimal("25")
        # background flush already ran
        assert [r["name"] for r in store.tables[EntityKind.MEMBERS]] == ["Alice"]

    def test_member_payload_is_strict(self, client):
        assert client.post("/members", json={"name": "Bob", "bogus": 1}).status_code == 422
        assert client.post("/members", json={"name": "Bob", "starting_credit": "-1"}).status_code == 422

    def test_unknown_member(self, client):
        assert client.get("/members/ghost").status_code == 404

    def test_list_accounts_by_kind(self, client, funded):
        client.post("/accounts", json={"name": "Bank", "kind": "BANK"})

        res = client.get("/accounts", params={"kind": "BANK"})

        assert [a["name"] for a in res.json()] == ["Bank"]

    def test_member_account_without_owner(self, client):
        res = client.post("/accounts", json={"name": "Wallet", "kind": "MEMBER"})
        assert res.status_code == 400

    def test_account_balance(self, client, funded):
        cash, _ = funded

        body = client.get(f"/accounts/{cash['id']}/balance").json()

        assert body["as_on"] == WORKING_DATE.isoformat()
        assert amount(body["principal"]) == 5000
        assert amount(body["interest"]) == 300
        assert amount(body["total"]) == 5300

    def test_balance_before_opening(self, client, funded):
        cash, _ = funded
        body = client.get(f"/accounts/{cash['id']}/balance", params={"as_on": "2024-02-01"}).json()
        assert amount(body["total"]) == 0

    def test_delete_account_with_balance(self, client, funded):
        cash, _ = funded
        assert client.delete(f"/accounts/{cash['id']}").status_code == 400

    def test_delete_empty_account(self, client):
        bank = client.post("/accounts", json={"name": "Bank", "kind": "BANK"}).json()
        assert client.delete(f"/accounts/{bank['id']}").status_code == 200
        assert client.get("/accounts").json() == []


class TestContributionsAndLoans:

    def test_contribution_over_cap(self, client, funded):
        cash, member = funded

        res = client.post("/transactions/contributions", json={
            "member_id": member["id"], "account_id": cash["id"], "amount": "1500", "txn_date": "2024-03-05",
        })

        assert res.status_code == 201
        body = res.json()
        assert len(body["entries"]) == 1
        assert body["entries"][0]["transaction_type"] == "CONTRIBUTION"
        assert amount(body["share"]) == 1000
        assert amount(body["carried_credit"]) == 500
        assert amount(client.get(f"/members/{member['id']}").json()["carried_credit"]) == 500

    def test_loan_lifecycle(self, client, funded):
        cash, member = funded

        res = client.post("/loans", json={
            "member_id": member["id"], "account_id": cash["id"], "principal": "1000",
            "issued_on": "2024-03-01", "interest_rate": "10",
        })
        assert res.status_code == 201
        loan = res.json()
        assert loan["due_on"] == "2024-03-31"

        second = client.post("/loans", json={
            "member_id": member["id"], "account_id": cash["id"], "principal": "10", "issued_on": "2024-03-02",
        })
        assert second.status_code == 409

        repaid = client.post(f"/loans/{loan['id']}/repayments", json={
            "amount": "400", "account_id": cash["id"], "txn_date": "2024-03-10",
        })
        assert repaid.status_code == 201
        assert repaid.json()["notes"] == "Direct repayment"

        detail = client.get(f"/loans/{loan['id']}").json()
        assert detail["status"] == "UNPAID"
        assert amount(detail["balance"]) == 700

        late = client.get(f"/loans/{loan['id']}", params={"as_on": "2024-04-01"}).json()
        assert late["status"] == "OVERDUE"

        assert [l["id"] for l in client.get("/loans", params={"status": "UNPAID"}).json()] == [loan["id"]]
        assert [l["id"] for l in client.get(f"/members/{member['id']}/loans").json()] == [loan["id"]]

    def test_loan_larger_than_account(self, client, funded):
        cash, member = funded
        res = client.post("/loans", json={
            "member_id": member["id"], "account_id": cash["id"], "principal": "99999", "issued_on": "2024-03-01",
        })
        assert res.status_code == 400

    def test_overpaying_a_loan(self, client, funded):
        cash, member = funded
        loan = client.post("/loans", json={
            "member_id": member["id"], "account_id": cash["id"], "principal": "100",
            "issued_on": "2024-03-01", "interest_rate": "0",
        }).json()

        res = client.post(f"/loans/{loan['id']}/repayments", json={
            "amount": "150", "account_id": cash["id"], "txn_date": "2024-03-02",
        })
        assert res.status_code == 400

    def test_unknown_loan(self, client):
        assert client.get("/loans/nope").status_code == 404

    def test_member_stats(self, client, funded):
        cash, member = funded
        client.post("/transactions/contributions", json={
            "member_id": member["id"], "account_id": cash["id"], "amount": "800", "txn_date": "2024-03-05",
        })

        body = client.get(f"/members/{member['id']}/stats").json()

        assert amount(body["total_contributed"]) == 800
        assert body["active_loan_count"] == 0
        assert body["last_contribution_date"] == "2024-03-05"


class TestExpensesAndTransfers:

    def test_expense_and_available_interest(self, client, funded):
        cash, _ = funded

        res = client.post("/transactions/expenses", json={
            "account_id": cash["id"], "amount": "120", "txn_date": "2024-03-05", "notes": "Airtime",
        })
        assert res.status_code == 201
        assert amount(res.json()["amount"]) == -120

        available = client.get("/transactions/interest-available").json()
        assert amount(available["available"]) == 180

        too_much = client.post("/transactions/expenses", json={
            "account_id": cash["id"], "amount": "181", "txn_date": "2024-03-05",
        })
        assert too_much.status_code == 400

    def test_transfer_returns_both_legs(self, client, funded):
        cash, _ = funded
        bank = client.post("/accounts", json={"name": "Bank", "kind": "BANK"}).json()

        res = client.post("/transactions/transfers", json={
            "from_account_id": cash["id"], "to_account_id": bank["id"], "amount": "200", "txn_date": "2024-03-05",
        })

        assert res.status_code == 201
        legs = res.json()
        assert sum(amount(l["amount"]) for l in legs) == 0
        assert amount(client.get(f"/accounts/{bank['id']}/balance").json()["principal"]) == 200

    def test_delete_transaction(self, client, funded):
        cash, _ = funded
        entries = client.get("/transactions", params={"account_id": cash["id"]}).json()
        interest = next(e for e in entries if e["fund_type"] == "INTEREST")

        assert client.delete(f"/transactions/{interest['id']}").status_code == 200
        assert client.delete(f"/transactions/{interest['id']}").status_code == 404
        assert amount(client.get(f"/accounts/{cash['id']}/balance").json()["interest"]) == 0


class TestSettings:

    def test_working_date_round_trip(self, client):
        assert client.get("/settings/working-date").json() == {
            "working_date": WORKING_DATE.isoformat(), "pinned": True,
        }

        res = client.put("/settings/working-date", json={"working_date": "2024-01-15"})
        assert res.json()["working_date"] == "2024-01-15"

        res = client.put("/settings/working-date", json={"working_date": None})
        assert res.json() == {"working_date": date.today().isoformat(), "pinned": False}


class TestMaintenance:

    def test_export_then_import(self, client, funded, api_ledger):
        cash, member = funded
        res = client.get("/db/export")
        assert res.status_code == 200
        assert "attachment" in res.headers["content-disposition"]
        snapshot = res.content

        client.post("/members", json={"name": "Bob"})
        assert len(api_ledger.list_members()) == 2

        res = client.post(
            "/db/import",
            files={"snapshot_file": ("backup.json", snapshot, "application/json")},
        )

        assert res.status_code == 200
        assert res.json()["members"] == 1
        assert [m.id for m in api_ledger.list_members()] == [member["id"]]
        assert amount(client.get(f"/accounts/{cash['id']}/balance").json()["total"]) == 5300

    def test_import_rejects_non_json_upload(self, client):
        res = client.post("/db/import", files={"snapshot_file": ("backup.csv", b"a,b", "text/csv")})
        assert res.status_code == 400

    def test_import_rejects_bad_version(self, client, funded):
        doc = client.get("/db/export").json()
        doc["version"] = "0.1"

        res = client.post(
            "/db/import",
            files={"snapshot_file": ("backup.json", json.dumps(doc).encode(), "application/json")},
        )

        assert res.status_code == 400
        assert len(client.get("/accounts").json()) == 1

    def test_reset_and_reload(self, client, funded, store):
        assert client.post("/db/reload").json()["accounts"] == 1

        assert client.post("/db/reset").status_code == 200
        assert client.get("/members").json() == []
        assert all(not rows for rows in store.tables.values())
