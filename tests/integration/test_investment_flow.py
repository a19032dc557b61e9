"""Integration tests for investments: purchases, SIPs and withdrawals.

Uses the session-scoped client fixture from tests/integration/conftest.py.
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient

from tests.integration.helpers import auth_headers

pytestmark = pytest.mark.asyncio(loop_scope="session")


async def _account(client: AsyncClient, headers: dict[str, str], balance: str = "1000.00") -> str:
    resp = await client.post(
        "/api/v1/accounts",
        json={"name": "Main", "type": "checking", "balance": balance},
        headers=headers,
    )
    return str(resp.json()["data"]["id"])


async def _type_id(client: AsyncClient, headers: dict[str, str]) -> str:
    resp = await client.get("/api/v1/investments/types", headers=headers)
    types = {t["name"]: t["id"] for t in resp.json()["data"]}
    return str(types["mutual_funds"])


async def _balance(client: AsyncClient, headers: dict[str, str], account_id: str) -> Decimal:
    resp = await client.get(f"/api/v1/accounts/{account_id}", headers=headers)
    return Decimal(resp.json()["data"]["balance"])


class TestPurchase:
    async def test_purchase_edit_delete(self, client: AsyncClient) -> None:
        headers = auth_headers()
        acc = await _account(client, headers)
        created = await client.post(
            "/api/v1/investments",
            json={
                "account_id": acc,
                "investment_type_id": await _type_id(client, headers),
                "name": "Index fund",
                "amount": "300",
            },
            headers=headers,
        )
        assert created.status_code == 201, created.text
        inv_id = created.json()["data"]["id"]
        assert await _balance(client, headers, acc) == Decimal("700")

        await client.put(f"/api/v1/investments/{inv_id}", json={"amount": "200"}, headers=headers)
        assert await _balance(client, headers, acc) == Decimal("800")

        await client.delete(f"/api/v1/investments/{inv_id}", headers=headers)
        assert await _balance(client, headers, acc) == Decimal("1000")

    async def test_existing_holding_is_neutral(self, client: AsyncClient) -> None:
        headers = auth_headers()
        acc = await _account(client, headers)
        resp = await client.post(
            "/api/v1/investments",
            json={
                "account_id": acc,
                "investment_type_id": await _type_id(client, headers),
                "name": "Old shares",
                "amount": "5000",
                "is_existing": True,
            },
            headers=headers,
        )
        assert resp.status_code == 201, resp.text
        assert await _balance(client, headers, acc) == Decimal("1000")


class TestSip:
    async def test_installments_capped(self, client: AsyncClient) -> None:
        headers = auth_headers()
        acc = await _account(client, headers)
        created = await client.post(
            "/api/v1/investments",
            json={
                "account_id": acc,
                "investment_type_id": await _type_id(client, headers),
                "name": "SIP",
                "is_sip": True,
                "sip_amount": "100",
                "sip_frequency": "monthly",
                "sip_start_date": "2026-01-05",
                "sip_total_installments": 2,
            },
            headers=headers,
        )
        inv_id = created.json()["data"]["id"]
        url = f"/api/v1/investments/{inv_id}/process-sip"

        duplicate = (await client.post(url, json={"transaction_date": "2026-01-05"}, headers=headers)).json()
        assert duplicate["data"]["skip_reason"] == "installment_exists_for_date"

        second = (await client.post(url, json={"transaction_date": "2026-02-05"}, headers=headers)).json()
        assert second["data"]["processed"] is True

        third = (await client.post(url, json={"transaction_date": "2026-03-05"}, headers=headers)).json()
        assert third["message"] == "SIP installment skipped"
        assert third["data"]["skip_reason"] == "installment_cap_reached"
        assert await _balance(client, headers, acc) == Decimal("800")


class TestWithdrawal:
    async def test_partial_then_full(self, client: AsyncClient) -> None:
        headers = auth_headers()
        funding = await _account(client, headers)
        target = await _account(client, headers, balance="0")
        created = await client.post(
            "/api/v1/investments",
            json={
                "account_id": funding,
                "investment_type_id": await _type_id(client, headers),
                "name": "Bluechip",
                "amount": "100",
            },
            headers=headers,
        )
        inv_id = created.json()["data"]["id"]
        url = f"/api/v1/investments/{inv_id}/withdraw"

        partial = await client.post(url, json={"target_account_id": target, "withdrawal_amount": "40"}, headers=headers)
        assert partial.json()["message"] == "Partial withdrawal processed"

        full = await client.post(url, json={"target_account_id": target, "withdrawal_amount": "500"}, headers=headers)
        data = full.json()["data"]
        assert data["full_withdrawal"] is True
        assert Decimal(data["withdrawn_amount"]) == Decimal("60")
        assert data["investment"]["status"] == "withdrawn"
        assert await _balance(client, headers, target) == Decimal("100")

        again = await client.post(url, json={"target_account_id": target}, headers=headers)
        assert again.status_code == 409
        assert again.json()["code"] == 5003
