"""End-to-end requests through the application and PostgreSQL."""

from collections.abc import Callable
from decimal import Decimal

import pytest
from httpx import AsyncClient

from src.infrastructure.database.models import User

pytestmark = pytest.mark.integration

AuthHeaders = Callable[[User], dict[str, str]]


async def test_freelancer_journey(
    client: AsyncClient, user: User, auth_headers: AuthHeaders
) -> None:
    headers = auth_headers(user)

    configured = await client.put(
        "/api/v1/tax-vault", json={"tax_percentage": "12.5"}, headers=headers
    )
    assert configured.status_code == 200
    assert Decimal(configured.json()["tax_percentage"]) == Decimal("12.50")

    created = await client.post(
        "/api/v1/savings-goals",
        json={"title": "Camera", "target_amount": "800", "savings_percentage": "10"},
        headers=headers,
    )
    assert created.status_code == 201

    allocated = await client.post(
        "/api/v1/allocations", json={"amount": "2000", "currency": "usdc"}, headers=headers
    )
    assert allocated.status_code == 200
    body = allocated.json()
    assert body["processed"] is True
    assert Decimal(body["tax_vault_saved"]) == Decimal(250)
    assert Decimal(body["total_saved"]) == Decimal(450)
    assert Decimal(body["main_balance"]) == Decimal(1550)
    assert [u["is_tax_vault"] for u in body["goal_updates"]] == [True, False]

    listed = await client.get("/api/v1/savings-goals", headers=headers)
    assert listed.json()["count"] == 2
    camera = listed.json()["goals"][1]
    assert Decimal(camera["current_amount"]) == Decimal(200)

    released = await client.delete("/api/v1/tax-vault", headers=headers)
    assert released.status_code == 200
    assert Decimal(released.json()["released_amount"]) == Decimal(250)

    vault = await client.get("/api/v1/tax-vault", headers=headers)
    assert Decimal(vault.json()["tax_vault"]["current_amount"]) == 0
    assert vault.json()["tax_vault"]["is_active"] is True


async def test_unknown_subject(client: AsyncClient, auth_headers: AuthHeaders) -> None:
    stranger = User(external_id="did:privy:nobody")

    response = await client.get("/api/v1/tax-vault", headers=auth_headers(stranger))

    assert response.status_code == 404


async def test_requires_token(client: AsyncClient) -> None:
    response = await client.post("/api/v1/allocations", json={"amount": "10"})

    assert response.status_code == 401
