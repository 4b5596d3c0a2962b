"""Unit tests for the /api/v1/tax-vault endpoints."""

from decimal import Decimal

import pytest
from httpx import AsyncClient

from tests.unit.stores import InMemoryGoalStore, InMemoryUserStore


@pytest.mark.unit
class TestGetTaxVault:
    async def test_without_vault(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/tax-vault")

        assert response.status_code == 200
        assert response.json()["tax_vault"] is None
        assert Decimal(response.json()["tax_percentage"]) == 0

    async def test_with_vault(
        self,
        client: AsyncClient,
        goal_store: InMemoryGoalStore,
        user_store: InMemoryUserStore,
    ) -> None:
        user_store.users[1].tax_percentage = Decimal(25)
        vault = goal_store.add_tax_vault(
            savings_percentage=Decimal(25), current_amount=Decimal("40.5")
        )

        response = await client.get("/api/v1/tax-vault")

        body = response.json()
        assert Decimal(body["tax_percentage"]) == Decimal(25)
        assert body["tax_vault"] == {
            "id": vault.id,
            "current_amount": "40.5",
            "is_active": True,
            "status": "in_progress",
        }


@pytest.mark.unit
class TestConfigureTaxVault:
    async def test_creates_vault(
        self, client: AsyncClient, goal_store: InMemoryGoalStore
    ) -> None:
        response = await client.put("/api/v1/tax-vault", json={"tax_percentage": 10})

        assert response.status_code == 200
        body = response.json()
        assert Decimal(body["tax_percentage"]) == Decimal(10)
        assert body["tax_vault"]["is_active"] is True
        assert Decimal(body["tax_vault"]["current_amount"]) == 0
        assert await goal_store.count_goals(1) == 1

    async def test_zero_deactivates(
        self, client: AsyncClient, goal_store: InMemoryGoalStore
    ) -> None:
        goal_store.add_tax_vault(current_amount=Decimal(250))

        response = await client.put("/api/v1/tax-vault", json={"tax_percentage": "0"})

        assert response.status_code == 200
        vault = response.json()["tax_vault"]
        assert vault["is_active"] is False
        assert Decimal(vault["current_amount"]) == Decimal(250)

    @pytest.mark.parametrize("percentage", [-1, 100.5, "150"])
    async def test_out_of_range(self, client: AsyncClient, percentage: object) -> None:
        response = await client.put("/api/v1/tax-vault", json={"tax_percentage": percentage})

        assert response.status_code == 400
        assert response.json()["message"] == "Tax percentage must be between 0 and 100"


@pytest.mark.unit
class TestReleaseTaxVault:
    async def test_releases_balance(
        self, client: AsyncClient, goal_store: InMemoryGoalStore
    ) -> None:
        vault = goal_store.add_tax_vault(current_amount=Decimal(250))

        response = await client.delete("/api/v1/tax-vault")

        assert response.status_code == 200
        body = response.json()
        assert Decimal(body["released_amount"]) == Decimal(250)
        assert Decimal(body["tax_vault"]["current_amount"]) == 0
        assert vault.current_amount == 0

    async def test_no_vault(self, client: AsyncClient) -> None:
        response = await client.delete("/api/v1/tax-vault")

        assert response.status_code == 404
        body = response.json()
        assert body["error_code"] == "NOT_FOUND"
        assert body["message"] == "No tax vault found"
