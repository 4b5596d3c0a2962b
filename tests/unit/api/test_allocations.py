"""Unit tests for POST /api/v1/allocations."""

from decimal import Decimal

import pytest
import pytest_check
from httpx import AsyncClient

from tests.unit.stores import InMemoryGoalStore


@pytest.mark.unit
class TestAllocateEndpoint:
    async def test_splits_payment_tax_vault_first(
        self, client: AsyncClient, goal_store: InMemoryGoalStore
    ) -> None:
        regular = goal_store.add(savings_percentage=Decimal(15), target_amount=Decimal(5000))
        vault = goal_store.add_tax_vault(savings_percentage=Decimal(10))

        response = await client.post(
            "/api/v1/allocations", json={"amount": "1000", "currency": "USDC"}
        )

        assert response.status_code == 200
        body = response.json()
        with pytest_check.check:
            assert body["processed"] is True
        with pytest_check.check:
            assert Decimal(body["total_saved"]) == Decimal(250)
        with pytest_check.check:
            assert Decimal(body["tax_vault_saved"]) == Decimal(100)
        with pytest_check.check:
            assert Decimal(body["main_balance"]) == Decimal(750)
        with pytest_check.check:
            assert [u["goal_id"] for u in body["goal_updates"]] == [vault.id, regular.id]

    async def test_no_goals(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/allocations", json={"amount": "12.34"})

        assert response.status_code == 200
        body = response.json()
        assert body["processed"] is False
        assert Decimal(body["main_balance"]) == Decimal("12.34")
        assert body["goal_updates"] == []

    async def test_rejects_other_currencies(
        self, client: AsyncClient, goal_store: InMemoryGoalStore
    ) -> None:
        goal = goal_store.add()

        response = await client.post(
            "/api/v1/allocations", json={"amount": "100", "currency": "EUR"}
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        assert goal.current_amount == Decimal(0)

    async def test_rejects_non_positive_amount(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/allocations", json={"amount": "0"})

        assert response.status_code == 400
        assert response.json()["message"] == "Payment amount must be greater than zero"

    async def test_missing_amount_fails_request_validation(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/allocations", json={"currency": "USDC"})

        assert response.status_code == 422
        assert "amount" in response.json()["details"]["validation_errors"]

    async def test_store_failure_reports_applied_goals(
        self, client: AsyncClient, goal_store: InMemoryGoalStore
    ) -> None:
        goal_store.add_tax_vault(savings_percentage=Decimal(10))
        failing = goal_store.add(savings_percentage=Decimal(10))
        goal_store.fail_on.add(failing.id)

        response = await client.post("/api/v1/allocations", json={"amount": "100"})

        assert response.status_code == 503
        body = response.json()
        assert body["error_code"] == "PERSISTENCE_ERROR"
        assert body["severity"] == "HIGH"
        assert body["details"]["applied_goal_ids"] == []
        assert body["details"]["failed_goal_id"] == failing.id
