from datetime import date
from decimal import Decimal

import pytest
from httpx import AsyncClient


async def _bill_for(client: AsyncClient, student_id: str, month: int, year: int) -> dict:
    bills = (await client.get(f"/api/v1/billing/student/{student_id}")).json()["data"]
    return next(b for b in bills if b["batch"]["month"] == month and b["batch"]["year"] == year)


async def _pay(client: AsyncClient, obligation_id: str, amount: int) -> None:
    response = await client.post("/api/v1/payments", json={"obligation_id": obligation_id, "amount": amount})
    assert response.status_code == 200, response.text


@pytest.mark.asyncio
async def test_dashboard_period_and_balances(client: AsyncClient, create_student, create_batch) -> None:
    ahmad = await create_student("Ahmad Fauzi")
    siti = await create_student("Siti Aminah", gender="P")
    await create_batch(12, 2025, tuition=90000)
    await create_batch(1, 2026, tuition=100000, upkeep=10000)

    await _pay(client, (await _bill_for(client, ahmad["id"], 1, 2026))["id"], 110000)
    await _pay(client, (await _bill_for(client, siti["id"], 1, 2026))["id"], 50000)
    await _pay(client, (await _bill_for(client, ahmad["id"], 12, 2025))["id"], 40000)

    response = await client.get("/api/v1/dashboard/admin", params={"month": 1, "year": 2026})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total_students"] == 2

    period = data["period"]
    assert (period["month"], period["year"]) == (1, 2026)
    assert period["batch_id"] is not None
    assert Decimal(period["total_billed"]) == Decimal("220000")
    assert Decimal(period["total_paid"]) == Decimal("160000")
    assert Decimal(period["outstanding"]) == Decimal("60000")
    assert period["paid_count"] == 1
    assert period["installment_count"] == 1
    assert period["unpaid_count"] == 0

    # December is before the requested period: 50000 + 90000 still open
    assert Decimal(data["total_overdue"]) == Decimal("140000")
    assert Decimal(data["total_outstanding_all_time"]) == Decimal("200000")


@pytest.mark.asyncio
async def test_dashboard_period_without_batch(client: AsyncClient, create_student, create_batch) -> None:
    await create_student("Ahmad Fauzi")
    await create_batch(1, 2026, tuition=100000)

    response = await client.get("/api/v1/dashboard/admin", params={"month": 6, "year": 2026})
    data = response.json()["data"]
    period = data["period"]
    assert period["batch_id"] is None
    assert Decimal(period["total_billed"]) == 0
    assert period["unpaid_count"] == 0
    assert Decimal(data["total_overdue"]) == Decimal("100000")
    assert Decimal(data["total_outstanding_all_time"]) == Decimal("100000")


@pytest.mark.asyncio
async def test_dashboard_unpaid_counts(client: AsyncClient, create_student, create_batch) -> None:
    await create_student("Ahmad Fauzi")
    await create_student("Budi Santoso")
    await create_batch(3, 2026, tuition=75000)

    period = (
        await client.get("/api/v1/dashboard/admin", params={"month": 3, "year": 2026})
    ).json()["data"]["period"]
    assert period["unpaid_count"] == 2
    assert period["paid_count"] == 0
    assert Decimal(period["outstanding"]) == Decimal("150000")


@pytest.mark.asyncio
async def test_dashboard_defaults_to_current_month(client: AsyncClient) -> None:
    today = date.today()
    response = await client.get("/api/v1/dashboard/admin")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total_students"] == 0
    assert (data["period"]["month"], data["period"]["year"]) == (today.month, today.year)
    assert Decimal(data["total_outstanding_all_time"]) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{"month": 13}, {"month": 0}, {"year": 0}, {"month": "x"}])
async def test_dashboard_rejects_bad_period(client: AsyncClient, params: dict) -> None:
    response = await client.get("/api/v1/dashboard/admin", params=params)
    assert response.status_code == 400
    assert response.json()["success"] is False
