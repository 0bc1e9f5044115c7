from uuid import UUID

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.students import service as student_service
from app.core.models import PaymentObligation, PaymentReceipt, Student

MISSING_ID = "00000000-0000-0000-0000-000000000000"


@pytest.mark.asyncio
async def test_enrollment_numbers_follow_year_gender_sequence(
    client: AsyncClient, create_student, current_year: int
) -> None:
    yy = f"{current_year % 100:02d}"
    first = await create_student("Ahmad Fauzi", gender="L")
    second = await create_student("Budi Santoso", gender="L")
    girl = await create_student("Siti Aminah", gender="P")

    assert first["enrollment_number"] == f"{yy}01001"
    assert second["enrollment_number"] == f"{yy}01002"
    assert girl["enrollment_number"] == f"{yy}02001"
    assert "password_hash" not in first


@pytest.mark.asyncio
async def test_sequence_continues_after_highest_number(
    client: AsyncClient, create_student, current_year: int
) -> None:
    yy = f"{current_year % 100:02d}"
    await create_student("Manual", enrollment_number=f"{yy}01007")
    generated = await create_student("Generated")
    assert generated["enrollment_number"] == f"{yy}01008"


@pytest.mark.asyncio
async def test_duplicate_enrollment_number(client: AsyncClient, create_student) -> None:
    await create_student("Ahmad Fauzi", enrollment_number="2501001")
    response = await client.post(
        "/api/v1/students",
        json={"full_name": "Another", "class_name": "7A", "enrollment_number": "2501001"},
    )
    assert response.status_code == 409
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_generated_number_needs_gender(client: AsyncClient) -> None:
    response = await client.post("/api/v1/students", json={"full_name": "No Gender", "class_name": "7A"})
    assert response.status_code == 400
    assert "Gender" in response.json()["error"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"class_name": "7A", "gender": "L"},
        {"full_name": "Ahmad", "gender": "L"},
        {"full_name": "", "class_name": "7A", "gender": "L"},
        {"full_name": "Ahmad", "class_name": "7A", "gender": "X"},
        {"full_name": "Ahmad", "class_name": "7A", "gender": "L", "birth_date": "not-a-date"},
    ],
)
async def test_invalid_student_payload(client: AsyncClient, payload: dict) -> None:
    response = await client.post("/api/v1/students", json=payload)
    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_default_password_is_birth_date(client: AsyncClient, create_student) -> None:
    student = await create_student("Ahmad Fauzi", birth_date="2012-03-05")
    response = await client.post(
        "/api/v1/auth/login",
        json={"username": student["enrollment_number"], "password": "050312"},
    )
    assert response.status_code == 200
    assert response.json()["data"]["role"] == "student"


@pytest.mark.asyncio
async def test_default_password_without_birth_date_is_enrollment_number(
    client: AsyncClient, create_student
) -> None:
    student = await create_student("Ahmad Fauzi")
    number = student["enrollment_number"]
    response = await client.post("/api/v1/auth/login", json={"username": number, "password": number})
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_new_student_is_billed_for_this_years_batches(
    client: AsyncClient, db_session: AsyncSession, create_student, create_batch, current_year: int
) -> None:
    await create_batch(1, current_year, tuition=100000)
    await create_batch(2, current_year, tuition=100000, meals=20000)
    await create_batch(12, current_year - 1, tuition=90000)

    student = await create_student("Late Enrollee")

    response = await client.get(f"/api/v1/billing/student/{student['id']}")
    bills = response.json()["data"]
    assert sorted((b["batch"]["year"], b["batch"]["month"]) for b in bills) == [
        (current_year, 1),
        (current_year, 2),
    ]
    assert all(b["status"] == "Belum Lunas" for b in bills)

    count = (
        await db_session.execute(
            select(func.count(PaymentObligation.id)).where(PaymentObligation.student_id == UUID(student["id"]))
        )
    ).scalar()
    assert count == 2


@pytest.mark.asyncio
async def test_list_and_get_students(client: AsyncClient, create_student) -> None:
    await create_student("Zainal Abidin")
    ahmad = await create_student("Ahmad Fauzi", guardian_name="Hasan", address="Jl. Pesantren 1")

    names = [s["full_name"] for s in (await client.get("/api/v1/students")).json()["data"]]
    assert names == ["Ahmad Fauzi", "Zainal Abidin"]

    response = await client.get(f"/api/v1/students/{ahmad['id']}")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["guardian_name"] == "Hasan"
    assert data["address"] == "Jl. Pesantren 1"

    response = await client.get(f"/api/v1/students/{MISSING_ID}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_student(client: AsyncClient, create_student) -> None:
    student = await create_student("Ahmad Fauzi", guardian_name="Hasan", address="Jl. Lama")
    response = await client.put(
        f"/api/v1/students/{student['id']}",
        json={"full_name": "Ahmad Fauzi Rahman", "class_name": "8A", "address": None, "password": "rahasia"},
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["full_name"] == "Ahmad Fauzi Rahman"
    assert data["class_name"] == "8A"
    assert data["address"] is None
    # Not sent, so left untouched
    assert data["guardian_name"] == "Hasan"
    assert data["enrollment_number"] == student["enrollment_number"]

    login = await client.post(
        "/api/v1/auth/login",
        json={"username": student["enrollment_number"], "password": "rahasia"},
    )
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_update_to_taken_enrollment_number(client: AsyncClient, create_student) -> None:
    first = await create_student("Ahmad Fauzi")
    second = await create_student("Budi Santoso")
    response = await client.put(
        f"/api/v1/students/{second['id']}",
        json={"full_name": "Budi Santoso", "class_name": "7A", "enrollment_number": first["enrollment_number"]},
    )
    assert response.status_code == 409

    # Keeping its own number is fine
    response = await client.put(
        f"/api/v1/students/{second['id']}",
        json={"full_name": "Budi", "class_name": "7B", "enrollment_number": second["enrollment_number"]},
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_update_unknown_student(client: AsyncClient) -> None:
    response = await client.put(
        f"/api/v1/students/{MISSING_ID}", json={"full_name": "Nobody", "class_name": "7A"}
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_student_removes_bills_and_receipts(
    client: AsyncClient, db_session: AsyncSession, create_student, create_batch
) -> None:
    leaving = await create_student("Ahmad Fauzi")
    staying = await create_student("Siti Aminah", gender="P")
    await create_batch(1, 2026, tuition=100000)

    bills = (await client.get(f"/api/v1/billing/student/{leaving['id']}")).json()["data"]
    paid = await client.post("/api/v1/payments", json={"obligation_id": bills[0]["id"], "amount": 40000})
    assert paid.status_code == 200

    response = await client.delete(f"/api/v1/students/{leaving['id']}")
    assert response.status_code == 200
    assert response.json()["data"] == {"id": leaving["id"]}

    assert (await db_session.execute(select(func.count(PaymentReceipt.id)))).scalar() == 0
    remaining = (
        await db_session.execute(select(PaymentObligation.student_id))
    ).scalars().all()
    assert [str(sid) for sid in remaining] == [staying["id"]]
    assert (await db_session.execute(select(func.count(Student.id)))).scalar() == 1

    response = await client.delete(f"/api/v1/students/{leaving['id']}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_generated_number_taken_concurrently(client: AsyncClient, create_student, monkeypatch) -> None:
    first = await create_student("Ahmad Fauzi")

    async def same_number(db, payload, year):
        return first["enrollment_number"]

    monkeypatch.setattr(student_service, "_generate_enrollment_number", same_number)
    response = await client.post(
        "/api/v1/students", json={"full_name": "Budi Santoso", "class_name": "7A", "gender": "L"}
    )
    assert response.status_code == 409
    assert response.json()["error"] == "Could not assign an enrollment number, please retry"

    students = (await client.get("/api/v1/students")).json()["data"]
    assert [s["full_name"] for s in students] == ["Ahmad Fauzi"]
