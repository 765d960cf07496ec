"""
Customer, project and payment endpoint tests.
"""

import re
from datetime import date
from decimal import Decimal

import pytest
from httpx import AsyncClient


CUSTOMER_PAYLOAD = {
    "name": "Tendai Moyo",
    "email": "tendai@example.com",
    "phone": "+263 77 123 4567",
    "university": "University of Zimbabwe",
    "course": "BSc Computer Science",
    "status": "active",
    "tags": ["final-year"],
    "projects": [
        {"title": "Crop disease detection", "status": "in-progress", "budget": "300.00"},
        {"title": "Thesis formatting", "budget": "50.00"},
    ],
}


async def create_customer(client: AsyncClient, **overrides) -> dict:
    response = await client.post("/api/v1/admin/customers", json={**CUSTOMER_PAYLOAD, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


async def record_payment(client: AsyncClient, customer_id: int, **overrides) -> dict:
    payload = {
        "customer_id": customer_id,
        "amount": "100.00",
        "payment_method": "mobile_money",
        "payment_type": "deposit",
        "status": "completed",
        "paid_date": date.today().isoformat(),
        **overrides,
    }
    response = await client.post("/api/v1/admin/payments", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


# ===== Customers =====

@pytest.mark.asyncio
async def test_create_customer_with_projects(auth_client: AsyncClient):
    customer = await create_customer(auth_client)

    assert customer["project_count"] == 2
    assert customer["active_projects"] == 1
    assert Decimal(customer["total_revenue"]) == Decimal("0")
    assert Decimal(customer["outstanding_balance"]) == Decimal("350.00")


@pytest.mark.asyncio
async def test_duplicate_customer_email(auth_client: AsyncClient):
    await create_customer(auth_client)

    response = await auth_client.post(
        "/api/v1/admin/customers",
        json={**CUSTOMER_PAYLOAD, "email": "TENDAI@example.com", "projects": []},
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_list_customers_with_search(auth_client: AsyncClient):
    await create_customer(auth_client)
    await create_customer(auth_client, name="Rudo Chikore", email="rudo@example.com", status="lead", projects=[])

    response = await auth_client.get("/api/v1/admin/customers", params={"search": "chikore"})
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["email"] == "rudo@example.com"

    response = await auth_client.get("/api/v1/admin/customers", params={"status": "active"})
    assert response.json()["total"] == 1


@pytest.mark.asyncio
async def test_update_customer(auth_client: AsyncClient):
    customer = await create_customer(auth_client)

    response = await auth_client.put(
        f"/api/v1/admin/customers/{customer['id']}",
        json={"status": "vip", "notes": "Referred three friends"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "vip"
    assert data["notes"] == "Referred three friends"
    assert data["name"] == "Tendai Moyo"


@pytest.mark.asyncio
async def test_get_unknown_customer(auth_client: AsyncClient):
    response = await auth_client.get("/api/v1/admin/customers/999")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_project_changes_refresh_balance(auth_client: AsyncClient):
    customer = await create_customer(auth_client)
    customer_id = customer["id"]

    response = await auth_client.post(
        f"/api/v1/admin/customers/{customer_id}/projects",
        json={"title": "Dashboard", "budget": "150.00"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["project_count"] == 3
    assert Decimal(data["outstanding_balance"]) == Decimal("500.00")

    project_id = data["projects"][0]["id"]
    response = await auth_client.put(
        f"/api/v1/admin/customers/{customer_id}/projects/{project_id}",
        json={"budget": "200.00", "progress": 60},
    )
    data = response.json()
    assert data["projects"][0]["progress"] == 60
    assert Decimal(data["outstanding_balance"]) == Decimal("400.00")

    response = await auth_client.delete(f"/api/v1/admin/customers/{customer_id}/projects/{project_id}")
    data = response.json()
    assert data["project_count"] == 2
    assert Decimal(data["outstanding_balance"]) == Decimal("200.00")


@pytest.mark.asyncio
async def test_delete_customer(auth_client: AsyncClient):
    customer = await create_customer(auth_client)
    await record_payment(auth_client, customer["id"])

    response = await auth_client.delete(f"/api/v1/admin/customers/{customer['id']}")

    assert response.status_code == 200
    response = await auth_client.get(f"/api/v1/admin/customers/{customer['id']}")
    assert response.status_code == 404


# ===== Payments =====

@pytest.mark.asyncio
async def test_payment_invoice_number(auth_client: AsyncClient):
    customer = await create_customer(auth_client)

    first = await record_payment(auth_client, customer["id"])
    second = await record_payment(auth_client, customer["id"], status="pending", paid_date=None)

    year = date.today().year
    assert first["invoice_number"] == f"INV{year}00001"
    assert second["invoice_number"] == f"INV{year}00002"
    assert re.fullmatch(r"INV\d{4}\d{5}", first["invoice_number"])
    assert first["invoice_date"] == date.today().isoformat()
    assert first["customer"]["email"] == "tendai@example.com"


@pytest.mark.asyncio
async def test_invoice_number_not_reused_after_delete(auth_client: AsyncClient):
    customer = await create_customer(auth_client)
    payments = [await record_payment(auth_client, customer["id"]) for _ in range(3)]

    response = await auth_client.delete(f"/api/v1/admin/payments/{payments[0]['id']}")
    assert response.status_code == 200

    latest = await record_payment(auth_client, customer["id"])

    year = date.today().year
    assert latest["invoice_number"] == f"INV{year}00004"
    assert latest["invoice_number"] not in {p["invoice_number"] for p in payments}


@pytest.mark.asyncio
async def test_payment_for_unknown_customer(auth_client: AsyncClient):
    response = await auth_client.post(
        "/api/v1/admin/payments",
        json={"customer_id": 999, "amount": "10.00", "payment_method": "cash"},
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_only_completed_payments_count_as_revenue(auth_client: AsyncClient):
    customer = await create_customer(auth_client)
    customer_id = customer["id"]

    await record_payment(auth_client, customer_id, amount="120.00")
    pending = await record_payment(auth_client, customer_id, amount="80.00", status="pending")

    response = await auth_client.get(f"/api/v1/admin/customers/{customer_id}")
    data = response.json()
    assert Decimal(data["total_revenue"]) == Decimal("120.00")
    assert Decimal(data["outstanding_balance"]) == Decimal("230.00")

    response = await auth_client.put(
        f"/api/v1/admin/payments/{pending['id']}",
        json={"status": "completed"},
    )
    assert response.status_code == 200

    response = await auth_client.get(f"/api/v1/admin/customers/{customer_id}")
    data = response.json()
    assert Decimal(data["total_revenue"]) == Decimal("200.00")
    assert Decimal(data["outstanding_balance"]) == Decimal("150.00")


@pytest.mark.asyncio
async def test_outstanding_balance_never_negative(auth_client: AsyncClient):
    customer = await create_customer(auth_client)

    await record_payment(auth_client, customer["id"], amount="500.00")

    response = await auth_client.post(f"/api/v1/admin/customers/{customer['id']}/calculate-revenue")
    data = response.json()
    assert Decimal(data["total_revenue"]) == Decimal("500.00")
    assert Decimal(data["outstanding_balance"]) == Decimal("0")


@pytest.mark.asyncio
async def test_delete_payment_refreshes_revenue(auth_client: AsyncClient):
    customer = await create_customer(auth_client)
    payment = await record_payment(auth_client, customer["id"])

    response = await auth_client.delete(f"/api/v1/admin/payments/{payment['id']}")
    assert response.status_code == 200

    response = await auth_client.get(f"/api/v1/admin/customers/{customer['id']}")
    assert Decimal(response.json()["total_revenue"]) == Decimal("0")


@pytest.mark.asyncio
async def test_list_payments_filters(auth_client: AsyncClient):
    customer = await create_customer(auth_client)
    other = await create_customer(auth_client, email="rudo@example.com", projects=[])

    await record_payment(auth_client, customer["id"], amount="10.00")
    await record_payment(auth_client, customer["id"], amount="30.00", payment_method="cash")
    await record_payment(auth_client, other["id"], amount="20.00", status="pending", paid_date=None)

    response = await auth_client.get("/api/v1/admin/payments", params={"status": "completed"})
    assert response.json()["total"] == 2

    response = await auth_client.get("/api/v1/admin/payments", params={"payment_method": "cash"})
    assert [Decimal(p["amount"]) for p in response.json()["items"]] == [Decimal("30.00")]

    response = await auth_client.get(
        "/api/v1/admin/payments",
        params={"sort_by": "amount", "order": "asc"},
    )
    amounts = [Decimal(p["amount"]) for p in response.json()["items"]]
    assert amounts == [Decimal("10.00"), Decimal("20.00"), Decimal("30.00")]

    response = await auth_client.get(f"/api/v1/admin/customers/{other['id']}/payments")
    assert len(response.json()) == 1
