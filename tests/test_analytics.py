"""
Analytics endpoint tests.
"""

from datetime import date

import pytest
from httpx import AsyncClient


async def seed(client: AsyncClient) -> int:
    response = await client.post(
        "/api/v1/admin/customers",
        json={
            "name": "Tendai Moyo",
            "email": "tendai@example.com",
            "phone": "+263 77 123 4567",
            "status": "vip",
            "projects": [{"title": "Crop disease detection", "status": "in-progress", "budget": "400"}],
        },
    )
    customer_id = response.json()["id"]

    today = date.today().isoformat()
    for amount, method, status in (
        ("100.00", "mobile_money", "completed"),
        ("150.00", "bank_transfer", "completed"),
        ("75.00", "cash", "pending"),
    ):
        response = await client.post(
            "/api/v1/admin/payments",
            json={
                "customer_id": customer_id,
                "amount": amount,
                "payment_method": method,
                "status": status,
                "paid_date": today if status == "completed" else None,
            },
        )
        assert response.status_code == 201
    return customer_id


@pytest.mark.asyncio
async def test_revenue_analytics(auth_client: AsyncClient):
    customer_id = await seed(auth_client)
    today = date.today()

    response = await auth_client.get(
        "/api/v1/admin/analytics/revenue",
        params={"year": today.year, "month": today.month},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["period"] == {"year": today.year, "month": today.month}
    assert data["monthly"] == {"total": 250.0, "count": 2}
    assert data["yearly_by_month"] == [{"month": today.month, "total": 250.0, "count": 2}]
    assert data["pending"] == [{"status": "pending", "total": 75.0, "count": 1}]
    assert data["top_customers"][0]["id"] == customer_id
    assert data["top_customers"][0]["total_revenue"] == 250.0
    methods = {m["method"]: m["total"] for m in data["payment_methods"]}
    assert methods == {"mobile_money": 100.0, "bank_transfer": 150.0}


@pytest.mark.asyncio
async def test_revenue_analytics_empty_period(auth_client: AsyncClient):
    await seed(auth_client)

    response = await auth_client.get(
        "/api/v1/admin/analytics/revenue",
        params={"year": 2001, "month": 1},
    )

    data = response.json()
    assert data["monthly"] == {"total": 0.0, "count": 0}
    assert data["yearly_by_month"] == []


@pytest.mark.asyncio
async def test_customer_analytics(auth_client: AsyncClient):
    await seed(auth_client)

    response = await auth_client.get("/api/v1/admin/analytics/customers")

    assert response.json() == {
        "total": 1,
        "active": 0,
        "vip": 1,
        "leads": 0,
        "with_active_projects": 1,
    }


@pytest.mark.asyncio
async def test_overview_stats(auth_client: AsyncClient, create_quote_request):
    first = await create_quote_request()
    await create_quote_request(email="rudo@example.com")
    await auth_client.post(
        f"/api/v1/admin/quote-requests/{first}/quotation",
        json={"line_items": [{"description": "Development", "quantity": 1, "unit_price": "150.00"}]},
    )

    response = await auth_client.get("/api/v1/admin/stats")

    assert response.status_code == 200
    data = response.json()
    assert data["total_quote_requests"] == 2
    assert data["recent_quote_requests"] == 2
    assert data["quotations_issued"] == 1
    assert data["customer_count"] == 0
    assert data["quote_requests_by_status"]["pending"] == 1
    assert data["quote_requests_by_status"]["quoted"] == 1


@pytest.mark.asyncio
async def test_analytics_require_admin(client: AsyncClient):
    response = await client.get("/api/v1/admin/stats")

    assert response.status_code == 401
