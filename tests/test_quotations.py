"""
Quote request and quotation workflow tests.
"""

from decimal import Decimal
from io import BytesIO
from pathlib import Path

import pytest
from httpx import AsyncClient
from pypdf import PdfReader
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from scholardesk.schemas.quotation import QuotationCreate
from scholardesk.schemas.quote_request import QuoteRequestCreate
from scholardesk.services.email import EmailService
from scholardesk.services.quotation import QuotationService
from scholardesk.services.quote_request import QuoteRequestService


QUOTATION_PAYLOAD = {
    "line_items": [
        {"description": "Model training", "quantity": 1, "unit_price": "120.00"},
        {"description": "Report writing", "quantity": 2, "unit_price": "40.00"},
        {"description": "", "quantity": 1, "unit_price": "99.00"},
    ],
    "discount": "10",
    "discount_type": "percentage",
    "tax_rate": "5",
    "notes": "Includes two rounds of revisions.",
}


def quotation_url(quote_request_id: int) -> str:
    return f"/api/v1/admin/quote-requests/{quote_request_id}/quotation"


# ===== Public submission =====

@pytest.mark.asyncio
async def test_submit_quote_request(client: AsyncClient, create_quote_request):
    quote_request_id = await create_quote_request()

    assert quote_request_id > 0


@pytest.mark.asyncio
async def test_submit_quote_request_validation(client: AsyncClient):
    response = await client.post(
        "/api/v1/quote-requests",
        json={"name": "T", "email": "not-an-email", "project_type": "Machine Learning"},
    )

    assert response.status_code == 422
    data = response.json()
    assert data["detail"] == "Validation error"
    assert any("email" in error["field"] for error in data["errors"])


@pytest.mark.asyncio
async def test_list_and_filter_quote_requests(auth_client: AsyncClient, create_quote_request):
    first = await create_quote_request()
    await create_quote_request(name="Rudo Chikore", email="rudo@example.com")
    await auth_client.post(quotation_url(first), json=QUOTATION_PAYLOAD)

    response = await auth_client.get("/api/v1/admin/quote-requests")
    assert response.status_code == 200
    assert response.json()["total"] == 2

    response = await auth_client.get("/api/v1/admin/quote-requests", params={"status": "quoted"})
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["id"] == first

    response = await auth_client.get("/api/v1/admin/quote-requests", params={"search": "rudo"})
    assert [item["name"] for item in response.json()["items"]] == ["Rudo Chikore"]


@pytest.mark.asyncio
async def test_update_quote_request_status(auth_client: AsyncClient, create_quote_request):
    quote_request_id = await create_quote_request()

    response = await auth_client.patch(
        f"/api/v1/admin/quote-requests/{quote_request_id}/status",
        json={"status": "rejected", "notes": "Out of scope"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "rejected"
    assert data["notes"] == "Out of scope"


# ===== Quotation workflow =====

@pytest.mark.asyncio
async def test_generate_quotation(auth_client: AsyncClient, create_quote_request, storage: Path):
    quote_request_id = await create_quote_request()

    response = await auth_client.post(quotation_url(quote_request_id), json=QUOTATION_PAYLOAD)

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["success"] is True
    assert data["email_sent"] is False
    assert data["warning"] is True

    quotation = data["quotation"]
    assert quotation["quotation_number"].startswith("ZS-")
    assert quotation["revision"] == 1
    assert len(quotation["line_items"]) == 2
    assert Decimal(quotation["subtotal"]) == Decimal("200.00")
    assert Decimal(quotation["discount_amount"]) == Decimal("20.00")
    assert Decimal(quotation["tax_amount"]) == Decimal("9.00")
    assert Decimal(quotation["total"]) == Decimal("189.00")
    assert data["download_url"] == f"/api/v1/admin/quotations/{quotation['quotation_number']}/pdf"
    assert (storage / f"quotation-{quotation['quotation_number']}.pdf").is_file()

    response = await auth_client.get(f"/api/v1/admin/quote-requests/{quote_request_id}")
    quote_request = response.json()
    assert quote_request["status"] == "quoted"
    assert Decimal(quote_request["quoted_price"]) == Decimal("189.00")
    assert quote_request["quotation"]["id"] == quotation["id"]


@pytest.mark.asyncio
async def test_stored_quotation_matches_priced_inputs(auth_client: AsyncClient, create_quote_request):
    quote_request_id = await create_quote_request()
    payload = {
        "line_items": [
            {"description": "Data cleaning", "quantity": 3, "unit_price": "33.33"},
            {"description": "Dashboard", "quantity": 1, "unit_price": "100.01"},
        ],
        "discount": "12.345",
        "discount_type": "percentage",
        "tax_rate": "7.125",
    }

    response = await auth_client.post(quotation_url(quote_request_id), json=payload)
    assert response.status_code == 201, response.text

    response = await auth_client.get(f"/api/v1/admin/quote-requests/{quote_request_id}")
    stored = response.json()["quotation"]
    assert Decimal(stored["discount_value"]) == Decimal("12.345")
    assert Decimal(stored["tax_rate"]) == Decimal("7.125")
    assert sum(Decimal(item["amount"]) for item in stored["line_items"]) == Decimal(stored["subtotal"])
    assert Decimal(stored["subtotal"]) == Decimal("200.00")
    assert Decimal(stored["discount_amount"]) == Decimal("24.69")
    assert Decimal(stored["tax_amount"]) == Decimal("12.49")
    assert Decimal(stored["total"]) == Decimal("187.80")


@pytest.mark.asyncio
async def test_generate_rejects_sub_cent_price(auth_client: AsyncClient, create_quote_request):
    quote_request_id = await create_quote_request()
    payload = {
        "line_items": [{"description": "Survey analysis", "quantity": 1, "unit_price": "10.005"}],
    }

    response = await auth_client.post(quotation_url(quote_request_id), json=payload)

    assert response.status_code == 422
    assert any("unit_price" in error["field"] for error in response.json()["errors"])


@pytest.mark.asyncio
async def test_generate_quotation_with_email(
    auth_client: AsyncClient,
    create_quote_request,
    monkeypatch,
):
    sent = []

    async def fake_send(self, document, breakdown, pdf_path):
        sent.append((document.client_email, pdf_path))
        return True

    monkeypatch.setattr(EmailService, "send_quotation", fake_send)
    quote_request_id = await create_quote_request()

    response = await auth_client.post(quotation_url(quote_request_id), json=QUOTATION_PAYLOAD)

    data = response.json()
    assert data["email_sent"] is True
    assert data["warning"] is False
    assert data["quotation"]["sent_at"] is not None
    assert sent[0][0] == "tendai@example.com"


@pytest.mark.asyncio
async def test_generate_twice_conflicts(auth_client: AsyncClient, create_quote_request):
    quote_request_id = await create_quote_request()
    await auth_client.post(quotation_url(quote_request_id), json=QUOTATION_PAYLOAD)

    response = await auth_client.post(quotation_url(quote_request_id), json=QUOTATION_PAYLOAD)

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_generate_for_unknown_request(auth_client: AsyncClient):
    response = await auth_client.post(quotation_url(999), json=QUOTATION_PAYLOAD)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_generate_without_valid_items(
    auth_client: AsyncClient,
    create_quote_request,
    storage: Path,
):
    quote_request_id = await create_quote_request()
    payload = {"line_items": [{"description": "", "quantity": 1, "unit_price": "10"}]}

    response = await auth_client.post(quotation_url(quote_request_id), json=payload)

    assert response.status_code == 400
    assert response.json()["code"] == "no_valid_line_items"
    assert not storage.exists() or list(storage.iterdir()) == []

    response = await auth_client.get(f"/api/v1/admin/quote-requests/{quote_request_id}")
    assert response.json()["status"] == "pending"
    assert response.json()["quotation"] is None


@pytest.mark.asyncio
async def test_generate_with_zero_total(auth_client: AsyncClient, create_quote_request):
    quote_request_id = await create_quote_request()
    payload = {
        "line_items": [{"description": "Consultation", "quantity": 1, "unit_price": "30.00"}],
        "discount": "50.00",
        "discount_type": "fixed",
    }

    response = await auth_client.post(quotation_url(quote_request_id), json=payload)

    assert response.status_code == 400
    assert response.json()["code"] == "non_positive_total"


@pytest.mark.asyncio
async def test_edit_quotation_keeps_number(
    auth_client: AsyncClient,
    create_quote_request,
    storage: Path,
):
    quote_request_id = await create_quote_request()
    response = await auth_client.post(quotation_url(quote_request_id), json=QUOTATION_PAYLOAD)
    original = response.json()["quotation"]

    response = await auth_client.put(
        quotation_url(quote_request_id),
        json={
            "line_items": [{"description": "Full project", "quantity": 1, "unit_price": "300.00"}],
            "tax_rate": "15",
        },
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["message"] == "Quotation updated successfully"
    quotation = data["quotation"]
    assert quotation["quotation_number"] == original["quotation_number"]
    assert quotation["id"] == original["id"]
    assert quotation["revision"] == 2
    assert [item["description"] for item in quotation["line_items"]] == ["Full project"]
    assert Decimal(quotation["total"]) == Decimal("345.00")
    assert len(list(storage.glob("*.pdf"))) == 1


@pytest.mark.asyncio
async def test_failed_edit_keeps_stored_pdf(db_session: AsyncSession, storage: Path, monkeypatch):
    """An edit whose database write fails leaves the previous PDF in place."""
    quote_request = await QuoteRequestService(db_session).create(
        QuoteRequestCreate(
            name="Tendai Moyo",
            email="tendai@example.com",
            phone="+263 77 123 4567",
            university="University of Zimbabwe",
            course="BSc Computer Science",
            project_type="Machine Learning",
            description="Crop disease detection from leaf images using a CNN.",
        )
    )
    service = QuotationService(db_session)
    quotation, _ = await service.generate(
        quote_request,
        QuotationCreate(line_items=[{"description": "Development", "quantity": 1, "unit_price": "150.00"}]),
    )
    pdf_path = Path(quotation.pdf_path)
    original = pdf_path.read_bytes()

    async def failing_flush(*args, **kwargs):
        raise SQLAlchemyError("database unavailable")

    monkeypatch.setattr(db_session, "flush", failing_flush)

    with pytest.raises(SQLAlchemyError):
        await service.update(
            quote_request,
            QuotationCreate(line_items=[{"description": "Development", "quantity": 2, "unit_price": "400.00"}]),
        )

    assert pdf_path.read_bytes() == original
    assert sorted(p.name for p in storage.iterdir()) == [pdf_path.name]


@pytest.mark.asyncio
async def test_edit_without_quotation(auth_client: AsyncClient, create_quote_request):
    quote_request_id = await create_quote_request()

    response = await auth_client.put(quotation_url(quote_request_id), json=QUOTATION_PAYLOAD)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_download_quotation_pdf(auth_client: AsyncClient, create_quote_request):
    quote_request_id = await create_quote_request()
    payload = {
        "line_items": [
            {"description": f"Milestone {n}", "quantity": 1, "unit_price": "25.00"}
            for n in range(1, 31)
        ],
    }
    response = await auth_client.post(quotation_url(quote_request_id), json=payload)
    download_url = response.json()["download_url"]

    response = await auth_client.get(download_url)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    reader = PdfReader(BytesIO(response.content))
    assert len(reader.pages) == 2
    assert "$750.00" in reader.pages[1].extract_text()


@pytest.mark.asyncio
async def test_download_unknown_quotation(auth_client: AsyncClient):
    response = await auth_client.get("/api/v1/admin/quotations/ZS-202501-0000/pdf")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_quotation(auth_client: AsyncClient, create_quote_request, storage: Path):
    quote_request_id = await create_quote_request()
    response = await auth_client.post(quotation_url(quote_request_id), json=QUOTATION_PAYLOAD)
    download_url = response.json()["download_url"]

    response = await auth_client.delete(quotation_url(quote_request_id))

    assert response.status_code == 200
    assert list(storage.glob("*.pdf")) == []

    response = await auth_client.get(f"/api/v1/admin/quote-requests/{quote_request_id}")
    data = response.json()
    assert data["status"] == "pending"
    assert data["quoted_price"] is None
    assert data["quotation"] is None

    response = await auth_client.get(download_url)
    assert response.status_code == 404

    # A new quotation can be generated again
    response = await auth_client.post(quotation_url(quote_request_id), json=QUOTATION_PAYLOAD)
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_delete_quote_request_removes_pdf(
    auth_client: AsyncClient,
    create_quote_request,
    storage: Path,
):
    quote_request_id = await create_quote_request()
    await auth_client.post(quotation_url(quote_request_id), json=QUOTATION_PAYLOAD)

    response = await auth_client.delete(f"/api/v1/admin/quote-requests/{quote_request_id}")

    assert response.status_code == 200
    assert list(storage.glob("*.pdf")) == []
    response = await auth_client.get(f"/api/v1/admin/quote-requests/{quote_request_id}")
    assert response.status_code == 404


# ===== Calculation preview =====

@pytest.mark.asyncio
async def test_calculate_preview(auth_client: AsyncClient):
    response = await auth_client.post(
        "/api/v1/admin/quotations/calculate",
        json=QUOTATION_PAYLOAD,
    )

    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["subtotal"]) == Decimal("200.00")
    assert Decimal(data["total"]) == Decimal("189.00")
    assert [item["description"] for item in data["line_items"]] == ["Model training", "Report writing"]
    assert Decimal(data["line_items"][1]["amount"]) == Decimal("80.00")


@pytest.mark.asyncio
async def test_calculate_accepts_tax_rate_above_hundred(auth_client: AsyncClient):
    payload = {
        "line_items": [{"description": "Import duty pass-through", "quantity": 1, "unit_price": "200.00"}],
        "tax_rate": "150",
    }

    response = await auth_client.post("/api/v1/admin/quotations/calculate", json=payload)

    assert response.status_code == 200, response.text
    data = response.json()
    assert Decimal(data["tax_amount"]) == Decimal("300.00")
    assert Decimal(data["total"]) == Decimal("500.00")


@pytest.mark.asyncio
async def test_calculate_requires_admin(client: AsyncClient):
    response = await client.post("/api/v1/admin/quotations/calculate", json=QUOTATION_PAYLOAD)

    assert response.status_code == 401
