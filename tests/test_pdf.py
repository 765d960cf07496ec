"""
Quotation PDF rendering tests.
"""

from decimal import Decimal
from io import BytesIO

import pytest
from pypdf import PdfReader

from scholardesk.core.exceptions import RenderError
from scholardesk.models.quotation import DiscountType
from scholardesk.schemas.quotation import DiscountSpec, LineItem, QuotationBreakdown, TaxSpec
from scholardesk.services.calculator import calculate_breakdown
from scholardesk.services.pdf import QuotationRenderer


def many_items(count: int) -> tuple[LineItem, ...]:
    return tuple(
        LineItem(description=f"Work package {n}", quantity=1, unit_price=Decimal("150.00"))
        for n in range(1, count + 1)
    )


def page_texts(data: bytes) -> list[str]:
    reader = PdfReader(BytesIO(data))
    return [page.extract_text() for page in reader.pages]


@pytest.fixture
def renderer(identity) -> QuotationRenderer:
    return QuotationRenderer(identity)


def test_single_item_fits_on_one_page(renderer, make_document, tmp_path):
    document = make_document()
    breakdown = calculate_breakdown(document.line_items)
    target = tmp_path / "quotation.pdf"

    result = renderer.render(document, breakdown, target)

    assert target.read_bytes().startswith(b"%PDF")
    assert result.page_count == 1
    assert result.row_pages == (1,)
    assert len(page_texts(target.read_bytes())) == 1


def test_document_content(renderer, make_document):
    document = make_document(
        discount=DiscountSpec(value=Decimal("10"), type=DiscountType.PERCENTAGE),
        tax=TaxSpec(rate=Decimal("5")),
        line_items=(
            LineItem(description="Model training", quantity=1, unit_price=Decimal("1200.00")),
            LineItem(description="Report", quantity=2, unit_price=Decimal("400.00")),
        ),
    )
    breakdown = calculate_breakdown(document.line_items, document.discount, document.tax)

    data, _ = renderer.render_bytes(document, breakdown)
    text = page_texts(data)[0]

    assert "ZS-202501-0042" in text
    assert "05 January 2025" in text
    assert "04 February 2025" in text
    assert "Tendai Moyo" in text
    assert "$2,000.00" in text
    assert "Discount (10%)" in text
    assert "-$200.00" in text
    assert "Tax (5%)" in text
    assert "$1,890.00" in text
    assert "Thank you for choosing Scholarxafrica!" in text


def test_optional_lines_omitted(renderer, make_document):
    document = make_document(notes="")
    breakdown = calculate_breakdown(document.line_items)

    data, result = renderer.render_bytes(document, breakdown)
    text = page_texts(data)[0]

    assert "Discount" not in text
    assert "Tax (" not in text
    assert "Revision" not in text
    assert "notes" not in result.block_pages


def test_revision_shown_after_edit(renderer, make_document):
    document = make_document(revision=2, notes="Second draft")
    breakdown = calculate_breakdown(document.line_items)

    data, result = renderer.render_bytes(document, breakdown)
    text = page_texts(data)[0]

    assert "Revision" in text
    assert "ADDITIONAL NOTES" in text
    assert result.block_pages["notes"] == 1


def test_long_item_list_continues_on_second_page(renderer, make_document):
    document = make_document(line_items=many_items(30))
    breakdown = calculate_breakdown(document.line_items)

    data, result = renderer.render_bytes(document, breakdown)

    assert result.page_count == 2
    assert len(result.row_pages) == 30
    assert result.row_pages[0] == 1
    assert result.row_pages[-1] == 2
    assert list(result.row_pages) == sorted(result.row_pages)
    assert result.block_pages["line_items"] == 1
    assert result.block_pages["totals"] == 2
    assert result.block_pages["terms_and_conditions"] == 2

    texts = page_texts(data)
    assert len(texts) == 2
    # Column header repeated on the continuation page
    assert "Unit Price" in texts[1]
    assert "Work package 30" in texts[1]
    assert "TOTAL" in texts[1]
    assert "$4,500.00" in texts[1]
    assert "TERMS & CONDITIONS" in texts[1]


def test_user_text_is_escaped(renderer, make_document):
    document = make_document(
        client_name="O'Brien & <Sons>",
        line_items=(LineItem(description="Fix <b>bold</b> & more", quantity=1, unit_price=Decimal("10")),),
    )
    breakdown = calculate_breakdown(document.line_items)

    data, _ = renderer.render_bytes(document, breakdown)

    assert "O'Brien & <Sons>" in page_texts(data)[0]


def test_render_to_stream(renderer, make_document, tmp_path):
    document = make_document()
    breakdown = calculate_breakdown(document.line_items)
    target = tmp_path / "streamed.pdf"
    stream = open(target, "wb")

    result = renderer.render(document, breakdown, stream)

    assert stream.closed
    assert target.read_bytes().startswith(b"%PDF")
    assert result.page_count == 1


class BrokenStream(BytesIO):
    def write(self, data):
        raise OSError("device full")


def test_failed_stream_write_closes_stream(renderer, make_document):
    document = make_document()
    breakdown = calculate_breakdown(document.line_items)
    stream = BrokenStream()

    with pytest.raises(RenderError):
        renderer.render(document, breakdown, stream)

    assert stream.closed


def test_invalid_document_closes_stream(renderer, make_document):
    document = make_document(client_email="")
    breakdown = calculate_breakdown(document.line_items)
    stream = BytesIO()

    with pytest.raises(RenderError):
        renderer.render(document, breakdown, stream)

    assert stream.closed


def test_zero_total_is_rejected(renderer, make_document, tmp_path):
    document = make_document()
    breakdown = QuotationBreakdown(
        subtotal=Decimal("30.00"),
        discount_amount=Decimal("30.00"),
        tax_amount=Decimal("0.00"),
        total=Decimal("0.00"),
    )
    target = tmp_path / "quotation.pdf"

    with pytest.raises(RenderError):
        renderer.render(document, breakdown, target)

    assert not target.exists()
    assert list(tmp_path.iterdir()) == []


@pytest.mark.parametrize("field", ["client_email", "client_name", "quotation_number"])
def test_missing_required_field_is_rejected(renderer, make_document, field):
    document = make_document(**{field: ""})
    breakdown = calculate_breakdown(document.line_items)

    with pytest.raises(RenderError):
        renderer.render_bytes(document, breakdown)


def test_unwritable_target_leaves_nothing_behind(renderer, make_document, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    document = make_document()
    breakdown = calculate_breakdown(document.line_items)

    with pytest.raises(RenderError):
        renderer.render(document, breakdown, blocker / "quotation.pdf")

    assert sorted(p.name for p in tmp_path.iterdir()) == ["blocker"]


def test_rerender_replaces_existing_file(renderer, make_document, tmp_path):
    target = tmp_path / "quotation.pdf"
    target.write_bytes(b"stale")
    document = make_document()
    breakdown = calculate_breakdown(document.line_items)

    renderer.render(document, breakdown, target)

    assert target.read_bytes().startswith(b"%PDF")
    assert sorted(p.name for p in tmp_path.iterdir()) == ["quotation.pdf"]
