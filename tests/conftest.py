"""
Shared fixtures: one fully compliant MYR invoice that tests break on purpose
"""

from datetime import date

import pytest

from myinvois_compliance.models.invoice import (
    Buyer,
    BuyerAddress,
    CompleteInvoice,
    Invoice,
    InvoiceLine,
    Organization,
)


@pytest.fixture
def organization():
    return Organization(
        name="Teknologi Jaya Sdn Bhd",
        tin="C2581476930",
        industry_code="62010",
        is_sst_registered=True,
    )


@pytest.fixture
def buyer():
    return Buyer(
        name="Syarikat Pelanggan Bhd",
        tin="C7391046285",
        address=BuyerAddress(line1="12 Jalan Ampang", city="Kuala Lumpur", postcode="50450"),
    )


@pytest.fixture
def line():
    return InvoiceLine(
        line_number=1,
        item_description="Professional Consulting Services",
        quantity="1.000",
        unit_price="1000.00",
        discount_amount="0.00",
        line_total="1000.00",
        sst_rate="6.00",
        sst_amount="60.00",
    )


@pytest.fixture
def invoice():
    return Invoice(
        invoice_number="INV-2024-001",
        issue_date=date(2024, 1, 15),
        due_date=date(2024, 2, 15),
        currency="MYR",
        exchange_rate="1.000000",
        subtotal="1000.00",
        total_discount="0.00",
        sst_amount="60.00",
        grand_total="1060.00",
    )


@pytest.fixture
def lines(line):
    return [line]


@pytest.fixture
def complete_invoice(invoice, lines, buyer):
    return CompleteInvoice(invoice=invoice, line_items=lines, buyer=buyer)


@pytest.fixture
def invoice_document():
    """JSON shape accepted by InvoiceDataLoader"""
    return {
        "organization": {
            "name": "Teknologi Jaya Sdn Bhd",
            "tin": "C2581476930",
            "industry_code": "62010",
            "is_sst_registered": True,
        },
        "invoice": {
            "invoice_number": "INV-2024-001",
            "issue_date": "2024-01-15",
            "due_date": "2024-02-15",
            "subtotal": "1000.00",
            "sst_amount": "60.00",
            "grand_total": "1060.00",
        },
        "line_items": [
            {
                "line_number": 1,
                "item_description": "Professional Consulting Services",
                "quantity": "1.000",
                "unit_price": "1000.00",
                "line_total": "1000.00",
                "sst_rate": "6.00",
                "sst_amount": "60.00",
            }
        ],
        "buyer": {"name": "Syarikat Pelanggan Bhd", "tin": "C7391046285"},
    }
