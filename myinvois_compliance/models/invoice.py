"""
Invoice data models using Pydantic

Monetary and quantity fields are kept as fixed-point strings exactly as the
caller supplied them. They are parsed leniently at comparison time
(see utils.decimals) so a malformed amount produces a finding, not a crash.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EInvoiceType(str, Enum):
    INVOICE = "01"
    CREDIT_NOTE = "02"
    DEBIT_NOTE = "03"
    REFUND_NOTE = "04"


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    VALIDATED = "validated"
    SUBMITTED = "submitted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


def _amount_to_str(value):
    """Accept numbers for amount fields but store them as strings"""
    if value is None:
        return value
    if isinstance(value, bool):
        raise ValueError("amount must be a number or decimal string")
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    return value


class Organization(BaseModel):
    """Supplier issuing the invoice"""
    model_config = ConfigDict(frozen=True)

    tin: str = ""
    industry_code: Optional[str] = None
    is_sst_registered: bool = False
    name: Optional[str] = None


class BuyerAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    line1: Optional[str] = None
    line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postcode: Optional[str] = None
    country: str = "MY"


class Buyer(BaseModel):
    """Invoice recipient. Absent only on consolidated B2C invoices."""
    model_config = ConfigDict(frozen=True)

    name: str
    tin: Optional[str] = None
    address: Optional[BuyerAddress] = None
    is_individual: bool = False
    country_code: str = "MY"


class InvoiceLine(BaseModel):
    """Individual line item in invoice"""
    model_config = ConfigDict(frozen=True)

    line_number: int = Field(gt=0)
    item_description: str
    quantity: str
    unit_price: str
    line_total: str
    discount_amount: str = "0.00"
    sst_rate: str = "0.00"
    sst_amount: str = "0.00"
    tax_exemption_code: Optional[str] = None
    item_sku: Optional[str] = None

    @field_validator(
        'quantity', 'unit_price', 'line_total', 'discount_amount', 'sst_rate', 'sst_amount',
        mode='before'
    )
    @classmethod
    def _coerce_amounts(cls, value):
        return _amount_to_str(value)


class Invoice(BaseModel):
    """Invoice header"""
    model_config = ConfigDict(frozen=True)

    invoice_number: str
    issue_date: date
    e_invoice_type: EInvoiceType = EInvoiceType.INVOICE
    due_date: Optional[date] = None
    currency: str = "MYR"
    exchange_rate: str = "1.000000"
    is_consolidated: bool = False
    consolidation_period: Optional[str] = None
    reference_invoice_id: Optional[str] = None

    # Totals
    subtotal: str = "0.00"
    total_discount: str = "0.00"
    sst_amount: str = "0.00"
    grand_total: str = "0.00"

    status: InvoiceStatus = InvoiceStatus.DRAFT
    validation_score: int = Field(default=0, ge=0, le=100)
    notes: Optional[str] = None

    @field_validator('exchange_rate', 'subtotal', 'total_discount', 'sst_amount', 'grand_total', mode='before')
    @classmethod
    def _coerce_amounts(cls, value):
        return _amount_to_str(value)

    @field_validator('currency')
    @classmethod
    def _normalize_currency(cls, value: str) -> str:
        return value.strip().upper()

    def is_foreign_currency(self) -> bool:
        return self.currency != "MYR"

    def requires_reference(self) -> bool:
        """Credit and debit notes must point at the original invoice"""
        return self.e_invoice_type in (EInvoiceType.CREDIT_NOTE, EInvoiceType.DEBIT_NOTE)


class CompleteInvoice(BaseModel):
    """Header, lines and buyer bundled together"""
    model_config = ConfigDict(frozen=True)

    invoice: Invoice
    line_items: List[InvoiceLine] = Field(default_factory=list)
    buyer: Optional[Buyer] = None
