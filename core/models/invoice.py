"""Invoice domain models.

Amounts are Decimal. Percentages are stored as percentages (19 = 19%).
Totals and the due date are never stored: they are properties computed from
the current items, taxes and discounts every time they are read.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import IntEnum
from uuid import UUID

from pydantic import BaseModel, Field

from core import money
from core.models.company import CompanyData


class InvoiceStatus(IntEnum):
    """
    Invoice lifecycle status.

    Ordered: anything greater than DRAFT has been issued and is numbered.
    STORNO and PARTIAL_STORNO mark reversing invoices.
    """

    DRAFT = 0
    ACTIVE = 1
    PAID = 2
    STORNO = 3
    PARTIAL_STORNO = 4

    @property
    def readable(self) -> str:
        """'PARTIAL_STORNO' -> 'Partial Storno'."""
        return self.name.replace("_", " ").title()


class ExtendedInfo(BaseModel):
    """Invoice-level tax or discount line, either a percentage or a flat amount."""

    name: str = Field(..., max_length=255)
    value: Decimal = Decimal(0)
    is_percentage: bool = False


class InvoiceItem(BaseModel):
    """One billable line. Quantity is negative on reversing invoices."""

    nr_crt: int = 0
    item_id: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=2000)
    quantity: int = 0
    price: Decimal = Decimal(0)
    vat_tax_value: Decimal = Field(Decimal(0), ge=0)
    other_tax_value: Decimal = Field(Decimal(0), ge=0)
    discount_value: Decimal = Field(Decimal(0), ge=0, le=100)

    @property
    def amount(self) -> Decimal:
        return money.item_amount(self)

    @property
    def vat_amount(self) -> Decimal:
        return money.item_vat_amount(self)

    @property
    def discount_amount(self) -> Decimal:
        return money.item_discount_amount(self)

    @property
    def other_taxes_amount(self) -> Decimal:
        return money.item_other_taxes_amount(self)

    @property
    def total_amount(self) -> Decimal:
        return money.item_total(self)


class CurrencyDetails(BaseModel):
    """Invoice currency. exchange_rate: 1 selected = exchange_rate base currency."""

    selected: str | None = None
    base_currency: str = ""
    exchange_rate: float = 1.0

    @property
    def selected_currency(self) -> str:
        """The selected currency, or the base currency when none was chosen."""
        return self.selected or self.base_currency


class RepetitiveData(BaseModel):
    """Schedule for re-issuing an invoice every `days` days within a window."""

    is_active: bool = False
    days: int = Field(0, ge=0)
    start_on: date = Field(default_factory=date.today)
    end_on: date = Field(default_factory=date.today)


class InvoiceCreate(BaseModel):
    """
    Data required to draft an invoice.

    Business validation (non-empty items, issuing company) runs in the
    service so that failures come back as results, not exceptions.
    """

    name: str = Field(..., min_length=1, max_length=255)
    company: CompanyData
    client: CompanyData
    client_bank_account: str | None = Field(None, max_length=100)
    description: str | None = Field(None, max_length=2000)
    series: str | None = Field(None, max_length=20)
    issue_date: date
    language: str | None = Field(None, max_length=10)
    currency: CurrencyDetails = Field(default_factory=CurrencyDetails)
    payment_term: str | None = Field(None, max_length=20)
    note: str | None = Field(None, max_length=2000)
    type: str | None = Field(None, max_length=50)
    template: str | None = Field(None, max_length=100)
    items: list[InvoiceItem] = Field(default_factory=list)
    taxes: list[ExtendedInfo] = Field(default_factory=list)
    discounts: list[ExtendedInfo] = Field(default_factory=list)

    # Transport, delivery and legal mentions printed on the invoice
    split_vat: bool = False
    split_vat_bank_accounts: str | None = None
    client_legal_representative: str | None = Field(None, max_length=255)
    user_legal_representative: str | None = Field(None, max_length=255)
    delivery_date: date | None = None
    means_of_transportation: str | None = Field(None, max_length=255)
    advance_payment_date: date | None = None
    advance_payment_amount: Decimal = Decimal(0)
    reverse_taxes: bool = False


class InvoiceUpdate(BaseModel):
    """Data that can be updated on a draft invoice. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    client: CompanyData | None = None
    client_bank_account: str | None = Field(None, max_length=100)
    description: str | None = Field(None, max_length=2000)
    series: str | None = Field(None, max_length=20)
    issue_date: date | None = None
    language: str | None = Field(None, max_length=10)
    currency: CurrencyDetails | None = None
    payment_term: str | None = Field(None, max_length=20)
    note: str | None = Field(None, max_length=2000)
    type: str | None = Field(None, max_length=50)
    template: str | None = Field(None, max_length=100)
    items: list[InvoiceItem] | None = None
    taxes: list[ExtendedInfo] | None = None
    discounts: list[ExtendedInfo] | None = None
    split_vat: bool | None = None
    split_vat_bank_accounts: str | None = None
    client_legal_representative: str | None = Field(None, max_length=255)
    user_legal_representative: str | None = Field(None, max_length=255)
    delivery_date: date | None = None
    means_of_transportation: str | None = Field(None, max_length=255)
    advance_payment_date: date | None = None
    advance_payment_amount: Decimal | None = None
    reverse_taxes: bool | None = None


class Invoice(BaseModel):
    """Full invoice entity as stored."""

    id: UUID
    tenant_id: UUID
    company_id: UUID
    client_id: UUID
    created_by: UUID
    name: str
    company: CompanyData
    client: CompanyData
    client_bank_account: str | None = None
    description: str | None = None
    series: str | None = None
    number: int = 0
    issue_date: date
    language: str | None = None
    currency: CurrencyDetails = Field(default_factory=CurrencyDetails)
    payment_term: str | None = None
    note: str | None = None
    type: str | None = None
    template: str | None = None
    status: InvoiceStatus = InvoiceStatus.DRAFT
    items: list[InvoiceItem] = Field(default_factory=list)
    taxes: list[ExtendedInfo] = Field(default_factory=list)
    discounts: list[ExtendedInfo] = Field(default_factory=list)

    related_to_invoice_id: UUID | None = None
    related_to_invoice_mentions: str | None = None
    repetitive_data: RepetitiveData | None = None

    split_vat: bool = False
    split_vat_bank_accounts: str | None = None
    client_legal_representative: str | None = None
    user_legal_representative: str | None = None
    delivery_date: date | None = None
    means_of_transportation: str | None = None
    advance_payment_date: date | None = None
    advance_payment_amount: Decimal = Decimal(0)
    reverse_taxes: bool = False

    is_deleted: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @property
    def due_date(self) -> date:
        """Issue date plus payment term days (1 day when the term isn't a number)."""
        return money.due_date(self.issue_date, self.payment_term)

    @property
    def subtotal_amount(self) -> Decimal:
        return money.subtotal(self.items)

    @property
    def total_amount(self) -> Decimal:
        """Subtotal adjusted by invoice-level taxes and discounts."""
        return money.grand_total(self.items, self.taxes, self.discounts)

    @property
    def is_draft(self) -> bool:
        return self.status == InvoiceStatus.DRAFT

    def to_details(self) -> dict:
        """JSON-ready dict including the derived amounts, for read models and responses."""
        data = self.model_dump(mode="json")
        data["status_text"] = self.status.readable
        data["due_date"] = self.due_date.isoformat()
        data["subtotal_amount"] = str(money.round_money(self.subtotal_amount))
        data["total_amount"] = str(money.round_money(self.total_amount))
        data["currency"]["selected"] = self.currency.selected_currency
        return data
