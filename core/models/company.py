"""Issuer and client company profiles.

Invoices keep a snapshot of both profiles as they were when the invoice was
drafted; the profiles themselves are owned by the companies module.
"""

from uuid import UUID

from pydantic import BaseModel, Field


class BankDetails(BaseModel):
    """One bank account of a company."""

    bank_name: str | None = None
    bank_account: str | None = None
    bank_account_currency: str | None = None
    swift_bic_code: str | None = None


class VatDetails(BaseModel):
    """A VAT-at-payment registration period, as published by the tax authority."""

    type_description: str | None = None
    type: str | None = None
    published_on: str | None = None
    updated_on: str | None = None
    start: str | None = None
    end: str | None = None


class CompanyData(BaseModel):
    """Identity, legal and banking profile of an issuer or a client."""

    id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    email: str | None = Field(None, max_length=255)
    postal_address: str | None = Field(None, max_length=500)
    zip_code: str | None = Field(None, max_length=20)
    city: str | None = Field(None, max_length=100)
    area_or_state: str | None = Field(None, max_length=100)
    country: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=50)
    website: str | None = Field(None, max_length=255)

    # Legal details
    fiscal_code: str | None = Field(None, max_length=50)
    trade_register_number: str | None = Field(None, max_length=50)
    is_individual: bool = False
    vat_code: str | None = Field(None, max_length=50)
    eu_vat_code: str | None = Field(None, max_length=50)
    using_vat: bool = False
    is_faded: bool = False
    status: str | None = None
    vat_at_payment: list[VatDetails] = Field(default_factory=list)
    is_using_vat_at_payment: bool = False

    subscribed_revenue: str | None = None
    subscribed_revenue_currency: str | None = None
    capitalized_revenue: str | None = None
    capitalized_revenue_currency: str | None = None

    bank_accounts: list[BankDetails] = Field(default_factory=list)
