"""Core domain models."""

from core.models.company import CompanyData, BankDetails, VatDetails
from core.models.invoice import (
    Invoice,
    InvoiceCreate,
    InvoiceUpdate,
    InvoiceItem,
    InvoiceStatus,
    ExtendedInfo,
    CurrencyDetails,
    RepetitiveData,
)
from core.models.status_change import StatusChange, StornoChange, PartialStornoChange

__all__ = [
    # Company
    "CompanyData", "BankDetails", "VatDetails",
    # Invoice
    "Invoice", "InvoiceCreate", "InvoiceUpdate", "InvoiceItem", "InvoiceStatus",
    "ExtendedInfo", "CurrencyDetails", "RepetitiveData",
    # Status changes
    "StatusChange", "StornoChange", "PartialStornoChange",
]
