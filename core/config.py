"""Invoicing configuration."""

from pydantic import BaseModel, Field


class InvoicingConfig(BaseModel):
    """
    Invoicing configuration.

    Defaults reproduce the behavior invoices have always had; override only
    for tenants that print reversing invoices differently.
    """

    # Reversal naming
    storno_name_suffix: str = Field(
        default=" - Storno",
        description="Appended to the name of a full reversing invoice",
        min_length=1,
    )
    partial_storno_name_suffix: str = Field(
        default=" - Partial Storno",
        description="Appended to the name of a partial reversing invoice",
        min_length=1,
    )

    # Numbering
    numbering_lock_timeout_seconds: int = Field(
        default=10,
        description="How long activation waits for the per-company numbering lock",
        ge=1,
        le=120,
    )

    # Listing
    default_list_limit: int = Field(
        default=200,
        description="Maximum invoices returned by list queries",
        ge=1,
        le=5000,
    )
