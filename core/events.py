"""
Domain events for invoicing.

Immutable event objects that represent invoice state changes. The service
publishes what happened after the write has committed; handlers react
without the publisher knowing who's listening.

Events carry the full invoice so handlers don't need to re-fetch state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from utils.timezone import now_utc


@dataclass(frozen=True, kw_only=True)
class InvoicingEvent:
    """Base class for all invoicing domain events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)


@dataclass(frozen=True)
class InvoiceCreated(InvoicingEvent):
    """A new invoice was drafted."""
    invoice: Any = None  # Invoice; Any avoids a circular import

    @classmethod
    def create(cls, invoice: Any) -> "InvoiceCreated":
        return cls(invoice=invoice)


@dataclass(frozen=True)
class InvoiceActivated(InvoicingEvent):
    """A draft was issued and received its sequence number."""
    invoice: Any = None

    @classmethod
    def create(cls, invoice: Any) -> "InvoiceActivated":
        return cls(invoice=invoice)


@dataclass(frozen=True)
class InvoiceStatusChanged(InvoicingEvent):
    """Status written directly (e.g. Active -> Paid)."""
    invoice: Any = None
    previous_status: Any = None

    @classmethod
    def create(cls, invoice: Any, previous_status: Any) -> "InvoiceStatusChanged":
        return cls(invoice=invoice, previous_status=previous_status)


@dataclass(frozen=True)
class InvoiceReversed(InvoicingEvent):
    """A storno was issued. Both sides of the pair are carried, already linked."""
    source: Any = None
    storno: Any = None
    partial: bool = False

    @classmethod
    def create(cls, source: Any, storno: Any, partial: bool) -> "InvoiceReversed":
        return cls(source=source, storno=storno, partial=partial)
