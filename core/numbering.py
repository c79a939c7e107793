"""
Invoice sequence numbers.

Numbers are assigned when an invoice leaves Draft and grow monotonically
among the non-draft invoices of a scope. The sequencer only reads: callers
record the number and must serialize activations per company (see
InvoiceService.company_lock), otherwise two activations can compute the
same number.
"""

from typing import Iterable
from uuid import UUID

from core.models import Invoice, InvoiceStatus
from core.store import InvoiceStore


def next_number(invoices: Iterable[Invoice]) -> int:
    """One past the highest number among non-draft invoices, 1 when there are none."""
    numbers = [i.number for i in invoices if i.status != InvoiceStatus.DRAFT]
    return max(max(numbers), 0) + 1 if numbers else 1


class NumberingSequencer:
    """Computes the next number for a client (preview) or company (authoritative) scope."""

    def __init__(self, store: InvoiceStore):
        self.store = store

    def for_client(self, client_id: UUID) -> int:
        """Next number among the client's issued invoices. Shown on drafts, never assigned."""
        return next_number(self.store.list_active(client_ids=[client_id], exclude_draft=True))

    def for_company(self, company_id: UUID) -> int:
        """Next number among the issuing company's invoices. Assigned on activation."""
        return next_number(self.store.list_active(company_id=company_id, exclude_draft=True))
