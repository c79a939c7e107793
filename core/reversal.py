"""
Storno (reversing) invoices.

A storno negates an Active invoice, fully or for a subset of its items. It is
a two-phase command:

    pair = engine.build(source, ctx)         # validate, number, link, no writes
    engine.commit(pair)                      # both invoices in one transaction

build() reuses the draft validation of normal creation, so anything that
would reject a hand-made invoice (no items, wrong company) rejects the
storno too, and nothing is written. The source keeps its own items even on a
partial storno: only a new invoice for the selected items is issued.
"""

import logging
from dataclasses import dataclass
from typing import Iterable

from core.config import InvoicingConfig
from core.drafts import materialize, validate_draft
from core.exceptions import ValidationFailure
from core.models import Invoice, InvoiceCreate, InvoiceStatus
from core.numbering import NumberingSequencer
from core.status_machine import ensure_reversible
from core.store import InvoiceStore
from utils.request_context import RequestContext
from utils.timezone import now_utc, today_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReversalPair:
    """A built storno and the updated source, ready to be committed together."""

    storno: Invoice
    source: Invoice
    partial: bool


class ReversalEngine:
    """Builds and commits storno invoices."""

    def __init__(self, store: InvoiceStore, sequencer: NumberingSequencer, config: InvoicingConfig | None = None):
        self.store = store
        self.sequencer = sequencer
        self.config = config or InvoicingConfig()

    def build_draft(self, source: Invoice, item_ids: Iterable[str] | None = None) -> InvoiceCreate:
        """
        The creation payload of the reversing invoice.

        Args:
            source: Invoice to reverse, must be Active
            item_ids: Item references to reverse (partial), None for all items

        Raises:
            InvalidTransitionError: Source is not Active
            ValidationFailure: Partial mode with nothing selected
        """
        ensure_reversible(source)

        partial = item_ids is not None
        items = source.items
        if partial:
            selected = set(item_ids)
            if not selected:
                raise ValidationFailure("Items not selected")
            items = [item for item in source.items if item.item_id in selected]

        draft = InvoiceCreate.model_validate(
            source.model_dump(include=set(InvoiceCreate.model_fields))
        )
        suffix = self.config.partial_storno_name_suffix if partial else self.config.storno_name_suffix
        return draft.model_copy(update={
            "name": f"{source.name}{suffix}",
            "issue_date": today_utc(),
            "items": [item.model_copy(update={"quantity": -item.quantity}) for item in items],
        })

    def build(self, source: Invoice, ctx: RequestContext, item_ids: Iterable[str] | None = None) -> ReversalPair:
        """
        Phase one: validate, number and cross-link both invoices in memory.

        Callers must hold the numbering lock of the source's company until
        commit() returns.
        """
        partial = item_ids is not None
        draft = self.build_draft(source, item_ids)
        validate_draft(draft, ctx.company_id)

        storno = materialize(draft, ctx)
        storno_status = InvoiceStatus.PARTIAL_STORNO if partial else InvoiceStatus.STORNO
        kind = "Partial storno" if partial else "Storno"
        storno = storno.model_copy(update={
            "number": self.sequencer.for_company(source.company_id),
            "status": storno_status,
            "related_to_invoice_id": source.id,
            "related_to_invoice_mentions": f"{kind} for invoice #{source.number}",
        })

        updated_source = source.model_copy(update={
            "status": InvoiceStatus.ACTIVE if partial else InvoiceStatus.PAID,
            "related_to_invoice_id": storno.id,
            "related_to_invoice_mentions": (
                f"Was storned on '{today_utc().isoformat()}'. Storno invoice number: #{storno.number}"
            ),
            "updated_at": now_utc(),
        })

        return ReversalPair(storno=storno, source=updated_source, partial=partial)

    def commit(self, pair: ReversalPair) -> ReversalPair:
        """Phase two: write both invoices as one unit."""
        self.store.commit_reversal_pair(pair.storno, pair.source)
        logger.info(
            "Invoice #%s reversed by %s #%s",
            pair.source.number,
            pair.storno.status.readable,
            pair.storno.number,
        )
        return pair

    def reverse(self, source: Invoice, ctx: RequestContext, item_ids: Iterable[str] | None = None) -> ReversalPair:
        """Build and commit in one call."""
        return self.commit(self.build(source, ctx, item_ids))
