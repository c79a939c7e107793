"""
Invoice service: the invoice lifecycle.

Drafts are created and edited freely, then activated (numbered) and moved
through their statuses; Active invoices can be reversed by a storno. This
is the only component that talks to the invoice store.

Every command returns an OperationResult. Business failures (missing
invoice, illegal transition, validation) are raised as InvoiceError inside
and reported as failed results here; anything else propagates.
"""

import logging
from contextlib import nullcontext
from datetime import date
from functools import wraps
from typing import Callable, ContextManager, Iterable
from uuid import UUID

from pydantic import ValidationError

from core.audit import AuditLogger, AuditAction, compute_changes
from core.config import InvoicingConfig
from core.drafts import materialize, validate_draft
from core.event_bus import EventBus
from core.events import InvoiceActivated, InvoiceCreated, InvoiceReversed, InvoiceStatusChanged
from core.exceptions import (
    InvalidTransitionError,
    InvoiceError,
    NotFoundError,
    UnauthorizedError,
    ValidationFailure,
)
from core.models import (
    Invoice,
    InvoiceCreate,
    InvoiceStatus,
    InvoiceUpdate,
    RepetitiveData,
    StatusChange,
)
from core.numbering import NumberingSequencer
from core.results import OperationResult
from core.reversal import ReversalEngine
from core.status_machine import Transition, ensure_editable, plan_transition, status_choices
from core.store import InvoiceStore, in_period
from utils.request_context import get_current_context
from utils.timezone import now_utc

logger = logging.getLogger(__name__)

CompanyLock = Callable[[UUID], ContextManager]


def business_operation(name: str):
    """Report InvoiceError raised by the wrapped command as a failed OperationResult."""

    def decorator(method):
        @wraps(method)
        def wrapper(self, *args, **kwargs) -> OperationResult:
            try:
                return method(self, *args, **kwargs)
            except InvoiceError as exc:
                logger.warning(f"{name} rejected: {exc}")
                return OperationResult.from_error(exc)

        return wrapper

    return decorator


class InvoiceService:
    """Service for invoice lifecycle operations."""

    def __init__(
        self,
        store: InvoiceStore,
        audit: AuditLogger,
        event_bus: EventBus,
        config: InvoicingConfig | None = None,
        company_lock: CompanyLock | None = None,
    ):
        """
        Args:
            store: Invoice persistence
            audit: Audit trail, written after each successful command
            event_bus: Receives domain events after commits
            config: Invoicing settings (defaults when omitted)
            company_lock: Returns a context manager serializing numbering for
                one company. Activation and reversal hold it while they pick
                and write a number. Without one, concurrent activations in the
                same company can draw the same number.
        """
        self.store = store
        self.audit = audit
        self.event_bus = event_bus
        self.config = config or InvoicingConfig()
        self.company_lock = company_lock or nullcontext
        self.sequencer = NumberingSequencer(store)
        self.reversal = ReversalEngine(store, self.sequencer, self.config)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_by_id(self, invoice_id: UUID) -> Invoice | None:
        """Invoice if found and not deleted, None otherwise."""
        return self.store.find_active_by_id(invoice_id)

    def list_invoices(
        self,
        created_by: UUID | None = None,
        company_id: UUID | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Invoice]:
        """
        List invoices, optionally only one user's, one company's, or issued in a period.

        Returns:
            At most config.default_list_limit invoices, newest first
        """
        invoices = self.store.list_active(
            company_id=company_id,
            created_by=created_by,
            predicate=in_period(start, end),
        )
        return invoices[:self.config.default_list_limit]

    def list_for_clients(self, client_ids: Iterable[UUID] | None = None) -> list[Invoice]:
        """Invoices billed to any of the clients; all invoices when client_ids is None."""
        return self.store.list_active(client_ids=client_ids)[:self.config.default_list_limit]

    def list_statuses(self) -> list[tuple[int, str]]:
        return status_choices()

    def next_number(self, client_id: UUID) -> int:
        """Preview of the next number for a client. Not reserved."""
        return self.sequencer.for_client(client_id)

    def get_logs(self, invoice_id: UUID, count: int = 10) -> list[dict]:
        """Recent audit entries for an invoice."""
        return self.audit.get_entity_history(invoice_id, limit=count)

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    @business_operation("Create invoice")
    def create_invoice(self, data: InvoiceCreate) -> OperationResult:
        """
        Draft a new invoice for the acting company.

        Args:
            data: Invoice payload, must carry at least one item

        Returns:
            Result with the created invoice in DRAFT status. Fails when the
            payload has no items or names another issuing company; nothing
            is persisted then.
        """
        ctx = get_current_context()
        validate_draft(data, ctx.company_id)

        invoice = self.store.insert(materialize(data, ctx))

        self.audit.record(
            entity_id=invoice.id,
            action=AuditAction.CREATE,
            message="Invoice created successfully",
            changes={"created": invoice.model_dump(mode="json")},
        )
        self.event_bus.publish(InvoiceCreated.create(invoice=invoice))

        return OperationResult.succeeded(invoice, "Invoice created successfully")

    @business_operation("Update invoice")
    def update_invoice(self, invoice_id: UUID, patch: InvoiceUpdate) -> OperationResult:
        """
        Replace fields of a draft invoice.

        Returns:
            Result with the updated invoice. Fails with INVALID_TRANSITION
            once the invoice has left Draft; the stored record is untouched.
        """
        current = self._get(invoice_id)
        ensure_editable(current)

        changes = patch.model_dump(exclude_unset=True)
        if "items" in changes and not changes["items"]:
            raise ValidationFailure("Invoice cannot be created without items.")
        if changes.get("client") is not None:
            changes["client_id"] = changes["client"]["id"]

        try:
            updated = Invoice.model_validate({
                **current.model_dump(),
                **changes,
                "updated_at": now_utc(),
            })
        except ValidationError as exc:
            raise ValidationFailure([f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors()])

        saved = self.store.replace(updated)

        self.audit.record(
            entity_id=saved.id,
            action=AuditAction.UPDATE,
            message="Invoice updated successfully",
            changes=compute_changes(current.model_dump(mode="json"), saved.model_dump(mode="json")),
        )

        return OperationResult.succeeded(saved, "Invoice updated successfully")

    @business_operation("Activate invoice")
    def activate_invoice(self, invoice_id: UUID) -> OperationResult:
        """
        Issue a draft: assign the next number of its company and mark it ACTIVE.

        Returns:
            Result with the activated invoice. Fails when the invoice doesn't
            exist or is no longer a draft.
        """
        company_id = self._get(invoice_id).company_id

        with self.company_lock(company_id):
            # Re-read under the lock: a concurrent activation may have won
            current = self._get(invoice_id)
            if not current.is_draft:
                raise InvalidTransitionError(f"Invoice #{current.number} is already {current.status.readable}")

            activated = current.model_copy(update={
                "number": self.sequencer.for_company(current.company_id),
                "status": InvoiceStatus.ACTIVE,
                "updated_at": now_utc(),
            })
            saved = self.store.replace(activated)

        logger.info(f"Invoice {saved.id} activated as #{saved.number}")

        self.audit.record(
            entity_id=saved.id,
            action=AuditAction.UPDATE,
            message=f"Invoice activated as #{saved.number}",
            changes={
                "status": {"old": int(current.status), "new": int(saved.status)},
                "number": {"old": current.number, "new": saved.number},
            },
        )
        self.event_bus.publish(InvoiceActivated.create(invoice=saved))

        return OperationResult.succeeded(saved, "Invoice updated successfully")

    @business_operation("Set invoice status")
    def set_status(
        self,
        invoice_id: UUID,
        status: InvoiceStatus | int,
        change: StatusChange | None = None,
    ) -> OperationResult:
        """
        Move an invoice to another status.

        Args:
            invoice_id: Invoice UUID
            status: Requested status
            change: StornoChange / PartialStornoChange side data; required
                (with items) for PARTIAL_STORNO

        Returns:
            Result with the (source) invoice. Requesting the current status
            succeeds without touching anything. STORNO and PARTIAL_STORNO
            issue a reversing invoice and link both ways.
        """
        try:
            requested = InvoiceStatus(status)
        except ValueError:
            raise ValidationFailure(f"Unknown invoice status {status}")

        current = self._get(invoice_id)
        transition = plan_transition(current.status, requested, change)

        if transition is Transition.NOOP:
            return OperationResult.succeeded(current, "Invoice Status updated successfully")

        if transition is Transition.STORNO:
            return self._reverse(current, item_ids=None)

        if transition is Transition.PARTIAL_STORNO:
            return self._reverse(current, item_ids=change.item_ids)

        saved = self.store.replace(current.model_copy(update={"status": requested, "updated_at": now_utc()}))

        self.audit.record(
            entity_id=saved.id,
            action=AuditAction.UPDATE,
            message="Invoice Status updated successfully",
            changes={"status": {"old": int(current.status), "new": int(saved.status)}},
        )
        self.event_bus.publish(InvoiceStatusChanged.create(invoice=saved, previous_status=current.status))

        return OperationResult.succeeded(saved, "Invoice Status updated successfully")

    @business_operation("Save repetitive data")
    def save_repetitive_data(self, invoice_id: UUID, data: RepetitiveData) -> OperationResult:
        """
        Set the re-issue schedule of an invoice. Allowed in any status.

        Returns:
            Result with the updated invoice. Fails with UNAUTHORIZED when the
            invoice belongs to another company than the acting one.
        """
        current = self._get(invoice_id)
        if current.company_id != get_current_context().company_id:
            raise UnauthorizedError("You are not authorized for this action!")

        saved = self.store.replace(current.model_copy(update={"repetitive_data": data, "updated_at": now_utc()}))

        message = f"Repetitive data for Invoice ({saved.number}) updated successfully"
        self.audit.record(
            entity_id=saved.id,
            action=AuditAction.UPDATE,
            message=message,
            changes={"repetitive_data": {
                "old": current.repetitive_data.model_dump(mode="json") if current.repetitive_data else None,
                "new": data.model_dump(mode="json"),
            }},
        )

        return OperationResult.succeeded(saved, message)

    def delete_invoice(self, invoice_id: UUID) -> OperationResult:
        """
        Soft-delete an invoice.

        Always succeeds, also when the invoice doesn't exist (or is already
        deleted), so retries are harmless.
        """
        current = self.store.find_active_by_id(invoice_id)
        if current is not None:
            self.store.replace(current.model_copy(update={"is_deleted": True, "updated_at": now_utc()}))
            self.audit.record(
                entity_id=current.id,
                action=AuditAction.DELETE,
                message="Invoice deleted successfully",
                changes={"deleted": current.model_dump(mode="json")},
            )
        else:
            logger.debug(f"Delete of missing invoice {invoice_id} ignored")

        return OperationResult.succeeded(message="Invoice deleted successfully")

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _get(self, invoice_id: UUID) -> Invoice:
        invoice = self.store.find_active_by_id(invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice not found")
        return invoice

    def _reverse(self, source: Invoice, item_ids: Iterable[str] | None) -> OperationResult:
        ctx = get_current_context()

        with self.company_lock(source.company_id):
            # Re-read under the lock; reverse() re-checks that it is still Active
            source = self._get(source.id)
            pair = self.reversal.reverse(source, ctx, item_ids)

        self.audit.record(
            entity_id=pair.storno.id,
            action=AuditAction.CREATE,
            message=pair.storno.related_to_invoice_mentions,
            changes={"created": pair.storno.model_dump(mode="json")},
        )
        self.audit.record(
            entity_id=pair.source.id,
            action=AuditAction.UPDATE,
            message=pair.source.related_to_invoice_mentions,
            changes=compute_changes(source.model_dump(mode="json"), pair.source.model_dump(mode="json")),
        )
        self.event_bus.publish(InvoiceReversed.create(source=pair.source, storno=pair.storno, partial=pair.partial))

        return OperationResult.succeeded(pair.source, f"Invoice storned. Storno invoice number: #{pair.storno.number}")
