"""
Invoice status rules.

    DRAFT --activate--> ACTIVE --set_status--> PAID (or back, as a plain write)
                          |
                          +--storno---------> (new STORNO invoice), source PAID
                          +--partial storno-> (new PARTIAL_STORNO invoice), source stays ACTIVE

Draft is left only through activation, which numbers the invoice. Once left,
any other status is a plain field write without side effects, backward moves
included. Reversing invoices (STORNO, PARTIAL_STORNO) are terminal. Fields
are editable only in Draft.
"""

from enum import Enum

from core.exceptions import InvalidTransitionError, ValidationFailure
from core.models import Invoice, InvoiceStatus, PartialStornoChange, StatusChange

TERMINAL_STATUSES = frozenset({InvoiceStatus.STORNO, InvoiceStatus.PARTIAL_STORNO})


class Transition(Enum):
    """What set_status has to do to reach the requested status."""

    NOOP = "noop"
    STORNO = "storno"
    PARTIAL_STORNO = "partial_storno"
    RAW_WRITE = "raw_write"


def plan_transition(
    current: InvoiceStatus,
    requested: InvoiceStatus,
    change: StatusChange | None = None,
) -> Transition:
    """
    Decide how to move an invoice from current to requested status.

    Raises:
        InvalidTransitionError: The move is not allowed from current.
        ValidationFailure: Partial storno without selected items.
    """
    if requested == current:
        return Transition.NOOP

    if current in TERMINAL_STATUSES:
        raise InvalidTransitionError(f"{current.readable} invoices cannot change status")

    if requested == InvoiceStatus.STORNO:
        return Transition.STORNO

    if requested == InvoiceStatus.PARTIAL_STORNO:
        if not isinstance(change, PartialStornoChange) or not change.item_ids:
            raise ValidationFailure("Items not selected")
        return Transition.PARTIAL_STORNO

    if current == InvoiceStatus.DRAFT:
        raise InvalidTransitionError("Draft invoices must be activated before changing status")

    return Transition.RAW_WRITE


def ensure_editable(invoice: Invoice) -> None:
    """Fields can only be replaced while the invoice is a draft."""
    if invoice.status > InvoiceStatus.DRAFT:
        raise InvalidTransitionError("Invalid action: Update. Only draft invoices can be updated")


def ensure_reversible(invoice: Invoice) -> None:
    if invoice.status != InvoiceStatus.ACTIVE:
        raise InvalidTransitionError("Only active invoices can be reversed")


def status_choices() -> list[tuple[int, str]]:
    """(value, readable name) for every status, for pickers."""
    return [(int(status), status.readable) for status in InvoiceStatus]
