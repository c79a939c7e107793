"""Typed exceptions for invoice business failures.

Raised inside the core and converted to failure results by InvoiceService.
"""


class InvoiceError(Exception):
    """Base class for expected invoice business failures."""

    code = "INVOICE_ERROR"


class NotFoundError(InvoiceError):
    """Operating on an invoice id that doesn't exist (or was soft-deleted)."""

    code = "NOT_FOUND"


class InvalidTransitionError(InvoiceError):
    """
    Mutation not allowed in the invoice's current status.

    Covers field updates past Draft, illegal status changes and
    reversing an invoice that is not Active.
    """

    code = "INVALID_TRANSITION"


class ValidationFailure(InvoiceError):
    """Payload rejected by business validation. Carries every message found."""

    code = "VALIDATION_ERROR"

    def __init__(self, errors: list[str] | str):
        self.errors = [errors] if isinstance(errors, str) else list(errors)
        super().__init__(" ".join(self.errors))


class UnauthorizedError(InvoiceError):
    """Invoice belongs to a different company than the one acting."""

    code = "UNAUTHORIZED"
