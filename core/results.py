"""Success/failure envelope returned by every InvoiceService operation."""

from typing import Any

from pydantic import BaseModel, Field

from core.exceptions import InvoiceError, ValidationFailure


class OperationResult(BaseModel):
    """
    Outcome of a business operation.

    Expected failures (not found, invalid transition, validation) are
    reported here instead of being raised to the caller.
    """

    success: bool
    data: Any | None = None
    message: str | None = None
    error_code: str | None = None
    errors: list[str] = Field(default_factory=list)

    @classmethod
    def succeeded(cls, data: Any = None, message: str | None = None) -> "OperationResult":
        return cls(success=True, data=data, message=message)

    @classmethod
    def failed(cls, code: str, message: str, errors: list[str] | None = None) -> "OperationResult":
        return cls(success=False, message=message, error_code=code, errors=errors or [message])

    @classmethod
    def from_error(cls, exc: InvoiceError) -> "OperationResult":
        """Build a failure result from a typed business exception."""
        errors = exc.errors if isinstance(exc, ValidationFailure) else [str(exc)]
        return cls.failed(exc.code, str(exc), errors)
