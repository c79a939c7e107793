"""Turning an InvoiceCreate into a draft Invoice.

Shared by normal creation and by reversal, so a reversing invoice goes
through exactly the checks a hand-made one does.
"""

from uuid import UUID, uuid4

from core.exceptions import ValidationFailure
from core.models import Invoice, InvoiceCreate, InvoiceStatus
from utils.request_context import RequestContext
from utils.timezone import now_utc


def validate_draft(data: InvoiceCreate, company_id: UUID) -> None:
    """
    Business checks the payload schema can't express.

    Raises:
        ValidationFailure: with every problem found, not just the first.
    """
    errors = []

    if data.company.id != company_id:
        errors.append("Company of invoice differs from selected company!")

    if not data.items:
        errors.append("Invoice cannot be created without items.")

    if errors:
        raise ValidationFailure(errors)


def materialize(data: InvoiceCreate, ctx: RequestContext) -> Invoice:
    """Build the Draft entity for a validated payload. Nothing is persisted."""
    now = now_utc()
    return Invoice(
        **data.model_dump(),
        id=uuid4(),
        tenant_id=ctx.tenant_id,
        company_id=ctx.company_id,
        client_id=data.client.id,
        created_by=ctx.user_id,
        status=InvoiceStatus.DRAFT,
        number=0,
        created_at=now,
        updated_at=now,
    )
