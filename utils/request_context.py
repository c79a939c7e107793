"""Propagate tenant, company and user identity through the call stack using contextvars."""

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class RequestContext:
    """Who is acting, and on behalf of which tenant and issuing company."""

    tenant_id: UUID
    company_id: UUID
    user_id: UUID


_current_context: ContextVar[RequestContext | None] = ContextVar("current_request_context", default=None)


def get_current_context() -> RequestContext:
    """
    Get current request context.

    Raises RuntimeError if no context is set.
    This is fail-fast behavior - if you're in a code path that
    requires a tenant and it's not set, that's a bug.
    """
    ctx = _current_context.get()
    if ctx is None:
        raise RuntimeError(
            "No request context set. This usually means you're calling "
            "tenant-scoped code outside of a request."
        )
    return ctx


def get_current_tenant_id() -> UUID | None:
    """Tenant of the current context, or None outside a request."""
    ctx = _current_context.get()
    return ctx.tenant_id if ctx else None


def set_current_context(ctx: RequestContext) -> None:
    """
    Set current request context.

    Called by the tenant middleware once the gateway headers are parsed.
    """
    _current_context.set(ctx)


def clear_current_context() -> None:
    """
    Clear request context.

    Must be called in finally block to prevent context leakage.
    """
    _current_context.set(None)


@contextmanager
def request_context(tenant_id: UUID, company_id: UUID, user_id: UUID):
    """
    Context manager for temporarily setting the request context.

    Useful for:
    - Tests
    - Background jobs that iterate over companies (repetitive invoices)

    Example:
        with request_context(tenant_id, company_id, user_id):
            result = invoice_service.activate_invoice(invoice_id)
    """
    previous = _current_context.get()
    set_current_context(RequestContext(tenant_id=tenant_id, company_id=company_id, user_id=user_id))
    try:
        yield
    finally:
        if previous is None:
            clear_current_context()
        else:
            set_current_context(previous)
