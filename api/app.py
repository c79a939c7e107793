"""FastAPI application factory."""

import logging

from fastapi import FastAPI

from api.base import success_response
from api.errors import register_error_handlers
from api.invoices import create_invoices_router
from api.middleware import RequestIDMiddleware, TenantContextMiddleware
from core.config import InvoicingConfig
from core.services.invoice_service import InvoiceService

logger = logging.getLogger(__name__)


def create_app(invoice_svc: InvoiceService) -> FastAPI:
    """App with tenant context, error handlers and the invoice routes under /api."""
    app = FastAPI(title="Invoicing")
    app.add_middleware(TenantContextMiddleware)
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    @app.get("/health")
    async def health():
        return success_response({"status": "ok"}).model_dump(mode="json")

    app.include_router(create_invoices_router(invoice_svc), prefix="/api")
    return app


def build_invoice_service(config: InvoicingConfig | None = None) -> InvoiceService:
    """
    Wire InvoiceService to PostgreSQL, Valkey and the audit log.

    Connection URLs come from Vault; fails fast when any backend is unreachable.
    """
    from clients.postgres_client import PostgresClient
    from clients.valkey_client import ValkeyClient
    from clients.vault_client import get_database_url, get_valkey_url
    from core.audit import AuditLogger
    from core.event_bus import EventBus
    from core.store import PostgresInvoiceStore

    config = config or InvoicingConfig()
    postgres = PostgresClient(get_database_url())
    valkey = ValkeyClient(get_valkey_url())

    logger.info("Invoice service wired to PostgreSQL and Valkey")
    return InvoiceService(
        PostgresInvoiceStore(postgres),
        AuditLogger(postgres),
        EventBus(),
        config=config,
        company_lock=valkey.company_lock_factory(config.numbering_lock_timeout_seconds),
    )
