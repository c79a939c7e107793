"""Shared test fixtures for the invoicing test suite."""

from pathlib import Path
from unittest.mock import Mock
from uuid import UUID

import pytest
from dotenv import load_dotenv

# Load .env file BEFORE any other imports that might use env vars
load_dotenv(Path(__file__).parent.parent / ".env", override=True)

from builders import (
    TEST_COMPANY_B_ID,
    TEST_COMPANY_ID,
    TEST_TENANT_ID,
    TEST_USER_ID,
    make_invoice_create,
)
from core.audit import AuditLogger
from core.event_bus import EventBus
from core.models import Invoice, InvoiceStatus
from utils.request_context import request_context, clear_current_context


# =============================================================================
# REQUEST CONTEXT FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def reset_request_context():
    """Ensure clean request context before and after each test."""
    clear_current_context()
    yield
    clear_current_context()


@pytest.fixture
def as_test_company():
    """Act as the primary test user of the primary test company."""
    with request_context(TEST_TENANT_ID, TEST_COMPANY_ID, TEST_USER_ID):
        yield TEST_COMPANY_ID


@pytest.fixture
def as_company_b():
    """Act on behalf of another company of the same tenant."""
    with request_context(TEST_TENANT_ID, TEST_COMPANY_B_ID, TEST_USER_ID):
        yield TEST_COMPANY_B_ID


# =============================================================================
# IN-MEMORY STORE (no DB needed)
# =============================================================================


class InMemoryInvoiceStore:
    """InvoiceStore kept in a dict. Hands out copies so callers can't mutate stored rows."""

    def __init__(self):
        self.rows: dict[UUID, Invoice] = {}
        self.reversal_commits: list[tuple[UUID, UUID]] = []

    def find_active_by_id(self, invoice_id):
        invoice = self.rows.get(invoice_id)
        if invoice is None or invoice.is_deleted:
            return None
        return invoice.model_copy(deep=True)

    def list_active(self, company_id=None, client_ids=None, created_by=None, exclude_draft=False, predicate=None):
        client_ids = set(client_ids) if client_ids is not None else None
        result = [
            i.model_copy(deep=True) for i in self.rows.values()
            if not i.is_deleted
            and (company_id is None or i.company_id == company_id)
            and (client_ids is None or i.client_id in client_ids)
            and (created_by is None or i.created_by == created_by)
            and (not exclude_draft or i.status != InvoiceStatus.DRAFT)
        ]
        if predicate is not None:
            result = [i for i in result if predicate(i)]
        return sorted(result, key=lambda i: (i.issue_date, i.number), reverse=True)

    def insert(self, invoice):
        self.rows[invoice.id] = invoice.model_copy(deep=True)
        return invoice.model_copy(deep=True)

    def replace(self, invoice):
        if invoice.id not in self.rows:
            raise LookupError(f"Invoice {invoice.id} vanished before it could be replaced")
        self.rows[invoice.id] = invoice.model_copy(deep=True)
        return invoice.model_copy(deep=True)

    def commit_reversal_pair(self, storno, source):
        if source.id not in self.rows:
            raise LookupError(f"Invoice {source.id} vanished during reversal")
        self.rows[storno.id] = storno.model_copy(deep=True)
        self.rows[source.id] = source.model_copy(deep=True)
        self.reversal_commits.append((storno.id, source.id))


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def store():
    return InMemoryInvoiceStore()


@pytest.fixture
def audit():
    """AuditLogger stand-in; assertions inspect its calls."""
    mock = Mock(spec=AuditLogger)
    mock.get_entity_history.return_value = []
    return mock


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def invoice_service(store, audit, event_bus):
    from core.services.invoice_service import InvoiceService

    return InvoiceService(store, audit, event_bus)


@pytest.fixture
def active_invoice(as_test_company, invoice_service):
    """An activated invoice with items sku-1 (qty 3) and sku-2 (qty 2)."""
    created = invoice_service.create_invoice(make_invoice_create())
    return invoice_service.activate_invoice(created.data.id).data
