"""API test fixtures: TestClient over the in-memory invoice service."""

import pytest
from starlette.testclient import TestClient

from api.app import create_app
from builders import TEST_COMPANY_B_ID, TEST_COMPANY_ID, TEST_TENANT_ID, TEST_USER_ID


def identity_headers(company_id=TEST_COMPANY_ID, user_id=TEST_USER_ID):
    return {
        "X-Tenant-Id": str(TEST_TENANT_ID),
        "X-Company-Id": str(company_id),
        "X-User-Id": str(user_id),
    }


# =============================================================================
# APP & CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def app(invoice_service):
    """Invoicing app wired to the in-memory store."""
    return create_app(invoice_service)


@pytest.fixture
def client(app):
    """Client acting for the test company."""
    c = TestClient(app, raise_server_exceptions=False)
    c.headers.update(identity_headers())
    return c


@pytest.fixture
def company_b_client(app):
    """Client acting for another company of the same tenant."""
    c = TestClient(app, raise_server_exceptions=False)
    c.headers.update(identity_headers(company_id=TEST_COMPANY_B_ID))
    return c


@pytest.fixture
def anonymous_client(app):
    """Client without gateway identity headers."""
    return TestClient(app, raise_server_exceptions=False)
