"""
Invoice storage.

InvoiceStore is the contract InvoiceService relies on. PostgresInvoiceStore
keeps each invoice as a JSONB document next to the columns queries filter
on:

    CREATE TABLE invoices (
        id          uuid PRIMARY KEY,
        tenant_id   uuid NOT NULL,
        company_id  uuid NOT NULL,
        client_id   uuid NOT NULL,
        created_by  uuid NOT NULL,
        number      integer NOT NULL DEFAULT 0,
        status      smallint NOT NULL,
        issue_date  date NOT NULL,
        is_deleted  boolean NOT NULL DEFAULT false,
        document    jsonb NOT NULL,
        created_at  timestamptz NOT NULL,
        updated_at  timestamptz NOT NULL
    );

The document holds only inputs (items, taxes, discounts, ...). Totals are
never persisted.
"""

import logging
from datetime import date
from typing import Any, Callable, Iterable, Protocol
from uuid import UUID

from psycopg2.extras import Json

from clients.postgres_client import PostgresClient
from core.models import Invoice, InvoiceStatus

logger = logging.getLogger(__name__)

InvoicePredicate = Callable[[Invoice], bool]


class InvoiceStore(Protocol):
    """What the invoice core needs from persistence. Listing never returns soft-deleted rows."""

    def find_active_by_id(self, invoice_id: UUID) -> Invoice | None: ...

    def list_active(
        self,
        company_id: UUID | None = None,
        client_ids: Iterable[UUID] | None = None,
        created_by: UUID | None = None,
        exclude_draft: bool = False,
        predicate: InvoicePredicate | None = None,
    ) -> list[Invoice]: ...

    def insert(self, invoice: Invoice) -> Invoice: ...

    def replace(self, invoice: Invoice) -> Invoice: ...

    def commit_reversal_pair(self, storno: Invoice, source: Invoice) -> None: ...


_INSERT = """
    INSERT INTO invoices (
        id, tenant_id, company_id, client_id, created_by,
        number, status, issue_date, is_deleted, document,
        created_at, updated_at
    ) VALUES (
        %s, %s, %s, %s, %s,
        %s, %s, %s, %s, %s,
        %s, %s
    )
    RETURNING document
"""

_REPLACE = """
    UPDATE invoices
    SET client_id = %s, number = %s, status = %s, issue_date = %s,
        is_deleted = %s, document = %s, updated_at = %s
    WHERE id = %s
    RETURNING document
"""


class PostgresInvoiceStore:
    """InvoiceStore over the invoices table. Tenant isolation comes from RLS."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    @staticmethod
    def _insert_params(invoice: Invoice) -> tuple:
        return (
            invoice.id, invoice.tenant_id, invoice.company_id, invoice.client_id, invoice.created_by,
            invoice.number, int(invoice.status), invoice.issue_date, invoice.is_deleted,
            Json(invoice.model_dump(mode="json")),
            invoice.created_at, invoice.updated_at,
        )

    @staticmethod
    def _replace_params(invoice: Invoice) -> tuple:
        return (
            invoice.client_id, invoice.number, int(invoice.status), invoice.issue_date,
            invoice.is_deleted, Json(invoice.model_dump(mode="json")), invoice.updated_at,
            invoice.id,
        )

    def find_active_by_id(self, invoice_id: UUID) -> Invoice | None:
        """
        Get invoice by ID.

        Returns:
            Invoice if found and not deleted, None otherwise.
        """
        row = self.postgres.execute_single(
            "SELECT document FROM invoices WHERE id = %s AND is_deleted = false",
            (invoice_id,)
        )
        if row is None:
            return None
        return Invoice.model_validate(row["document"])

    def list_active(
        self,
        company_id: UUID | None = None,
        client_ids: Iterable[UUID] | None = None,
        created_by: UUID | None = None,
        exclude_draft: bool = False,
        predicate: InvoicePredicate | None = None,
    ) -> list[Invoice]:
        """
        List non-deleted invoices.

        Column filters narrow the query in SQL; predicate, when given, is
        applied to the loaded invoices.
        """
        clauses = ["is_deleted = false"]
        params: list[Any] = []

        if company_id is not None:
            clauses.append("company_id = %s")
            params.append(company_id)
        if client_ids is not None:
            clauses.append("client_id = ANY(%s::uuid[])")
            params.append([str(c) for c in client_ids])
        if created_by is not None:
            clauses.append("created_by = %s")
            params.append(created_by)
        if exclude_draft:
            clauses.append("status <> %s")
            params.append(int(InvoiceStatus.DRAFT))

        rows = self.postgres.execute(
            f"SELECT document FROM invoices WHERE {' AND '.join(clauses)} ORDER BY issue_date DESC, number DESC",
            tuple(params)
        )

        invoices = [Invoice.model_validate(row["document"]) for row in rows]
        if predicate is not None:
            invoices = [i for i in invoices if predicate(i)]
        return invoices

    def insert(self, invoice: Invoice) -> Invoice:
        row = self.postgres.execute_returning(_INSERT, self._insert_params(invoice))[0]
        return Invoice.model_validate(row["document"])

    def replace(self, invoice: Invoice) -> Invoice:
        rows = self.postgres.execute_returning(_REPLACE, self._replace_params(invoice))
        if not rows:
            raise LookupError(f"Invoice {invoice.id} vanished before it could be replaced")
        return Invoice.model_validate(rows[0]["document"])

    def commit_reversal_pair(self, storno: Invoice, source: Invoice) -> None:
        """
        Insert the reversing invoice and update its source in one transaction.

        Readers see either neither write or both, so the two-way link is
        never observed half-made.
        """
        with self.postgres.transaction() as cur:
            cur.execute(_INSERT, self._insert_params(storno))
            updated = cur.execute(_REPLACE, self._replace_params(source))
            if not updated:
                raise LookupError(f"Invoice {source.id} vanished during reversal")
        logger.info(f"Committed reversal pair: storno {storno.id} for invoice {source.id}")


def in_period(start: date | None, end: date | None) -> InvoicePredicate:
    """Predicate matching invoices issued between start and end, both inclusive."""

    def predicate(invoice: Invoice) -> bool:
        if start is not None and invoice.issue_date < start:
            return False
        if end is not None and invoice.issue_date > end:
            return False
        return True

    return predicate
