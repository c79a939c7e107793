"""
Audit trail for invoice changes.

Every successful create, update and delete of an invoice is recorded here:
- Append-only (entries never modified or deleted)
- User-attributed (who made the change, on behalf of which tenant)
- Detailed (captures old and new values)

Recording is fire-and-forget. It runs after the invoice write has committed
and is not part of it: a failing audit insert is logged and swallowed.
"""

import logging
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from psycopg2.extras import Json

from clients.postgres_client import PostgresClient
from utils.request_context import get_current_context
from utils.timezone import now_utc

logger = logging.getLogger(__name__)

MODULE = "invoicing"


class AuditAction(Enum):
    """Type of change made to an entity."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


def compute_changes(
    old: dict[str, Any],
    new: dict[str, Any],
    exclude_fields: set[str] | None = None
) -> dict[str, dict[str, Any]]:
    """
    Compute top-level changes between two entity states.

    Args:
        old: Previous state of entity
        new: New state of entity
        exclude_fields: Fields to ignore (defaults to {"updated_at"})

    Returns:
        Dict of {field: {"old": old_val, "new": new_val}} for changed fields.
        Empty dict if no changes.
    """
    exclude = exclude_fields if exclude_fields is not None else {"updated_at"}
    return {
        key: {"old": old.get(key), "new": new.get(key)}
        for key in sorted(set(old) | set(new))
        if key not in exclude and old.get(key) != new.get(key)
    }


class AuditLogger:
    """
    Records invoice changes in audit_log.

    Always pass model_dump(mode="json") output so UUIDs, dates and Decimals
    arrive as JSON-compatible values.

    Usage:
        audit = AuditLogger(postgres)

        audit.record(
            entity_id=invoice.id,
            action=AuditAction.CREATE,
            message="Invoice created",
            changes={"created": invoice.model_dump(mode="json")},
        )

        history = audit.get_entity_history(invoice.id)
    """

    def __init__(self, postgres: PostgresClient, entity_type: str = "invoice"):
        self.postgres = postgres
        self.entity_type = entity_type

    def record(
        self,
        entity_id: UUID,
        action: AuditAction,
        message: str,
        changes: dict[str, Any] | None = None,
    ) -> None:
        """
        Record an entity change. Never raises.

        Changes format by action:
        - CREATE: {"created": {full entity data}}
        - UPDATE: {"field": {"old": old_val, "new": new_val}, ...}
        - DELETE: {"deleted": {full entity data at deletion}}
        """
        try:
            ctx = get_current_context()
            self.postgres.execute(
                """
                INSERT INTO audit_log (
                    id, tenant_id, user_id, module, entity_type, entity_id,
                    action, message, changes, created_at
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    uuid4(),
                    ctx.tenant_id,
                    ctx.user_id,
                    MODULE,
                    self.entity_type,
                    entity_id,
                    action.value,
                    message,
                    Json(changes or {}),
                    now_utc(),
                )
            )
        except Exception:
            logger.exception(f"Failed to record audit entry for {self.entity_type} {entity_id} ({action.value})")

    def get_entity_history(self, entity_id: UUID, limit: int = 10) -> list[dict[str, Any]]:
        """
        Most recent audit entries for an entity, newest first.

        Args:
            entity_id: ID of the entity
            limit: Maximum entries to return
        """
        return self.postgres.execute(
            """
            SELECT id, user_id, action, message, changes, created_at
            FROM audit_log
            WHERE module = %s AND entity_type = %s AND entity_id = %s
            ORDER BY created_at DESC
            LIMIT %s
            """,
            (MODULE, self.entity_type, entity_id, limit)
        )
