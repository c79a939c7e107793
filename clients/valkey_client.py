"""
Valkey (Redis-compatible) client for cross-process invoice numbering locks.

Simple wrapper around redis-py. Connection URL from Vault.
Fail-fast: raises on connection failure, never pretends a lock was taken.
"""

import logging
from typing import Callable
from uuid import UUID

import redis
from redis.lock import Lock

logger = logging.getLogger(__name__)

_LOCK_PREFIX = "invoicing:numbering"


class ValkeyClient:
    """
    Redis-compatible client for Valkey.

    Usage:
        client = ValkeyClient("redis://localhost:6379/0")
        with client.company_lock(company_id, timeout_seconds=10):
            ...  # pick and write the next invoice number

        service = InvoiceService(..., company_lock=client.company_lock_factory(10))
    """

    def __init__(self, url: str):
        """
        Initialize Valkey connection.

        Args:
            url: Redis-compatible connection URL (e.g., redis://localhost:6379/0)

        Raises:
            redis.ConnectionError: If connection fails
        """
        self._client = redis.from_url(url, decode_responses=True)
        # Verify connectivity immediately (fail-fast)
        self._client.ping()
        logger.info("ValkeyClient connected")

    def ping(self) -> bool:
        """
        Health check.

        Returns True if Valkey responds.
        Raises redis.ConnectionError if unreachable.
        """
        self._client.ping()
        return True

    def company_lock(self, company_id: UUID, timeout_seconds: int = 10) -> Lock:
        """
        Distributed lock serializing invoice numbering for one company.

        The lock expires after timeout_seconds so a crashed holder can't block
        numbering forever; acquiring waits at most as long, then raises
        redis.exceptions.LockError.
        """
        return self._client.lock(
            f"{_LOCK_PREFIX}:{company_id}",
            timeout=timeout_seconds,
            blocking_timeout=timeout_seconds,
        )

    def company_lock_factory(self, timeout_seconds: int) -> Callable[[UUID], Lock]:
        """company_lock with a fixed timeout, in the shape InvoiceService expects."""

        def factory(company_id: UUID) -> Lock:
            return self.company_lock(company_id, timeout_seconds)

        return factory

    def close(self) -> None:
        """Close the connection."""
        self._client.close()
        logger.info("ValkeyClient closed")
