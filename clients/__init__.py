# Infrastructure clients
from clients.vault_client import (
    VaultClient,
    get_cached_secret,
    get_database_url,
    get_valkey_url,
)
from clients.postgres_client import PostgresClient, TransactionCursor
from clients.valkey_client import ValkeyClient
