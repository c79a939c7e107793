"""Tests for VaultClient - HashiCorp Vault secrets management (hvac mocked)."""

from unittest.mock import MagicMock, patch

import pytest
from hvac.exceptions import Forbidden, InvalidPath

from clients import vault_client
from clients.vault_client import VaultClient, get_cached_secret, get_database_url, get_valkey_url


@pytest.fixture
def vault_env(monkeypatch):
    monkeypatch.setenv("VAULT_ADDR", "http://vault.test:8200")
    monkeypatch.setenv("VAULT_ROLE_ID", "role")
    monkeypatch.setenv("VAULT_SECRET_ID", "secret")
    monkeypatch.delenv("VAULT_NAMESPACE", raising=False)


@pytest.fixture
def hvac_client(vault_env):
    with patch("clients.vault_client.hvac.Client") as client_cls:
        client = client_cls.return_value
        client.auth.approle.login.return_value = {"auth": {"client_token": "s.token"}}
        client.is_authenticated.return_value = True
        yield client


@pytest.fixture(autouse=True)
def reset_vault_singleton(monkeypatch):
    monkeypatch.setattr(vault_client, "_vault_client_instance", None)
    monkeypatch.setattr(vault_client, "_secret_cache", {})


class TestVaultClientInit:
    """Initialization and authentication."""

    def test_missing_vault_addr_raises(self, monkeypatch):
        """VAULT_ADDR required."""
        monkeypatch.delenv("VAULT_ADDR", raising=False)
        with pytest.raises(ValueError, match="VAULT_ADDR"):
            VaultClient()

    def test_missing_approle_credentials_raises(self, vault_env, monkeypatch):
        """VAULT_ROLE_ID and VAULT_SECRET_ID required."""
        monkeypatch.delenv("VAULT_SECRET_ID")
        with pytest.raises(ValueError, match="VAULT_ROLE_ID"):
            VaultClient()

    def test_login_sets_token(self, hvac_client):
        client = VaultClient()

        hvac_client.auth.approle.login.assert_called_once_with(role_id="role", secret_id="secret")
        assert client.client.token == "s.token"

    def test_failed_login_raises_permission_error(self, hvac_client):
        hvac_client.auth.approle.login.side_effect = Forbidden("denied")
        with pytest.raises(PermissionError, match="authentication"):
            VaultClient()

    def test_unauthenticated_after_login_raises(self, hvac_client):
        hvac_client.is_authenticated.return_value = False
        with pytest.raises(PermissionError):
            VaultClient()


class TestGetSecret:
    """Secret retrieval - paths automatically scoped to invoicing/."""

    def test_returns_field_value(self, hvac_client):
        hvac_client.secrets.kv.v2.read_secret_version.return_value = {"data": {"data": {"url": "postgresql://db"}}}

        assert VaultClient().get_secret("database", "url") == "postgresql://db"
        kwargs = hvac_client.secrets.kv.v2.read_secret_version.call_args.kwargs
        assert kwargs["path"] == "invoicing/database"

    def test_missing_field_raises_key_error(self, hvac_client):
        hvac_client.secrets.kv.v2.read_secret_version.return_value = {"data": {"data": {"url": "x"}}}
        with pytest.raises(KeyError, match="password"):
            VaultClient().get_secret("database", "password")

    def test_missing_path_raises_permission_error(self, hvac_client):
        hvac_client.secrets.kv.v2.read_secret_version.side_effect = InvalidPath("nope")
        with pytest.raises(PermissionError, match="not found"):
            VaultClient().get_secret("nonexistent", "url")


class TestCachedSecrets:

    def test_reads_once_per_process(self, hvac_client):
        read = hvac_client.secrets.kv.v2.read_secret_version
        read.return_value = {"data": {"data": {"url": "redis://valkey"}}}

        assert get_valkey_url() == "redis://valkey"
        assert get_cached_secret("valkey", "url") == "redis://valkey"
        assert read.call_count == 1

    def test_database_url_path(self, hvac_client):
        read = hvac_client.secrets.kv.v2.read_secret_version
        read.return_value = {"data": {"data": {"url": "postgresql://db"}}}

        assert get_database_url() == "postgresql://db"
        assert read.call_args.kwargs["path"] == "invoicing/database"
