"""Tests for the website, storage and database managers and the Azure client."""

from unittest.mock import MagicMock, patch

import pytest
from azure.core.exceptions import ResourceNotFoundError

from sitelink.azure_client import AzureClient
from sitelink.database_manager import DatabaseManager, build_connection_string
from sitelink.models import DatabaseServer, EnsureStatus, SqlCredential, StorageAccount
from sitelink.storage_manager import StorageManager
from sitelink.website_manager import WebsiteManager


# ---------------------------------------------------------------------------
# AzureClient
# ---------------------------------------------------------------------------

class TestAzureClient:
    @patch.dict("os.environ", {}, clear=True)
    def test_requires_subscription(self):
        with pytest.raises(ValueError, match="subscription ID is required"):
            AzureClient()

    @patch.dict("os.environ", {
        "AZURE_SUBSCRIPTION_ID": "sub-env",
        "AZURE_CLIENT_ID": "app-id",
        "AZURE_CLIENT_SECRET": "app-secret",
        "AZURE_TENANT_ID": "tenant-id",
    }, clear=True)
    @patch("sitelink.azure_client.SqlManagementClient")
    @patch("sitelink.azure_client.StorageManagementClient")
    @patch("sitelink.azure_client.WebSiteManagementClient")
    @patch("sitelink.azure_client.ResourceManagementClient")
    @patch("sitelink.azure_client.DefaultAzureCredential")
    @patch("sitelink.azure_client.ClientSecretCredential")
    def test_service_principal_from_env(self, secret_cred, default_cred, *_clients):
        client = AzureClient()

        assert client.subscription_id == "sub-env"
        secret_cred.assert_called_once_with(tenant_id="tenant-id", client_id="app-id", client_secret="app-secret")
        default_cred.assert_not_called()

    @patch.dict("os.environ", {"AZURE_CLIENT_ID": "your-client-id"}, clear=True)
    @patch("sitelink.azure_client.SqlManagementClient")
    @patch("sitelink.azure_client.StorageManagementClient")
    @patch("sitelink.azure_client.WebSiteManagementClient")
    @patch("sitelink.azure_client.ResourceManagementClient")
    @patch("sitelink.azure_client.DefaultAzureCredential")
    @patch("sitelink.azure_client.ClientSecretCredential")
    def test_falls_back_to_default_credential(self, secret_cred, default_cred, *_clients):
        AzureClient(subscription_id="sub-arg")

        secret_cred.assert_not_called()
        default_cred.assert_called_once_with(exclude_environment_credential=True)

    def test_ensure_resource_group_creates_with_tags(self, azure_client, mgmt):
        result = azure_client.ensure_resource_group("site1-rg", "West US")

        assert result.status == EnsureStatus.CREATED
        params = mgmt.resource_client.resource_groups.create_or_update.call_args[1]['parameters']
        assert params['location'] == "West US"
        assert params['tags']['CreatedBy'] == "Sitelink"

    def test_ensure_resource_group_reuses(self, azure_client, mgmt):
        mgmt.resource_client.resource_groups.get.side_effect = None

        result = azure_client.ensure_resource_group("site1-rg", "West US")

        assert result.status == EnsureStatus.EXISTING
        mgmt.resource_client.resource_groups.create_or_update.assert_not_called()


# ---------------------------------------------------------------------------
# WebsiteManager
# ---------------------------------------------------------------------------

class TestWebsiteManager:
    def test_website_exists_is_case_insensitive(self, azure_client, mgmt):
        other, match = MagicMock(), MagicMock()
        other.name = "other"
        match.name = "MySite"
        mgmt.web_client.web_apps.list.return_value = [other, match]

        manager = WebsiteManager(azure_client)

        assert manager.website_exists("mysite") is True
        assert manager.website_exists("nosite") is False

    def test_plan_is_reused(self, azure_client, mgmt):
        mgmt.web_client.app_service_plans.get.side_effect = None

        result = WebsiteManager(azure_client).ensure_app_service_plan("site1-plan", "rg", "West US")

        assert result.status == EnsureStatus.EXISTING
        mgmt.web_client.app_service_plans.begin_create_or_update.assert_not_called()

    @pytest.mark.parametrize("sku,tier", [("F1", "Free"), ("S2", "Standard"), ("nonsense", "Basic")])
    def test_plan_sku_tiers(self, azure_client, mgmt, sku, tier):
        result = WebsiteManager(azure_client).ensure_app_service_plan("site1-plan", "rg", "West US", sku)

        assert result.created
        params = mgmt.web_client.app_service_plans.begin_create_or_update.call_args[0][2]
        assert params['sku']['tier'] == tier


# ---------------------------------------------------------------------------
# StorageManager
# ---------------------------------------------------------------------------

class TestStorageManager:
    def test_keys_and_settings(self, azure_client):
        manager = StorageManager(azure_client)
        account = manager.get_storage_keys(StorageAccount("stor1", "West US", "rg"))

        assert account.primary_key == "primary-key"
        assert account.secondary_key == "secondary-key"
        settings = manager.build_storage_settings(account)
        assert [(s.name, s.value) for s in settings] == [
            ("StorageAccountName", "stor1"),
            ("StorageAccountAccessKey", "primary-key"),
        ]

    def test_name_taken_elsewhere_is_failed_result(self, azure_client, mgmt, config):
        mgmt.storage_client.storage_accounts.check_name_availability.return_value = MagicMock(name_available=False)
        mgmt.storage_client.storage_accounts.get_properties.side_effect = ResourceNotFoundError("nope")

        result = StorageManager(azure_client).ensure_storage_account(config)

        assert result.status == EnsureStatus.FAILED
        assert result.ok is False
        mgmt.storage_client.storage_accounts.begin_create.assert_not_called()


# ---------------------------------------------------------------------------
# DatabaseManager
# ---------------------------------------------------------------------------

class TestDatabaseManager:
    def test_connection_string_format(self):
        conn = build_connection_string("srv1", "site1_db", SqlCredential("admin", "pw"))

        assert conn == (
            "Server=tcp:srv1.database.windows.net,1433;Database=site1_db;User ID=admin@srv1;"
            "Password=pw;Trusted_Connection=False;Encrypt=True;Connection Timeout=30;"
        )

    def test_client_rule_names_are_random(self, azure_client, mgmt):
        manager = DatabaseManager(azure_client)
        credential = SqlCredential("admin", "pw")

        manager.create_db_server_and_firewall_rules("srv1", "rg", "West US", credential, "1.2.3.4")
        manager.create_db_server_and_firewall_rules("srv2", "rg", "West US", credential, "1.2.3.4")

        rule_names = [call[0][2] for call in mgmt.sql_client.firewall_rules.create_or_update.call_args_list]
        client_rules = [name for name in rule_names if name.startswith("ClientIPAddress_")]
        assert len(client_rules) == 2
        assert client_rules[0] != client_rules[1]
        assert rule_names.count("AzureServices") == 2

    def test_find_server_parses_resource_group(self, azure_client, mgmt):
        server = MagicMock()
        server.name = "Shared-SQL"
        server.location = "East US"
        server.administrator_login = "dbadmin"
        server.id = "/subscriptions/sub-123/resourceGroups/shared-rg/providers/Microsoft.Sql/servers/Shared-SQL"
        mgmt.sql_client.servers.list.return_value = [server]

        found = DatabaseManager(azure_client).find_server("shared-sql")

        assert found == DatabaseServer("Shared-SQL", "East US", "shared-rg", "dbadmin", [], False)

    def test_create_database_defaults_to_server_location(self, azure_client, mgmt):
        server = DatabaseServer("srv1", "North Europe", "rg")

        database = DatabaseManager(azure_client).create_database(server, "site1_db")

        params = mgmt.sql_client.databases.begin_create_or_update.call_args[0][3]
        assert params['location'] == "North Europe"
        assert database.server_name == "srv1"
