"""Shared fixtures: an AzureClient whose management clients are mocks."""

from unittest.mock import MagicMock, patch

import pytest
from azure.core.exceptions import ResourceNotFoundError

from sitelink.azure_client import AzureClient
from sitelink.credentials import FixedCredentialProvider
from sitelink.provision_config import ProvisionConfig


@pytest.fixture
def mgmt():
    """Parent of every management client mock, so cross-client call order is recorded."""
    return MagicMock()


@pytest.fixture
def azure_client(mgmt):
    with patch("sitelink.azure_client.ResourceManagementClient", return_value=mgmt.resource_client), \
         patch("sitelink.azure_client.WebSiteManagementClient", return_value=mgmt.web_client), \
         patch("sitelink.azure_client.StorageManagementClient", return_value=mgmt.storage_client), \
         patch("sitelink.azure_client.SqlManagementClient", return_value=mgmt.sql_client):
        client = AzureClient(subscription_id="sub-123", credential=MagicMock())

    # Empty subscription: nothing exists yet
    mgmt.web_client.web_apps.list.return_value = []
    mgmt.resource_client.resource_groups.get.side_effect = ResourceNotFoundError("not found")
    mgmt.web_client.app_service_plans.get.side_effect = ResourceNotFoundError("not found")
    mgmt.storage_client.storage_accounts.check_name_availability.return_value = MagicMock(name_available=True)

    keys = MagicMock()
    keys.keys = [MagicMock(value="primary-key"), MagicMock(value="secondary-key")]
    mgmt.storage_client.storage_accounts.list_keys.return_value = keys

    app = MagicMock()
    app.name = "site1"
    app.default_host_name = "site1.azurewebsites.net"
    mgmt.web_client.web_apps.begin_create_or_update.return_value.result.return_value = app

    return client


@pytest.fixture
def config():
    return ProvisionConfig(
        website_name="site1",
        location="West US",
        storage_account_name="stor1",
        client_ip_address="1.2.3.4",
    )


@pytest.fixture
def credentials():
    return FixedCredentialProvider("dbadmin", "S3cret!pw")
