"""
Azure client for the management APIs a site provisioning run talks to
"""
import os
from datetime import datetime
from azure.identity import DefaultAzureCredential, ClientSecretCredential
from azure.mgmt.resource import ResourceManagementClient
from azure.mgmt.web import WebSiteManagementClient
from azure.mgmt.storage import StorageManagementClient
from azure.mgmt.sql import SqlManagementClient
from azure.core.exceptions import ResourceNotFoundError

from .models import EnsureResult, EnsureStatus


class AzureClient:
    """Azure client holding the resource, web, storage and SQL management clients"""

    def __init__(self, subscription_id: str = None, credential=None):
        self.subscription_id = subscription_id or os.getenv('AZURE_SUBSCRIPTION_ID')
        if not self.subscription_id:
            raise ValueError("Azure subscription ID is required (set AZURE_SUBSCRIPTION_ID)")

        self.credential = credential or self._get_credential()

        self.resource_client = ResourceManagementClient(
            self.credential,
            self.subscription_id
        )
        self.web_client = WebSiteManagementClient(
            self.credential,
            self.subscription_id
        )
        self.storage_client = StorageManagementClient(
            self.credential,
            self.subscription_id
        )
        self.sql_client = SqlManagementClient(
            self.credential,
            self.subscription_id
        )

    def _get_credential(self):
        """Get Azure credentials based on environment"""
        # Service principal only if all three are set and not placeholders
        client_id = os.getenv('AZURE_CLIENT_ID')
        client_secret = os.getenv('AZURE_CLIENT_SECRET')
        tenant_id = os.getenv('AZURE_TENANT_ID')

        if all([client_id, client_secret, tenant_id]) and all([client_id.strip(), client_secret.strip(), tenant_id.strip()]) and not any([client_id == 'your-client-id', client_secret == 'your-client-secret', tenant_id == 'your-tenant-id']):
            return ClientSecretCredential(
                tenant_id=tenant_id,
                client_id=client_id,
                client_secret=client_secret
            )

        # Azure CLI login, managed identity and the rest of the default chain
        return DefaultAzureCredential(exclude_environment_credential=True)

    def get_resource_group(self, name: str):
        """Get a resource group by name"""
        try:
            return self.resource_client.resource_groups.get(name)
        except ResourceNotFoundError:
            return None

    def create_resource_group(self, name: str, location: str, tags: dict = None):
        """Create a new resource group with optional tags"""
        default_tags = {
            "CreatedBy": "Sitelink",
            "CreatedDate": datetime.now().strftime("%Y-%m-%d")
        }

        if tags:
            default_tags.update(tags)

        return self.resource_client.resource_groups.create_or_update(
            resource_group_name=name,
            parameters={
                "location": location,
                "tags": default_tags
            }
        )

    def ensure_resource_group(self, name: str, location: str, tags: dict = None) -> EnsureResult:
        """Reuse a resource group if present, create it otherwise"""
        existing = self.get_resource_group(name)
        if existing:
            return EnsureResult(
                EnsureStatus.EXISTING,
                existing,
                f"Resource group '{name}' already exists, reusing it"
            )

        resource_group = self.create_resource_group(name, location, tags)
        return EnsureResult(
            EnsureStatus.CREATED,
            resource_group,
            f"Resource group '{name}' created in {location}"
        )

    def delete_resource_group(self, name: str):
        """Delete a resource group and all its resources, waiting for completion"""
        print(f"Deleting resource group: {name}")
        self.resource_client.resource_groups.begin_delete(name).result()
