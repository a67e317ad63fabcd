"""
Storage account management
"""
from typing import List
from azure.core.exceptions import ResourceNotFoundError

from .models import AppSetting, EnsureResult, EnsureStatus, StorageAccount
from .provision_config import ProvisionConfig


class StorageManager:
    """Creates storage accounts and exposes their keys as website settings"""

    def __init__(self, azure_client):
        self.storage_client = azure_client.storage_client

    def ensure_storage_account(self, config: ProvisionConfig) -> EnsureResult:
        """Create the storage account, or reuse it if it already lives in our resource group"""
        name = config.storage_account_name
        account = StorageAccount(name=name, location=config.location, resource_group=config.resource_group)

        availability = self.storage_client.storage_accounts.check_name_availability({"name": name})
        if availability.name_available:
            print(f"Creating storage account '{name}' in {config.location}...")
            self.storage_client.storage_accounts.begin_create(
                config.resource_group,
                name,
                {
                    "location": config.location,
                    "kind": "StorageV2",
                    "sku": {"name": config.storage_sku}
                }
            ).result()
            return EnsureResult(EnsureStatus.CREATED, account, f"Storage account '{name}' created")

        try:
            existing = self.storage_client.storage_accounts.get_properties(config.resource_group, name)
        except ResourceNotFoundError:
            return EnsureResult(
                EnsureStatus.FAILED,
                account,
                f"Storage account name '{name}' is taken outside resource group '{config.resource_group}'"
            )

        account.location = existing.location or config.location
        print(f"Storage account '{name}' already exists, reusing it")
        return EnsureResult(EnsureStatus.EXISTING, account, f"Storage account '{name}' already exists, reusing it")

    def get_storage_keys(self, account: StorageAccount) -> StorageAccount:
        """Fill in the primary and secondary access keys"""
        keys = self.storage_client.storage_accounts.list_keys(account.resource_group, account.name).keys
        account.primary_key = keys[0].value if len(keys) > 0 else None
        account.secondary_key = keys[1].value if len(keys) > 1 else None
        return account

    @staticmethod
    def build_storage_settings(account: StorageAccount) -> List[AppSetting]:
        return [
            AppSetting("StorageAccountName", account.name),
            AppSetting("StorageAccountAccessKey", account.primary_key or ""),
        ]

    def delete_storage_account(self, resource_group: str, name: str):
        print(f"Deleting storage account: {name}")
        self.storage_client.storage_accounts.delete(resource_group, name)
