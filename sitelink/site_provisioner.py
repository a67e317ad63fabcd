"""
Site provisioning
Creates a website with a linked storage account and SQL database, and
tears the whole set down again after a test run
"""
from typing import Dict, Optional
from azure.core.exceptions import AzureError

from .azure_client import AzureClient
from .credentials import CredentialProvider, FixedCredentialProvider, InteractiveCredentialProvider
from .database_manager import DatabaseManager, build_connection_string
from .errors import ProvisioningError, StorageAccountUnavailableError
from .models import ConnectionString, ProvisionResult
from .provision_config import (
    ProvisionConfig,
    apply_test_mode,
    generate_server_name,
    validate_provision_config,
)
from .storage_manager import StorageManager
from .website_manager import WebsiteManager


DEFAULT_CONNECTION_NAME = "DefaultConnection"


class SiteProvisioner:
    """Runs the website, storage and database provisioning sequence"""

    def __init__(self, azure_client: AzureClient):
        self.azure_client = azure_client
        self.website_manager = WebsiteManager(azure_client)
        self.storage_manager = StorageManager(azure_client)
        self.database_manager = DatabaseManager(azure_client)

    def _credential_provider_for(self, config: ProvisionConfig) -> CredentialProvider:
        if config.test_mode:
            return FixedCredentialProvider.for_test_run(config.test_password)
        return InteractiveCredentialProvider()

    def provision(self, config: ProvisionConfig,
                  credential_provider: Optional[CredentialProvider] = None) -> ProvisionResult:
        """
        Provision a website linked to a storage account and a SQL database.

        Every step runs in sequence and any Azure error propagates to the
        caller. Nothing is rolled back on failure; in test mode a successful
        run deletes what it created before returning.

        Args:
            config: The run's parameters
            credential_provider: Source of the SQL administrator login; defaults
                to a prompt, or to the fixed test login in test mode

        Returns:
            ProvisionResult with the created resources and an ordered step log
        """
        if config.test_mode:
            config = apply_test_mode(config)
            print(f"Test mode: using website '{config.website_name}', storage account "
                  f"'{config.storage_account_name}' in {config.location}")

        validation = validate_provision_config(config)
        if not validation['valid']:
            raise ProvisioningError(f"Configuration validation failed: {'; '.join(validation['errors'])}")
        for warning in validation['warnings']:
            print(f"Warning: {warning}")

        result = ProvisionResult()

        # Step 1: Website name must be free before anything is created
        print(f"Step 1: Checking website name '{config.website_name}'...")
        self.website_manager.require_website_name_available(config.website_name)
        result.add_step('name_check', 'completed', f"Website name '{config.website_name}' is available")

        # Step 2: Resource group
        print(f"Step 2: Ensuring resource group '{config.resource_group}'...")
        rg_result = self.azure_client.ensure_resource_group(config.resource_group, config.location)
        result.resource_group_created = rg_result.created
        result.add_step('resource_group', rg_result.status.value, rg_result.message)

        # Step 3: App Service Plan and website
        print(f"Step 3: Creating website '{config.website_name}'...")
        plan_result = self.website_manager.ensure_app_service_plan(
            config.plan_name,
            config.resource_group,
            config.location,
            config.app_service_sku
        )
        result.plan_created = plan_result.created
        result.add_step('app_service_plan', plan_result.status.value, plan_result.message)

        result.website = self.website_manager.create_website(config)
        result.add_step('website', 'completed', f"Website '{config.website_name}' created")

        # Step 4: Storage account
        print(f"Step 4: Ensuring storage account '{config.storage_account_name}'...")
        storage_result = self.storage_manager.ensure_storage_account(config)
        if not storage_result.ok:
            result.add_step('storage_account', storage_result.status.value, storage_result.message)
            raise StorageAccountUnavailableError(config.storage_account_name, config.resource_group)
        result.storage_created = storage_result.created
        result.add_step('storage_account', storage_result.status.value, storage_result.message)

        # Step 5: Storage keys become app settings
        print("Step 5: Fetching storage account keys...")
        result.storage_account = self.storage_manager.get_storage_keys(storage_result.resource)
        app_settings = self.storage_manager.build_storage_settings(result.storage_account)
        result.add_step('storage_keys', 'completed', f"Storage keys retrieved for '{config.storage_account_name}'")

        # Step 6: SQL administrator credential
        print("Step 6: Acquiring SQL administrator credential...")
        credential_provider = credential_provider or self._credential_provider_for(config)
        credential = credential_provider.get_credential()
        result.add_step('credential', 'completed', f"Using SQL administrator '{credential.username}'")

        # Step 7: Database server, new or reused
        if config.db_server_name:
            print(f"Step 7: Reusing database server '{config.db_server_name}'...")
            server = self.database_manager.find_server(config.db_server_name)
            result.add_step('database_server', 'existing', f"Database server '{server.name}' reused")
        else:
            print("Step 7: Creating database server and firewall rules...")
            server = self.database_manager.create_db_server_and_firewall_rules(
                generate_server_name(config.website_name),
                config.resource_group,
                config.location,
                credential,
                config.client_ip_address
            )
            result.add_step('database_server', 'created',
                            f"Database server '{server.name}' created with {len(server.firewall_rules)} firewall rules")
        result.database_server = server

        # Step 8: Database
        print(f"Step 8: Creating database '{config.database_name}'...")
        # Databases live in their server's region
        result.database = self.database_manager.create_database(server, config.database_name, server.location)
        result.add_step('database', 'completed', f"Database '{config.database_name}' created on '{server.name}'")

        # Step 9: Link everything to the website
        print("Step 9: Updating website settings...")
        connection_strings = [
            ConnectionString(
                DEFAULT_CONNECTION_NAME,
                build_connection_string(server.name, result.database.name, credential),
                "SQLAzure"
            )
        ]
        self.website_manager.update_site_settings(result.website, app_settings, connection_strings)
        result.add_step('site_settings', 'completed',
                        f"{len(app_settings)} app settings and {len(connection_strings)} connection strings applied")

        if config.test_mode:
            print("Test mode: removing provisioned resources...")
            result.teardown = self.teardown(
                resource_group=config.resource_group,
                storage_account_name=result.storage_account.name,
                website_name=result.website.name,
                database_name=result.database.name,
                server_name=server.name,
                server_resource_group=server.resource_group,
                delete_server=server.created,
                plan_name=config.plan_name if result.plan_created else None,
                delete_resource_group=result.resource_group_created
            )

        return result

    def teardown(self, resource_group: str, storage_account_name: str = None, website_name: str = None,
                 database_name: str = None, server_name: str = None, server_resource_group: str = None,
                 delete_server: bool = False, plan_name: str = None,
                 delete_resource_group: bool = False) -> Dict:
        """
        Delete provisioned resources in order: storage account, website,
        database, server, plan, resource group.

        Every deletion is attempted even if an earlier one fails; failures are
        collected in the returned report.
        """
        server_resource_group = server_resource_group or resource_group
        deletions = []
        if storage_account_name:
            deletions.append((f"storage account '{storage_account_name}'",
                              lambda: self.storage_manager.delete_storage_account(resource_group, storage_account_name)))
        if website_name:
            deletions.append((f"website '{website_name}'",
                              lambda: self.website_manager.delete_website(resource_group, website_name)))
        if database_name and server_name:
            deletions.append((f"database '{database_name}'",
                              lambda: self.database_manager.delete_database(server_resource_group, server_name, database_name)))
        if delete_server and server_name:
            deletions.append((f"database server '{server_name}'",
                              lambda: self.database_manager.delete_server(server_resource_group, server_name)))
        if plan_name:
            deletions.append((f"App Service Plan '{plan_name}'",
                              lambda: self.website_manager.delete_app_service_plan(resource_group, plan_name)))
        if delete_resource_group:
            deletions.append((f"resource group '{resource_group}'",
                              lambda: self.azure_client.delete_resource_group(resource_group)))

        report = {'deleted': [], 'failed': []}
        for label, delete in deletions:
            try:
                delete()
                report['deleted'].append(label)
            except AzureError as e:
                print(f"Warning: failed to delete {label}: {e}")
                report['failed'].append({'resource': label, 'error': str(e)})

        return report
