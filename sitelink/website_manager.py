"""
Website management
Creates App Service websites and pushes their app settings and connection strings
"""
from typing import List
from azure.core.exceptions import ResourceNotFoundError

from .errors import WebsiteExistsError
from .models import AppSetting, ConnectionString, EnsureResult, EnsureStatus, Website
from .provision_config import ProvisionConfig


# SKU -> (tier, size)
SKU_TIERS = {
    'F1': ('Free', 'F1'),
    'B1': ('Basic', 'B1'),
    'B2': ('Basic', 'B2'),
    'B3': ('Basic', 'B3'),
    'S1': ('Standard', 'S1'),
    'S2': ('Standard', 'S2'),
    'S3': ('Standard', 'S3'),
    'P1': ('Premium', 'P1'),
    'P2': ('Premium', 'P2'),
    'P3': ('Premium', 'P3'),
}


class WebsiteManager:
    """Manages App Service plans and websites"""

    def __init__(self, azure_client):
        self.web_client = azure_client.web_client
        self.subscription_id = azure_client.subscription_id

    def website_exists(self, name: str) -> bool:
        """Check the subscription's websites for a name, ignoring case"""
        for site in self.web_client.web_apps.list():
            if site.name and site.name.lower() == name.lower():
                return True
        return False

    def require_website_name_available(self, name: str):
        """Website names are never updated in place, so a taken name aborts the run"""
        if self.website_exists(name):
            raise WebsiteExistsError(name)

    def ensure_app_service_plan(self, name: str, resource_group: str, location: str, sku: str = 'B1') -> EnsureResult:
        """Reuse the App Service Plan if present, create it otherwise"""
        try:
            plan = self.web_client.app_service_plans.get(resource_group, name)
            if plan:
                print(f"App Service Plan '{name}' already exists, reusing it")
                return EnsureResult(EnsureStatus.EXISTING, plan, f"App Service Plan '{name}' already exists, reusing it")
        except ResourceNotFoundError:
            pass

        tier, size = SKU_TIERS.get(sku, ('Basic', 'B1'))
        plan_params = {
            'location': location,
            'sku': {
                'name': size,
                'tier': tier
            }
        }

        print(f"Creating App Service Plan '{name}' with SKU {sku} ({tier}/{size})...")
        plan = self.web_client.app_service_plans.begin_create_or_update(
            resource_group,
            name,
            plan_params
        ).result()

        return EnsureResult(EnsureStatus.CREATED, plan, f"App Service Plan '{name}' created")

    def create_website(self, config: ProvisionConfig) -> Website:
        """Create the website on the configured plan"""
        app_params = {
            'location': config.location,
            'server_farm_id': f"/subscriptions/{self.subscription_id}/resourceGroups/{config.resource_group}/providers/Microsoft.Web/serverfarms/{config.plan_name}",
            'https_only': True
        }

        print(f"Creating website '{config.website_name}' in resource group '{config.resource_group}'...")
        app = self.web_client.web_apps.begin_create_or_update(
            config.resource_group,
            config.website_name,
            app_params
        ).result()

        print(f"Website created: {app.name}, Hostname: {app.default_host_name}")
        return Website(
            name=config.website_name,
            location=config.location,
            resource_group=config.resource_group,
            plan_name=config.plan_name,
            default_host_name=app.default_host_name or f"{config.website_name}.azurewebsites.net"
        )

    def update_site_settings(self, website: Website, app_settings: List[AppSetting],
                             connection_strings: List[ConnectionString]):
        """Push app settings and connection strings to the website in one update"""
        website.app_settings = list(app_settings)
        website.connection_strings = list(connection_strings)

        print(f"Updating website '{website.name}' with {len(app_settings)} app settings "
              f"and {len(connection_strings)} connection strings...")
        return self.web_client.web_apps.update_configuration(
            website.resource_group,
            website.name,
            {
                'app_settings': [setting.to_dict() for setting in website.app_settings],
                'connection_strings': [conn.to_dict() for conn in website.connection_strings]
            }
        )

    def delete_website(self, resource_group: str, name: str):
        print(f"Deleting website: {name}")
        self.web_client.web_apps.delete(resource_group, name)

    def delete_app_service_plan(self, resource_group: str, name: str):
        print(f"Deleting App Service Plan: {name}")
        self.web_client.app_service_plans.delete(resource_group, name)
