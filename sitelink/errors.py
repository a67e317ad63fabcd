"""
Provisioning errors
"""


class ProvisioningError(Exception):
    """Base class for errors raised while provisioning a site"""


class WebsiteExistsError(ProvisioningError):
    """Raised when the requested website name is already taken"""

    def __init__(self, website_name: str):
        self.website_name = website_name
        super().__init__("Website already exists. Please try a different website name.")


class StorageAccountUnavailableError(ProvisioningError):
    """Raised when a storage account name is owned outside the target resource group"""

    def __init__(self, account_name: str, resource_group: str):
        self.account_name = account_name
        self.resource_group = resource_group
        super().__init__(
            f"Storage account name '{account_name}' is already taken and does not belong "
            f"to resource group '{resource_group}'"
        )


class InvalidIPAddressError(ProvisioningError, ValueError):
    """Raised when the client IP address is not a dotted-quad IPv4 address"""

    def __init__(self, value):
        self.value = value
        super().__init__(f"'{value}' is not a valid IPv4 address (expected a.b.c.d)")
