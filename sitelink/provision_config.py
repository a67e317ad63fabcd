"""
Provisioning configuration, input validation and test-mode substitution
"""
import os
import re
import ipaddress
from dataclasses import dataclass, replace
from typing import Dict, Optional

from .errors import InvalidIPAddressError


TEST_LOCATION = "West US"
TEST_CLIENT_IP = "24.16.65.126"
TEST_USERNAME = "TestUser"

VALID_APP_SERVICE_SKUS = ['F1', 'B1', 'B2', 'B3', 'S1', 'S2', 'S3', 'P1', 'P2', 'P3']


@dataclass
class ProvisionConfig:
    website_name: str
    location: str
    storage_account_name: str
    client_ip_address: str
    db_server_name: Optional[str] = None
    test_script: Optional[str] = None
    test_password: Optional[str] = None
    resource_group: Optional[str] = None
    app_service_sku: str = "B1"
    storage_sku: str = "Standard_LRS"

    def __post_init__(self):
        if not self.resource_group and self.website_name:
            self.resource_group = f"{self.website_name}-rg"

    @property
    def test_mode(self) -> bool:
        return is_test_mode(self.test_script)

    @property
    def plan_name(self) -> str:
        return f"{self.website_name}-plan"

    @property
    def database_name(self) -> str:
        return database_name_for(self.website_name)


def is_test_mode(test_script: Optional[str]) -> bool:
    """Test mode is on when the flag starts with TEST, in any case"""
    return bool(test_script) and test_script.upper().startswith("TEST")


def validate_ip_address(value: str) -> str:
    """Return the address unchanged if it is a dotted-quad IPv4 address"""
    if not isinstance(value, str) or value.count('.') != 3:
        raise InvalidIPAddressError(value)
    try:
        ipaddress.IPv4Address(value)
    except ipaddress.AddressValueError:
        raise InvalidIPAddressError(value)
    return value


def database_name_for(website_name: str) -> str:
    return f"{website_name}_db"


def _random_suffix(length: int = 8) -> str:
    return os.urandom(length // 2).hex()


def generate_website_name() -> str:
    return f"testsite{_random_suffix()}"


def generate_storage_account_name() -> str:
    # 3-24 lowercase letters and digits
    return f"teststor{_random_suffix()}"


def generate_server_name(website_name: str) -> str:
    """SQL server names are lowercase letters, digits and hyphens, max 63 characters"""
    base = re.sub(r'[^a-z0-9-]+', '-', website_name.lower()).strip('-')[:40] or 'sitelink'
    return f"{base}-sql-{_random_suffix(6)}"


def generate_test_password() -> str:
    # Azure SQL wants three of: upper, lower, digit, symbol
    return f"Tp{_random_suffix(16)}!9"


def apply_test_mode(config: ProvisionConfig) -> ProvisionConfig:
    """Swap website and storage names for random ones and pin location and IP when in test mode"""
    if not config.test_mode:
        return config

    website_name = generate_website_name()
    return replace(
        config,
        website_name=website_name,
        location=TEST_LOCATION,
        storage_account_name=generate_storage_account_name(),
        client_ip_address=TEST_CLIENT_IP,
        resource_group=f"{website_name}-rg",
    )


def validate_provision_config(config: ProvisionConfig) -> Dict:
    """Validate a provisioning configuration before any Azure call is made"""
    errors = []
    warnings = []

    required_fields = ['website_name', 'location', 'storage_account_name', 'client_ip_address']
    for field in required_fields:
        if not getattr(config, field):
            errors.append(f"{field} is required")

    # Website names are globally unique host names
    website_name = config.website_name or ''
    if website_name:
        if len(website_name) < 2 or len(website_name) > 60:
            errors.append("Website name must be 2-60 characters")
        if not re.match(r'^[A-Za-z0-9-]+$', website_name):
            errors.append("Website name can only contain letters, numbers and hyphens")

    storage_name = config.storage_account_name or ''
    if storage_name and not re.match(r'^[a-z0-9]{3,24}$', storage_name):
        errors.append("Storage account name must be 3-24 lowercase letters and numbers")

    if config.client_ip_address:
        try:
            validate_ip_address(config.client_ip_address)
        except InvalidIPAddressError as e:
            errors.append(str(e))

    if config.app_service_sku not in VALID_APP_SERVICE_SKUS:
        warnings.append(f"SKU {config.app_service_sku} may not be valid. Valid SKUs: {', '.join(VALID_APP_SERVICE_SKUS)}")

    return {
        'valid': len(errors) == 0,
        'errors': errors,
        'warnings': warnings
    }
