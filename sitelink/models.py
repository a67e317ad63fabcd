"""
Resource records for provisioned websites, storage accounts and databases
"""
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, asdict
from enum import Enum


class EnsureStatus(Enum):
    CREATED = "created"
    EXISTING = "existing"
    FAILED = "failed"


@dataclass
class EnsureResult:
    """Outcome of an ensure-resource-exists operation"""
    status: EnsureStatus
    resource: Any = None
    message: str = ""

    @property
    def created(self) -> bool:
        return self.status == EnsureStatus.CREATED

    @property
    def ok(self) -> bool:
        return self.status != EnsureStatus.FAILED


@dataclass
class AppSetting:
    name: str
    value: str

    def to_dict(self) -> Dict:
        return {'name': self.name, 'value': self.value}


@dataclass
class ConnectionString:
    name: str
    connection_string: str
    type: str = "SQLAzure"

    def to_dict(self) -> Dict:
        return {
            'name': self.name,
            'connection_string': self.connection_string,
            'type': self.type
        }


@dataclass
class SqlCredential:
    username: str
    password: str

    def __repr__(self):
        return f"SqlCredential(username={self.username!r}, password='***')"


@dataclass
class FirewallRule:
    name: str
    start_ip_address: str
    end_ip_address: str


@dataclass
class Website:
    name: str
    location: str
    resource_group: str
    plan_name: str = ""
    default_host_name: str = ""
    app_settings: List[AppSetting] = None
    connection_strings: List[ConnectionString] = None

    def __post_init__(self):
        if self.app_settings is None:
            self.app_settings = []
        if self.connection_strings is None:
            self.connection_strings = []


@dataclass
class StorageAccount:
    name: str
    location: str
    resource_group: str
    primary_key: Optional[str] = None
    secondary_key: Optional[str] = None


@dataclass
class DatabaseServer:
    name: str
    location: str
    resource_group: str
    administrator_login: str = ""
    firewall_rules: List[FirewallRule] = None
    created: bool = False

    def __post_init__(self):
        if self.firewall_rules is None:
            self.firewall_rules = []


@dataclass
class Database:
    name: str
    server_name: str
    edition: str = "Basic"


@dataclass
class ProvisionResult:
    """Everything a provisioning run created or linked"""
    website: Optional[Website] = None
    storage_account: Optional[StorageAccount] = None
    database_server: Optional[DatabaseServer] = None
    database: Optional[Database] = None
    resource_group_created: bool = False
    plan_created: bool = False
    storage_created: bool = False
    steps: List[Dict] = None
    teardown: Optional[Dict] = None

    def __post_init__(self):
        if self.steps is None:
            self.steps = []

    def add_step(self, step: str, status: str, message: str):
        self.steps.append({'step': step, 'status': status, 'message': message})

    def summary(self) -> Dict:
        """Serializable summary of the run, with secrets removed"""
        summary = {
            'website': self.website.name if self.website else None,
            'url': f"https://{self.website.default_host_name}" if self.website and self.website.default_host_name else None,
            'storage_account': self.storage_account.name if self.storage_account else None,
            'database_server': self.database_server.name if self.database_server else None,
            'database': asdict(self.database) if self.database else None,
            'steps': list(self.steps),
        }
        if self.teardown is not None:
            summary['teardown'] = self.teardown
        return summary
