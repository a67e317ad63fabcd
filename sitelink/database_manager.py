"""
Azure SQL server and database management
"""
import os
from typing import Optional

from .errors import ProvisioningError
from .models import Database, DatabaseServer, FirewallRule, SqlCredential


DATABASE_EDITION = "Basic"
AZURE_SERVICES_RULE = "AzureServices"
# 0.0.0.0 - 0.0.0.0 means "allow Azure services"
AZURE_SERVICES_IP = "0.0.0.0"

CONNECTION_STRING_FORMAT = (
    "Server=tcp:{server}.database.windows.net,1433;"
    "Database={database};"
    "User ID={user}@{server};"
    "Password={password};"
    "Trusted_Connection=False;"
    "Encrypt=True;"
    "Connection Timeout=30;"
)


def build_connection_string(server_name: str, database_name: str, credential: SqlCredential) -> str:
    """Build the ADO.NET connection string a website uses to reach the database"""
    return CONNECTION_STRING_FORMAT.format(
        server=server_name,
        database=database_name,
        user=credential.username,
        password=credential.password
    )


def client_rule_name() -> str:
    return f"ClientIPAddress_{int.from_bytes(os.urandom(4), 'big')}"


class DatabaseManager:
    """Creates SQL servers, firewall rules and databases"""

    def __init__(self, azure_client):
        self.sql_client = azure_client.sql_client

    def find_server(self, name: str) -> DatabaseServer:
        """Locate an existing server anywhere in the subscription"""
        for server in self.sql_client.servers.list():
            if server.name and server.name.lower() == name.lower():
                return DatabaseServer(
                    name=server.name,
                    location=server.location,
                    resource_group=server.id.split('/')[4],
                    administrator_login=server.administrator_login or "",
                    created=False
                )
        raise ProvisioningError(f"Database server '{name}' not found in this subscription")

    def create_db_server_and_firewall_rules(self, server_name: str, resource_group: str, location: str,
                                            credential: SqlCredential, client_ip: str) -> DatabaseServer:
        """Create a new server and open it to the client IP and to Azure services"""
        print(f"Creating database server '{server_name}' in {location}...")
        self.sql_client.servers.begin_create_or_update(
            resource_group,
            server_name,
            {
                "location": location,
                "administrator_login": credential.username,
                "administrator_login_password": credential.password,
                "version": "12.0"
            }
        ).result()

        server = DatabaseServer(
            name=server_name,
            location=location,
            resource_group=resource_group,
            administrator_login=credential.username,
            created=True
        )

        rules = [
            FirewallRule(client_rule_name(), client_ip, client_ip),
            FirewallRule(AZURE_SERVICES_RULE, AZURE_SERVICES_IP, AZURE_SERVICES_IP),
        ]
        for rule in rules:
            print(f"Adding firewall rule '{rule.name}' ({rule.start_ip_address} - {rule.end_ip_address})")
            self.sql_client.firewall_rules.create_or_update(
                resource_group,
                server_name,
                rule.name,
                {
                    "start_ip_address": rule.start_ip_address,
                    "end_ip_address": rule.end_ip_address
                }
            )
            server.firewall_rules.append(rule)

        return server

    def create_database(self, server: DatabaseServer, database_name: str,
                        location: Optional[str] = None) -> Database:
        """Create a Basic database; an existing name is left for the provider to reject"""
        print(f"Creating database '{database_name}' on server '{server.name}'...")
        self.sql_client.databases.begin_create_or_update(
            server.resource_group,
            server.name,
            database_name,
            {
                "location": location or server.location,
                "sku": {"name": DATABASE_EDITION, "tier": DATABASE_EDITION}
            },
            headers={"If-None-Match": "*"}
        ).result()
        return Database(name=database_name, server_name=server.name, edition=DATABASE_EDITION)

    def delete_database(self, resource_group: str, server_name: str, database_name: str):
        print(f"Deleting database: {database_name}")
        self.sql_client.databases.begin_delete(resource_group, server_name, database_name).result()

    def delete_server(self, resource_group: str, server_name: str):
        print(f"Deleting database server: {server_name}")
        self.sql_client.servers.begin_delete(resource_group, server_name).result()
