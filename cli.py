#!/usr/bin/env python3
"""
Sitelink CLI - provision an Azure website with linked storage and SQL database
"""
import click
import json
import sys
from dotenv import load_dotenv
from sitelink.azure_client import AzureClient
from sitelink.database_manager import build_connection_string
from sitelink.errors import InvalidIPAddressError
from sitelink.models import SqlCredential
from sitelink.provision_config import ProvisionConfig, is_test_mode, validate_ip_address
from sitelink.site_provisioner import SiteProvisioner


def _validate_ip_option(value):
    try:
        return validate_ip_address(value)
    except InvalidIPAddressError as e:
        raise click.BadParameter(str(e), param_hint="'--client-ip-address'")


def _echo_teardown(report):
    click.echo("\nTeardown:")
    for label in report['deleted']:
        click.echo(f"  ✓ Deleted {label}")
    for failure in report['failed']:
        click.echo(f"  ✗ Could not delete {failure['resource']}: {failure['error']}", err=True)


@click.group()
def cli():
    """Sitelink - Azure website, storage and SQL database provisioning"""
    load_dotenv()


@cli.command('provision')
@click.option('--website-name', '-w', help='Website name (globally unique)')
@click.option('--location', '-l', help='Azure location, e.g. "West US"')
@click.option('--storage-account-name', '-s', help='Storage account name (3-24 lowercase letters and numbers)')
@click.option('--client-ip-address', '-i',
              help='Your public IPv4 address, allowed through the database firewall')
@click.option('--db-server-name', '-d', help='Existing database server to reuse instead of creating one')
@click.option('--test-script', help='Run in test mode when this starts with TEST')
@click.option('--test-pw', help='SQL administrator password for test mode')
@click.option('--resource-group', '-g', help='Resource group (defaults to <website-name>-rg)')
@click.option('--sku', default='B1', help='App Service SKU (F1, B1, S1, P1, etc.)')
@click.option('--storage-sku', default='Standard_LRS', help='Storage account SKU')
@click.option('--json', 'as_json', is_flag=True, help='Print the result as JSON')
def provision(website_name, location, storage_account_name, client_ip_address, db_server_name,
              test_script, test_pw, resource_group, sku, storage_sku, as_json):
    """Create a website linked to a new storage account and SQL database"""
    test_mode = is_test_mode(test_script)
    if not test_mode:
        missing = [
            option for option, value in [
                ('--website-name', website_name),
                ('--location', location),
                ('--storage-account-name', storage_account_name),
                ('--client-ip-address', client_ip_address),
            ] if not value
        ]
        if missing:
            raise click.UsageError(f"Missing required options: {', '.join(missing)}")
        # Test mode replaces the IP, so it is only checked here
        client_ip_address = _validate_ip_option(client_ip_address)

    config = ProvisionConfig(
        website_name=website_name or '',
        location=location or '',
        storage_account_name=storage_account_name or '',
        client_ip_address=client_ip_address or '',
        db_server_name=db_server_name,
        test_script=test_script,
        test_password=test_pw,
        resource_group=resource_group,
        app_service_sku=sku,
        storage_sku=storage_sku
    )

    try:
        azure_client = AzureClient()
        provisioner = SiteProvisioner(azure_client)

        result = provisioner.provision(config)

        if as_json:
            click.echo(json.dumps(result.summary(), indent=2))
            return

        click.echo(f"✓ Website '{result.website.name}' provisioned")
        click.echo(f"URL: https://{result.website.default_host_name}")
        click.echo(f"Storage account: {result.storage_account.name}")
        click.echo(f"Database: {result.database.name} on {result.database_server.name}")
        click.echo("\nSteps:")
        for step in result.steps:
            click.echo(f"  - {step['step']}: {step['status']} - {step['message']}")

        if result.teardown is not None:
            _echo_teardown(result.teardown)

    except Exception as e:
        click.echo(f"Error: {str(e)}", err=True)
        sys.exit(1)


@cli.command('teardown')
@click.option('--resource-group', '-g', required=True, help='Resource group holding the website and storage account')
@click.option('--website-name', '-w', help='Website to delete')
@click.option('--storage-account-name', '-s', help='Storage account to delete')
@click.option('--db-server-name', '-d', help='Server holding the database')
@click.option('--database-name', help='Database to delete')
@click.option('--server-resource-group', help='Resource group of the database server, if different')
@click.option('--delete-server', is_flag=True, help='Also delete the database server')
@click.option('--plan-name', help='App Service Plan to delete')
@click.option('--delete-resource-group', is_flag=True, help='Finally delete the resource group itself')
@click.option('--yes', '-y', is_flag=True, help='Do not ask for confirmation')
def teardown(resource_group, website_name, storage_account_name, db_server_name, database_name,
             server_resource_group, delete_server, plan_name, delete_resource_group, yes):
    """Delete resources created by an earlier provisioning run"""
    if not yes:
        click.confirm(f"Delete the selected resources in '{resource_group}'?", abort=True)

    try:
        azure_client = AzureClient()
        provisioner = SiteProvisioner(azure_client)

        report = provisioner.teardown(
            resource_group=resource_group,
            storage_account_name=storage_account_name,
            website_name=website_name,
            database_name=database_name,
            server_name=db_server_name,
            server_resource_group=server_resource_group,
            delete_server=delete_server,
            plan_name=plan_name,
            delete_resource_group=delete_resource_group
        )

        _echo_teardown(report)
        if report['failed']:
            sys.exit(1)

    except Exception as e:
        click.echo(f"Error: {str(e)}", err=True)
        sys.exit(1)


@cli.command('connection-string')
@click.argument('server_name')
@click.argument('database_name')
@click.argument('username')
@click.password_option('--password', '-p', confirmation_prompt=False, help='SQL administrator password')
def connection_string(server_name, database_name, username, password):
    """Print the connection string a website uses for a database"""
    click.echo(build_connection_string(server_name, database_name, SqlCredential(username, password)))


if __name__ == '__main__':
    cli()
