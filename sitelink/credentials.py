"""
SQL administrator credential providers
"""
from typing import Optional

import click

from .models import SqlCredential
from .provision_config import TEST_USERNAME, generate_test_password


class CredentialProvider:
    """Supplies the SQL administrator credential for a provisioning run"""

    def get_credential(self) -> SqlCredential:
        raise NotImplementedError


class InteractiveCredentialProvider(CredentialProvider):
    """Prompts the operator for the SQL administrator login"""

    def __init__(self, default_username: Optional[str] = None):
        self.default_username = default_username

    def get_credential(self) -> SqlCredential:
        username = click.prompt("SQL administrator login", default=self.default_username)
        password = click.prompt(
            "SQL administrator password",
            hide_input=True,
            confirmation_prompt=True
        )
        return SqlCredential(username=username, password=password)


class FixedCredentialProvider(CredentialProvider):
    """Returns a credential injected up front (test runs, automation)"""

    def __init__(self, username: str, password: str):
        self.credential = SqlCredential(username=username, password=password)

    def get_credential(self) -> SqlCredential:
        return self.credential

    @classmethod
    def for_test_run(cls, test_password: Optional[str] = None) -> 'FixedCredentialProvider':
        return cls(TEST_USERNAME, test_password or generate_test_password())
