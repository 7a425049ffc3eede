import os
from typing import Optional

from ape import accounts
from ape.api import AccountAPI, NetworkAPI
from ape_accounts import import_account_from_private_key
from eth_account import Account

from vault_deployment.constants import (
    DEFAULT_DEPLOYER_ALIAS,
    DEPLOYER_ALIAS_ENVVAR,
    DEPLOYER_PASSPHRASE_ENVVAR,
    PRIVATE_KEY_ENVVAR,
)
from vault_deployment.networks import is_local_network


class DeployerAccountError(Exception):
    """Raised when no deployer account can be derived from the environment."""


def _load_keyfile_account(alias: str, passphrase: str, private_key: str) -> AccountAPI:
    expected_address = Account.from_key(private_key).address
    if alias in accounts.aliases:
        account = accounts.load(alias)
        if account.address != expected_address:
            raise DeployerAccountError(
                f"Account '{alias}' ({account.address}) does not match "
                f"{PRIVATE_KEY_ENVVAR} ({expected_address}); "
                f"set {DEPLOYER_ALIAS_ENVVAR} to use another alias."
            )
        return account

    account = import_account_from_private_key(alias, passphrase, private_key)
    print(f"Account imported: {account.address}")
    return account


def get_deployer_account(
    network: Optional[NetworkAPI] = None, autosign: bool = False
) -> AccountAPI:
    """
    Returns the account that signs the deployment.

    On local networks this is the first ape test account. Otherwise the key in
    PRIVATE_KEY is imported into the ape keystore under DEPLOYER_ALIAS (once)
    and loaded from there.
    """
    if is_local_network(network):
        return accounts.test_accounts[0]

    private_key = os.environ.get(PRIVATE_KEY_ENVVAR)
    if not private_key:
        raise DeployerAccountError(f"{PRIVATE_KEY_ENVVAR} is not set.")

    alias = os.environ.get(DEPLOYER_ALIAS_ENVVAR, DEFAULT_DEPLOYER_ALIAS)
    passphrase = os.environ.get(DEPLOYER_PASSPHRASE_ENVVAR, "")
    account = _load_keyfile_account(alias, passphrase, private_key)
    if autosign:
        account.set_autosign(True, passphrase=passphrase)
    return account
