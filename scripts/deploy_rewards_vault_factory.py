#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, network_option

from vault_deployment.constants import VAULT_CONTRACT, VAULT_FACTORY_CONTRACT
from vault_deployment.options import autosign_option, constructor_params_option
from vault_deployment.params import Deployer
from vault_deployment.pipeline import run_deployment, run_script
from vault_deployment.utils import get_contract_container


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@constructor_params_option
@autosign_option
def cli(network, constructor_params_filepath, autosign):
    """
    Deploys the BerachainZerolendRewardsVault implementation and the
    BerachainZerolendRewardsVaultFactory that clones it.
    The factory is verified on the block explorer unless the network is local.

    ape run deploy_rewards_vault_factory --network berachain:bartio:node
    """

    def deploy():
        deployer = Deployer.from_yaml(filepath=constructor_params_filepath, autosign=autosign)
        run_deployment(
            deployer,
            vault_container=get_contract_container(VAULT_CONTRACT),
            factory_container=get_contract_container(VAULT_FACTORY_CONTRACT),
        )

    run_script(deploy)


if __name__ == "__main__":
    cli()
