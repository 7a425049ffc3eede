#!/usr/bin/python3
import click
from ape import networks
from ape.cli import ConnectedProviderCommand, network_option

from vault_deployment.constants import VAULT_CONTRACT, VAULT_FACTORY_CONTRACT
from vault_deployment.options import address_option, registry_filepath_option
from vault_deployment.pipeline import find_deployed_contract, run_script
from vault_deployment.utils import verify_contract


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@click.option(
    "--contract-name",
    "-c",
    help="Contract to verify",
    type=click.Choice([VAULT_FACTORY_CONTRACT, VAULT_CONTRACT]),
    default=VAULT_FACTORY_CONTRACT,
    show_default=True,
)
@registry_filepath_option
@address_option
def cli(network, contract_name, registry_filepath, address):
    """Retries block explorer verification of a deployed contract."""
    if registry_filepath and address:
        raise click.BadOptionUsage(
            option_name="--address",
            message="Provide either 'registry_filepath' or 'address', not both.",
        )

    def verify():
        contract_instance = find_deployed_contract(
            contract_name,
            chain_id=networks.active_provider.chain_id,
            registry_filepath=registry_filepath,
            address=address,
        )
        verify_contract(contract_instance)

    run_script(verify)


if __name__ == "__main__":
    cli()
