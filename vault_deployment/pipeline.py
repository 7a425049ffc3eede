import sys
import traceback
from pathlib import Path
from typing import Any, Callable, List, NamedTuple, Optional

import click
from ape.api import ExplorerAPI
from ape.contracts.base import ContractContainer, ContractInstance
from dotenv import find_dotenv, load_dotenv

from vault_deployment.constants import (
    REWARDS_VAULT_FACTORY_PARAMS_FILEPATH,
    VAULT_FACTORY_CONTRACT,
)
from vault_deployment.params import Deployer
from vault_deployment.registry import contracts_from_registry
from vault_deployment.utils import (
    _load_yaml,
    get_artifact_filepath,
    get_contract_container,
    verify_contract,
)

SUCCESS_EXIT_CODE = 0
FAILURE_EXIT_CODE = 1


class VaultFactoryDeployment(NamedTuple):
    vault_implementation: ContractInstance
    factory: ContractInstance
    factory_constructor_args: List[Any]


def deploy_vault_factory(
    deployer: Deployer,
    vault_container: ContractContainer,
    factory_container: ContractContainer,
) -> VaultFactoryDeployment:
    """
    Deploys the vault implementation, then the factory that clones it.
    The factory's constructor parameters reference the implementation
    (see constructor_params/bartio/rewards-vault-factory.yml).
    """
    vault_implementation = deployer.deploy(vault_container)
    factory = deployer.deploy(factory_container)
    factory_name = factory_container.contract_type.name
    print(f"{factory_name} deployed to: {factory.address}")
    return VaultFactoryDeployment(
        vault_implementation=vault_implementation,
        factory=factory,
        factory_constructor_args=deployer.constructor_arguments[factory_name],
    )


def verify_vault_factory(deployment: VaultFactoryDeployment, explorer: ExplorerAPI) -> None:
    verify_contract(
        deployment.factory,
        constructor_args=deployment.factory_constructor_args,
        explorer=explorer,
    )


def run_deployment(
    deployer: Deployer,
    vault_container: ContractContainer,
    factory_container: ContractContainer,
    explorer: Optional[ExplorerAPI] = None,
) -> VaultFactoryDeployment:
    """Deploys, records and, on live networks, verifies the rewards vault factory."""
    deployment = deploy_vault_factory(deployer, vault_container, factory_container)
    deployer.finalize(deployments=[deployment.vault_implementation, deployment.factory])

    if deployer.verify:
        verify_vault_factory(deployment, explorer=explorer or deployer.explorer)
    else:
        print(f"(i) Skipping verification of {VAULT_FACTORY_CONTRACT} on {deployer.network.name}.")

    return deployment


def execute(step: Callable[[], Any]) -> int:
    """Runs a deployment step; any error is reported once and turned into a failure exit code."""
    try:
        step()
    except Exception:
        click.echo(traceback.format_exc(), err=True)
        return FAILURE_EXIT_CODE
    return SUCCESS_EXIT_CODE


def run_script(step: Callable[[], Any]) -> None:
    """
    Entry point of the ape scripts: loads .env from the working directory,
    runs the script body and exits the process with its status.
    """
    load_dotenv(find_dotenv(usecwd=True))
    sys.exit(execute(step))


def find_deployed_contract(
    contract_name: str,
    chain_id: int,
    registry_filepath: Optional[Path] = None,
    address: Optional[str] = None,
) -> ContractInstance:
    """
    Returns a deployed contract, either at an explicit address or as recorded
    in the registry for the given chain. The registry defaults to the one
    named in the rewards vault factory params file.
    """
    if address:
        return get_contract_container(contract_name).at(address)

    filepath = registry_filepath or get_artifact_filepath(
        _load_yaml(REWARDS_VAULT_FACTORY_PARAMS_FILEPATH)
    )
    contracts = contracts_from_registry(filepath, chain_id=chain_id)
    try:
        return contracts[contract_name]
    except KeyError:
        raise ValueError(
            f"Contract '{contract_name}' not found in registry, '{filepath}', "
            f"for chain {chain_id}"
        )
