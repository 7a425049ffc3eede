import json
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import yaml
from ape import project
from ape.api import ExplorerAPI, NetworkAPI
from ape.contracts import ContractContainer, ContractInstance

from vault_deployment.constants import ARTIFACTS_DIR
from vault_deployment.networks import get_active_network, is_local_network


class DeploymentConfigError(ValueError):
    pass


def _load_yaml(filepath: Path) -> dict:
    """Loads a YAML file."""
    with open(filepath, "r") as file:
        return yaml.safe_load(file)


def _load_json(filepath: Path) -> dict:
    """Loads a JSON file."""
    with open(filepath, "r") as file:
        return json.load(file)


def get_artifact_filepath(config: Dict) -> Path:
    """Returns the filepath of the registry artifact."""
    artifact_config = config.get("artifacts", {})
    artifact_dir = Path(artifact_config.get("dir", ARTIFACTS_DIR))
    filename = artifact_config.get("filename")
    if not filename:
        raise DeploymentConfigError("artifact filename is not set in params file.")
    return artifact_dir / filename


def validate_config(config: Dict, network: Optional[NetworkAPI] = None) -> Path:
    """
    Checks that the params file targets the connected chain and that
    the deployment has not already been published for that chain.
    Returns the registry filepath.
    """
    print("Validating parameters YAML...")
    network = network or get_active_network()

    deployment = config.get("deployment")
    if not deployment:
        raise DeploymentConfigError("deployment is not set in params file.")

    config_chain_id = deployment.get("chain_id")
    if not config_chain_id:
        raise DeploymentConfigError("chain_id is not set in params file.")

    if not config.get("contracts"):
        raise DeploymentConfigError("Constructor parameters file missing 'contracts' field.")

    config_chain_id = int(config_chain_id)
    live_deployment = not is_local_network(network)
    if config_chain_id != network.chain_id and live_deployment:
        raise DeploymentConfigError(
            f"chain_id in params file ({config_chain_id}) does not match "
            f"chain_id of current network ({network.chain_id})."
        )

    registry_filepath = get_artifact_filepath(config=config)
    if not live_deployment or not registry_filepath.exists():
        # local chains are ephemeral and never published
        return registry_filepath

    registry_chain_ids = map(int, _load_json(registry_filepath).keys())
    if network.chain_id in registry_chain_ids:
        raise DeploymentConfigError(
            f"Deployment is already published for chain_id {network.chain_id} "
            f"in {registry_filepath}."
        )

    return registry_filepath


def check_etherscan_plugin(network: Optional[NetworkAPI] = None) -> None:
    """
    Checks that the ape-etherscan plugin is installed and that it
    serves the connected network. Routescan needs no API key.
    """
    network = network or get_active_network()
    if is_local_network(network):
        # unnecessary for local deployment
        return
    try:
        import ape_etherscan  # noqa: F401
    except ImportError:
        raise ImportError("Please install the ape-etherscan plugin to use this script.")
    if network.explorer is None:
        raise ValueError(
            f"No explorer configured for {network.ecosystem.name}:{network.name}; "
            "check the 'etherscan' section of ape-config.yaml."
        )


def get_explorer(network: Optional[NetworkAPI] = None) -> ExplorerAPI:
    network = network or get_active_network()
    explorer = network.explorer
    if explorer is None:
        raise ValueError(f"No explorer available for network '{network.name}'.")
    return explorer


def verify_contract(
    instance: ContractInstance,
    constructor_args: Sequence[Any] = (),
    explorer: Optional[ExplorerAPI] = None,
) -> None:
    """Submits the source of a deployed contract to the block explorer."""
    explorer = explorer or get_explorer()
    print(f"(i) Verifying {instance.contract_type.name} at {instance.address}...")
    if constructor_args:
        pretty_args = "\n\t".join(str(arg) for arg in constructor_args)
        print(f"Constructor arguments:\n\t{pretty_args}")
    explorer.publish_contract(instance.address)


def get_contract_container(contract: str) -> ContractContainer:
    try:
        return getattr(project, contract)
    except AttributeError:
        raise ValueError(f"No contract found with name '{contract}'.")
