from typing import Optional

from ape import networks
from ape.api import NetworkAPI

from vault_deployment.constants import FORK_NETWORK_SUFFIX, LOCAL_NETWORK


def get_active_network() -> NetworkAPI:
    """Returns the network of the connected provider."""
    return networks.provider.network


def is_local_network_name(network_name: str) -> bool:
    """Returns True for ape's in-memory network and for fork networks."""
    return network_name == LOCAL_NETWORK or network_name.endswith(FORK_NETWORK_SUFFIX)


def is_local_network(network: Optional[NetworkAPI] = None) -> bool:
    network = network or get_active_network()
    return is_local_network_name(network.name)
