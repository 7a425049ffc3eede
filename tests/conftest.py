from types import SimpleNamespace

import pytest
from eth_utils import to_checksum_address

from vault_deployment.constants import (
    BARTIO,
    BARTIO_CHAIN_ID,
    BERACHAIN,
    REWARDS_VAULT_FACTORY_PARAMS_FILEPATH,
    VAULT_CONTRACT,
    VAULT_FACTORY_CONTRACT,
)
from vault_deployment.params import Deployer
from vault_deployment.utils import _load_yaml

BGT = "0xbDa130737BDd9618301681329bF2e46A016ff9Ad"
BERACHEF = "0xfb81E39E3970076ab2693fA5C45A07Cc724C93c2"
DISTRIBUTOR = "0x2C1F148Ee973a4cdA4aBEce2241DF3D3337b7319"
GOVERNANCE = "0x0F6e98A756A40dD050dC78959f45559F98d3289d"

LOCAL_CHAIN_ID = 1337
FACTORY_PARAMETER_NAMES = [
    "_bgt",
    "_berachef",
    "_distributor",
    "_governance",
    "_vaultImplementation",
]


def make_address(seed: int) -> str:
    return to_checksum_address(f"0x{seed:040x}")


class FakeAbiEntry:
    def __init__(self, type_, name=None):
        self.type = type_
        self.name = name

    def model_dump(self, **kwargs):
        entry = {"type": self.type}
        if self.name:
            entry["name"] = self.name
        return entry


class FakeContractContainer:
    def __init__(self, name, parameter_names=(), parameter_type="address"):
        inputs = [SimpleNamespace(name=n, type=parameter_type) for n in parameter_names]
        self.contract_type = SimpleNamespace(
            name=name,
            abi=[FakeAbiEntry("constructor"), FakeAbiEntry("function", "createVault")],
        )
        self.constructor = SimpleNamespace(abi=SimpleNamespace(inputs=inputs))


class FakeContractInstance:
    def __init__(self, container, address, chain_id, sender, block_number):
        self.contract_type = container.contract_type
        self.address = address
        self.receipt = SimpleNamespace(
            chain_id=chain_id,
            txn_hash=f"0x{block_number:064x}",
            block_number=block_number,
            transaction=SimpleNamespace(sender=sender),
        )


class FakeAccount:
    """Deploys fake instances at sequential addresses and records every call."""

    def __init__(self, address=None, chain_id=BARTIO_CHAIN_ID, fail_on=None):
        self.address = address or make_address(0xDE9)
        self.chain_id = chain_id
        self.fail_on = fail_on
        self.deploy_calls = []

    def deploy(self, container, *args, **kwargs):
        contract_name = container.contract_type.name
        self.deploy_calls.append((contract_name, list(args)))
        if contract_name == self.fail_on:
            raise RuntimeError(f"{contract_name} deployment reverted")
        seed = len(self.deploy_calls)
        return FakeContractInstance(
            container,
            address=make_address(0x1000 + seed),
            chain_id=self.chain_id,
            sender=self.address,
            block_number=100 + seed,
        )


class FakeExplorer:
    def __init__(self):
        self.published = []

    def publish_contract(self, address):
        self.published.append(address)


def make_network(name=BARTIO, chain_id=BARTIO_CHAIN_ID, explorer=None):
    return SimpleNamespace(
        name=name,
        chain_id=chain_id,
        ecosystem=SimpleNamespace(name=BERACHAIN),
        explorer=explorer,
    )


@pytest.fixture
def explorer():
    return FakeExplorer()


@pytest.fixture
def bartio(explorer):
    return make_network(explorer=explorer)


@pytest.fixture
def local_network(explorer):
    return make_network(name="local", chain_id=LOCAL_CHAIN_ID, explorer=explorer)


@pytest.fixture
def deployer_account():
    return FakeAccount()


@pytest.fixture
def vault_container():
    return FakeContractContainer(VAULT_CONTRACT)


@pytest.fixture
def factory_container():
    return FakeContractContainer(VAULT_FACTORY_CONTRACT, FACTORY_PARAMETER_NAMES)


@pytest.fixture
def params_config(tmp_path):
    config = _load_yaml(REWARDS_VAULT_FACTORY_PARAMS_FILEPATH)
    config["artifacts"]["dir"] = str(tmp_path / "artifacts")
    return config


@pytest.fixture
def get_deployer(params_config, deployer_account, bartio):
    def _get_deployer(network=None, account=None, config=None, **kwargs):
        return Deployer(
            config=config or params_config,
            path=REWARDS_VAULT_FACTORY_PARAMS_FILEPATH,
            account=account or deployer_account,
            autosign=True,
            network=network or bartio,
            **kwargs,
        )

    return _get_deployer


class FakeRegistryContainer:
    """Stands in for get_contract_container when contracts are loaded back by address."""

    def __init__(self, name):
        self.contract_type = SimpleNamespace(name=name)

    def at(self, address):
        return SimpleNamespace(contract_type=self.contract_type, address=address)
