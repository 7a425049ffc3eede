import copy

import pytest

from tests.conftest import (
    BERACHEF,
    BGT,
    DISTRIBUTOR,
    GOVERNANCE,
    FakeContractContainer,
    make_address,
)
from vault_deployment.constants import VAULT_CONTRACT, VAULT_FACTORY_CONTRACT
from vault_deployment.params import ConstructorParameters, validate_constructor_args
from vault_deployment.utils import DeploymentConfigError


def _with_factory_constructor(config, **overrides):
    config = copy.deepcopy(config)
    factory_params = config["contracts"][1][VAULT_FACTORY_CONTRACT]["constructor"]
    factory_params.update(overrides)
    return config


def test_constants_and_contracts_resolved(params_config):
    deployments = dict()
    parameters = ConstructorParameters.from_config(params_config, deployments=deployments)

    assert parameters.resolve(VAULT_CONTRACT) == {}

    implementation = make_address(42)
    deployments[VAULT_CONTRACT] = type("Instance", (), {"address": implementation})()
    resolved = parameters.resolve(VAULT_FACTORY_CONTRACT)
    assert list(resolved.keys()) == [
        "_bgt",
        "_berachef",
        "_distributor",
        "_governance",
        "_vaultImplementation",
    ]
    assert list(resolved.values()) == [BGT, BERACHEF, DISTRIBUTOR, GOVERNANCE, implementation]


def test_contract_address_before_deployment(params_config):
    parameters = ConstructorParameters.from_config(params_config, deployments=dict())
    with pytest.raises(DeploymentConfigError, match="must be deployed before"):
        parameters.resolve(VAULT_FACTORY_CONTRACT)


def test_unknown_constant(params_config):
    config = _with_factory_constructor(params_config, _bgt="$HONEY")
    with pytest.raises(DeploymentConfigError, match="Constant 'HONEY' not found"):
        ConstructorParameters.from_config(config, deployments=dict())


def test_unknown_contract(params_config):
    config = _with_factory_constructor(params_config, _vaultImplementation="$SomeOtherVault")
    with pytest.raises(DeploymentConfigError, match="SomeOtherVault not found"):
        ConstructorParameters.from_config(config, deployments=dict())


def test_contract_cannot_reference_itself(params_config):
    config = _with_factory_constructor(params_config, _vaultImplementation=f"${VAULT_FACTORY_CONTRACT}")
    with pytest.raises(DeploymentConfigError, match="its own address"):
        ConstructorParameters.from_config(config, deployments=dict())


def test_deployer_variable(params_config, deployer_account):
    config = _with_factory_constructor(params_config, _governance="$deployer")
    parameters = ConstructorParameters.from_config(
        config, deployments={VAULT_CONTRACT: deployer_account}, account=deployer_account
    )
    assert parameters.resolve(VAULT_FACTORY_CONTRACT)["_governance"] == deployer_account.address

    with pytest.raises(DeploymentConfigError, match="without a deployer account"):
        ConstructorParameters.from_config(config, deployments=dict())


def test_address_constants_are_checksummed(params_config):
    config = copy.deepcopy(params_config)
    config["constants"]["BGT"] = BGT.lower()
    parameters = ConstructorParameters.from_config(
        config, deployments={VAULT_CONTRACT: type("I", (), {"address": make_address(1)})()}
    )
    assert parameters.resolve(VAULT_FACTORY_CONTRACT)["_bgt"] == BGT


def test_unlisted_contract(params_config):
    parameters = ConstructorParameters.from_config(params_config, deployments=dict())
    with pytest.raises(DeploymentConfigError, match="not listed"):
        parameters.resolve("HoneyVault")


def test_malformed_contracts_section(params_config):
    config = copy.deepcopy(params_config)
    config["contracts"].append({"A": {}, "B": {}})
    with pytest.raises(DeploymentConfigError, match="Malformed"):
        ConstructorParameters.from_config(config, deployments=dict())


def test_constructor_args_arity_mismatch():
    container = FakeContractContainer(VAULT_FACTORY_CONTRACT, ["_bgt", "_berachef"])
    inputs = container.constructor.abi.inputs
    with pytest.raises(ConstructorParameters.Invalid, match="length mismatch"):
        validate_constructor_args(VAULT_FACTORY_CONTRACT, inputs, {"_bgt": BGT})


@pytest.mark.parametrize("value", ["bgt", "bgt.eth", 42])
def test_constructor_args_type_mismatch(value):
    container = FakeContractContainer(VAULT_FACTORY_CONTRACT, ["_bgt"])
    inputs = container.constructor.abi.inputs
    with pytest.raises(ConstructorParameters.Invalid, match="ABI type 'address'"):
        validate_constructor_args(VAULT_FACTORY_CONTRACT, inputs, {"_bgt": value})


def test_constructor_args_name_mismatch_is_reported(capsys):
    container = FakeContractContainer(VAULT_FACTORY_CONTRACT, ["bgtToken"])
    inputs = container.constructor.abi.inputs
    validate_constructor_args(VAULT_FACTORY_CONTRACT, inputs, {"_bgt": BGT})
    assert "is named 'bgtToken' in the ABI" in capsys.readouterr().out


def test_deploy_rejects_invalid_arguments_before_transaction(
    get_deployer, deployer_account, vault_container
):
    deployer = get_deployer()
    deployer.deploy(vault_container)
    short_factory = FakeContractContainer(VAULT_FACTORY_CONTRACT, ["_bgt"])

    with pytest.raises(ConstructorParameters.Invalid):
        deployer.deploy(short_factory)
    assert [name for name, _ in deployer_account.deploy_calls] == [VAULT_CONTRACT]


def test_empty_constants_section(get_deployer, params_config, vault_container):
    config = copy.deepcopy(params_config)
    config["constants"] = None
    config["contracts"] = [VAULT_CONTRACT]

    deployer = get_deployer(config=config)
    deployer.deploy(vault_container)
    assert list(deployer.deployments) == [VAULT_CONTRACT]

    config["contracts"] = copy.deepcopy(params_config["contracts"])
    with pytest.raises(DeploymentConfigError, match="Constant 'BGT' not found"):
        get_deployer(config=config)
