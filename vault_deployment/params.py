import typing
from abc import ABC, abstractmethod
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, List, Optional

from ape.api import AccountAPI, ExplorerAPI, NetworkAPI
from ape.contracts.base import ContractContainer, ContractInstance
from eth_abi import is_encodable
from eth_utils import is_hex_address, to_checksum_address

from vault_deployment.accounts import get_deployer_account
from vault_deployment.confirm import confirm_continue, confirm_deployment
from vault_deployment.networks import get_active_network, is_local_network
from vault_deployment.registry import registry_from_ape_deployments
from vault_deployment.utils import (
    DeploymentConfigError,
    _load_yaml,
    check_etherscan_plugin,
    get_explorer,
    validate_config,
)

CONTRACT_CONSTRUCTOR_PARAMETER_KEY = "constructor"


class VariableContext:
    """What a variable may refer to while a single params file is processed."""

    def __init__(
        self,
        contract_names: List[str],
        contract_name: str,
        deployments: Dict[str, ContractInstance],
        constants: typing.Dict[str, Any] = None,
        account: Optional[AccountAPI] = None,
    ):
        self.contract_names = contract_names or list()
        self.contract_name = contract_name
        self.deployments = deployments
        self.constants = constants or dict()
        self.account = account


# Variables


class Variable(ABC):
    VARIABLE_PREFIX = "$"

    @abstractmethod
    def resolve(self) -> Any:
        raise NotImplementedError

    @classmethod
    def is_variable(cls, param: Any) -> bool:
        """Returns True if the param is a variable."""
        return isinstance(param, str) and param.startswith(cls.VARIABLE_PREFIX)


class DeployerAccount(Variable):
    DEPLOYER_INDICATOR = "deployer"

    def __init__(self, context: VariableContext):
        if context.account is None:
            raise DeploymentConfigError("'$deployer' used without a deployer account.")
        self.account = context.account

    @classmethod
    def is_deployer(cls, value: str) -> bool:
        return value == cls.DEPLOYER_INDICATOR

    def resolve(self) -> Any:
        return self.account.address


class Constant(Variable):
    def __init__(self, constant_name: str, context: VariableContext):
        try:
            constant_value = context.constants[constant_name]
        except KeyError:
            raise DeploymentConfigError(f"Constant '{constant_name}' not found in deployment file.")
        if is_hex_address(constant_value):
            constant_value = to_checksum_address(constant_value)
        self.constant_value = constant_value

    @classmethod
    def is_constant(cls, value: str) -> bool:
        """Returns True if the variable is a deployment constant."""
        return value.isupper()

    def resolve(self) -> Any:
        return self.constant_value


class ContractName(Variable):
    """The address of a contract deployed earlier in the same run."""

    def __init__(self, contract_name: str, context: VariableContext):
        if contract_name not in context.contract_names:
            raise DeploymentConfigError(f"Contract name {contract_name} not found")
        if contract_name == context.contract_name:
            raise DeploymentConfigError(f"{contract_name} cannot reference its own address")

        self.contract_name = contract_name
        self.deployments = context.deployments

    def resolve(self) -> Any:
        try:
            contract_instance = self.deployments[self.contract_name]
        except KeyError:
            raise DeploymentConfigError(
                f"{self.contract_name} must be deployed before its address can be used"
            )
        return contract_instance.address


def _resolve_param(value: Any) -> Any:
    """Resolves a single parameter value or a list of parameter values."""
    if isinstance(value, list):
        return [_resolve_param(v) for v in value]

    if isinstance(value, Variable):
        return value.resolve()

    return value  # literally a value


def _resolve_params(parameters: OrderedDict) -> OrderedDict:
    resolved_parameters = OrderedDict()
    for name, value in parameters.items():
        resolved_parameters[name] = _resolve_param(value)
    return resolved_parameters


def _variable_from_value(variable: str, context: VariableContext) -> Variable:
    variable = variable[len(Variable.VARIABLE_PREFIX) :]
    if DeployerAccount.is_deployer(variable):
        return DeployerAccount(context)
    elif Constant.is_constant(variable):
        return Constant(variable, context)
    else:
        return ContractName(variable, context)


def _process_raw_value(value: Any, context: VariableContext) -> Any:
    if isinstance(value, list):
        return [_process_raw_value(v, context) for v in value]

    if Variable.is_variable(value):
        value = _variable_from_value(value, context)

    return value


def _process_raw_values(values: typing.Mapping, context: VariableContext) -> OrderedDict:
    processed_parameters = OrderedDict()
    for name, value in values.items():
        processed_parameters[name] = _process_raw_value(value, context)
    return processed_parameters


def _get_contract_names(config: typing.Dict) -> List[str]:
    contract_names = list()
    for contract_info in config["contracts"]:
        if isinstance(contract_info, str):
            contract_names.append(contract_info)
        elif isinstance(contract_info, dict) and len(contract_info) == 1:
            contract_names.extend(contract_info.keys())
        else:
            raise DeploymentConfigError("Malformed constructor parameters YAML.")
    return contract_names


def validate_constructor_args(
    contract_name: str, abi_inputs: List[Any], resolved_parameters: OrderedDict
) -> None:
    """
    Validates resolved constructor parameters against the constructor ABI.
    Arity and types must match; a differing parameter name is only reported.
    """
    if len(resolved_parameters) != len(abi_inputs):
        raise ConstructorParameters.Invalid(
            f"Constructor parameters length mismatch - "
            f"{contract_name} ABI requires {len(abi_inputs)}, Got {len(resolved_parameters)}."
        )

    codex = enumerate(zip(abi_inputs, resolved_parameters.items()))
    for position, (abi_input, (name, value)) in codex:
        if abi_input.name != name:
            print(
                f"(!) {contract_name} constructor parameter '{name}' at position {position} "
                f"is named '{abi_input.name}' in the ABI."
            )
        if not is_encodable(abi_input.type, value):
            raise ConstructorParameters.Invalid(
                f"Constructor param name '{name}' at position {position} has a value '{value}' "
                f"whose type does not match expected ABI type '{abi_input.type}'"
            )


class ConstructorParameters:
    """Represents the constructor parameters for a set of contracts."""

    class Invalid(Exception):
        """Raised when the constructor parameters are invalid"""

    def __init__(self, parameters: OrderedDict):
        self.parameters = parameters

    @classmethod
    def from_config(
        cls,
        config: typing.Dict,
        deployments: Dict[str, ContractInstance],
        account: Optional[AccountAPI] = None,
    ) -> "ConstructorParameters":
        """Processes the 'contracts' section of a params file."""
        print("Processing contract constructor parameters...")
        contract_names = _get_contract_names(config)
        constants = config.get("constants")

        parameters = OrderedDict()
        for contract_info in config["contracts"]:
            if isinstance(contract_info, str):
                parameters[contract_info] = OrderedDict()
                continue

            contract_name, contract_data = next(iter(contract_info.items()))
            context = VariableContext(
                contract_names=contract_names,
                contract_name=contract_name,
                deployments=deployments,
                constants=constants,
                account=account,
            )
            raw_values = (contract_data or dict()).get(CONTRACT_CONSTRUCTOR_PARAMETER_KEY) or dict()
            parameters[contract_name] = _process_raw_values(raw_values, context)

        return cls(parameters=parameters)

    def resolve(self, contract_name: str) -> OrderedDict:
        """Resolves the constructor parameters for a single contract."""
        try:
            parameters = self.parameters[contract_name]
        except KeyError:
            raise DeploymentConfigError(f"{contract_name} is not listed in the params file.")
        return _resolve_params(parameters)


class Deployer:
    """
    An ape account plus the constructor parameters of a params file,
    deploying contracts with validated and annotated execution.
    """

    def __init__(
        self,
        config: typing.Dict,
        path: Path,
        verify: Optional[bool] = None,
        account: Optional[AccountAPI] = None,
        autosign: bool = False,
        network: Optional[NetworkAPI] = None,
    ):
        self.network = network or get_active_network()
        if verify is None:
            # explorers only know about live networks
            verify = not is_local_network(self.network)
        self.verify = verify
        if self.verify:
            check_etherscan_plugin(self.network)

        self.path = path
        self.config = config
        self.registry_filepath = validate_config(config=self.config, network=self.network)

        if account is None:
            account = get_deployer_account(network=self.network, autosign=autosign)
        self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign

        self.deployments: Dict[str, ContractInstance] = OrderedDict()
        self.constructor_arguments: Dict[str, List[Any]] = dict()
        self.constructor_parameters = ConstructorParameters.from_config(
            self.config, deployments=self.deployments, account=self._account
        )

        self._print_deployment_info()
        if not self._autosign:
            confirm_continue()

    @classmethod
    def from_yaml(cls, filepath: Path, *args, **kwargs) -> "Deployer":
        config = _load_yaml(filepath)
        return cls(config, filepath, *args, **kwargs)

    @property
    def explorer(self) -> ExplorerAPI:
        return get_explorer(self.network)

    def deploy(self, container: ContractContainer) -> ContractInstance:
        """Deploys a contract with its resolved constructor parameters and waits for the receipt."""
        contract_name = container.contract_type.name
        resolved_params = self.constructor_parameters.resolve(contract_name)
        validate_constructor_args(
            contract_name=contract_name,
            abi_inputs=container.constructor.abi.inputs,
            resolved_parameters=resolved_params,
        )
        if not self._autosign:
            confirm_deployment(contract_name, resolved_params)

        print(f"\nDeploying {contract_name}...")
        constructor_args = list(resolved_params.values())
        instance = self._account.deploy(container, *constructor_args)

        self.deployments[contract_name] = instance
        self.constructor_arguments[contract_name] = constructor_args
        return instance

    def finalize(self, deployments: List[ContractInstance]) -> Optional[Path]:
        """Records live deployments in the registry; local chains are not recorded."""
        if is_local_network(self.network):
            print("(i) Local network; skipping registry.")
            return None
        return registry_from_ape_deployments(
            deployments=deployments, output_filepath=self.registry_filepath
        )

    def _print_deployment_info(self):
        print(
            f"Account: {self._account.address}",
            f"Config: {self.path}",
            f"Registry: {self.registry_filepath}",
            f"Verify: {self.verify}",
            f"Ecosystem: {self.network.ecosystem.name}",
            f"Network: {self.network.name}",
            f"Chain ID: {self.network.chain_id}",
            sep="\n",
        )
