from pathlib import Path

import click

from vault_deployment.constants import REWARDS_VAULT_FACTORY_PARAMS_FILEPATH
from vault_deployment.types import ChecksumAddress

constructor_params_option = click.option(
    "--constructor-params-filepath",
    "-f",
    help="Constructor params filepath",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    default=REWARDS_VAULT_FACTORY_PARAMS_FILEPATH,
    show_default=True,
)

autosign_option = click.option(
    "--autosign",
    help="Sign transactions and skip confirmation prompts.",
    is_flag=True,
    default=False,
)

registry_filepath_option = click.option(
    "--registry-filepath",
    "-r",
    help="Registry the contract was recorded in",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=False,
)

address_option = click.option(
    "--address",
    "-a",
    help="Address of the deployed contract",
    type=ChecksumAddress(),
    required=False,
)
