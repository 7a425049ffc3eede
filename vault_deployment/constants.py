from pathlib import Path

import vault_deployment

#
# Filesystem
#

DEPLOYMENT_DIR = Path(vault_deployment.__file__).parent
CONSTRUCTOR_PARAMS_DIR = DEPLOYMENT_DIR / "constructor_params"
ARTIFACTS_DIR = DEPLOYMENT_DIR / "artifacts"

#
# Networks
#

BERACHAIN = "berachain"
BARTIO = "bartio"
BARTIO_CHAIN_ID = 80084

# ape's in-memory network; fork networks are suffixed, e.g. "bartio-fork"
LOCAL_NETWORK = "local"
FORK_NETWORK_SUFFIX = "-fork"

#
# Environment
#

PRIVATE_KEY_ENVVAR = "PRIVATE_KEY"
DEPLOYER_PASSPHRASE_ENVVAR = "DEPLOYER_PASSPHRASE"
DEPLOYER_ALIAS_ENVVAR = "DEPLOYER_ALIAS"
DEFAULT_DEPLOYER_ALIAS = "bartio-deployer"

#
# Contracts
#

VAULT_CONTRACT = "BerachainZerolendRewardsVault"
VAULT_FACTORY_CONTRACT = "BerachainZerolendRewardsVaultFactory"

REWARDS_VAULT_FACTORY_PARAMS_FILEPATH = (
    CONSTRUCTOR_PARAMS_DIR / BARTIO / "rewards-vault-factory.yml"
)
