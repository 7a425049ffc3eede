import sys
from collections import OrderedDict

from ape.utils import ZERO_ADDRESS

ABORT_EXIT_CODE = -1


def _ask(question: str) -> None:
    """Asks the operator a Y/N question; anything but 'n' carries on."""
    answer = input(f"{question} Y/N? ")
    if answer.lower().strip() == "n":
        print("Aborting deployment!")
        sys.exit(ABORT_EXIT_CODE)


def confirm_continue() -> None:
    _ask("Continue")


def confirm_deployment(contract_name: str, resolved_params: OrderedDict) -> None:
    """
    Shows the resolved constructor parameters of a contract and asks the operator
    to confirm its deployment. Zero addresses get an extra confirmation.
    """
    if not resolved_params:
        print(f"\n(i) No constructor parameters for {contract_name}")
        _ask(f"Deploy {contract_name}")
        return

    print(f"\nConstructor parameters for {contract_name}")
    for name, resolved_value in resolved_params.items():
        print(f"\t{name}={resolved_value}")
    _ask(f"Deploy {contract_name}")

    if ZERO_ADDRESS in resolved_params.values():
        _ask("Zero Address detected for deployment parameter; Continue?")
