"""Authorization policies for contracts."""

from zena.core.policies import Principal, policies
from zena.modules.contracts.models import Contract


@policies.register("contract", "view_any", "view")
def view_contract(principal: Principal, contract: Contract | None) -> bool:
    return principal.has("contract.read")


@policies.register("contract", "create", "update")
def write_contract(principal: Principal, contract: Contract | None) -> bool:
    return principal.has("contract.write")


@policies.register("contract", "approve")
def approve_contract(principal: Principal, contract: Contract) -> bool:
    return principal.has("contract.approve")


@policies.register("contract", "delete")
def delete_contract(principal: Principal, contract: Contract) -> bool:
    # Ownership alone never allows deleting a contract
    return principal.has("contract.delete")
