from typing import Any, Dict, List, Union

from pydantic import BaseModel, ConfigDict

from utils.formatter_utils import to_checksum_address


class BoundContract(BaseModel):
    """A contract handle the caller already built (web3 contract with .address/.abi)."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    handle: Any


class AddressRef(BaseModel):
    """A bare address, bound to the expected ABI when resolved."""

    model_config = ConfigDict(frozen=True)

    address: str


ContractRef = Union[BoundContract, AddressRef]


def as_contract_ref(value: Union[ContractRef, str, Any]) -> ContractRef:
    """Wraps user input (address string or contract handle) into a ContractRef."""
    if isinstance(value, (BoundContract, AddressRef)):
        return value
    if isinstance(value, str):
        return AddressRef(address=value)
    return BoundContract(handle=value)


def resolve_contract(web3: Any, ref: ContractRef, abi: List[Dict[str, Any]]) -> Any:
    """Turns a ContractRef into a contract handle. Called once, when a client is built."""
    if isinstance(ref, BoundContract):
        return ref.handle
    return web3.eth.contract(address=to_checksum_address(ref.address), abi=abi)
