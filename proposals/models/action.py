from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict, Field


class ProposalAction(BaseModel):
    """
    One call bundled inside a proposal.

    `calldata` holds the ABI-encoded arguments only. The timelock rebuilds the
    4-byte selector from `signature` when it executes the action, so the
    selector must never be part of `calldata`.
    """

    model_config = ConfigDict(frozen=True)

    target: str
    value: int = Field(default=0, ge=0)
    signature: str
    calldata: bytes = b""
    decoded_args: Tuple[Any, ...] = ()

    @property
    def method_name(self) -> str:
        return self.signature.split("(", 1)[0]

    @property
    def argument_types(self) -> str:
        """The parenthesised argument list of the signature, e.g. "(address,uint256)"."""
        return self.signature[len(self.method_name):]
