from typing import Any, List, Optional, Sequence, Union

from web3 import AsyncWeb3

from config.settings import settings
from proposals.contract_ref import ContractRef, as_contract_ref
from proposals.exceptions import CapacityExceededError, NoGovernorError
from proposals.models.action import ProposalAction
from proposals.proposal import Proposal
from proposals.service.action_codec import ActionCodec
from proposals.service.chain_control import ChainControl
from proposals.service.governance_client import GovernanceClient
from utils.formatter_utils import to_checksum_address


class ProposalBuilder(object):
    """
    Fluent accumulator for a GovernorAlpha proposal.

    Actions are encoded and checked as they are added; `build()` only
    succeeds once a governor is bound.

        proposal = (
            ProposalBuilder(web3, governor=AddressRef(address=GOVERNOR))
            .set_proposer(proposer)
            .add_contract_action(storage, "set", [42])
            .set_description("# Set the answer\\nSets storage to 42")
            .build()
        )
    """

    def __init__(
        self,
        web3: AsyncWeb3,
        governor: Optional[Union[ContractRef, str, Any]] = None,
        voting_token: Optional[Union[ContractRef, str, Any]] = None,
        chain_control: Optional[ChainControl] = None,
        max_actions: int = settings.proposals.max_actions,
        codec: Optional[ActionCodec] = None,
    ):
        self._web3 = web3
        self._governor = as_contract_ref(governor) if governor else None
        self._voting_token = as_contract_ref(voting_token) if voting_token else None
        self._chain_control = chain_control
        self._codec = codec or ActionCodec()

        self.max_actions = max_actions
        self._proposer: Optional[str] = None
        self._description = ""
        self._actions: List[ProposalAction] = []

    @property
    def actions(self) -> List[ProposalAction]:
        return list(self._actions)

    def set_governor(self, governor: Union[ContractRef, str, Any]) -> "ProposalBuilder":
        self._governor = as_contract_ref(governor)
        return self

    def set_voting_token(self, voting_token: Union[ContractRef, str, Any]) -> "ProposalBuilder":
        self._voting_token = as_contract_ref(voting_token)
        return self

    def set_chain_control(self, chain_control: ChainControl) -> "ProposalBuilder":
        self._chain_control = chain_control
        return self

    def set_proposer(self, proposer: str) -> "ProposalBuilder":
        self._proposer = to_checksum_address(proposer)
        return self

    def set_description(self, description: str) -> "ProposalBuilder":
        """
        Some proposal UIs split the title from the body on the first newline;
        adding one is left to the caller.
        """
        self._description = description
        return self

    def _check_capacity(self) -> None:
        if len(self._actions) >= self.max_actions:
            raise CapacityExceededError(self.max_actions)

    def add_action(
        self, target: str, value: int, signature: str, calldata: Union[bytes, str]
    ) -> "ProposalBuilder":
        """Adds an already encoded action. `calldata` must not contain the selector."""
        self._check_capacity()
        self._actions.append(self._codec.from_raw(target, value, signature, calldata))
        return self

    def add_contract_action(
        self, contract: Any, method: str, args: Sequence[Any], value: int = 0
    ) -> "ProposalBuilder":
        """Encodes `contract.method(*args)`; `contract` is a web3 contract handle."""
        self._check_capacity()
        self._actions.append(self._codec.encode_contract_call(contract, method, args, value))
        return self

    def build(self) -> Proposal:
        if self._governor is None:
            raise NoGovernorError()

        governance = GovernanceClient(self._web3, self._governor, self._voting_token)
        proposal = Proposal(
            governance,
            chain_control=self._chain_control,
            proposer=self._proposer,
            description=self._description,
            max_actions=self.max_actions,
            codec=self._codec,
        )
        for action in self._actions:
            proposal.add_action(action)
        return proposal
