from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from hexbytes import HexBytes
from web3 import AsyncWeb3
from web3.exceptions import ContractLogicError, Web3RPCError

from abi.governor_alpha_abi import GOVERNOR_ALPHA_ABI
from abi.timelock_abi import TIMELOCK_ABI
from abi.voting_token_abi import NAMED_CONTRACT_ABI, VOTING_TOKEN_ABI
from config.settings import settings
from proposals.contract_ref import ContractRef, resolve_contract
from proposals.enums.proposal_state import RemoteProposalState
from proposals.exceptions import NoVotingTokenError, RemoteRevertError
from proposals.models.action import ProposalAction
from proposals.models.onchain_proposal import OnChainProposal
from utils.formatter_utils import to_checksum_address
from utils.logger_utils import get_logger
from utils.revert_utils import extract_revert_reason, get_error_message

logger = get_logger("Governance Client")


def to_remote_revert(error: Exception) -> RemoteRevertError:
    data = getattr(error, "data", None)
    return RemoteRevertError(
        message=get_error_message(error),
        reason=extract_revert_reason(error),
        data=data if isinstance(data, str) else None,
    )


class GovernanceClient(object):
    """
    Call surface of a GovernorAlpha contract, its Timelock and its voting token.

    Every method is a single round trip. Nothing is retried: a reverted call is
    re-raised as RemoteRevertError with the node's message and decoded reason.
    Transaction methods return the transaction hash without waiting for it to
    be mined, so callers can batch them while automine is off.
    """

    def __init__(
        self,
        web3: AsyncWeb3,
        governor: ContractRef,
        voting_token: Optional[ContractRef] = None,
        receipt_timeout: int = settings.proposals.receipt_timeout_seconds,
    ):
        self._web3 = web3
        self._governor = resolve_contract(web3, governor, GOVERNOR_ALPHA_ABI)
        self._voting_token = resolve_contract(web3, voting_token, VOTING_TOKEN_ABI) if voting_token else None
        self._receipt_timeout = receipt_timeout
        self._timelock = None

    @property
    def governor_address(self) -> str:
        return self._governor.address

    @property
    def has_voting_token(self) -> bool:
        return self._voting_token is not None

    # --- low level ---

    async def _call(self, function: Any, sender: Optional[str] = None, block_identifier: str = "latest") -> Any:
        transaction = {"from": sender} if sender else None
        try:
            return await function.call(transaction, block_identifier=block_identifier)
        except ContractLogicError as e:
            raise to_remote_revert(e) from e

    async def _transact(self, function: Any, sender: str, value: int = 0) -> HexBytes:
        transaction: Dict[str, Any] = {"from": sender}
        if value:
            transaction["value"] = value
        try:
            return await function.transact(transaction)
        except ContractLogicError as e:
            raise to_remote_revert(e) from e
        except Web3RPCError as e:
            # Hardhat reports estimateGas reverts as plain RPC errors
            if "revert" not in get_error_message(e).lower():
                raise
            raise to_remote_revert(e) from e

    async def wait_for_receipt(self, tx_hash: Union[HexBytes, str]) -> Dict[str, Any]:
        return await self._web3.eth.wait_for_transaction_receipt(tx_hash, timeout=self._receipt_timeout)

    # --- governor ---

    @staticmethod
    def _proposal_args(actions: Sequence[ProposalAction], description: str) -> Tuple[list, list, list, list, str]:
        return (
            [action.target for action in actions],
            [action.value for action in actions],
            [action.signature for action in actions],
            [action.calldata for action in actions],
            description,
        )

    async def call_propose(self, proposer: str, actions: Sequence[ProposalAction], description: str) -> int:
        """Dry-run of propose; returns the id the governor would assign."""
        function = self._governor.functions.propose(*self._proposal_args(actions, description))
        return await self._call(function, sender=proposer)

    async def propose(self, proposer: str, actions: Sequence[ProposalAction], description: str) -> HexBytes:
        function = self._governor.functions.propose(*self._proposal_args(actions, description))
        return await self._transact(function, proposer)

    async def vote(self, proposal_id: int, support: bool, signer: str) -> HexBytes:
        return await self._transact(self._governor.functions.castVote(proposal_id, support), signer)

    async def queue(self, proposal_id: int, signer: str) -> HexBytes:
        return await self._transact(self._governor.functions.queue(proposal_id), signer)

    async def execute(self, proposal_id: int, signer: str, value: int = 0) -> HexBytes:
        return await self._transact(self._governor.functions.execute(proposal_id), signer, value)

    async def state(self, proposal_id: int) -> RemoteProposalState:
        return RemoteProposalState(await self._call(self._governor.functions.state(proposal_id)))

    async def proposals(self, proposal_id: int) -> OnChainProposal:
        result = await self._call(self._governor.functions.proposals(proposal_id))
        return OnChainProposal.from_call_result(result)

    async def get_actions(self, proposal_id: int) -> Tuple[List[str], List[int], List[str], List[bytes]]:
        targets, values, signatures, calldatas = await self._call(self._governor.functions.getActions(proposal_id))
        return list(targets), list(values), list(signatures), list(calldatas)

    async def voting_delay(self) -> int:
        return await self._call(self._governor.functions.votingDelay())

    async def voting_period(self) -> int:
        return await self._call(self._governor.functions.votingPeriod())

    async def quorum_votes(self) -> int:
        return await self._call(self._governor.functions.quorumVotes())

    async def timelock_address(self) -> str:
        return to_checksum_address(await self._call(self._governor.functions.timelock()))

    # --- timelock ---

    async def timelock(self) -> Any:
        if self._timelock is None:
            self._timelock = self._web3.eth.contract(address=await self.timelock_address(), abi=TIMELOCK_ABI)
        return self._timelock

    async def delay(self) -> int:
        timelock = await self.timelock()
        return await self._call(timelock.functions.delay())

    @staticmethod
    def _timelock_args(action: ProposalAction, eta: int) -> Tuple[str, int, str, bytes, int]:
        return action.target, action.value, action.signature, action.calldata, eta

    async def queue_transaction(self, action: ProposalAction, eta: int, sender: str) -> HexBytes:
        timelock = await self.timelock()
        return await self._transact(timelock.functions.queueTransaction(*self._timelock_args(action, eta)), sender)

    async def execute_transaction(self, action: ProposalAction, eta: int, sender: str) -> HexBytes:
        timelock = await self.timelock()
        return await self._transact(timelock.functions.executeTransaction(*self._timelock_args(action, eta)), sender)

    async def call_execute_transaction(
        self, action: ProposalAction, eta: int, sender: str, block_identifier: str = "pending"
    ) -> bytes:
        timelock = await self.timelock()
        function = timelock.functions.executeTransaction(*self._timelock_args(action, eta))
        return await self._call(function, sender=sender, block_identifier=block_identifier)

    # --- targets ---

    async def call_target(
        self, target: str, data: bytes, sender: str, value: int = 0, block_identifier: str = "pending"
    ) -> bytes:
        """Raw eth_call against a proposal target, used to get the target's own revert reason."""
        transaction: Dict[str, Any] = {"from": sender, "to": target, "data": data}
        if value:
            transaction["value"] = value
        try:
            return await self._web3.eth.call(transaction, block_identifier=block_identifier)
        except ContractLogicError as e:
            raise to_remote_revert(e) from e

    async def target_name(self, target: str) -> Optional[str]:
        """name() of a target contract, or None when it has none."""
        contract = self._web3.eth.contract(address=target, abi=NAMED_CONTRACT_ABI)
        try:
            return await contract.functions.name().call()
        except Exception as e:
            logger.debug(f"Target {target} has no name(): {e}")
            return None

    # --- voting token ---

    def _require_voting_token(self) -> Any:
        if self._voting_token is None:
            raise NoVotingTokenError()
        return self._voting_token

    async def current_votes(self, address: str) -> int:
        voting_token = self._require_voting_token()
        return await self._call(voting_token.functions.getCurrentVotes(address))

    async def voting_token_name(self) -> str:
        voting_token = self._require_voting_token()
        return await self._call(voting_token.functions.name())

    async def voting_token_decimals(self) -> int:
        voting_token = self._require_voting_token()
        return await self._call(voting_token.functions.decimals())
