from contextlib import AsyncExitStack
from typing import List, Optional, Sequence

from hexbytes import HexBytes

from config.settings import settings
from proposals.enums.proposal_state import RemoteProposalState, SimulationMode
from proposals.exceptions import (
    ActionCodecError,
    ActionExecutionFailedError,
    ChainControlError,
    ExecutionDiagnosisError,
    ProposalNotActiveError,
    QuorumInsufficientError,
    RemoteRevertError,
)
from proposals.models.action import ProposalAction
from proposals.models.simulation_result import ExecutedAction, SimulationResult
from proposals.service.action_codec import ActionCodec
from proposals.service.chain_control import ChainControl
from proposals.service.governance_client import GovernanceClient
from utils.formatter_utils import to_hex_str
from utils.logger_utils import get_logger

logger = get_logger("Simulation Engine")


class SimulationEngine(object):
    """
    Rehearses a proposal on a local chain.

    The fast path (`simulate`) skips voting: it impersonates the governor to
    queue every action in the timelock, jumps the clock to the eta and
    executes them, diagnosing the first action that reverts. The full path
    (`full_simulate`) replays propose, vote, queue and execute through the
    unmodified governor with the chain fast-forwarded between steps.

    Chain calls are awaited one after the other; actions always run in the
    order they were added.
    """

    def __init__(
        self,
        governance: GovernanceClient,
        chain_control: ChainControl,
        codec: Optional[ActionCodec] = None,
        eta_margin: int = settings.proposals.eta_margin_seconds,
        impersonation_balance: int = settings.chain.impersonation_balance,
    ):
        self._governance = governance
        self._chain = chain_control
        self._codec = codec or ActionCodec()
        self._eta_margin = eta_margin
        self._impersonation_balance = impersonation_balance

    async def compute_eta(self, delay: int) -> int:
        block = await self._chain.get_block("latest")
        return block["timestamp"] + delay + self._eta_margin

    # ------------------------------------------------------------------
    # Fast simulation
    # ------------------------------------------------------------------

    async def simulate(self, actions: Sequence[ProposalAction]) -> SimulationResult:
        actions = list(actions)
        logger.info(f"Starting fast simulation of {len(actions)} action(s)")

        async with AsyncExitStack() as stack:
            governor_signer = await stack.enter_async_context(
                self._chain.impersonating(self._governance.governor_address, self._impersonation_balance)
            )
            timelock_address = await self._governance.timelock_address()
            timelock_signer = await stack.enter_async_context(
                self._chain.impersonating(timelock_address, self._impersonation_balance)
            )

            delay = await self._governance.delay()
            eta = await self.compute_eta(delay)
            logger.info(f"Timelock {timelock_address} delay is {delay}s, queueing with eta {eta}")

            async with self._chain.batch_mining():
                for action in actions:
                    await self._governance.queue_transaction(action, eta, governor_signer)

                await self._chain.mine_block()
                await self._chain.mine_block(eta)

                tx_hashes = []
                try:
                    for index, action in enumerate(actions):
                        tx_hashes.append(
                            await self._execute_action(index, action, eta, governor_signer, timelock_signer)
                        )
                except Exception:
                    await self._drop_pending(tx_hashes)
                    raise

                await self._chain.mine_block()
                executed_actions = await self._check_receipts(actions, tx_hashes)

        logger.info(f"Fast simulation succeeded, {len(executed_actions)} action(s) executed")
        return SimulationResult(mode=SimulationMode.FAST, eta=eta, executed_actions=executed_actions)

    async def _execute_action(
        self, index: int, action: ProposalAction, eta: int, governor_signer: str, timelock_signer: str
    ) -> HexBytes:
        """Dry-runs executeTransaction against the pending block, then sends it."""
        try:
            await self._governance.call_execute_transaction(action, eta, governor_signer)
            return await self._governance.execute_transaction(action, eta, governor_signer)
        except RemoteRevertError as timelock_error:
            raise await self._diagnose(index, action, timelock_error, timelock_signer) from timelock_error

    async def _drop_pending(self, tx_hashes: Sequence[HexBytes]) -> None:
        """
        Executes sent before a failing one are still unmined; dropping them keeps
        the caller's next transaction from mining them.
        """
        for tx_hash in tx_hashes:
            try:
                await self._chain.drop_transaction(to_hex_str(tx_hash))
            except ChainControlError as e:
                logger.warning(f"Could not drop pending transaction {to_hex_str(tx_hash)}: {e}")
        if tx_hashes:
            logger.info(f"Dropped {len(tx_hashes)} pending execute transaction(s)")

    async def _diagnose(
        self, index: int, action: ProposalAction, timelock_error: RemoteRevertError, timelock_signer: str
    ) -> ExecutionDiagnosisError:
        """
        Replays the failed action straight against its target, sent from the
        timelock, to get the target's own revert reason.
        """
        timelock_message = timelock_error.reason or timelock_error.message
        target_message = None

        try:
            data = self._codec.encode_function_data(action.signature, action.decoded_args)
            await self._governance.call_target(action.target, data, timelock_signer, action.value)
        except RemoteRevertError as target_error:
            target_message = target_error.reason or target_error.message
        except ActionCodecError as e:
            logger.warning(f"Could not re-encode action {index} for diagnosis: {e}")

        logger.error(
            f"Action {index} ({action.signature} on {action.target}) reverted. "
            f"Timelock: {timelock_message}. Contract: {target_message}"
        )
        return ExecutionDiagnosisError(
            index=index,
            target=action.target,
            signature=action.signature,
            args=action.decoded_args,
            timelock_message=timelock_message,
            target_message=target_message,
        )

    async def _check_receipts(
        self, actions: Sequence[ProposalAction], tx_hashes: Sequence[HexBytes]
    ) -> List[ExecutedAction]:
        executed_actions = []
        for index, (action, tx_hash) in enumerate(zip(actions, tx_hashes)):
            receipt = await self._governance.wait_for_receipt(tx_hash)
            status = receipt["status"]
            if status != 1:
                raise ActionExecutionFailedError(index, to_hex_str(tx_hash))
            executed_actions.append(
                ExecutedAction(
                    index=index,
                    target=action.target,
                    signature=action.signature,
                    transaction_hash=to_hex_str(tx_hash),
                    status=status,
                )
            )
        return executed_actions

    # ------------------------------------------------------------------
    # Full simulation
    # ------------------------------------------------------------------

    async def full_simulate(
        self, actions: Sequence[ProposalAction], proposer: str, description: str
    ) -> SimulationResult:
        """
        Requires `proposer` to be an account the node can send from and to
        hold at least quorumVotes, since it is the only voter.
        """
        actions = list(actions)
        logger.info(f"Starting full simulation of {len(actions)} action(s) proposed by {proposer}")

        quorum = await self._governance.quorum_votes()
        votes = await self._governance.current_votes(proposer)
        if votes < quorum:
            raise QuorumInsufficientError(votes, quorum)

        proposal_id = await self._governance.call_propose(proposer, actions, description)
        await self._wait_success("propose", await self._governance.propose(proposer, actions, description))
        logger.info(f"Proposed simulated proposal {proposal_id}")

        voting_delay = await self._governance.voting_delay()
        await self._chain.mine_blocks(voting_delay + 1)

        state = await self._governance.state(proposal_id)
        if state != RemoteProposalState.ACTIVE:
            raise ProposalNotActiveError(state)
        await self._wait_success("castVote", await self._governance.vote(proposal_id, True, proposer))

        voting_period = await self._governance.voting_period()
        await self._chain.mine_blocks(voting_period)

        await self._wait_success("queue", await self._governance.queue(proposal_id, proposer))
        delay = await self._governance.delay()
        eta = await self.compute_eta(delay)
        await self._chain.mine_block(eta)

        total_value = sum(action.value for action in actions)
        tx_hash = await self._governance.execute(proposal_id, proposer, total_value)
        await self._wait_success("execute", tx_hash)

        logger.info(f"Full simulation of proposal {proposal_id} succeeded")
        executed_actions = [
            ExecutedAction(
                index=index,
                target=action.target,
                signature=action.signature,
                transaction_hash=to_hex_str(tx_hash),
                status=1,
            )
            for index, action in enumerate(actions)
        ]
        return SimulationResult(
            mode=SimulationMode.FULL, eta=eta, proposal_id=proposal_id, executed_actions=executed_actions
        )

    async def _wait_success(self, step: str, tx_hash: HexBytes) -> None:
        receipt = await self._governance.wait_for_receipt(tx_hash)
        if receipt["status"] != 1:
            raise RemoteRevertError(f"{step} transaction {to_hex_str(tx_hash)} failed")
