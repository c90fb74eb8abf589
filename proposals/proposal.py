from typing import List, Optional, Tuple

from config.settings import settings
from proposals.enums.proposal_state import InternalProposalState, RemoteProposalState
from proposals.exceptions import (
    AlreadySimulatedError,
    CapacityExceededError,
    NoChainControlError,
    NoGovernorError,
    NoProposerError,
    NoSignerError,
    NoVotingTokenError,
    ProposalAlreadySubmittedError,
    ProposalNotActiveError,
    ProposalNotSubmittedError,
    RemoteRevertError,
)
from proposals.mappers.proposal_report_mapper import ProposalReportMapper
from proposals.models.action import ProposalAction
from proposals.models.proposal_report import ProposalReport
from proposals.models.simulation_result import SimulationResult
from proposals.service.action_codec import ActionCodec
from proposals.service.chain_control import ChainControl
from proposals.service.governance_client import GovernanceClient
from proposals.service.simulation_engine import SimulationEngine
from utils.formatter_utils import to_checksum_address, to_hex_str
from utils.logger_utils import get_logger

logger = get_logger("Proposal")

UNLOADED_DESCRIPTION = "<DESCRIPTION NOT LOADED>"


class Proposal(object):
    """
    An ordered batch of actions and its local lifecycle.

    State moves UNSUBMITTED -> SIMULATED -> SUBMITTED. SIMULATED is optional
    and can be re-entered with `simulate(force=True)`; SUBMITTED is final
    locally, the governor tracks the rest (see `get_remote_state`).
    `id` is non-zero only once SUBMITTED.
    """

    def __init__(
        self,
        governance: GovernanceClient,
        chain_control: Optional[ChainControl] = None,
        proposer: Optional[str] = None,
        description: str = "",
        max_actions: int = settings.proposals.max_actions,
        codec: Optional[ActionCodec] = None,
        simulation_engine: Optional[SimulationEngine] = None,
    ):
        if governance is None:
            raise NoGovernorError()

        self._governance = governance
        self._chain_control = chain_control
        self._codec = codec or ActionCodec()
        self._simulation_engine = simulation_engine
        self._report_mapper = ProposalReportMapper()

        self.max_actions = max_actions
        self.proposer = to_checksum_address(proposer)
        self.description = description

        self._id = 0
        self._state = InternalProposalState.UNSUBMITTED
        self._actions: List[ProposalAction] = []

    @property
    def id(self) -> int:
        return self._id

    @property
    def state(self) -> InternalProposalState:
        return self._state

    @property
    def actions(self) -> Tuple[ProposalAction, ...]:
        return tuple(self._actions)

    @property
    def governance(self) -> GovernanceClient:
        return self._governance

    def set_proposer(self, proposer: str) -> None:
        self.proposer = to_checksum_address(proposer)

    def add_action(self, action: ProposalAction) -> None:
        if self._state == InternalProposalState.SUBMITTED:
            raise ProposalAlreadySubmittedError()
        if len(self._actions) >= self.max_actions:
            raise CapacityExceededError(self.max_actions)
        self._actions.append(action)

    def _mark_as_submitted(self, proposal_id: int) -> None:
        self._id = proposal_id
        self._state = InternalProposalState.SUBMITTED

    def _require_submitted(self) -> None:
        if self._state != InternalProposalState.SUBMITTED:
            raise ProposalNotSubmittedError()

    def _resolve_signer(self, signer: Optional[str]) -> str:
        signer = signer or self.proposer
        if not signer:
            raise NoSignerError()
        return to_checksum_address(signer)

    # ------------------------------------------------------------------
    # Governance lifecycle
    # ------------------------------------------------------------------

    async def propose(self, proposer: Optional[str] = None) -> int:
        """
        Submits the proposal. A dry-run call runs first so a revert surfaces
        before any transaction is sent or local state changes.
        """
        if self._state == InternalProposalState.SUBMITTED:
            raise ProposalAlreadySubmittedError()

        proposer = proposer or self.proposer
        if not proposer:
            raise NoProposerError()
        proposer = to_checksum_address(proposer)

        proposal_id = await self._governance.call_propose(proposer, self._actions, self.description)
        tx_hash = await self._governance.propose(proposer, self._actions, self.description)
        receipt = await self._governance.wait_for_receipt(tx_hash)
        if receipt["status"] != 1:
            raise RemoteRevertError(f"propose transaction {to_hex_str(tx_hash)} failed")

        self.proposer = proposer
        self._mark_as_submitted(proposal_id)
        logger.info(f"Submitted proposal {proposal_id} with {len(self._actions)} action(s)")
        return proposal_id

    async def get_remote_state(self) -> RemoteProposalState:
        self._require_submitted()
        return await self._governance.state(self._id)

    async def vote(self, signer: str, support: bool = True) -> None:
        self._require_submitted()

        current_state = await self.get_remote_state()
        if current_state != RemoteProposalState.ACTIVE:
            raise ProposalNotActiveError(current_state)

        tx_hash = await self._governance.vote(self._id, support, to_checksum_address(signer))
        await self._wait_success("castVote", tx_hash)
        logger.info(f"{signer} voted {'for' if support else 'against'} proposal {self._id}")

    async def queue(self, signer: Optional[str] = None) -> None:
        self._require_submitted()
        signer = self._resolve_signer(signer)

        await self._wait_success("queue", await self._governance.queue(self._id, signer))
        logger.info(f"Queued proposal {self._id}")

    async def execute(self, signer: Optional[str] = None) -> None:
        self._require_submitted()
        signer = self._resolve_signer(signer)

        total_value = sum(action.value for action in self._actions)
        await self._wait_success("execute", await self._governance.execute(self._id, signer, total_value))
        logger.info(f"Executed proposal {self._id}")

    async def _wait_success(self, step: str, tx_hash) -> None:
        receipt = await self._governance.wait_for_receipt(tx_hash)
        if receipt["status"] != 1:
            raise RemoteRevertError(f"{step} transaction {to_hex_str(tx_hash)} failed")

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def _get_simulation_engine(self) -> SimulationEngine:
        if self._simulation_engine is None:
            if self._chain_control is None:
                raise NoChainControlError()
            self._simulation_engine = SimulationEngine(self._governance, self._chain_control, self._codec)
        return self._simulation_engine

    async def simulate(self, full_simulation: bool = False, force: bool = False) -> SimulationResult:
        """
        Runs the proposal on the local chain without assigning it an id.

        The default fast simulation impersonates the governor and only goes
        through the timelock; actions run as separate transactions and their
        gas costs should not be relied on. `full_simulation=True` goes through
        propose, vote, queue and execute and needs a proposer holding quorum.

        A proposal can only be simulated once unless `force` is set.
        """
        if self._state != InternalProposalState.UNSUBMITTED and not force:
            raise AlreadySimulatedError()

        engine = self._get_simulation_engine()
        if full_simulation:
            result = await self._full_simulate(engine)
        else:
            result = await self._simulate(engine)

        if self._state != InternalProposalState.SUBMITTED:
            self._state = InternalProposalState.SIMULATED
        return result

    async def _simulate(self, engine: SimulationEngine) -> SimulationResult:
        return await engine.simulate(self._actions)

    async def _full_simulate(self, engine: SimulationEngine) -> SimulationResult:
        if not self._governance.has_voting_token:
            raise NoVotingTokenError()
        if not self.proposer:
            raise NoProposerError()
        return await engine.full_simulate(self._actions, self.proposer, self.description)

    # ------------------------------------------------------------------
    # Loading & reporting
    # ------------------------------------------------------------------

    async def load_proposal(self, proposal_id: int) -> "Proposal":
        """Builds a SUBMITTED proposal from the actions stored on chain for `proposal_id`."""
        onchain_proposal = await self._governance.proposals(proposal_id)
        targets, values, signatures, calldatas = await self._governance.get_actions(proposal_id)

        proposal = Proposal(
            self._governance,
            chain_control=self._chain_control,
            proposer=onchain_proposal.proposer,
            description=UNLOADED_DESCRIPTION,
            max_actions=max(self.max_actions, len(targets)),
            codec=self._codec,
        )
        for target, value, signature, calldata in zip(targets, values, signatures, calldatas):
            proposal.add_action(self._codec.from_chain(target, value, signature, calldata))
        proposal._mark_as_submitted(proposal_id)

        logger.info(f"Loaded proposal {proposal_id} with {len(targets)} action(s)")
        return proposal

    async def proposal_report(self) -> ProposalReport:
        action_reports = []
        for index, action in enumerate(self._actions):
            target_name = await self._governance.target_name(action.target)
            action_reports.append(self._report_mapper.action_to_report(index, action, target_name))

        if self._state != InternalProposalState.SUBMITTED:
            return self._report_mapper.to_report(self.description, action_reports)

        if not self._governance.has_voting_token:
            raise NoVotingTokenError()
        return self._report_mapper.to_report(
            self.description,
            action_reports,
            proposal_id=self._id,
            onchain_proposal=await self._governance.proposals(self._id),
            state=await self.get_remote_state(),
            voting_token_name=await self._governance.voting_token_name(),
            voting_token_decimals=await self._governance.voting_token_decimals(),
        )
