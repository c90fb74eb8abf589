from typing import Optional

from web3 import AsyncWeb3

from config.settings import settings
from proposals.contract_ref import AddressRef
from proposals.exceptions import NoGovernorError
from proposals.proposal import Proposal
from proposals.proposal_builder import ProposalBuilder
from proposals.service.chain_control import ChainControl
from proposals.service.governance_client import GovernanceClient
from utils.rpc_provider_utils import get_async_web3


def create_web3(provider_uri: Optional[str] = None) -> AsyncWeb3:
    return get_async_web3(provider_uri or settings.ethereum.provider_uri, settings.ethereum.rpc_timeout)


def create_proposal_builder(
    web3: Optional[AsyncWeb3] = None,
    governor: Optional[str] = None,
    voting_token: Optional[str] = None,
) -> ProposalBuilder:
    """Builder wired from settings (GOVERNOR_ADDRESS, VOTING_TOKEN_ADDRESS, PROVIDER_URI)."""
    web3 = web3 or create_web3()
    return ProposalBuilder(
        web3,
        governor=governor or settings.proposals.governor,
        voting_token=voting_token or settings.proposals.voting_token,
        chain_control=ChainControl(web3, settings.chain.rpc_namespace),
        max_actions=settings.proposals.max_actions,
    )


def create_proposal(
    web3: Optional[AsyncWeb3] = None,
    governor: Optional[str] = None,
    voting_token: Optional[str] = None,
) -> Proposal:
    """Empty proposal bound to the configured governor, used as a handle to load existing ones."""
    web3 = web3 or create_web3()
    governor = governor or settings.proposals.governor
    if not governor:
        raise NoGovernorError()

    voting_token = voting_token or settings.proposals.voting_token
    governance = GovernanceClient(
        web3,
        AddressRef(address=governor),
        AddressRef(address=voting_token) if voting_token else None,
    )
    return Proposal(governance, chain_control=ChainControl(web3, settings.chain.rpc_namespace))
