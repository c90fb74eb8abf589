import pytest
from unittest.mock import MagicMock, patch

from conftest import GOVERNOR_ADDRESS, PROPOSER_ADDRESS, SIMPLE_STORAGE_ABI, STORAGE_ADDRESS
from proposals.contract_ref import AddressRef, BoundContract
from proposals.enums.proposal_state import InternalProposalState
from proposals.exceptions import CapacityExceededError, NoGovernorError, UnknownMethodError
from proposals.proposal_builder import ProposalBuilder


@pytest.fixture
def mock_web3():
    return MagicMock()


def test_builder_accepts_max_actions(mock_web3, storage_contract):
    builder = ProposalBuilder(mock_web3, governor=GOVERNOR_ADDRESS, max_actions=10)
    for i in range(10):
        builder.add_contract_action(storage_contract, "set", [i])

    assert len(builder.actions) == 10


def test_builder_rejects_action_over_capacity(mock_web3, storage_contract):
    builder = ProposalBuilder(mock_web3, governor=GOVERNOR_ADDRESS, max_actions=10)
    for i in range(10):
        builder.add_contract_action(storage_contract, "set", [i])

    with pytest.raises(CapacityExceededError):
        builder.add_contract_action(storage_contract, "set", [10])
    with pytest.raises(CapacityExceededError):
        builder.add_action(STORAGE_ADDRESS, 0, "fail()", b"")
    assert len(builder.actions) == 10


def test_build_requires_governor(mock_web3, storage_contract):
    builder = ProposalBuilder(mock_web3).add_contract_action(storage_contract, "set", [1])

    with pytest.raises(NoGovernorError):
        builder.build()


def test_failed_encoding_does_not_add_action(mock_web3, storage_contract):
    builder = ProposalBuilder(mock_web3, governor=GOVERNOR_ADDRESS)

    with pytest.raises(UnknownMethodError):
        builder.add_contract_action(storage_contract, "missing", [])
    assert builder.actions == []


def test_build_binds_collaborators(mock_web3, storage_contract, codec):
    token = MagicMock()
    calldata = codec.encode_call(STORAGE_ADDRESS, SIMPLE_STORAGE_ABI, "set", [3]).calldata

    with patch("proposals.proposal_builder.GovernanceClient") as MockClient:
        proposal = (
            ProposalBuilder(mock_web3)
            .set_governor(GOVERNOR_ADDRESS)
            .set_voting_token(token)
            .set_proposer(PROPOSER_ADDRESS.lower())
            .set_description("# Title\nBody")
            .add_contract_action(storage_contract, "set", [1])
            .add_action(STORAGE_ADDRESS, 0, "set(uint256)", "0x" + calldata.hex())
            .build()
        )

    MockClient.assert_called_once_with(
        mock_web3, AddressRef(address=GOVERNOR_ADDRESS), BoundContract(handle=token)
    )
    assert proposal.governance is MockClient.return_value
    assert proposal.proposer == PROPOSER_ADDRESS
    assert proposal.description == "# Title\nBody"
    assert proposal.state == InternalProposalState.UNSUBMITTED
    assert [action.decoded_args for action in proposal.actions] == [(1,), (3,)]
