from decimal import Decimal

from conftest import PROPOSER_ADDRESS, SIMPLE_STORAGE_ABI, STORAGE_ADDRESS
from proposals.enums.proposal_state import RemoteProposalState
from proposals.mappers.proposal_report_mapper import ProposalReportMapper
from proposals.models.onchain_proposal import OnChainProposal


def test_action_to_report_formats_values_and_args(codec):
    action = codec.encode_call(STORAGE_ADDRESS, SIMPLE_STORAGE_ABI, "set", [42], value=10**18)

    report = ProposalReportMapper.action_to_report(0, action, "SimpleStorage")

    assert report.target == STORAGE_ADDRESS
    assert report.target_name == "SimpleStorage"
    assert report.value_ether == Decimal(1)
    assert report.args == ["42"]


def test_zero_value_is_omitted(codec):
    action = codec.encode_call(STORAGE_ADDRESS, SIMPLE_STORAGE_ABI, "fail", [])

    report = ProposalReportMapper.action_to_report(3, action)

    assert report.value_ether is None
    assert "value_ether" not in ProposalReportMapper.report_to_dict(report)


def test_submitted_report_text(codec):
    mapper = ProposalReportMapper()
    actions = [
        mapper.action_to_report(0, codec.encode_call(STORAGE_ADDRESS, SIMPLE_STORAGE_ABI, "set", [1]), "Storage"),
        mapper.action_to_report(1, codec.encode_call(STORAGE_ADDRESS, SIMPLE_STORAGE_ABI, "fail", [])),
    ]
    onchain_proposal = OnChainProposal(
        id=5, proposer=PROPOSER_ADDRESS, end_block=999, for_votes=2 * 10**18, against_votes=10**17
    )

    report = mapper.to_report(
        "<DESCRIPTION NOT LOADED>",
        actions,
        proposal_id=5,
        onchain_proposal=onchain_proposal,
        state=RemoteProposalState.SUCCEEDED,
        voting_token_name="Uniswap",
    )
    text = mapper.report_to_text(report)

    assert "Id: 5" in text
    assert "State: SUCCEEDED" in text
    assert "Vote End: 999" in text
    assert "Uniswap Votes" in text
    assert f"target ───── {STORAGE_ADDRESS} (name: Storage)" in text
    assert " └─ args [ 0 ] ─ 1" in text
    assert " └─ signature ── fail()" in text


def test_unsubmitted_report_has_no_votes():
    report = ProposalReportMapper().to_report("# Draft", [])

    assert report.submitted is False
    assert report.for_votes is None
    assert "Unsubmitted proposal" in ProposalReportMapper.report_to_text(report)
