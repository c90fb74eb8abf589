from typing import Any, Dict, List, Optional

from proposals.enums.proposal_state import RemoteProposalState
from proposals.models.action import ProposalAction
from proposals.models.onchain_proposal import OnChainProposal
from proposals.models.proposal_report import ActionReport, ProposalReport
from utils.formatter_utils import format_arg, format_ether, format_units


class ProposalReportMapper(object):
    @staticmethod
    def action_to_report(index: int, action: ProposalAction, target_name: Optional[str] = None) -> ActionReport:
        return ActionReport(
            index=index,
            target=action.target,
            target_name=target_name or None,
            value_ether=format_ether(action.value) if action.value else None,
            signature=action.signature,
            args=[format_arg(arg) for arg in action.decoded_args],
        )

    def to_report(
        self,
        description: str,
        action_reports: List[ActionReport],
        proposal_id: Optional[int] = None,
        onchain_proposal: Optional[OnChainProposal] = None,
        state: Optional[RemoteProposalState] = None,
        voting_token_name: Optional[str] = None,
        voting_token_decimals: int = 18,
    ) -> ProposalReport:
        report = ProposalReport(submitted=proposal_id is not None, description=description, actions=action_reports)
        if proposal_id is None:
            return report

        report.id = proposal_id
        report.state = state.name if state is not None else None
        report.voting_token_name = voting_token_name
        if onchain_proposal is not None:
            report.for_votes = format_units(onchain_proposal.for_votes, voting_token_decimals)
            report.against_votes = format_units(onchain_proposal.against_votes, voting_token_decimals)
            report.end_block = onchain_proposal.end_block
        return report

    @staticmethod
    def report_to_dict(report: ProposalReport) -> Dict[str, Any]:
        return report.model_dump(exclude_none=True, mode="json")

    @staticmethod
    def report_to_text(report: ProposalReport) -> str:
        """Tree-style rendering for terminals."""
        lines = ["-" * 56]
        if report.submitted:
            votes_unit = f"{report.voting_token_name} Votes" if report.voting_token_name else "Votes"
            lines.append(f"Id: {report.id}")
            lines.append(f"Description: {report.description}")
            lines.append(f"For Votes: {report.for_votes} {votes_unit}")
            lines.append(f"Against Votes: {report.against_votes} {votes_unit}")
            lines.append(f"Vote End: {report.end_block}")
            lines.append(f"State: {report.state}")
        else:
            lines.append("Unsubmitted proposal")
            lines.append(f"Description: {report.description}")

        for action in report.actions:
            lines.append(f"Action {action.index}")
            if action.target_name:
                lines.append(f" ├─ target ───── {action.target} (name: {action.target_name})")
            else:
                lines.append(f" ├─ target ───── {action.target}")
            if action.value_ether is not None:
                lines.append(f" ├─ value ────── {action.value_ether} ETH")
            if action.args:
                lines.append(f" ├─ signature ── {action.signature}")
                for j, arg in enumerate(action.args):
                    branch = "└" if j == len(action.args) - 1 else "├"
                    lines.append(f" {branch}─ args [ {j} ] ─ {arg}")
            else:
                lines.append(f" └─ signature ── {action.signature}")
        return "\n".join(lines)
