from typing import Sequence

from pydantic import BaseModel, ConfigDict


class OnChainProposal(BaseModel):
    """Decoded GovernorAlpha.proposals(id) struct."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    proposer: str
    eta: int = 0
    start_block: int = 0
    end_block: int = 0
    for_votes: int = 0
    against_votes: int = 0
    canceled: bool = False
    executed: bool = False

    @classmethod
    def from_call_result(cls, result: Sequence) -> "OnChainProposal":
        (proposal_id, proposer, eta, start_block, end_block,
         for_votes, against_votes, canceled, executed) = result
        return cls(
            id=proposal_id,
            proposer=proposer,
            eta=eta,
            start_block=start_block,
            end_block=end_block,
            for_votes=for_votes,
            against_votes=against_votes,
            canceled=canceled,
            executed=executed,
        )
