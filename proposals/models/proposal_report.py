from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class ActionReport(BaseModel):
    index: int
    target: str
    target_name: Optional[str] = None
    value_ether: Optional[Decimal] = None
    signature: str
    args: List[str] = Field(default_factory=list)


class ProposalReport(BaseModel):
    submitted: bool
    description: str
    id: Optional[int] = None
    state: Optional[str] = None
    voting_token_name: Optional[str] = None
    for_votes: Optional[Decimal] = None
    against_votes: Optional[Decimal] = None
    end_block: Optional[int] = None
    actions: List[ActionReport] = Field(default_factory=list)
