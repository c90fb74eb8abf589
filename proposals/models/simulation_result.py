from typing import List, Optional

from pydantic import BaseModel, Field

from proposals.enums.proposal_state import SimulationMode


class ExecutedAction(BaseModel):
    index: int
    target: str
    signature: str
    transaction_hash: Optional[str] = None
    status: Optional[int] = None


class SimulationResult(BaseModel):
    mode: SimulationMode
    eta: int
    # Only the full simulation goes through governor.propose and gets an id
    proposal_id: Optional[int] = None
    executed_actions: List[ExecutedAction] = Field(default_factory=list)
