from enum import Enum, IntEnum


class InternalProposalState(IntEnum):
    """Local lifecycle of a proposal object. Only ever moves forward."""

    UNSUBMITTED = 0
    SIMULATED = 1
    SUBMITTED = 2


class RemoteProposalState(IntEnum):
    """Mirror of GovernorAlpha.ProposalState, ordered as the contract's enum."""

    PENDING = 0
    ACTIVE = 1
    CANCELED = 2
    DEFEATED = 3
    SUCCEEDED = 4
    QUEUED = 5
    EXPIRED = 6
    EXECUTED = 7


class SimulationMode(str, Enum):
    FAST = "fast"
    FULL = "full"
