from typing import Any, Optional, Sequence


class ProposalError(Exception):
    """Base class for every error raised while building, submitting or simulating a proposal."""


# --- Configuration ---

class ConfigurationMissingError(ProposalError):
    """A collaborator (governor, voting token, proposer, signer) is not bound."""


class NoGovernorError(ConfigurationMissingError):
    def __init__(self):
        super().__init__("Proposal has no governor")


class NoVotingTokenError(ConfigurationMissingError):
    def __init__(self):
        super().__init__("Proposal has no voting token")


class NoProposerError(ConfigurationMissingError):
    def __init__(self):
        super().__init__("Proposal has no proposer")


class NoSignerError(ConfigurationMissingError):
    def __init__(self):
        super().__init__("Proposal has no signer")


class NoChainControlError(ConfigurationMissingError):
    def __init__(self):
        super().__init__("Proposal has no chain control bound, it cannot be simulated")


# --- Lifecycle ---

class LifecycleViolationError(ProposalError):
    """An operation was attempted in a local state that does not allow it."""


class ProposalNotSubmittedError(LifecycleViolationError):
    def __init__(self):
        super().__init__("Proposal has not been submitted yet")


class ProposalAlreadySubmittedError(LifecycleViolationError):
    def __init__(self):
        super().__init__("Proposal has already been submitted, its actions can no longer change")


class AlreadySimulatedError(LifecycleViolationError):
    def __init__(self):
        super().__init__("Proposal has already been simulated")


class ProposalNotActiveError(LifecycleViolationError):
    def __init__(self, state: Any):
        self.state = state
        super().__init__(f"Proposal is not in an active state, received {state!r}")


# --- Actions ---

class ActionCodecError(ProposalError):
    """An action could not be encoded or decoded."""


class UnknownMethodError(ActionCodecError):
    pass


class ArityMismatchError(ActionCodecError):
    def __init__(self, signature: str, expected: int, received: int):
        self.signature = signature
        self.expected = expected
        self.received = received
        super().__init__(
            f"arguments length do not match signature {signature}: expected {expected}, received {received}"
        )


class ActionDecodeError(ActionCodecError):
    pass


class RoundTripMismatchError(ActionCodecError):
    def __init__(self, signature: str, original: Sequence[Any], decoded: Sequence[Any]):
        self.signature = signature
        self.original = original
        self.decoded = decoded
        super().__init__(f"Decoded calldata for {signature} does not match the input: {original!r} != {decoded!r}")


class CapacityExceededError(ProposalError):
    def __init__(self, max_actions: int):
        self.max_actions = max_actions
        super().__init__(f"Proposal has too many actions (max {max_actions})")


# --- Remote ---

class RemoteRevertError(ProposalError):
    """
    A governance, timelock or target call reverted.

    Attributes:
        message: The remote error message, verbatim.
        reason: The decoded revert reason, when one could be extracted.
        data: Raw revert data returned by the node, if any.
    """

    def __init__(self, message: str, reason: Optional[str] = None, data: Optional[str] = None):
        self.message = message
        self.reason = reason
        self.data = data
        super().__init__(message)


class ChainControlError(ProposalError):
    """A privileged test-chain RPC (impersonation, mining, balance) returned an error."""

    def __init__(self, method: str, error: Any):
        self.method = method
        self.error = error
        super().__init__(f"{method} failed: {error}")


class QuorumInsufficientError(ProposalError):
    def __init__(self, votes: int, quorum: int):
        self.votes = votes
        self.quorum = quorum
        super().__init__(f"Proposer does not have enough votes to reach quorum ({votes} < {quorum})")


class ExecutionDiagnosisError(ProposalError):
    """Composite report for an action whose timelock execution reverted."""

    def __init__(
        self,
        index: int,
        target: str,
        signature: str,
        args: Sequence[Any],
        timelock_message: Optional[str],
        target_message: Optional[str],
    ):
        self.index = index
        self.target = target
        self.signature = signature
        self.args = tuple(args)
        self.timelock_message = timelock_message
        self.target_message = target_message
        super().__init__(
            f"Proposal action {index} failed.\n"
            f"  Target: {target}\n"
            f"  Signature: {signature}\n"
            f"  Args: {', '.join(str(arg) for arg in self.args)}\n"
            f"  Timelock revert message: {timelock_message}\n"
            f"  Contract revert message: {target_message}"
        )


class ActionExecutionFailedError(ProposalError):
    def __init__(self, index: int, tx_hash: Optional[str] = None):
        self.index = index
        self.tx_hash = tx_hash
        super().__init__(f"Action {index} failed" + (f" (tx {tx_hash})" if tx_hash else ""))
