from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Set, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest
from eth_utils import to_checksum_address

from proposals.enums.proposal_state import RemoteProposalState
from proposals.exceptions import RemoteRevertError
from proposals.models.action import ProposalAction
from proposals.service.action_codec import ActionCodec

GOVERNOR_ADDRESS = to_checksum_address("0x" + "a1" * 20)
TIMELOCK_ADDRESS = to_checksum_address("0x" + "b2" * 20)
PROPOSER_ADDRESS = to_checksum_address("0x" + "c3" * 20)
STORAGE_ADDRESS = to_checksum_address("0x" + "d4" * 20)

TIMELOCK_DELAY = 172800
GENESIS_TIMESTAMP = 1_700_000_000

SIMPLE_STORAGE_ABI = [
    {
        "inputs": [{"internalType": "uint256", "name": "value", "type": "uint256"}],
        "name": "set",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "fail",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "value",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    }
]

ALWAYS_FAILS_REASON = "SimpleStorage: always fails"
TIMELOCK_EXECUTION_REVERTED = "Timelock::executeTransaction: Transaction execution reverted."


class FakeSimpleStorage(object):
    """Target contract: set(uint256) stores the value, fail() always reverts."""

    def __init__(self):
        self.value = 0
        self.history: List[int] = []

    def handle(self, signature: str, args: Tuple[Any, ...], sender: str, dry_run: bool = False) -> None:
        if sender != TIMELOCK_ADDRESS:
            raise RemoteRevertError("execution reverted: only timelock", reason="only timelock")
        if signature == "set(uint256)":
            if not dry_run:
                self.value = args[0]
                self.history.append(args[0])
        elif signature == "fail()":
            raise RemoteRevertError(f"execution reverted: {ALWAYS_FAILS_REASON}", reason=ALWAYS_FAILS_REASON)
        else:
            raise RemoteRevertError("execution reverted")


class FakeChain(object):
    """Shared node state for FakeGovernance and FakeChainControl."""

    def __init__(self):
        self.timestamp = GENESIS_TIMESTAMP
        self.block_number = 100
        self.automine = True
        self.impersonated: Set[str] = set()
        self.balances: Dict[str, int] = {}
        self.queued: Set[Tuple] = set()
        self.receipts: Dict[str, int] = {}
        self.events: List[Tuple] = []
        self.storage = FakeSimpleStorage()
        self.tx_count = 0

    def next_tx_hash(self) -> str:
        self.tx_count += 1
        return "0x" + format(self.tx_count, "064x")


class FakeGovernance(object):
    """Implements the part of GovernanceClient the fast simulation talks to."""

    def __init__(self, chain: FakeChain, codec: ActionCodec):
        self._chain = chain
        self._codec = codec
        self.has_voting_token = True

    @property
    def governor_address(self) -> str:
        return GOVERNOR_ADDRESS

    async def timelock_address(self) -> str:
        return TIMELOCK_ADDRESS

    async def delay(self) -> int:
        return TIMELOCK_DELAY

    @staticmethod
    def _key(action: ProposalAction, eta: int) -> Tuple:
        return action.target, action.value, action.signature, action.calldata, eta

    def _require_admin(self, sender: str, method: str) -> None:
        if sender != GOVERNOR_ADDRESS or sender not in self._chain.impersonated:
            raise RemoteRevertError(
                f"execution reverted: Timelock::{method}: Call must come from admin.",
                reason=f"Timelock::{method}: Call must come from admin.",
            )

    async def queue_transaction(self, action: ProposalAction, eta: int, sender: str) -> str:
        self._require_admin(sender, "queueTransaction")
        if eta < self._chain.timestamp + TIMELOCK_DELAY:
            raise RemoteRevertError(
                "execution reverted: Timelock::queueTransaction: Estimated execution block must satisfy delay.",
                reason="Timelock::queueTransaction: Estimated execution block must satisfy delay.",
            )
        self._chain.queued.add(self._key(action, eta))
        self._chain.events.append(("queue", action.signature, action.decoded_args))
        tx_hash = self._chain.next_tx_hash()
        self._chain.receipts[tx_hash] = 1
        return tx_hash

    async def call_execute_transaction(self, action: ProposalAction, eta: int, sender: str) -> bytes:
        self._chain.events.append(("call_execute", action.signature, action.decoded_args))
        self._check_execute(action, eta, sender, dry_run=True)
        return b""

    async def execute_transaction(self, action: ProposalAction, eta: int, sender: str) -> str:
        self._check_execute(action, eta, sender, dry_run=False)
        self._chain.queued.discard(self._key(action, eta))
        self._chain.events.append(("execute", action.signature, action.decoded_args))
        tx_hash = self._chain.next_tx_hash()
        self._chain.receipts[tx_hash] = 1
        return tx_hash

    def _check_execute(self, action: ProposalAction, eta: int, sender: str, dry_run: bool) -> None:
        self._require_admin(sender, "executeTransaction")
        if self._key(action, eta) not in self._chain.queued:
            raise RemoteRevertError(
                "execution reverted: Timelock::executeTransaction: Transaction hasn't been queued.",
                reason="Timelock::executeTransaction: Transaction hasn't been queued.",
            )
        if self._chain.timestamp < eta:
            raise RemoteRevertError(
                "execution reverted: Timelock::executeTransaction: Transaction hasn't surpassed time lock.",
                reason="Timelock::executeTransaction: Transaction hasn't surpassed time lock.",
            )
        try:
            self._chain.storage.handle(action.signature, action.decoded_args, TIMELOCK_ADDRESS, dry_run)
        except RemoteRevertError as e:
            raise RemoteRevertError(
                f"execution reverted: {TIMELOCK_EXECUTION_REVERTED}", reason=TIMELOCK_EXECUTION_REVERTED
            ) from e

    async def call_target(self, target: str, data: bytes, sender: str, value: int = 0) -> bytes:
        self._chain.events.append(("call_target", target, sender))
        for entry in SIMPLE_STORAGE_ABI:
            signature = self._codec.function_signature(entry)
            if self._codec.selector(signature) == data[:4]:
                args = self._codec.decode_args(signature, data[4:])
                self._chain.storage.handle(signature, args, sender)
                return b""
        raise RemoteRevertError("execution reverted")

    async def wait_for_receipt(self, tx_hash: str) -> Dict[str, Any]:
        return {"transactionHash": tx_hash, "status": self._chain.receipts[tx_hash]}


class FakeChainControl(object):
    def __init__(self, chain: FakeChain):
        self._chain = chain

    @asynccontextmanager
    async def impersonating(self, address: str, balance: Optional[int] = None):
        self._chain.impersonated.add(address)
        self._chain.events.append(("impersonate", address))
        if balance is not None:
            self._chain.balances[address] = balance
        try:
            yield address
        finally:
            self._chain.impersonated.discard(address)
            self._chain.events.append(("stop_impersonating", address))

    @asynccontextmanager
    async def batch_mining(self):
        self._chain.automine = False
        try:
            yield
        finally:
            self._chain.automine = True

    async def drop_transaction(self, tx_hash: str) -> None:
        self._chain.events.append(("drop", tx_hash))

    async def get_block(self, block_identifier: str = "latest") -> Dict[str, Any]:
        return {"number": self._chain.block_number, "timestamp": self._chain.timestamp}

    async def mine_block(self, timestamp: Optional[int] = None) -> None:
        self._chain.block_number += 1
        self._chain.timestamp = timestamp if timestamp is not None else self._chain.timestamp + 1
        self._chain.events.append(("mine", self._chain.timestamp))

    async def mine_blocks(self, count: int) -> None:
        for _ in range(count):
            await self.mine_block()


@pytest.fixture
def codec():
    return ActionCodec()


@pytest.fixture
def fake_chain():
    return FakeChain()


@pytest.fixture
def fake_governance(fake_chain, codec):
    return FakeGovernance(fake_chain, codec)


@pytest.fixture
def fake_chain_control(fake_chain):
    return FakeChainControl(fake_chain)


@pytest.fixture
def storage_contract():
    contract = MagicMock()
    contract.address = STORAGE_ADDRESS
    contract.abi = SIMPLE_STORAGE_ABI
    return contract


@pytest.fixture
def mock_governance():
    """GovernanceClient stand-in whose remote calls are all AsyncMocks."""
    governance = MagicMock()
    governance.governor_address = GOVERNOR_ADDRESS
    governance.has_voting_token = True
    governance.call_propose = AsyncMock(return_value=7)
    governance.propose = AsyncMock(return_value="0x" + "01" * 32)
    governance.vote = AsyncMock(return_value="0x" + "02" * 32)
    governance.queue = AsyncMock(return_value="0x" + "03" * 32)
    governance.execute = AsyncMock(return_value="0x" + "04" * 32)
    governance.wait_for_receipt = AsyncMock(return_value={"status": 1})
    governance.state = AsyncMock(return_value=RemoteProposalState.ACTIVE)
    governance.quorum_votes = AsyncMock(return_value=400_000 * 10**18)
    governance.current_votes = AsyncMock(return_value=400_001 * 10**18)
    governance.voting_delay = AsyncMock(return_value=1)
    governance.voting_period = AsyncMock(return_value=17280)
    governance.delay = AsyncMock(return_value=TIMELOCK_DELAY)
    governance.target_name = AsyncMock(return_value=None)
    return governance
