from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List, Optional

from web3 import AsyncWeb3
from web3.types import RPCEndpoint

from config.settings import settings
from utils.formatter_utils import to_checksum_address
from utils.logger_utils import get_logger
from utils.rpc_utils import rpc_response_to_result, to_rpc_quantity

logger = get_logger("Chain Control")


class ChainControl(object):
    """
    Privileged RPC methods of a local test chain (Hardhat or Anvil).

    A production node rejects all of these. The impersonation and automine
    flags are global to the node, so `impersonating` and `batch_mining`
    always restore them on exit.
    """

    def __init__(self, web3: AsyncWeb3, rpc_namespace: str = settings.chain.rpc_namespace):
        self._web3 = web3
        self._namespace = rpc_namespace

    async def _request(self, method: str, params: List[Any]) -> Any:
        response = await self._web3.provider.make_request(RPCEndpoint(method), params)
        return rpc_response_to_result(method, response)

    async def impersonate(self, address: str) -> None:
        await self._request(f"{self._namespace}_impersonateAccount", [to_checksum_address(address)])

    async def stop_impersonating(self, address: str) -> None:
        await self._request(f"{self._namespace}_stopImpersonatingAccount", [to_checksum_address(address)])

    async def set_balance(self, address: str, amount: int) -> None:
        await self._request(f"{self._namespace}_setBalance", [to_checksum_address(address), to_rpc_quantity(amount)])

    async def mine_block(self, timestamp: Optional[int] = None) -> None:
        """Mines one block, optionally with the given timestamp (jumps the clock forward)."""
        await self._request("evm_mine", [timestamp] if timestamp is not None else [])

    async def mine_blocks(self, count: int) -> None:
        if count <= 0:
            return
        await self._request(f"{self._namespace}_mine", [to_rpc_quantity(count)])

    async def drop_transaction(self, tx_hash: str) -> None:
        """Removes a pending transaction from the node's mempool."""
        await self._request(f"{self._namespace}_dropTransaction", [tx_hash])

    async def set_automine(self, enabled: bool) -> None:
        await self._request("evm_setAutomine", [enabled])

    async def get_block(self, block_identifier: str = "latest") -> Any:
        return await self._web3.eth.get_block(block_identifier)

    def get_signer(self, address: str) -> str:
        """Sender identity for transactions from an unlocked or impersonated account."""
        return to_checksum_address(address)

    @asynccontextmanager
    async def impersonating(self, address: str, balance: Optional[int] = None) -> AsyncIterator[str]:
        await self.impersonate(address)
        logger.debug(f"Impersonating {address}")
        try:
            if balance is not None:
                await self.set_balance(address, balance)
            yield self.get_signer(address)
        finally:
            await self.stop_impersonating(address)
            logger.debug(f"Stopped impersonating {address}")

    @asynccontextmanager
    async def batch_mining(self) -> AsyncIterator[None]:
        """Disables automine so that every transaction sent inside lands in the next mined block."""
        await self.set_automine(False)
        try:
            yield
        finally:
            await self.set_automine(True)
