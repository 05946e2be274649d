"""
Chain source.

Read access to an Ethereum-compatible node. Web3 calls are blocking,
so they run in a thread pool with a per-call timeout.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Protocol

from loguru import logger
from web3 import Web3

from chainsync.config.constants import (
    BLOCKCHAIN_EXECUTOR_TIMEOUT,
    BLOCKCHAIN_MAX_RETRIES,
    BLOCKCHAIN_RETRY_DELAY_BASE,
    BLOCKCHAIN_TIMEOUT,
    RPC_EXECUTOR_WORKERS,
)
from chainsync.services.blockchain.converters import convert_block
from chainsync.services.blockchain.rpc_wrapper import (
    rpc_call_with_retry,
    run_blocking,
    with_timeout,
)
from chainsync.services.blockchain.types import Block
from chainsync.utils.exceptions import BlockFetchError


class ChainSource(Protocol):
    """
    Node contract consumed by the sync engine.

    Implementations must tolerate concurrent calls from the gap filler
    task and the validator.
    """

    async def last_block_number(self) -> int:
        """Return the current chain head."""
        ...

    async def block_by_number(self, number: int) -> Block:
        """Return the block at this height or raise BlockFetchError."""
        ...


class Web3ChainSource:
    """ChainSource backed by a web3 HTTP provider."""

    def __init__(
        self,
        w3: Web3,
        executor: ThreadPoolExecutor | None = None,
        timeout: float = BLOCKCHAIN_TIMEOUT,
        max_retries: int = BLOCKCHAIN_MAX_RETRIES,
        retry_delay_base: float = BLOCKCHAIN_RETRY_DELAY_BASE,
    ) -> None:
        """
        Initialize chain source.

        Args:
            w3: Web3 instance
            executor: Thread pool for blocking calls (created if omitted)
            timeout: Timeout per block fetch attempt in seconds
            max_retries: Attempts per block fetch
            retry_delay_base: First retry delay in seconds
        """
        self.w3 = w3
        self._executor = executor or ThreadPoolExecutor(
            max_workers=RPC_EXECUTOR_WORKERS, thread_name_prefix="rpc"
        )
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay_base = retry_delay_base

    @classmethod
    def from_url(
        cls,
        rpc_url: str,
        request_timeout: int,
        **kwargs,
    ) -> "Web3ChainSource":
        """
        Create a chain source for a JSON-RPC endpoint.

        Args:
            rpc_url: http(s) URL, or filesystem path of the node's IPC socket
            request_timeout: Provider request timeout in seconds
            **kwargs: Passed to the constructor

        Returns:
            Chain source instance
        """
        if rpc_url.startswith(("http://", "https://")):
            provider = Web3.HTTPProvider(
                rpc_url, request_kwargs={"timeout": request_timeout}
            )
        else:
            provider = Web3.IPCProvider(rpc_url, timeout=request_timeout)
        return cls(Web3(provider), **kwargs)

    async def last_block_number(self) -> int:
        """
        Get current block number.

        Returns:
            Current block number
        """
        return await with_timeout(
            run_blocking(self._executor, lambda: self.w3.eth.block_number),
            timeout=BLOCKCHAIN_EXECUTOR_TIMEOUT,
            operation_name="eth_blockNumber",
        )

    async def block_by_number(self, number: int) -> Block:
        """
        Fetch a block with its transactions and receipts.

        Args:
            number: Block number

        Returns:
            Block

        Raises:
            BlockFetchError: If the node call fails or the payload is malformed
        """
        try:
            raw_block, receipts = await rpc_call_with_retry(
                lambda: run_blocking(self._executor, lambda: self._fetch_raw(number)),
                max_retries=self.max_retries,
                timeout=self.timeout,
                operation_name=f"get_block({number})",
                retry_delay_base=self.retry_delay_base,
            )
        except Exception as e:
            logger.debug(f"[ChainSource] Block {number} fetch failed: {e}")
            raise BlockFetchError(number, str(e)) from e

        # Decoding is deterministic, a malformed payload is not retried
        try:
            return convert_block(raw_block, receipts)
        except Exception as e:
            logger.warning(f"[ChainSource] Block {number} payload malformed: {e!r}")
            raise BlockFetchError(number, f"malformed payload: {e!r}") from e

    def _fetch_raw(self, number: int) -> tuple[Any, list[Any]]:
        """Blocking fetch of the block and its receipts, runs in the executor."""
        raw_block = self.w3.eth.get_block(number, full_transactions=True)
        receipts = [
            self.w3.eth.get_transaction_receipt(tx["hash"])
            for tx in raw_block["transactions"]
        ]
        return raw_block, receipts

    def close(self) -> None:
        """Release executor threads."""
        self._executor.shutdown(wait=False, cancel_futures=True)
