"""
RPC Wrapper with Timeout and Retry Logic.

Provides centralized timeout and retry functionality for all blockchain RPC calls.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from loguru import logger

from chainsync.config.constants import BLOCKCHAIN_RETRY_DELAY_BASE, BLOCKCHAIN_TIMEOUT
from chainsync.utils.exceptions import BlockchainTimeoutError

T = TypeVar("T")


async def with_timeout(
    coro: Awaitable[T],
    timeout: float = BLOCKCHAIN_TIMEOUT,
    operation_name: str = "RPC call",
) -> T:
    """
    Execute async coroutine with timeout.

    Args:
        coro: Coroutine to execute
        timeout: Timeout in seconds (default: BLOCKCHAIN_TIMEOUT)
        operation_name: Operation name for logging

    Returns:
        Result of the coroutine

    Raises:
        BlockchainTimeoutError: If operation times out
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except TimeoutError as e:
        error_msg = f"{operation_name} timed out after {timeout}s"
        logger.warning(error_msg)
        raise BlockchainTimeoutError(error_msg) from e


async def rpc_call_with_retry(
    coro_factory: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    timeout: float = BLOCKCHAIN_TIMEOUT,
    operation_name: str = "RPC call",
    retry_delay_base: float = BLOCKCHAIN_RETRY_DELAY_BASE,
) -> T:
    """
    Execute RPC call with retry logic and timeout.

    Args:
        coro_factory: Factory function that returns a coroutine
        max_retries: Maximum number of attempts
        timeout: Timeout per attempt in seconds
        operation_name: Operation name for logging
        retry_delay_base: First retry delay in seconds, doubled per attempt

    Returns:
        Result of the RPC call

    Raises:
        The last error raised by the final attempt
    """
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    last_error: Exception | None = None

    for attempt in range(max_retries):
        try:
            result = await with_timeout(
                coro_factory(),
                timeout=timeout,
                operation_name=f"{operation_name} (attempt {attempt + 1}/{max_retries})",
            )

            if attempt > 0:
                logger.info(f"{operation_name} succeeded on attempt {attempt + 1}")

            return result

        except asyncio.CancelledError:
            raise
        except Exception as e:
            last_error = e

            if attempt < max_retries - 1:
                delay = retry_delay_base * (2 ** attempt)  # 2s, 4s, 8s...
                logger.warning(
                    f"{operation_name} failed on attempt {attempt + 1}/{max_retries}: {e}. "
                    f"Retrying in {delay}s..."
                )
                await asyncio.sleep(delay)

    raise last_error  # type: ignore[misc]


async def run_blocking(
    executor: Any,
    func: Callable[[], T],
) -> T:
    """
    Run a blocking web3 call in the thread pool.

    Args:
        executor: ThreadPoolExecutor (or None for the loop default)
        func: Zero-argument callable

    Returns:
        Result of the call
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, func)
