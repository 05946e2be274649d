"""Unit tests for RPC timeout and retry helpers."""

import asyncio

import pytest

from chainsync.services.blockchain.rpc_wrapper import rpc_call_with_retry, with_timeout
from chainsync.utils.exceptions import BlockchainTimeoutError


class TestWithTimeout:
    """Tests for with_timeout."""

    @pytest.mark.asyncio
    async def test_returns_result(self):
        async def answer():
            return 42

        assert await with_timeout(answer(), timeout=1) == 42

    @pytest.mark.asyncio
    async def test_timeout_raises_blockchain_error(self):
        with pytest.raises(BlockchainTimeoutError, match="eth_blockNumber"):
            await with_timeout(
                asyncio.sleep(1), timeout=0.01, operation_name="eth_blockNumber"
            )


class TestRpcCallWithRetry:
    """Tests for rpc_call_with_retry."""

    @pytest.mark.asyncio
    async def test_succeeds_after_transient_failures(self):
        calls = 0

        async def flaky():
            nonlocal calls
            calls += 1
            if calls < 3:
                raise ConnectionError("connection reset")
            return "ok"

        result = await rpc_call_with_retry(flaky, max_retries=3, retry_delay_base=0)

        assert result == "ok"
        assert calls == 3

    @pytest.mark.asyncio
    async def test_raises_last_error_when_exhausted(self):
        calls = 0

        async def broken():
            nonlocal calls
            calls += 1
            raise ConnectionError(f"failure {calls}")

        with pytest.raises(ConnectionError, match="failure 2"):
            await rpc_call_with_retry(broken, max_retries=2, retry_delay_base=0)

    @pytest.mark.asyncio
    async def test_requires_at_least_one_attempt(self):
        async def never_called():
            raise AssertionError("should not run")

        with pytest.raises(ValueError):
            await rpc_call_with_retry(never_called, max_retries=0)
