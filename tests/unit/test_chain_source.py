"""Unit tests for the web3-backed chain source and payload conversion."""

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest
from hexbytes import HexBytes
from web3 import HTTPProvider, IPCProvider
from web3.datastructures import AttributeDict

from chainsync.services.blockchain.chain_source import Web3ChainSource
from chainsync.services.blockchain.converters import convert_block, to_hex
from chainsync.utils.exceptions import BlockFetchError

TX_HASH = HexBytes("0x" + "ab" * 32)
BLOCK_HASH = HexBytes("0x" + "cd" * 32)
PARENT_HASH = HexBytes("0x" + "ef" * 32)
SENDER = "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0"
CONTRACT = "0x55d398326f99059fF775485246999027B3197955"


def raw_block(number: int = 12345) -> AttributeDict:
    return AttributeDict({
        "number": number,
        "hash": BLOCK_HASH,
        "parentHash": PARENT_HASH,
        "miner": "0x0000000000000000000000000000000000000000",
        "nonce": HexBytes("0x0000000000000042"),
        "timestamp": 1_700_000_000,
        "gasLimit": 30_000_000,
        "gasUsed": 53_000,
        "size": 1024,
        "extraData": HexBytes("0x"),
        "transactions": [
            AttributeDict({
                "hash": TX_HASH,
                "transactionIndex": 0,
                "from": SENDER,
                "to": None,
                "value": 0,
                "gas": 100_000,
                "gasPrice": 5 * 10**9,
                "nonce": 7,
                "input": HexBytes("0x6080"),
            })
        ],
    })


def raw_receipt(number: int = 12345) -> AttributeDict:
    return AttributeDict({
        "transactionHash": TX_HASH,
        "cumulativeGasUsed": 53_000,
        "gasUsed": 53_000,
        "contractAddress": CONTRACT,
        "status": 1,
        "logs": [
            AttributeDict({
                "address": CONTRACT,
                "topics": [HexBytes("0x" + "11" * 32)],
                "data": HexBytes("0x" + "00" * 32),
                "logIndex": 0,
                "blockNumber": number,
                "transactionHash": TX_HASH,
            })
        ],
    })


@pytest.fixture
def mock_w3():
    w3 = MagicMock()
    w3.eth.block_number = 12345
    w3.eth.get_block.return_value = raw_block()
    w3.eth.get_transaction_receipt.return_value = raw_receipt()
    return w3


@pytest.fixture
def source(mock_w3):
    executor = ThreadPoolExecutor(max_workers=1)
    chain_source = Web3ChainSource(mock_w3, executor=executor, timeout=5, max_retries=1)
    yield chain_source
    chain_source.close()


class TestConverters:
    """Tests for web3 payload conversion."""

    def test_to_hex_normalizes_case_and_prefix(self):
        assert to_hex(CONTRACT) == CONTRACT.lower()
        assert to_hex("ABCD") == "0xabcd"
        assert to_hex(HexBytes("0x0102")) == "0x0102"

    def test_contract_creation_block(self):
        block = convert_block(raw_block(), [raw_receipt()])

        assert block.number == 12345
        assert block.hash == "0x" + "cd" * 32
        assert block.parent_hash == "0x" + "ef" * 32
        tx = block.transactions[0]
        assert tx.to_address is None
        assert tx.from_address == SENDER.lower()
        assert tx.input_data == "0x6080"
        receipt = block.receipts[0]
        assert receipt.contract_address == CONTRACT.lower()
        assert receipt.logs[0].topics == ("0x" + "11" * 32,)

    def test_pending_block_rejected(self):
        pending = AttributeDict({**raw_block(), "hash": None})

        with pytest.raises(ValueError):
            convert_block(pending)

    def test_hash_only_transactions_rejected(self):
        """Blocks fetched without full transactions cannot be stored."""
        partial = AttributeDict({**raw_block(), "transactions": [TX_HASH]})

        with pytest.raises((KeyError, TypeError, IndexError)):
            convert_block(partial)


class TestWeb3ChainSource:
    """Tests for the node-facing source."""

    @pytest.mark.asyncio
    async def test_last_block_number(self, source):
        assert await source.last_block_number() == 12345

    @pytest.mark.asyncio
    async def test_block_by_number_fetches_receipts(self, source, mock_w3):
        block = await source.block_by_number(12345)

        mock_w3.eth.get_block.assert_called_once_with(12345, full_transactions=True)
        mock_w3.eth.get_transaction_receipt.assert_called_once_with(TX_HASH)
        assert len(block.receipts) == 1
        assert block.receipts[0].transaction_hash == "0x" + "ab" * 32

    @pytest.mark.asyncio
    async def test_node_error_wrapped(self, source, mock_w3):
        mock_w3.eth.get_block.side_effect = ConnectionError("connection reset")

        with pytest.raises(BlockFetchError) as exc_info:
            await source.block_by_number(77)

        assert exc_info.value.block_number == 77

    @pytest.mark.asyncio
    async def test_malformed_payload_wrapped(self, source, mock_w3):
        """Decode failures surface as fetch errors, never as a stored block."""
        mock_w3.eth.get_block.return_value = AttributeDict({**raw_block(), "hash": None})

        with pytest.raises(BlockFetchError):
            await source.block_by_number(12345)

    @pytest.mark.asyncio
    async def test_retries_transient_failure(self, mock_w3):
        mock_w3.eth.get_block.side_effect = [TimeoutError("read timeout"), raw_block()]
        chain_source = Web3ChainSource(
            mock_w3, timeout=5, max_retries=2, retry_delay_base=0
        )

        try:
            block = await chain_source.block_by_number(12345)
        finally:
            chain_source.close()

        assert block.number == 12345
        assert mock_w3.eth.get_block.call_count == 2

    @pytest.mark.asyncio
    async def test_malformed_payload_not_retried(self, mock_w3):
        """Decoding fails the same way every time, so the node is asked once."""
        mock_w3.eth.get_block.return_value = AttributeDict({**raw_block(), "hash": None})
        chain_source = Web3ChainSource(
            mock_w3, timeout=5, max_retries=3, retry_delay_base=0
        )

        try:
            with pytest.raises(BlockFetchError, match="malformed payload"):
                await chain_source.block_by_number(12345)
        finally:
            chain_source.close()

        assert mock_w3.eth.get_block.call_count == 1


class TestFromUrl:
    """Tests for provider selection."""

    def test_http_endpoint(self):
        chain_source = Web3ChainSource.from_url("http://localhost:8545", request_timeout=10)
        try:
            assert isinstance(chain_source.w3.provider, HTTPProvider)
        finally:
            chain_source.close()

    def test_ipc_socket_path(self, tmp_path):
        ipc_path = tmp_path / "geth.ipc"

        chain_source = Web3ChainSource.from_url(str(ipc_path), request_timeout=10)
        try:
            assert isinstance(chain_source.w3.provider, IPCProvider)
            assert chain_source.w3.provider.ipc_path.endswith("geth.ipc")
        finally:
            chain_source.close()
