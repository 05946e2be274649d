"""
Web3 response converters.

Turns web3 AttributeDict / HexBytes payloads into chain data types.
Missing mandatory fields raise, so a malformed payload can never be
stored as a valid block.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from web3 import Web3

from chainsync.services.blockchain.types import Block, Log, Receipt, Transaction


def to_hex(value: Any) -> str:
    """Normalize bytes / HexBytes / hex str to lower-case 0x-prefixed hex."""
    if isinstance(value, str):
        return value.lower() if value.startswith("0x") else f"0x{value.lower()}"
    return Web3.to_hex(value).lower()


def to_address(value: Any) -> str | None:
    """Normalize an optional address to lower-case hex."""
    if value is None:
        return None
    return to_hex(value)


def convert_log(log: Mapping[str, Any]) -> Log:
    return Log(
        address=to_hex(log["address"]),
        topics=tuple(to_hex(topic) for topic in log.get("topics", ())),
        data=to_hex(log.get("data", "0x")),
        log_index=int(log["logIndex"]),
        block_number=int(log["blockNumber"]),
        transaction_hash=to_hex(log["transactionHash"]),
    )


def convert_receipt(receipt: Mapping[str, Any]) -> Receipt:
    return Receipt(
        transaction_hash=to_hex(receipt["transactionHash"]),
        cumulative_gas_used=int(receipt["cumulativeGasUsed"]),
        gas_used=int(receipt["gasUsed"]),
        contract_address=to_address(receipt.get("contractAddress")),
        status=receipt.get("status"),
        logs=tuple(convert_log(log) for log in receipt.get("logs", ())),
    )


def convert_transaction(tx: Mapping[str, Any]) -> Transaction:
    return Transaction(
        hash=to_hex(tx["hash"]),
        transaction_index=int(tx["transactionIndex"]),
        from_address=to_hex(tx["from"]),
        to_address=to_address(tx.get("to")),
        value=int(tx["value"]),
        gas=int(tx["gas"]),
        nonce=int(tx["nonce"]),
        gas_price=tx.get("gasPrice"),
        input_data=to_hex(tx.get("input", "0x")),
    )


def convert_block(
    block: Mapping[str, Any],
    receipts: Sequence[Mapping[str, Any]] = (),
) -> Block:
    """
    Build a Block from a full-transaction web3 block and its receipts.

    Args:
        block: Result of ``eth.get_block(n, full_transactions=True)``
        receipts: One receipt per transaction, in transaction order

    Returns:
        Immutable Block value

    Raises:
        KeyError, TypeError, ValueError: If the payload is malformed
    """
    if block.get("hash") is None:
        # Pending blocks have no hash yet
        raise ValueError(f"block {block.get('number')} has no hash")

    nonce = block.get("nonce")
    extra_data = block.get("extraData")
    return Block(
        number=int(block["number"]),
        hash=to_hex(block["hash"]),
        parent_hash=to_hex(block["parentHash"]),
        miner=to_address(block.get("miner")),
        nonce=to_hex(nonce) if nonce is not None else None,
        timestamp=int(block.get("timestamp", 0)),
        gas_limit=int(block.get("gasLimit", 0)),
        gas_used=int(block.get("gasUsed", 0)),
        size=block.get("size"),
        extra_data=to_hex(extra_data) if extra_data is not None else None,
        transactions=tuple(convert_transaction(tx) for tx in block.get("transactions", ())),
        receipts=tuple(convert_receipt(receipt) for receipt in receipts),
    )
