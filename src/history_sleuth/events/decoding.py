"""Decode raw Transfer and Swap logs."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping

from web3 import Web3

from ..core.exceptions import DecodingError
from ..utils.formatting import format_units, to_hex
from .signatures import SWAP_TOPIC, TRANSFER_TOPIC

_codec = Web3().codec


@dataclass
class TransferEvent:
    block_number: int
    transaction_hash: str
    sender: str
    recipient: str
    value: int
    decimals: int = 18

    @property
    def amount(self) -> Decimal:
        return format_units(self.value, self.decimals)


@dataclass
class SwapEvent:
    block_number: int
    transaction_hash: str
    sender: str
    recipient: str
    amount0: int
    amount1: int
    sqrt_price_x96: int
    liquidity: int
    tick: int

    def amount1_units(self, decimals: int = 6) -> Decimal:
        return format_units(abs(self.amount1), decimals)

    def amount0_units(self, decimals: int = 18) -> Decimal:
        return format_units(abs(self.amount0), decimals)


def _topics(log: Mapping[str, Any]) -> List[str]:
    return [to_hex(t).lower() for t in log.get("topics", [])]


def _topic_address(topic: str) -> str:
    return Web3.to_checksum_address("0x" + topic[-40:])


def _data_bytes(log: Mapping[str, Any]) -> bytes:
    data = log.get("data", b"")
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    return bytes.fromhex(data[2:] if data.startswith("0x") else data)


def _check_topic0(topics: List[str], expected: str, name: str, count: int):
    if len(topics) != count or topics[0] != expected:
        raise DecodingError(f"Log is not a {name} event: {topics[:1]}")


def decode_transfer(log: Mapping[str, Any], decimals: int = 18) -> TransferEvent:
    """Decode an ERC-20 Transfer(address,address,uint256) log."""
    topics = _topics(log)
    _check_topic0(topics, TRANSFER_TOPIC, "Transfer", 3)
    try:
        (value,) = _codec.decode(["uint256"], _data_bytes(log))
    except Exception as e:
        raise DecodingError(f"Could not decode Transfer data: {e}") from e

    return TransferEvent(
        block_number=int(log["blockNumber"]),
        transaction_hash=to_hex(log["transactionHash"]),
        sender=_topic_address(topics[1]),
        recipient=_topic_address(topics[2]),
        value=value,
        decimals=decimals,
    )


def decode_swap(log: Mapping[str, Any]) -> SwapEvent:
    """Decode a Uniswap v3 pool Swap log."""
    topics = _topics(log)
    _check_topic0(topics, SWAP_TOPIC, "Swap", 3)
    try:
        amount0, amount1, sqrt_price, liquidity, tick = _codec.decode(
            ["int256", "int256", "uint160", "uint128", "int24"], _data_bytes(log)
        )
    except Exception as e:
        raise DecodingError(f"Could not decode Swap data: {e}") from e

    return SwapEvent(
        block_number=int(log["blockNumber"]),
        transaction_hash=to_hex(log["transactionHash"]),
        sender=_topic_address(topics[1]),
        recipient=_topic_address(topics[2]),
        amount0=amount0,
        amount1=amount1,
        sqrt_price_x96=sqrt_price,
        liquidity=liquidity,
        tick=tick,
    )


def filter_large_swaps(
    swaps: Iterable[SwapEvent], min_amount: Decimal, decimals: int = 6
) -> List[SwapEvent]:
    """Keep swaps whose token1 leg exceeds ``min_amount`` (USDC in the ETH/USDC pool)."""
    threshold = Decimal(str(min_amount))
    return [s for s in swaps if s.amount1_units(decimals) > threshold]


def total_value(transfers: Iterable[TransferEvent]) -> int:
    return sum(t.value for t in transfers)


def transfer_record(event: TransferEvent) -> Dict[str, Any]:
    """Flat dict for export."""
    return {
        "block_number": event.block_number,
        "transaction_hash": event.transaction_hash,
        "from": event.sender,
        "to": event.recipient,
        "value": str(event.value),
        "amount": str(event.amount),
    }
