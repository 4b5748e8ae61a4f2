"""Event-log filtering and decoding."""

from .fetcher import EventLogFetcher, iter_block_ranges, DEFAULT_CHUNK_SIZE
from .decoding import (
    SwapEvent,
    TransferEvent,
    decode_swap,
    decode_transfer,
    filter_large_swaps,
    total_value,
    transfer_record,
)
from .signatures import (
    SWAP_EVENT_ABI,
    SWAP_TOPIC,
    TRANSFER_EVENT_ABI,
    TRANSFER_TOPIC,
    address_topic,
    event_signature,
    event_topic,
)

__all__ = [
    "EventLogFetcher",
    "iter_block_ranges",
    "DEFAULT_CHUNK_SIZE",
    "SwapEvent",
    "TransferEvent",
    "decode_swap",
    "decode_transfer",
    "filter_large_swaps",
    "total_value",
    "transfer_record",
    "SWAP_EVENT_ABI",
    "SWAP_TOPIC",
    "TRANSFER_EVENT_ABI",
    "TRANSFER_TOPIC",
    "address_topic",
    "event_signature",
    "event_topic",
]
