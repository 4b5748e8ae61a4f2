#!/usr/bin/env python3
"""
Query USDC Transfer and Uniswap v3 Swap events with eth_getLogs.
"""

import argparse
import logging
from decimal import Decimal

from history_sleuth import RPCClient, EventLogFetcher, data_path, save_records, settings
from history_sleuth.events import (
    SWAP_TOPIC,
    TRANSFER_TOPIC,
    decode_swap,
    decode_transfer,
    filter_large_swaps,
    total_value,
    transfer_record,
)
from history_sleuth.utils import format_units, setup_logging

logger = logging.getLogger(__name__)

USDC_ADDRESS = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
VITALIK = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"
# Uniswap V3 USDC/ETH pools (0.05% and 0.3%)
POOLS = [
    "0x88e6A0c2dDD26FEEb64F039a2c41296FcB3f5640",
    "0x8ad599c3A0ff1De082011EFDDc58f1908eb6e6D8",
]


def recent_transfers(fetcher: EventLogFetcher, current_block: int, output: str = None):
    logs = fetcher.fetch_logs(USDC_ADDRESS, [TRANSFER_TOPIC], current_block - 1000, current_block)
    transfers = [decode_transfer(log, decimals=6) for log in logs]
    logger.info(f"Found {len(transfers)} Transfer events")
    for event in transfers[:5]:
        logger.info(
            f"  Block {event.block_number} {event.sender} -> {event.recipient}: {event.amount} USDC"
        )
    if output and transfers:
        save_records([transfer_record(t) for t in transfers], output)


def transfers_to_vitalik(fetcher: EventLogFetcher, current_block: int):
    logs = fetcher.transfers_to(USDC_ADDRESS, VITALIK, current_block - 5000)
    transfers = [decode_transfer(log, decimals=6) for log in logs]
    logger.info(
        f"{len(transfers)} transfers to Vitalik, total {format_units(total_value(transfers), 6)} USDC"
    )


def swaps(fetcher: EventLogFetcher, current_block: int, min_usdc: Decimal):
    logs = fetcher.paginated_logs(POOLS[0], [SWAP_TOPIC], current_block - 10_000, current_block)
    logger.info(f"Paginated query returned {len(logs)} swaps")

    per_pool = fetcher.multi_contract_logs(POOLS, [SWAP_TOPIC], current_block - 1000)
    logger.info(f"Total swaps across pools: {sum(len(v) for v in per_pool.values())}")

    decoded = [decode_swap(log) for log in per_pool[POOLS[0]]]
    large = filter_large_swaps(decoded, min_usdc)
    logger.info(f"{len(large)} swaps > {min_usdc} USDC")
    for swap in large[:5]:
        logger.info(
            f"  Block {swap.block_number} tx {swap.transaction_hash}: "
            f"{swap.amount0_units()} ETH / {swap.amount1_units()} USDC"
        )


def watch_swaps(duration: float):
    if not settings.rpc.ws_rpc_url:
        logger.info("WS_RPC_URL not configured, polling a filter over RPC_URL instead")

    def on_swap(log):
        swap = decode_swap(log)
        logger.info(f"New swap detected in block {swap.block_number}")
        logger.info(f"  Tx: {swap.transaction_hash}")

    with RPCClient.from_settings(realtime=True) as rpc:
        EventLogFetcher(rpc).watch_logs(POOLS[0], [SWAP_TOPIC], duration, on_swap)


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--min-usdc", type=Decimal, default=Decimal("1000"))
    parser.add_argument(
        "--output",
        default=str(data_path("events", "usdc_transfers.parquet")),
        help="Save decoded transfers (.parquet or .json)",
    )
    parser.add_argument("--watch", type=float, metavar="SECONDS", help="Then watch new swaps")
    args = parser.parse_args()

    setup_logging()
    with RPCClient.from_settings() as rpc:
        fetcher = EventLogFetcher(rpc)
        current_block = rpc.get_block_number()
        logger.info(f"Current block: {current_block}")

        recent_transfers(fetcher, current_block, args.output)
        transfers_to_vitalik(fetcher, current_block)
        swaps(fetcher, current_block, args.min_usdc)

    if args.watch:
        watch_swaps(args.watch)


if __name__ == "__main__":
    main()
