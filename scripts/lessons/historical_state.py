#!/usr/bin/env python3
"""
Read USDC balances and supply at past blocks. Requires an archive node (ARCHIVE_RPC_URL).
"""

import argparse
import logging
import time
from datetime import datetime, timedelta, timezone

from history_sleuth import HistoricalStateReader, RPCClient, find_block_by_timestamp
from history_sleuth.utils import format_units, setup_logging

logger = logging.getLogger(__name__)

USDC_ADDRESS = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
HOLDERS = {
    "Vitalik": "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045",
    "Binance Hot Wallet": "0xF977814e90dA44bFA03b6295A0616a897441aceC",
    "Coinbase": "0x71660c4005BA85c37ccec55d0C4493E66Fe775d3",
}


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--days-ago", type=int, default=7, help="Locate the block N days back")
    parser.add_argument("--tolerance", type=int, default=15, help="Seconds")
    args = parser.parse_args()

    setup_logging()
    with RPCClient.from_settings(archive=True) as rpc:
        reader = HistoricalStateReader(rpc, USDC_ADDRESS, decimals=6)
        current_block = rpc.get_block_number()

        blocks = [current_block, current_block - 10_000, current_block - 100_000]
        reader.balance_history(HOLDERS["Vitalik"], blocks)

        historical_block = current_block - 50_000
        for label, snapshot in reader.compare_balances(HOLDERS, historical_block).items():
            logger.info(f"{label} at {historical_block}: {snapshot.error if snapshot.error else snapshot.formatted}")

        for snapshot in reader.supply_snapshots(current_block):
            change = ""
            if snapshot.change is not None:
                change = f" change {format_units(snapshot.change, 6)} ({snapshot.change_percent:.2f}%)"
            logger.info(
                f"Block {snapshot.block} {snapshot.date}: "
                f"{format_units(snapshot.total_supply, 6)} USDC{change}"
            )

        target = datetime.now(timezone.utc) - timedelta(days=args.days_ago)
        find_block_by_timestamp(rpc, target, args.tolerance)

        started = time.monotonic()
        balances = reader.batch_balances(list(HOLDERS.values()), current_block - 10_000)
        elapsed_ms = (time.monotonic() - started) * 1000
        for address, balance in balances.items():
            logger.info(f"  {address}: {format_units(balance, 6)} USDC")
        logger.info(f"Total time: {elapsed_ms:.0f}ms, {elapsed_ms / len(balances):.0f}ms per query")


if __name__ == "__main__":
    main()
