#!/usr/bin/env python3
"""
Query an ERC-20 transfers subgraph on The Graph. Requires SUBGRAPH_URL.
"""

import argparse
import logging

from history_sleuth import SubgraphClient
from history_sleuth.indexing import total_volume
from history_sleuth.utils import iso_time, setup_logging

logger = logging.getLogger(__name__)

USDC_ID = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
VITALIK = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--start", default="2024-01-01")
    parser.add_argument("--end", default="2024-01-07")
    parser.add_argument("--block", type=int, default=18_000_000)
    parser.add_argument("--all", action="store_true", help="Page through every transfer")
    args = parser.parse_args()

    setup_logging()
    with SubgraphClient() as client:
        for transfer in client.recent_transfers():
            logger.info(
                f"{transfer['from']['address']} -> {transfer['to']['address']}: "
                f"{transfer['value']} at {iso_time(int(transfer['timestamp']))}"
            )

        for i, transfer in enumerate(client.large_transfers(1_000_000_000), 1):
            logger.info(f"{i}. {transfer['value']} tokens")

        user = client.user_transfers(VITALIK)
        if user:
            logger.info(
                f"Balance {user['balance']}, sent {user['transfersSentCount']}, "
                f"received {user['transfersReceivedCount']}"
            )
        else:
            logger.info("User not found or has no activity")

        for rank, holder in enumerate(client.top_holders(), 1):
            transfers = int(holder["transfersSentCount"]) + int(holder["transfersReceivedCount"])
            logger.info(f"{rank:>4} | {holder['address'][:10]}... | {holder['balance']:>20} | {transfers}")

        in_range = client.transfers_in_range(args.start, args.end)
        logger.info(f"{len(in_range)} transfers in range, volume {total_volume(in_range)}")

        state = client.state_at_block(USDC_ID, args.block)
        if state.get("token"):
            logger.info(f"Token at {args.block}: {state['token']}")

        if args.all:
            logger.info(f"Total transfers fetched: {len(client.all_transfers())}")


if __name__ == "__main__":
    main()
