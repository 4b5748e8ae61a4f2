#!/usr/bin/env python3
"""
Print the block closest to a UNIX timestamp or ISO-8601 UTC datetime.
"""

import argparse
from datetime import datetime, timezone

from history_sleuth import RPCClient, find_block_by_timestamp
from history_sleuth.utils import setup_logging


def parse_target(value: str):
    if value.isdigit():
        return int(value)
    parsed = datetime.fromisoformat(value)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("target", type=parse_target, help="1700000000 or 2024-01-01T00:00:00")
    parser.add_argument("--tolerance", type=int, default=15, help="Seconds")
    parser.add_argument("--poa", action="store_true", help="Chain uses PoA extra data")
    args = parser.parse_args()

    setup_logging()
    with RPCClient.from_settings(poa=args.poa) as rpc:
        location = find_block_by_timestamp(rpc, args.target, args.tolerance)
    print(location.number)


if __name__ == "__main__":
    main()
