#!/usr/bin/env python3
"""
Supply tokens to Aave v3. Requires RPC_URL for the target network and PRIVATE_KEY.
"""

import argparse

from history_sleuth import RPCClient, settings, supply_to_aave
from history_sleuth.core import ConfigurationError
from history_sleuth.utils import parse_units, setup_logging


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("asset", help="Token address, e.g. USDC on Sepolia")
    parser.add_argument("amount", help="Human amount, e.g. 100")
    parser.add_argument("--decimals", type=int, default=6)
    parser.add_argument("--network", default="sepolia")
    args = parser.parse_args()

    setup_logging()
    if not settings.private_key:
        raise ConfigurationError("PRIVATE_KEY is not configured")

    with RPCClient.from_settings() as rpc:
        account = rpc.w3.eth.account.from_key(settings.private_key)
        receipt = supply_to_aave(
            rpc,
            account,
            args.asset,
            parse_units(args.amount, args.decimals),
            network=args.network,
            decimals=args.decimals,
        )
    print(f"Supplied in block {receipt['blockNumber']}")


if __name__ == "__main__":
    main()
