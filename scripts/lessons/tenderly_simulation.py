#!/usr/bin/env python3
"""
Simulate USDC calls on Tenderly, at the head and at a past block.
Requires TENDERLY_USER, TENDERLY_PROJECT and TENDERLY_ACCESS_KEY.
"""

import argparse
import logging

from history_sleuth import SimulationRequest, TenderlyClient
from history_sleuth.simulation import (
    TOTAL_SUPPLY_SELECTOR,
    erc20_balance_of_calldata,
    erc20_transfer_calldata,
)
from history_sleuth.utils import parse_units, setup_logging

logger = logging.getLogger(__name__)

USDC_ADDRESS = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
VITALIK = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--block", type=int, default=18_000_000)
    parser.add_argument("--fork", action="store_true", help="Also create a fork")
    args = parser.parse_args()

    setup_logging()
    with TenderlyClient() as client:
        transfer = SimulationRequest(
            from_address=VITALIK,
            to=USDC_ADDRESS,
            input=erc20_transfer_calldata(
                "0x0000000000000000000000000000000000000001", parse_units("100", 6)
            ),
            save=True,
            save_if_fails=True,
        )
        simulation = client.simulate(transfer)
        logger.info(f"View in dashboard: {client.dashboard_url(simulation['id'])}")

        historical = SimulationRequest(
            from_address=VITALIK,
            to=USDC_ADDRESS,
            input=erc20_balance_of_calldata(VITALIK),
            block_number=args.block,
        )
        client.simulate(historical)

        bundle = [
            historical,
            SimulationRequest(from_address=VITALIK, to=USDC_ADDRESS, input=TOTAL_SUPPLY_SELECTOR),
        ]
        for i, result in enumerate(client.simulate_bundle(bundle), 1):
            sim = result.get("simulation", {})
            logger.info(
                f"Transaction {i}: {'Success' if sim.get('status') else 'Failed'}, gas used {sim.get('gas_used')}"
            )

        if args.fork:
            fork = client.create_fork(block_number=args.block)
            logger.info(f"Fork RPC URL: {fork.get('rpc_url')}")


if __name__ == "__main__":
    main()
