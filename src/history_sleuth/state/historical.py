"""Read contract state as it was at past blocks (needs an archive node)."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from ..utils.formatting import format_units, iso_time

ERC20_READ_ABI = [
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "totalSupply",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "decimals",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    },
]


@dataclass
class BalanceSnapshot:
    block: int
    holder: str
    balance: Optional[int] = None
    timestamp: Optional[int] = None
    decimals: int = 18
    error: Optional[str] = None

    @property
    def formatted(self) -> Optional[Decimal]:
        if self.balance is None:
            return None
        return format_units(self.balance, self.decimals)


@dataclass
class SupplySnapshot:
    block: int
    timestamp: int
    total_supply: int
    decimals: int = 18
    change: Optional[int] = None
    change_percent: Optional[float] = None

    @property
    def date(self) -> str:
        return iso_time(self.timestamp)


class HistoricalStateReader:
    """eth_call reads of an ERC-20 token pinned to historical blocks.

    Example:
        reader = HistoricalStateReader(rpc, USDC_ADDRESS, decimals=6)
        reader.balance_at(VITALIK, 18_000_000)
    """

    def __init__(self, rpc, token_address: str, decimals: int = 18):
        self.rpc = rpc
        self.token_address = token_address
        self.decimals = decimals
        self.contract = rpc.contract(token_address, ERC20_READ_ABI)
        self.logger = logging.getLogger(self.__class__.__name__)

    def balance_at(self, holder: str, block: int) -> int:
        return self.contract.functions.balanceOf(holder).call(block_identifier=block)

    def total_supply_at(self, block: int) -> int:
        return self.contract.functions.totalSupply().call(block_identifier=block)

    def _snapshot(self, holder: str, block: int, with_timestamp: bool) -> BalanceSnapshot:
        snapshot = BalanceSnapshot(block=block, holder=holder, decimals=self.decimals)
        try:
            snapshot.balance = self.balance_at(holder, block)
            if with_timestamp:
                snapshot.timestamp = self.rpc.get_block_timestamp(block)
        except Exception as e:
            # Typically the block is older than the provider keeps state for
            self.logger.warning(f"Block {block}: Error - {e}")
            snapshot.error = str(e)
        return snapshot

    def balance_history(self, holder: str, blocks: Sequence[int]) -> List[BalanceSnapshot]:
        """One snapshot per block; failed blocks carry ``error`` instead of a balance."""
        snapshots = []
        for block in blocks:
            snapshot = self._snapshot(holder, block, with_timestamp=True)
            if snapshot.error is None:
                self.logger.info(
                    f"Block {block} ({iso_time(snapshot.timestamp)}): {snapshot.formatted}"
                )
            snapshots.append(snapshot)
        return snapshots

    def compare_balances(
        self, holders: Dict[str, str], block: int
    ) -> Dict[str, BalanceSnapshot]:
        """Balances of several labelled holders at the same block."""
        return {
            label: self._snapshot(address, block, with_timestamp=False)
            for label, address in holders.items()
        }

    def supply_snapshots(
        self, latest_block: int, count: int = 5, interval: int = 20_000
    ) -> List[SupplySnapshot]:
        """Total supply every ``interval`` blocks back from ``latest_block``, oldest first."""
        snapshots: List[SupplySnapshot] = []
        for i in range(count - 1, -1, -1):
            block = latest_block - i * interval
            if block < 0:
                continue
            try:
                total_supply = self.total_supply_at(block)
                timestamp = self.rpc.get_block_timestamp(block)
            except Exception as e:
                self.logger.warning(f"Block {block}: Error - {e}")
                continue

            snapshot = SupplySnapshot(
                block=block,
                timestamp=timestamp,
                total_supply=total_supply,
                decimals=self.decimals,
            )
            if snapshots:
                previous = snapshots[-1].total_supply
                snapshot.change = total_supply - previous
                if previous:
                    # basis points, truncated toward zero, then percent
                    bps = abs(snapshot.change) * 10000 // previous
                    if snapshot.change < 0:
                        bps = -bps
                    snapshot.change_percent = bps / 100
            snapshots.append(snapshot)
        return snapshots

    def batch_balances(
        self, holders: Sequence[str], block: int, max_workers: int = 8
    ) -> Dict[str, int]:
        """Concurrent balanceOf calls at one block; any failure propagates."""
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            balances = list(
                executor.map(lambda holder: self.balance_at(holder, block), holders)
            )
        return dict(zip(holders, balances))
