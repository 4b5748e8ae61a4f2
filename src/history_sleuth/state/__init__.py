"""Historical state reads."""

from .historical import (
    ERC20_READ_ABI,
    BalanceSnapshot,
    HistoricalStateReader,
    SupplySnapshot,
)

__all__ = [
    "ERC20_READ_ABI",
    "BalanceSnapshot",
    "HistoricalStateReader",
    "SupplySnapshot",
]
