"""Transaction simulation."""

from .tenderly import (
    BALANCE_OF_SELECTOR,
    TOTAL_SUPPLY_SELECTOR,
    TRANSFER_SELECTOR,
    SimulationRequest,
    TenderlyClient,
    erc20_balance_of_calldata,
    erc20_transfer_calldata,
)

__all__ = [
    "BALANCE_OF_SELECTOR",
    "TOTAL_SUPPLY_SELECTOR",
    "TRANSFER_SELECTOR",
    "SimulationRequest",
    "TenderlyClient",
    "erc20_balance_of_calldata",
    "erc20_transfer_calldata",
]
