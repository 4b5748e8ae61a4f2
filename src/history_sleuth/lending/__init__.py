"""Lending protocol interactions."""

from .aave import AAVE_POOL_ABI, AAVE_POOL_ADDRESSES, ERC20_ABI, supply_to_aave

__all__ = [
    "AAVE_POOL_ABI",
    "AAVE_POOL_ADDRESSES",
    "ERC20_ABI",
    "supply_to_aave",
]
