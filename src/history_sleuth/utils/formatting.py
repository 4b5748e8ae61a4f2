"""Unit and hex formatting helpers."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Union


def format_units(value: int, decimals: int = 18) -> Decimal:
    """Scale an integer token amount down by ``decimals``."""
    return Decimal(int(value)).scaleb(-decimals)


def parse_units(amount: Union[str, int, Decimal], decimals: int = 18) -> int:
    """Scale a human amount up to the token's smallest unit."""
    scaled = Decimal(str(amount)).scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{amount} has more than {decimals} decimals")
    return int(scaled)


def to_hex(value: Union[bytes, bytearray, str]) -> str:
    """0x-prefixed hex for bytes/HexBytes, passthrough for strings."""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return value if value.startswith("0x") else f"0x{value}"


def iso_time(timestamp: int) -> str:
    return datetime.fromtimestamp(int(timestamp), tz=timezone.utc).isoformat()
