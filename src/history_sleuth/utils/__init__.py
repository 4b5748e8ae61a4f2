"""Utility functions for history_sleuth package."""

from .formatting import format_units, parse_units, to_hex, iso_time
from .logging import setup_logging

__all__ = [
    "format_units",
    "parse_units",
    "to_hex",
    "iso_time",
    "setup_logging",
]
