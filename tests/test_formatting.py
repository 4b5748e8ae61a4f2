from decimal import Decimal

import pytest

from history_sleuth.utils import format_units, iso_time, parse_units, to_hex


def test_format_units():
    assert format_units(1_500_000, 6) == Decimal("1.5")
    assert format_units(10**18) == Decimal(1)
    assert format_units(0, 6) == Decimal(0)


def test_parse_units():
    assert parse_units("1.5", 6) == 1_500_000
    assert parse_units(2) == 2 * 10**18
    with pytest.raises(ValueError):
        parse_units("0.0000001", 6)


def test_to_hex():
    assert to_hex(b"\x01\xff") == "0x01ff"
    assert to_hex("abcd") == "0xabcd"
    assert to_hex("0xabcd") == "0xabcd"


def test_iso_time():
    assert iso_time(1704067200) == "2024-01-01T00:00:00+00:00"
