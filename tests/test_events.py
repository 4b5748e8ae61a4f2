from decimal import Decimal

import pytest
from web3 import Web3

from history_sleuth.core.exceptions import DecodingError, InvalidInputError
from history_sleuth.events import (
    SWAP_TOPIC,
    TRANSFER_TOPIC,
    EventLogFetcher,
    SwapEvent,
    address_topic,
    decode_swap,
    decode_transfer,
    event_signature,
    event_topic,
    filter_large_swaps,
    iter_block_ranges,
    total_value,
    transfer_record,
)

from conftest import FakeRPC

USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
WETH = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"
VITALIK = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"
codec = Web3().codec


def test_well_known_topics():
    assert TRANSFER_TOPIC == "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
    assert SWAP_TOPIC == "0xc42079f94a6350d7e6235f29174924f928cc2ac818eb64fed8004e115fbcca67"
    assert event_topic("Transfer(address,address,uint256)") == TRANSFER_TOPIC


def test_event_signature_flattens_tuples():
    abi = {
        "name": "Settled",
        "inputs": [
            {"type": "tuple", "components": [{"type": "address"}, {"type": "uint256"}]},
            {"type": "tuple[]", "components": [{"type": "bool"}]},
            {"type": "contract IERC20"},
        ],
    }
    assert event_signature(abi) == "Settled((address,uint256),(bool)[],address)"


def test_address_topic():
    assert address_topic(VITALIK) == (
        "0x000000000000000000000000d8da6bf26964af9d7eed9e03e53415d37aa96045"
    )
    with pytest.raises(ValueError):
        address_topic("0x1234")


def test_iter_block_ranges():
    assert list(iter_block_ranges(0, 5000, 2000)) == [(0, 1999), (2000, 3999), (4000, 5000)]
    assert list(iter_block_ranges(10, 10, 2000)) == []
    assert list(iter_block_ranges(5, 5, 10)) == []


def test_iter_block_ranges_end_block_exclusive_on_chunk_boundary():
    assert list(iter_block_ranges(0, 4000, 2000)) == [(0, 1999), (2000, 3999)]
    with pytest.raises(InvalidInputError):
        list(iter_block_ranges(0, 10, 0))


def test_build_filter_checksums_address():
    flt = EventLogFetcher.build_filter(USDC, [TRANSFER_TOPIC], 100, 200)
    assert flt == {
        "address": Web3.to_checksum_address(USDC),
        "fromBlock": 100,
        "toBlock": 200,
        "topics": [TRANSFER_TOPIC],
    }


def test_paginated_logs_concatenates_chunks():
    rpc = FakeRPC(logs_for=lambda f: [f["fromBlock"]])
    logs = EventLogFetcher(rpc).paginated_logs(USDC, [TRANSFER_TOPIC], 0, 5000, pause=0)
    assert logs == [0, 2000, 4000]
    assert [(f["fromBlock"], f["toBlock"]) for f in rpc.filters] == [
        (0, 1999),
        (2000, 3999),
        (4000, 5000),
    ]


def test_paginated_logs_propagates_chunk_failure():
    def logs_for(flt):
        if flt["fromBlock"] == 2000:
            raise RuntimeError("query returned more than 10000 results")
        return []

    fetcher = EventLogFetcher(FakeRPC(logs_for=logs_for))
    with pytest.raises(RuntimeError):
        fetcher.paginated_logs(USDC, [TRANSFER_TOPIC], 0, 5000, pause=0)


def test_multi_contract_logs():
    rpc = FakeRPC(logs_for=lambda f: [f["address"]] * (2 if f["address"].startswith("0xA0") else 1))
    results = EventLogFetcher(rpc).multi_contract_logs([USDC, WETH], [TRANSFER_TOPIC], 100, 200)
    assert set(results) == {USDC, WETH}
    assert len(results[USDC]) == 2
    assert len(results[WETH]) == 1


def test_transfers_to_filters_on_recipient():
    rpc = FakeRPC()
    EventLogFetcher(rpc).transfers_to(USDC, VITALIK, 100)
    assert rpc.filters[0]["topics"] == [TRANSFER_TOPIC, None, address_topic(VITALIK)]
    assert rpc.filters[0]["toBlock"] == "latest"


def transfer_log(value, topic0=TRANSFER_TOPIC):
    return {
        "blockNumber": 18_000_000,
        "transactionHash": bytes.fromhex("ab" * 32),
        "topics": [topic0, address_topic(USDC), address_topic(VITALIK)],
        "data": codec.encode(["uint256"], [value]),
    }


def test_decode_transfer():
    event = decode_transfer(transfer_log(2_500_000), decimals=6)
    assert event.sender == Web3.to_checksum_address(USDC)
    assert event.recipient == VITALIK
    assert event.amount == Decimal("2.5")
    assert event.transaction_hash == "0x" + "ab" * 32
    assert transfer_record(event)["value"] == "2500000"


def test_decode_transfer_accepts_hex_data():
    log = transfer_log(7)
    log["data"] = "0x" + log["data"].hex()
    assert decode_transfer(log).value == 7


def test_decode_rejects_other_events():
    with pytest.raises(DecodingError):
        decode_transfer(transfer_log(1, topic0=SWAP_TOPIC))


def test_decode_rejects_truncated_data():
    log = transfer_log(1)
    log["data"] = b"\x00" * 4
    with pytest.raises(DecodingError):
        decode_transfer(log)


def test_decode_swap():
    data = codec.encode(
        ["int256", "int256", "uint160", "uint128", "int24"],
        [-10**18, 3_000_000_000, 2**96, 10**12, -200_000],
    )
    log = {
        "blockNumber": 1,
        "transactionHash": "0x" + "cd" * 32,
        "topics": [SWAP_TOPIC, address_topic(USDC), address_topic(WETH)],
        "data": data,
    }
    swap = decode_swap(log)
    assert swap.amount0 == -10**18
    assert swap.amount0_units() == Decimal(1)
    assert swap.amount1_units() == Decimal(3000)
    assert swap.tick == -200_000


def test_filter_large_swaps_and_total_value():
    def swap(amount1):
        return SwapEvent(1, "0x", USDC, WETH, 0, amount1, 0, 0, 0)

    swaps = [swap(-200_000 * 10**6), swap(50_000 * 10**6), swap(100_001 * 10**6)]
    large = filter_large_swaps(swaps, Decimal(100_000))
    assert [s.amount1 for s in large] == [-200_000 * 10**6, 100_001 * 10**6]

    events = [decode_transfer(transfer_log(v)) for v in (1, 2, 3)]
    assert total_value(events) == 6


class FakeLogFilter:
    filter_id = "0xfilter"

    def __init__(self, batches):
        self.batches = list(batches)

    def get_new_entries(self):
        return self.batches.pop(0) if self.batches else []


class WatchingRPC(FakeRPC):
    def __init__(self, batches):
        super().__init__()
        self.log_filter = FakeLogFilter(batches)
        self.installed = []
        self.uninstalled = []

    def new_filter(self, filter_params):
        self.installed.append(filter_params)
        return self.log_filter

    def uninstall_filter(self, filter_id):
        self.uninstalled.append(filter_id)
        return True


class Clock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def monotonic(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock(monkeypatch):
    clock = Clock()
    monkeypatch.setattr("history_sleuth.events.fetcher.time.monotonic", clock.monotonic)
    monkeypatch.setattr("history_sleuth.events.fetcher.time.sleep", clock.sleep)
    return clock


def test_watch_logs_delivers_new_entries_until_duration(clock):
    rpc = WatchingRPC([["a"], [], ["b", "c"]])
    received = []

    seen = EventLogFetcher(rpc).watch_logs(WETH, [SWAP_TOPIC], 5, received.append, poll_interval=2)

    assert seen == 3
    assert received == ["a", "b", "c"]
    assert clock.sleeps == [2, 2, 2]
    assert rpc.installed[0]["fromBlock"] == "latest"
    assert rpc.installed[0]["topics"] == [SWAP_TOPIC]
    assert rpc.uninstalled == ["0xfilter"]


def test_watch_logs_uninstalls_filter_when_callback_fails(clock):
    rpc = WatchingRPC([["bad log"]])

    def on_log(log):
        raise DecodingError("not a swap")

    with pytest.raises(DecodingError):
        EventLogFetcher(rpc).watch_logs(WETH, [SWAP_TOPIC], 30, on_log)
    assert rpc.uninstalled == ["0xfilter"]
