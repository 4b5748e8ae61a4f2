"""Event-log queries over JSON-RPC eth_getLogs."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from web3 import Web3

from ..core.exceptions import InvalidInputError
from .signatures import TRANSFER_TOPIC, address_topic

BlockIdentifier = Union[int, str]
Topics = Sequence[Optional[Union[str, List[str]]]]

# Most hosted providers cap eth_getLogs at a 2000 block range
DEFAULT_CHUNK_SIZE = 2000


def iter_block_ranges(
    start: int, end: int, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> Iterator[Tuple[int, int]]:
    """Yield inclusive (from, to) windows for each chunk start in [start, end)."""
    if chunk_size <= 0:
        raise InvalidInputError(f"chunk_size must be positive, got {chunk_size}")
    for chunk_start in range(start, end, chunk_size):
        yield chunk_start, min(chunk_start + chunk_size - 1, end)


class EventLogFetcher:
    """Fetches raw logs for contracts through an RPCClient."""

    def __init__(self, rpc):
        self.rpc = rpc
        self.logger = logging.getLogger(self.__class__.__name__)

    @staticmethod
    def build_filter(
        address: str,
        topics: Topics,
        from_block: BlockIdentifier,
        to_block: BlockIdentifier = "latest",
    ) -> Dict[str, Any]:
        return {
            "address": Web3.to_checksum_address(address),
            "fromBlock": from_block,
            "toBlock": to_block,
            "topics": list(topics),
        }

    def fetch_logs(
        self,
        address: str,
        topics: Topics,
        from_block: BlockIdentifier,
        to_block: BlockIdentifier = "latest",
    ) -> List[Any]:
        """Single eth_getLogs call."""
        logs = self.rpc.get_logs(self.build_filter(address, topics, from_block, to_block))
        self.logger.debug(
            f"{len(logs)} logs for {address} in blocks {from_block}-{to_block}"
        )
        return logs

    def paginated_logs(
        self,
        address: str,
        topics: Topics,
        start_block: int,
        end_block: int,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        pause: float = 0.1,
    ) -> List[Any]:
        """Split a large block range into chunks to stay under provider limits.

        Chunks start at each multiple of ``chunk_size`` from ``start_block`` below
        ``end_block``, so ``end_block`` itself is exclusive whenever
        ``end_block - start_block`` is a multiple of ``chunk_size``.
        """
        self.logger.info(
            f"Querying {end_block - start_block} blocks in chunks of {chunk_size}"
        )
        all_logs: List[Any] = []
        for chunk_start, chunk_end in iter_block_ranges(start_block, end_block, chunk_size):
            self.logger.info(f"Fetching blocks {chunk_start} to {chunk_end}...")
            all_logs.extend(self.fetch_logs(address, topics, chunk_start, chunk_end))
            if pause:
                time.sleep(pause)

        self.logger.info(f"Total events found: {len(all_logs)}")
        return all_logs

    def multi_contract_logs(
        self,
        addresses: Sequence[str],
        topics: Topics,
        from_block: BlockIdentifier,
        to_block: BlockIdentifier = "latest",
        max_workers: int = 4,
    ) -> Dict[str, List[Any]]:
        """Query several contracts in parallel; the first failure propagates."""
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                address: executor.submit(
                    self.fetch_logs, address, topics, from_block, to_block
                )
                for address in addresses
            }
            results = {address: future.result() for address, future in futures.items()}

        for address, logs in results.items():
            self.logger.info(f"Contract {address[:10]}...: {len(logs)} logs")
        return results

    def transfers_to(
        self,
        token: str,
        recipient: str,
        from_block: BlockIdentifier,
        to_block: BlockIdentifier = "latest",
    ) -> List[Any]:
        """ERC-20 Transfer logs whose indexed ``to`` is ``recipient``."""
        topics = [TRANSFER_TOPIC, None, address_topic(recipient)]
        return self.fetch_logs(token, topics, from_block, to_block)

    def watch_logs(
        self,
        address: str,
        topics: Topics,
        duration: float,
        on_log: Callable[[Any], None],
        poll_interval: float = 2.0,
    ) -> int:
        """
        Call ``on_log`` for each new matching log until ``duration`` seconds pass.

        Installs an eth_newFilter filter from the latest block and polls it.
        The filter is uninstalled on exit, including when ``on_log`` raises.

        Returns:
            Number of logs delivered
        """
        log_filter = self.rpc.new_filter(self.build_filter(address, topics, "latest"))
        self.logger.info(f"Listening for logs on {address} for {duration}s...")

        seen = 0
        deadline = time.monotonic() + duration
        try:
            while True:
                for log in log_filter.get_new_entries():
                    on_log(log)
                    seen += 1
                if time.monotonic() >= deadline:
                    break
                time.sleep(poll_interval)
        finally:
            self.rpc.uninstall_filter(log_filter.filter_id)

        self.logger.info(f"Stopped monitoring after {seen} logs")
        return seen
