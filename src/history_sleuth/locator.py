"""Find the block closest to a wall-clock time."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from .core.exceptions import InvalidInputError

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_SECONDS = 15


def locate_block(
    target_timestamp: int,
    fetch_block_timestamp: Callable[[int], int],
    latest_block_number: int,
    tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
) -> int:
    """
    Binary search [0, latest_block_number] for the block nearest a timestamp.

    Returns as soon as a probed block lies within ``tolerance_seconds`` of the
    target, otherwise the closest block probed once the window is exhausted.
    Targets before genesis converge to block 0 and targets past the head
    converge to ``latest_block_number``.

    Block timestamps are assumed to be non-decreasing. Chains that violate
    this get an approximate answer; nothing here detects it.

    Args:
        target_timestamp: UNIX seconds to look for
        fetch_block_timestamp: returns the timestamp of a block number
        latest_block_number: chain head, used as the upper bound
        tolerance_seconds: distance at which a probe is close enough

    Returns:
        Block number

    Raises:
        InvalidInputError: latest_block_number or tolerance_seconds is negative
        Any exception from fetch_block_timestamp, unchanged
    """
    if latest_block_number < 0:
        raise InvalidInputError(
            f"latest_block_number must be >= 0, got {latest_block_number}"
        )
    if tolerance_seconds < 0:
        raise InvalidInputError(
            f"tolerance_seconds must be >= 0, got {tolerance_seconds}"
        )

    low, high = 0, latest_block_number
    best: Optional[int] = None
    best_diff: Optional[int] = None

    while low <= high:
        mid = (low + high) // 2
        timestamp = fetch_block_timestamp(mid)
        diff = abs(timestamp - target_timestamp)

        if diff <= tolerance_seconds:
            return mid

        if timestamp < target_timestamp:
            low = mid + 1
        else:
            high = mid - 1

        if best_diff is None or diff < best_diff:
            best, best_diff = mid, diff

    return best


@dataclass(frozen=True)
class BlockLocation:
    """A located block and how far it is from the requested time."""

    number: int
    timestamp: int
    target_timestamp: int

    @property
    def difference(self) -> int:
        return abs(self.timestamp - self.target_timestamp)

    @property
    def block_time(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, tz=timezone.utc)


def to_timestamp(target: Union[int, datetime]) -> int:
    """Normalise an int timestamp or an aware datetime to UNIX seconds."""
    if isinstance(target, datetime):
        if target.tzinfo is None:
            raise InvalidInputError("datetime must be timezone-aware (UTC).")
        return int(target.timestamp())
    return int(target)


def find_block_by_timestamp(
    rpc,
    target: Union[int, datetime],
    tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
) -> BlockLocation:
    """Locate the block closest to ``target`` on the chain behind ``rpc``."""
    target_timestamp = to_timestamp(target)
    target_date = datetime.fromtimestamp(target_timestamp, tz=timezone.utc)
    logger.info(f"Searching for block closest to {target_date.isoformat()}")

    latest = rpc.get_block_number()
    number = locate_block(
        target_timestamp,
        rpc.get_block_timestamp,
        latest,
        tolerance_seconds,
    )
    location = BlockLocation(
        number=number,
        timestamp=rpc.get_block_timestamp(number),
        target_timestamp=target_timestamp,
    )

    logger.info(
        f"Found block {location.number} ({location.block_time.isoformat()}), "
        f"{location.difference}s from target"
    )
    return location
