"""The Graph subgraph client implementation."""

from datetime import date, datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Union

from ..config.settings import settings
from ..core.base import BaseAPIClient, APIConfig
from ..core.exceptions import ConfigurationError, GraphQLError

RECENT_TRANSFERS = """
query RecentTransfers($first: Int!) {
  transfers(first: $first, orderBy: timestamp, orderDirection: desc) {
    id
    from { address }
    to { address }
    value
    timestamp
    transactionHash
  }
}
"""

LARGE_TRANSFERS = """
query LargeTransfers($first: Int!, $minValue: BigInt!) {
  transfers(first: $first, where: { value_gt: $minValue }, orderBy: value, orderDirection: desc) {
    from { address }
    to { address }
    value
    timestamp
  }
}
"""

USER_TRANSFERS = """
query GetUserTransfers($address: String!) {
  users(where: { address: $address }) {
    address
    balance
    totalSent
    totalReceived
    transfersSentCount
    transfersReceivedCount
    transfersSent(first: 5, orderBy: timestamp, orderDirection: desc) {
      to { address }
      value
      timestamp
    }
    transfersReceived(first: 5, orderBy: timestamp, orderDirection: desc) {
      from { address }
      value
      timestamp
    }
  }
}
"""

TOP_HOLDERS = """
query TopHolders($first: Int!) {
  users(first: $first, where: { balance_gt: "0" }, orderBy: balance, orderDirection: desc) {
    address
    balance
    transfersSentCount
    transfersReceivedCount
  }
}
"""

TRANSFERS_PAGE = """
query TransfersPage($first: Int!, $skip: Int!) {
  transfers(first: $first, skip: $skip, orderBy: timestamp, orderDirection: asc) {
    id
    value
    timestamp
  }
}
"""

TRANSFERS_IN_RANGE = """
query GetTransfersInRange($start: BigInt!, $end: BigInt!) {
  transfers(
    where: { timestamp_gte: $start, timestamp_lte: $end }
    orderBy: timestamp
    orderDirection: desc
  ) {
    id
    value
    timestamp
    from { address }
    to { address }
  }
}
"""

STATE_AT_BLOCK = """
query GetStateAtBlock($block: Int!, $token: ID!) {
  users(first: 5, block: { number: $block }, orderBy: balance, orderDirection: desc) {
    address
    balance
  }
  token(id: $token, block: { number: $block }) {
    totalSupply
    transferCount
    holderCount
  }
}
"""


def _to_timestamp(value: Union[int, str, date, datetime]) -> int:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp())
    if isinstance(value, date):
        return int(datetime(value.year, value.month, value.day, tzinfo=timezone.utc).timestamp())
    if isinstance(value, str):
        return _to_timestamp(date.fromisoformat(value))
    return int(value)


class SubgraphClient(BaseAPIClient):
    """GraphQL client for an ERC-20 transfers subgraph."""

    non_retryable_errors = (GraphQLError,)

    def __init__(self, url: Optional[str] = None, calls_per_second: Optional[float] = None):
        url = url or settings.api.subgraph_url
        if not url:
            raise ConfigurationError("SUBGRAPH_URL not configured")
        config = APIConfig(
            base_url=url,
            rate_limit=calls_per_second or settings.api.subgraph_rate_limit,
            headers={"Content-Type": "application/json"},
        )
        super().__init__(config)

    def _build_request_params(self, **kwargs) -> Dict[str, Any]:
        """GraphQL goes in the body; no query string."""
        return kwargs

    def _handle_response(self, response) -> Any:
        """Handle GraphQL response, raising on ``errors``."""
        response.raise_for_status()
        payload = response.json()
        if payload.get("errors"):
            raise GraphQLError(payload["errors"])
        return payload.get("data") or {}

    def query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.post("", {"query": query, "variables": variables or {}})

    def recent_transfers(self, first: int = 10) -> List[Dict[str, Any]]:
        return self.query(RECENT_TRANSFERS, {"first": first}).get("transfers", [])

    def large_transfers(self, min_value: int, first: int = 10) -> List[Dict[str, Any]]:
        data = self.query(LARGE_TRANSFERS, {"first": first, "minValue": str(min_value)})
        return data.get("transfers", [])

    def user_transfers(self, address: str) -> Optional[Dict[str, Any]]:
        """Stats and recent activity of one holder, or None if it never transacted."""
        users = self.query(USER_TRANSFERS, {"address": address.lower()}).get("users", [])
        return users[0] if users else None

    def top_holders(self, first: int = 10) -> List[Dict[str, Any]]:
        return self.query(TOP_HOLDERS, {"first": first}).get("users", [])

    def iter_transfers(self, page_size: int = 100) -> Iterator[List[Dict[str, Any]]]:
        """Yield pages of transfers until a short or empty page."""
        skip = 0
        while True:
            page = self.query(TRANSFERS_PAGE, {"first": page_size, "skip": skip}).get(
                "transfers", []
            )
            if not page:
                return
            yield page
            if len(page) < page_size:
                return
            skip += page_size

    def all_transfers(self, page_size: int = 100) -> List[Dict[str, Any]]:
        transfers: List[Dict[str, Any]] = []
        for page in self.iter_transfers(page_size):
            transfers.extend(page)
            self.logger.info(f"Fetched {len(transfers)} transfers...")
        return transfers

    def transfers_in_range(
        self,
        start: Union[int, str, date, datetime],
        end: Union[int, str, date, datetime],
    ) -> List[Dict[str, Any]]:
        """Transfers with start <= timestamp <= end; dates are taken as UTC midnight."""
        variables = {"start": str(_to_timestamp(start)), "end": str(_to_timestamp(end))}
        return self.query(TRANSFERS_IN_RANGE, variables).get("transfers", [])

    def state_at_block(self, token_id: str, block: int) -> Dict[str, Any]:
        """Token stats and top holders as indexed at ``block``."""
        return self.query(STATE_AT_BLOCK, {"block": block, "token": token_id.lower()})


def total_volume(transfers: List[Dict[str, Any]]) -> int:
    return sum(int(t["value"]) for t in transfers)
