"""Dune Analytics API client implementation."""

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Union

from ..config.settings import settings
from ..core.base import BaseAPIClient, APIConfig
from ..core.exceptions import (
    APIError,
    ClientError,
    ConfigurationError,
    QueryFailedError,
    QueryTimeoutError,
)

STATE_PENDING = "QUERY_STATE_PENDING"
STATE_EXECUTING = "QUERY_STATE_EXECUTING"
STATE_COMPLETED = "QUERY_STATE_COMPLETED"
FAILED_STATES = {
    "QUERY_STATE_FAILED",
    "QUERY_STATE_CANCELLED",
    "QUERY_STATE_EXPIRED",
}


@dataclass(frozen=True)
class QueryParameter:
    """A named parameter of a saved Dune query."""

    name: str
    value: Any
    type: str

    @classmethod
    def text(cls, name: str, value: str) -> "QueryParameter":
        return cls(name, str(value), "text")

    @classmethod
    def number(cls, name: str, value: Union[int, float]) -> "QueryParameter":
        return cls(name, value, "number")

    @classmethod
    def date(cls, name: str, value: Union[str, date, datetime]) -> "QueryParameter":
        if isinstance(value, datetime):
            value = value.strftime("%Y-%m-%d %H:%M:%S")
        elif isinstance(value, date):
            value = value.strftime("%Y-%m-%d 00:00:00")
        return cls(name, value, "date")

    @classmethod
    def enum(cls, name: str, value: str) -> "QueryParameter":
        return cls(name, str(value), "enum")


def parameters_payload(parameters: Optional[Sequence[QueryParameter]]) -> Dict[str, Any]:
    return {p.name: p.value for p in parameters or []}


@dataclass
class ExecutionResult:
    execution_id: str
    state: str
    query_id: Optional[int] = None
    rows: List[Dict[str, Any]] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    submitted_at: Optional[str] = None

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "ExecutionResult":
        result = data.get("result") or {}
        return cls(
            execution_id=data.get("execution_id"),
            state=data.get("state"),
            query_id=data.get("query_id"),
            rows=result.get("rows", []),
            metadata=result.get("metadata", {}),
            submitted_at=data.get("submitted_at"),
        )


class DuneClient(BaseAPIClient):
    """Dune API client implementation.

    Example:
        client = DuneClient()
        result = client.run_query(1234567, [QueryParameter.number("limit", 100)])
        save_records(result.rows, data_path("dune", "1234567.parquet"))
    """

    non_retryable_errors = (ClientError,)

    def __init__(self, api_key: Optional[str] = None, calls_per_second: Optional[float] = None):
        api_key = api_key or settings.api.dune_api_key
        if not api_key:
            raise ConfigurationError(
                "DUNE_API_KEY not configured. Get your API key from: https://dune.com/settings/api"
            )
        config = APIConfig(
            base_url=settings.api_urls.DUNE,
            api_key=api_key,
            rate_limit=calls_per_second or settings.api.dune_rate_limit,
            headers={"X-Dune-API-Key": api_key},
        )
        super().__init__(config)

    def _build_request_params(self, **kwargs) -> Dict[str, Any]:
        """Build request parameters (API key travels in the header)."""
        return kwargs

    def _handle_response(self, response) -> Any:
        """Handle Dune API response."""
        if not response.ok:
            try:
                message = response.json().get("error", response.text)
            except ValueError:
                message = response.text
            error = f"Dune API error {response.status_code}: {message}"
            # 429 (rate limited) stays retryable
            if 400 <= response.status_code < 500 and response.status_code != 429:
                raise ClientError(response.status_code, error)
            raise APIError(error)
        return response.json()

    def execute(
        self,
        query_id: int,
        parameters: Optional[Sequence[QueryParameter]] = None,
        performance: str = "medium",
    ) -> Dict[str, Any]:
        """Start an execution; returns ``{"execution_id", "state"}``."""
        payload: Dict[str, Any] = {"performance": performance}
        if parameters:
            payload["query_parameters"] = parameters_payload(parameters)
        execution = self.post(f"query/{query_id}/execute", payload)
        self.logger.info(
            f"Query {query_id}: execution {execution['execution_id']} ({execution.get('state')})"
        )
        return execution

    def get_execution_status(self, execution_id: str) -> Dict[str, Any]:
        return self.make_request(f"execution/{execution_id}/status")

    def get_execution_results(
        self, execution_id: str, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> ExecutionResult:
        params = {k: v for k, v in {"limit": limit, "offset": offset}.items() if v is not None}
        data = self.make_request(f"execution/{execution_id}/results", params)
        return ExecutionResult.from_response(data)

    def get_latest_result(self, query_id: int) -> ExecutionResult:
        """Latest cached result of a query, without re-executing it."""
        data = self.make_request(f"query/{query_id}/results")
        return ExecutionResult.from_response(data)

    def wait_for_results(
        self, execution_id: str, poll_interval: float = 2.0, timeout: float = 300.0
    ) -> ExecutionResult:
        """Poll the execution until it completes, fails or ``timeout`` elapses."""
        deadline = time.monotonic() + timeout
        while True:
            state = self.get_execution_status(execution_id).get("state")
            if state == STATE_COMPLETED:
                return self.get_execution_results(execution_id)
            if state in FAILED_STATES:
                raise QueryFailedError(execution_id, state)
            if time.monotonic() >= deadline:
                raise QueryTimeoutError(
                    f"Execution {execution_id} still {state} after {timeout}s"
                )
            self.logger.debug(f"Execution {execution_id}: {state}, waiting {poll_interval}s")
            time.sleep(poll_interval)

    def run_query(
        self,
        query_id: int,
        parameters: Optional[Sequence[QueryParameter]] = None,
        poll_interval: float = 2.0,
        timeout: float = 300.0,
    ) -> ExecutionResult:
        """Execute a saved query and block until its rows are available."""
        execution = self.execute(query_id, parameters)
        result = self.wait_for_results(execution["execution_id"], poll_interval, timeout)
        self.logger.info(f"Query {query_id}: {len(result.rows)} rows")
        return result


def fetch_many(
    client: DuneClient, queries: Dict[str, int], max_workers: int = 4
) -> Dict[str, List[Dict[str, Any]]]:
    """Latest rows of several named queries, fetched concurrently."""
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            name: executor.submit(client.get_latest_result, query_id)
            for name, query_id in queries.items()
        }
        return {name: future.result().rows for name, future in futures.items()}


def summarize_column(rows: List[Dict[str, Any]], column: str) -> Dict[str, float]:
    """Count, total and average of a numeric column; missing values count as 0."""
    total = sum(row.get(column) or 0 for row in rows)
    return {
        "count": len(rows),
        "total": total,
        "average": total / len(rows) if rows else 0,
    }
