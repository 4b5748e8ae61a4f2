"""Clients for third-party indexing services."""

from .dune import (
    DuneClient,
    ExecutionResult,
    QueryParameter,
    fetch_many,
    summarize_column,
)
from .subgraph import SubgraphClient, total_volume

__all__ = [
    "DuneClient",
    "ExecutionResult",
    "QueryParameter",
    "fetch_many",
    "summarize_column",
    "SubgraphClient",
    "total_volume",
]
