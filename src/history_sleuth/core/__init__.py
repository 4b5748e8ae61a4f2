"""Core infrastructure for history_sleuth package."""

from .base import BaseAPIClient, APIConfig
from .rate_limiter import RateLimitedSession, RateLimitStrategy
from .exceptions import (
    APIError,
    ClientError,
    ConfigurationError,
    DecodingError,
    GraphQLError,
    HistorySleuthError,
    InsufficientBalanceError,
    InvalidInputError,
    QueryFailedError,
    QueryTimeoutError,
    TransactionRevertedError,
)

__all__ = [
    "BaseAPIClient",
    "APIConfig",
    "RateLimitedSession",
    "RateLimitStrategy",
    "APIError",
    "ClientError",
    "ConfigurationError",
    "DecodingError",
    "GraphQLError",
    "HistorySleuthError",
    "InsufficientBalanceError",
    "InvalidInputError",
    "QueryFailedError",
    "QueryTimeoutError",
    "TransactionRevertedError",
]
