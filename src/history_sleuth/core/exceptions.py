"""Custom exceptions for history_sleuth package."""


class HistorySleuthError(Exception):
    """Base exception for history_sleuth package."""

    pass


class APIError(HistorySleuthError):
    """Exception raised for API-related errors."""

    pass


class ConfigurationError(HistorySleuthError):
    """Exception raised for configuration-related errors."""

    pass


class DecodingError(HistorySleuthError):
    """Exception raised for decoding-related errors."""

    pass


class InvalidInputError(HistorySleuthError, ValueError):
    """Exception raised when arguments are rejected before any remote call."""

    pass


class GraphQLError(APIError):
    """Exception raised when a subgraph answers with GraphQL errors."""

    def __init__(self, errors):
        self.errors = errors
        messages = "; ".join(str(e.get("message", e)) for e in errors)
        super().__init__(f"GraphQL errors: {messages}")


class ClientError(APIError):
    """Exception raised for 4xx responses that retrying cannot fix."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(message)


class QueryFailedError(APIError):
    """Exception raised when a Dune execution ends in a non-completed state."""

    def __init__(self, execution_id: str, state: str):
        self.execution_id = execution_id
        self.state = state
        super().__init__(f"Execution {execution_id} finished with state {state}")


class QueryTimeoutError(APIError, TimeoutError):
    """Exception raised when a Dune execution does not finish in time."""

    pass


class InsufficientBalanceError(HistorySleuthError):
    """Exception raised when a wallet cannot cover the requested amount."""

    pass


class TransactionRevertedError(HistorySleuthError):
    """Exception raised when a sent transaction is mined with status 0."""

    def __init__(self, tx_hash: str):
        self.tx_hash = tx_hash
        super().__init__(f"Transaction {tx_hash} reverted")
