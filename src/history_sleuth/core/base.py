"""Abstract base classes for history_sleuth package."""

import time
import logging
import requests
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Type

from .rate_limiter import RateLimitedSession, RateLimitStrategy
from .exceptions import APIError


@dataclass
class APIConfig:
    """Configuration for API clients."""

    base_url: str
    api_key: Optional[str] = None
    rate_limit: float = 5.0  # requests per second
    timeout: int = 30
    retry_attempts: int = 3
    retry_delay_base: float = 1.0  # base delay for exponential backoff
    headers: Dict[str, str] = field(default_factory=dict)


class BaseAPIClient(ABC):
    """Abstract base class for all API clients."""

    # Errors raised by _handle_response that retrying cannot fix
    non_retryable_errors: Tuple[Type[Exception], ...] = ()

    def __init__(
        self,
        config: APIConfig,
        rate_limit_strategy: RateLimitStrategy = RateLimitStrategy.FIXED_INTERVAL,
    ):
        self.config = config
        self.rate_limit_strategy = rate_limit_strategy
        self.logger = logging.getLogger(self.__class__.__name__)
        self._session = self._create_session()

    def _create_session(self) -> RateLimitedSession:
        """Create configured session with rate limiting."""
        session = RateLimitedSession(
            calls_per_second=self.config.rate_limit,
            strategy=self.rate_limit_strategy,
            logger=self.logger,
        )
        session.headers.update(self.config.headers)
        return session

    @abstractmethod
    def _build_request_params(self, **kwargs) -> Dict[str, Any]:
        """Build request parameters specific to the API."""
        pass

    @abstractmethod
    def _handle_response(self, response: requests.Response) -> Any:
        """Handle API response and extract data."""
        pass

    def _build_url(self, endpoint: str) -> str:
        # Handle full URLs (when endpoint starts with http)
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        if not endpoint:
            return self.config.base_url
        return f"{self.config.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    def make_request(
        self,
        endpoint: str,
        params: Dict[str, Any] = None,
        method: str = "GET",
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Generic request method with error handling and retry logic."""
        url = self._build_url(endpoint)
        request_params = self._build_request_params(**(params or {}))

        last_exception = None
        for attempt in range(self.config.retry_attempts):
            try:
                response = self._session.request(
                    method,
                    url,
                    params=request_params or None,
                    json=json,
                    timeout=self.config.timeout,
                )
                return self._handle_response(response)
            except self.non_retryable_errors:
                raise
            except Exception as e:
                last_exception = e
                if attempt < self.config.retry_attempts - 1:
                    delay = self.config.retry_delay_base * (2**attempt)
                    self.logger.warning(
                        f"Request failed (attempt {attempt + 1}): {e}. Retrying in {delay}s..."
                    )
                    time.sleep(delay)
                else:
                    self.logger.error(
                        f"Request failed after {self.config.retry_attempts} attempts: {e}"
                    )

        raise APIError(
            f"Request failed after {self.config.retry_attempts} attempts"
        ) from last_exception

    def post(self, endpoint: str, payload: Dict[str, Any]) -> Any:
        """POST a JSON body to the API."""
        return self.make_request(endpoint, method="POST", json=payload)

    def close(self):
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
