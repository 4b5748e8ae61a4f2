import pytest
import requests

from history_sleuth.core.base import APIConfig, BaseAPIClient
from history_sleuth.core.exceptions import APIError, GraphQLError
from history_sleuth.core.rate_limiter import RateLimitedSession, RateLimitStrategy

from conftest import FakeResponse, install_session


class EchoClient(BaseAPIClient):
    def _build_request_params(self, **kwargs):
        return {**kwargs, "apikey": "secret"}

    def _handle_response(self, response):
        response.raise_for_status()
        return response.json()


class StrictClient(EchoClient):
    non_retryable_errors = (GraphQLError,)

    def _handle_response(self, response):
        payload = response.json()
        if payload.get("errors"):
            raise GraphQLError(payload["errors"])
        return payload


@pytest.fixture
def client():
    return EchoClient(APIConfig(base_url="https://api.example.com/v1/", retry_attempts=3))


def test_build_url(client):
    assert client._build_url("/items") == "https://api.example.com/v1/items"
    assert client._build_url("") == "https://api.example.com/v1/"
    assert client._build_url("https://other.example.com/x") == "https://other.example.com/x"


def test_request_params_and_json_are_forwarded(client):
    session = install_session(client, [FakeResponse({"ok": True})])
    assert client.make_request("items", {"page": 2}) == {"ok": True}
    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["params"] == {"page": 2, "apikey": "secret"}
    assert call["json"] is None


def test_retries_then_succeeds(client):
    session = install_session(
        client,
        [requests.ConnectionError("reset"), FakeResponse({}, status_code=502), FakeResponse({"n": 1})],
    )
    assert client.make_request("items") == {"n": 1}
    assert len(session.calls) == 3


def test_exhausted_retries_raise_api_error(client):
    install_session(client, [requests.ConnectionError("reset")] * 3)
    with pytest.raises(APIError) as excinfo:
        client.make_request("items")
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


def test_non_retryable_error_is_raised_immediately():
    client = StrictClient(APIConfig(base_url="https://graph.example.com"))
    session = install_session(
        client,
        [FakeResponse({"errors": [{"message": "bad field"}]}), FakeResponse({"data": {}})],
    )
    with pytest.raises(GraphQLError, match="bad field"):
        client.post("", {"query": "{ x }"})
    assert len(session.calls) == 1


def test_context_manager_closes_session(client):
    session = install_session(client, [])
    with client:
        pass
    assert session.closed


def test_session_carries_configured_headers():
    client = EchoClient(APIConfig(base_url="https://x", headers={"X-Key": "k"}))
    assert isinstance(client._session, RateLimitedSession)
    assert client._session.headers["X-Key"] == "k"


@pytest.mark.parametrize("strategy", list(RateLimitStrategy))
def test_rate_limited_session_rejects_non_positive_rate(strategy):
    with pytest.raises(ValueError):
        RateLimitedSession(calls_per_second=0, strategy=strategy)
