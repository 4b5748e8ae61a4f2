import pytest

from history_sleuth.core.exceptions import ConfigurationError, GraphQLError
from history_sleuth.config import settings
from history_sleuth.indexing.subgraph import (
    TRANSFERS_PAGE,
    SubgraphClient,
    total_volume,
)

from conftest import FakeResponse, install_session

URL = "https://api.studio.thegraph.com/query/1/transfers/v0.0.1"


def data(**payload):
    return FakeResponse({"data": payload})


@pytest.fixture
def client():
    return SubgraphClient(URL)


def test_missing_url(monkeypatch):
    monkeypatch.setattr(settings.api, "subgraph_url", None)
    with pytest.raises(ConfigurationError):
        SubgraphClient()


def test_query_posts_graphql_body(client):
    session = install_session(client, [data(transfers=[])])
    assert client.query(TRANSFERS_PAGE, {"first": 1, "skip": 0}) == {"transfers": []}
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == URL
    assert call["json"] == {"query": TRANSFERS_PAGE, "variables": {"first": 1, "skip": 0}}


def test_graphql_errors_raise_without_retry(client):
    session = install_session(
        client,
        [FakeResponse({"errors": [{"message": "Type `Query` has no field `foo`"}]})],
    )
    with pytest.raises(GraphQLError) as excinfo:
        client.recent_transfers()
    assert excinfo.value.errors[0]["message"].startswith("Type")
    assert len(session.calls) == 1


def test_large_transfers_sends_value_as_string(client):
    session = install_session(client, [data(transfers=[{"value": "5"}])])
    assert client.large_transfers(10**24, first=3) == [{"value": "5"}]
    assert session.calls[0]["json"]["variables"] == {"first": 3, "minValue": str(10**24)}


def test_user_transfers_lowercases_and_handles_unknown_user(client):
    session = install_session(client, [data(users=[])])
    assert client.user_transfers("0xABCDEF0000000000000000000000000000000001") is None
    assert session.calls[0]["json"]["variables"]["address"] == (
        "0xabcdef0000000000000000000000000000000001"
    )


def test_pagination_stops_on_short_page(client):
    session = install_session(
        client,
        [
            data(transfers=[{"id": "1"}, {"id": "2"}]),
            data(transfers=[{"id": "3"}, {"id": "4"}]),
            data(transfers=[{"id": "5"}]),
        ],
    )
    transfers = client.all_transfers(page_size=2)
    assert [t["id"] for t in transfers] == ["1", "2", "3", "4", "5"]
    assert [c["json"]["variables"]["skip"] for c in session.calls] == [0, 2, 4]


def test_pagination_stops_on_empty_page(client):
    session = install_session(client, [data(transfers=[{"id": "1"}, {"id": "2"}]), data(transfers=[])])
    assert len(client.all_transfers(page_size=2)) == 2
    assert len(session.calls) == 2


def test_transfers_in_range_converts_dates(client):
    session = install_session(client, [data(transfers=[])])
    client.transfers_in_range("2024-01-01", 1704153600)
    assert session.calls[0]["json"]["variables"] == {"start": "1704067200", "end": "1704153600"}


def test_state_at_block(client):
    session = install_session(client, [data(users=[], token={"totalSupply": "100"})])
    state = client.state_at_block("0xToken", 18_000_000)
    assert state["token"] == {"totalSupply": "100"}
    assert session.calls[0]["json"]["variables"] == {"block": 18_000_000, "token": "0xtoken"}


def test_total_volume():
    assert total_volume([{"value": "10"}, {"value": "32"}]) == 42
