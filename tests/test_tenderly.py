import pytest

from history_sleuth.config import settings
from history_sleuth.core.exceptions import APIError, ConfigurationError
from history_sleuth.simulation.tenderly import (
    SimulationRequest,
    TenderlyClient,
    erc20_balance_of_calldata,
    erc20_transfer_calldata,
)

from conftest import FakeResponse, install_session

VITALIK = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"


@pytest.fixture
def client():
    return TenderlyClient(user="alice", project="sims", access_key="key")


def test_requires_access_key(monkeypatch):
    monkeypatch.setattr(settings.api, "tenderly_access_key", None)
    with pytest.raises(ConfigurationError):
        TenderlyClient(user="alice", project="sims")


def test_requires_user_and_project(monkeypatch):
    monkeypatch.setattr(settings.api, "tenderly_user", None)
    with pytest.raises(ConfigurationError):
        TenderlyClient(project="sims", access_key="key")


def test_balance_of_calldata():
    assert erc20_balance_of_calldata(VITALIK) == (
        "0x70a08231000000000000000000000000d8da6bf26964af9d7eed9e03e53415d37aa96045"
    )


def test_transfer_calldata():
    calldata = erc20_transfer_calldata(VITALIK, 100_000_000)
    assert calldata.startswith("0xa9059cbb")
    assert len(calldata) == 2 + 8 + 128
    assert calldata.endswith("5f5e100")


def test_simulation_request_payload():
    request = SimulationRequest(from_address=VITALIK, to=USDC, input="0x18160ddd")
    payload = request.to_payload()
    assert payload["from"] == VITALIK
    assert "from_address" not in payload
    assert "block_number" not in payload

    pinned = SimulationRequest(VITALIK, USDC, "0x", block_number=18_000_000).to_payload()
    assert pinned["block_number"] == 18_000_000


def test_simulate(client):
    session = install_session(
        client,
        [FakeResponse({"simulation": {"id": "sim-1", "status": True, "gas_used": 51_000}})],
    )
    simulation = client.simulate(SimulationRequest(VITALIK, USDC, "0x18160ddd"))
    assert simulation["gas_used"] == 51_000
    assert session.calls[0]["url"] == (
        "https://api.tenderly.co/api/v1/account/alice/project/sims/simulate"
    )
    assert client.dashboard_url("sim-1") == (
        "https://dashboard.tenderly.co/alice/sims/simulator/sim-1"
    )


def test_simulate_bundle(client):
    session = install_session(
        client, [FakeResponse({"simulation_results": [{"simulation": {}}, {"simulation": {}}]})]
    )
    txs = [SimulationRequest(VITALIK, USDC, "0x"), SimulationRequest(VITALIK, USDC, "0x")]
    assert len(client.simulate_bundle(txs, block_number=18_000_000)) == 2
    body = session.calls[0]["json"]
    assert body["block_number"] == 18_000_000
    assert len(body["simulations"]) == 2


def test_create_fork(client):
    session = install_session(
        client, [FakeResponse({"simulation_fork": {"id": "fork-1", "rpc_url": "https://rpc"}})]
    )
    fork = client.create_fork(block_number=18_000_000)
    assert fork["id"] == "fork-1"
    assert session.calls[0]["json"] == {
        "network_id": "1",
        "chain_config": {"chain_id": 1},
        "block_number": 18_000_000,
    }


def test_error_field_raises(client):
    client.config.retry_attempts = 1
    install_session(client, [FakeResponse({"error": {"message": "invalid network"}})])
    with pytest.raises(APIError) as excinfo:
        client.simulate(SimulationRequest(VITALIK, USDC, "0x"))
    assert "invalid network" in str(excinfo.value.__cause__)
