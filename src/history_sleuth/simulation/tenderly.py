"""Tenderly simulation API client implementation."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from web3 import Web3

from ..config.settings import settings
from ..core.base import BaseAPIClient, APIConfig
from ..core.exceptions import APIError, ConfigurationError

TRANSFER_SELECTOR = "0xa9059cbb"  # transfer(address,uint256)
BALANCE_OF_SELECTOR = "0x70a08231"  # balanceOf(address)
TOTAL_SUPPLY_SELECTOR = "0x18160ddd"  # totalSupply()

_codec = Web3().codec


def erc20_transfer_calldata(to: str, amount: int) -> str:
    encoded = _codec.encode(["address", "uint256"], [Web3.to_checksum_address(to), amount])
    return TRANSFER_SELECTOR + encoded.hex()


def erc20_balance_of_calldata(holder: str) -> str:
    encoded = _codec.encode(["address"], [Web3.to_checksum_address(holder)])
    return BALANCE_OF_SELECTOR + encoded.hex()


@dataclass
class SimulationRequest:
    """Body of a single simulation; ``block_number=None`` means latest."""

    from_address: str
    to: str
    input: str
    network_id: str = "1"
    gas: int = 100_000
    gas_price: str = "0"
    value: str = "0"
    block_number: Optional[int] = None
    save: bool = False
    save_if_fails: bool = False

    def to_payload(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["from"] = payload.pop("from_address")
        if self.block_number is None:
            payload.pop("block_number")
        return payload


class TenderlyClient(BaseAPIClient):
    """Tenderly API client implementation."""

    def __init__(
        self,
        user: Optional[str] = None,
        project: Optional[str] = None,
        access_key: Optional[str] = None,
        calls_per_second: Optional[float] = None,
    ):
        self.user = user or settings.api.tenderly_user
        self.project = project or settings.api.tenderly_project
        access_key = access_key or settings.api.tenderly_access_key
        if not access_key:
            raise ConfigurationError(
                "TENDERLY_ACCESS_KEY not configured. Get your access key from: "
                "https://dashboard.tenderly.co/account/authorization"
            )
        if not self.user or not self.project:
            raise ConfigurationError("TENDERLY_USER and TENDERLY_PROJECT are required")

        config = APIConfig(
            base_url=f"{settings.api_urls.TENDERLY}/account/{self.user}/project/{self.project}",
            api_key=access_key,
            rate_limit=calls_per_second or settings.api.tenderly_rate_limit,
            headers={"X-Access-Key": access_key, "Content-Type": "application/json"},
        )
        super().__init__(config)

    def _build_request_params(self, **kwargs) -> Dict[str, Any]:
        """Build request parameters (auth goes in the header)."""
        return kwargs

    def _handle_response(self, response) -> Any:
        """Handle Tenderly API response."""
        response.raise_for_status()
        data = response.json()
        if isinstance(data, dict) and data.get("error"):
            error = data["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise APIError(f"Tenderly error: {message}")
        return data

    def simulate(self, request: SimulationRequest) -> Dict[str, Any]:
        """Run a single simulation and return the ``simulation`` object."""
        data = self.post("simulate", request.to_payload())
        simulation = data["simulation"]
        self.logger.info(
            f"Simulation {simulation.get('id')}: "
            f"{'Success' if simulation.get('status') else 'Failed'}, gas used {simulation.get('gas_used')}"
        )
        return simulation

    def simulate_bundle(
        self,
        transactions: List[SimulationRequest],
        network_id: str = "1",
        block_number: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Simulate transactions in order on shared state."""
        payload = {
            "network_id": network_id,
            "block_number": block_number,
            "simulations": [tx.to_payload() for tx in transactions],
        }
        data = self.post("simulate-bundle", payload)
        results = data.get("simulation_results", [])
        self.logger.info(f"Simulated {len(results)} transactions")
        return results

    def create_fork(
        self, network_id: str = "1", block_number: Optional[int] = None
    ) -> Dict[str, Any]:
        """Create a fork; the returned dict carries ``id`` and ``rpc_url``."""
        payload: Dict[str, Any] = {
            "network_id": network_id,
            "chain_config": {"chain_id": int(network_id)},
        }
        if block_number is not None:
            payload["block_number"] = block_number
        fork = self.post("fork", payload)["simulation_fork"]
        self.logger.info(f"Fork created: {fork.get('id')}")
        return fork

    def dashboard_url(self, simulation_id: str) -> str:
        return (
            f"{settings.api_urls.TENDERLY_DASHBOARD}/{self.user}/{self.project}"
            f"/simulator/{simulation_id}"
        )
