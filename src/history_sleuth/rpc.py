"""JSON-RPC access through an explicitly constructed web3 client."""

import logging
import re
from typing import Any, Dict, List, Union

import requests
from web3 import LegacyWebSocketProvider, Web3
from web3.middleware import ExtraDataToPOAMiddleware

from .config import settings
from .core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

BlockIdentifier = Union[int, str]

_KEY_PATTERNS = [
    re.compile(r"(/v3/)([A-Za-z0-9]+)"),  # Infura
    re.compile(r"(/v2/)([A-Za-z0-9_\-]+)"),  # Alchemy
]


def mask_api_key(url: str) -> str:
    """Mask API key in URL for logging"""
    for pattern in _KEY_PATTERNS:
        url = pattern.sub(lambda m: f"{m.group(1)}***{m.group(2)[-4:]}", url)
    return url


class RPCClient:
    """Owns a web3 instance and the HTTP session beneath it.

    Construct one per endpoint and pass it to whatever needs chain access;
    call ``close()`` (or use it as a context manager) when done.
    """

    def __init__(self, url: str, timeout: int = 30, poa: bool = False):
        if not url:
            raise ConfigurationError("RPC URL is required")
        self.url = url
        self._session = requests.Session()
        if url.startswith(("ws://", "wss://")):
            provider = LegacyWebSocketProvider(url, websocket_timeout=timeout)
        else:
            provider = Web3.HTTPProvider(
                url, request_kwargs={"timeout": timeout}, session=self._session
            )
        self.w3 = Web3(provider)
        if poa:
            # Polygon, BSC and other PoA chains carry extra data in headers
            self.w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
        logger.debug(f"RPC client created for {mask_api_key(url)}")

    @classmethod
    def from_settings(
        cls, archive: bool = False, poa: bool = False, realtime: bool = False
    ) -> "RPCClient":
        """Build a client from RPC_URL, or ARCHIVE_RPC_URL / WS_RPC_URL when asked."""
        url = settings.rpc.rpc_url
        if archive:
            url = settings.rpc.archive_rpc_url or url
        elif realtime:
            url = settings.rpc.ws_rpc_url or url
        if not url:
            name = "ARCHIVE_RPC_URL or RPC_URL" if archive else "RPC_URL"
            if realtime:
                name = "WS_RPC_URL or RPC_URL"
            raise ConfigurationError(f"{name} is not configured")
        return cls(url, timeout=settings.rpc.timeout, poa=poa)

    @property
    def chain_id(self) -> int:
        return self.w3.eth.chain_id

    def get_block_number(self) -> int:
        return self.w3.eth.block_number

    def get_block(self, block: BlockIdentifier = "latest") -> Any:
        return self.w3.eth.get_block(block)

    def get_block_timestamp(self, block: BlockIdentifier) -> int:
        return int(self.get_block(block)["timestamp"])

    def get_logs(self, filter_params: Dict[str, Any]) -> List[Any]:
        return list(self.w3.eth.get_logs(filter_params))

    def new_filter(self, filter_params: Dict[str, Any]):
        """Install an eth_newFilter log filter; poll it with ``get_new_entries()``."""
        return self.w3.eth.filter(filter_params)

    def uninstall_filter(self, filter_id: str) -> bool:
        return self.w3.eth.uninstall_filter(filter_id)

    def contract(self, address: str, abi: List[Dict[str, Any]]):
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    def close(self):
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self) -> str:
        return f"RPCClient({mask_api_key(self.url)!r})"
