"""Centralized configuration management for history_sleuth."""

import os
from typing import Optional
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass
class RPCSettings:
    """JSON-RPC endpoints."""

    rpc_url: Optional[str] = None
    archive_rpc_url: Optional[str] = None
    ws_rpc_url: Optional[str] = None
    timeout: int = 30

    def __post_init__(self):
        # Load from environment if not provided
        if self.rpc_url is None:
            self.rpc_url = os.getenv("RPC_URL")
        if self.archive_rpc_url is None:
            self.archive_rpc_url = os.getenv("ARCHIVE_RPC_URL")
        if self.ws_rpc_url is None:
            self.ws_rpc_url = os.getenv("WS_RPC_URL")


@dataclass
class APISettings:
    """API-specific settings."""

    dune_api_key: Optional[str] = None
    subgraph_url: Optional[str] = None
    tenderly_user: Optional[str] = None
    tenderly_project: Optional[str] = None
    tenderly_access_key: Optional[str] = None

    # Rate limits (requests per second)
    dune_rate_limit: float = 2.0
    subgraph_rate_limit: float = 5.0
    tenderly_rate_limit: float = 5.0

    def __post_init__(self):
        if self.dune_api_key is None:
            self.dune_api_key = os.getenv("DUNE_API_KEY")
        if self.subgraph_url is None:
            self.subgraph_url = os.getenv("SUBGRAPH_URL")
        if self.tenderly_user is None:
            self.tenderly_user = os.getenv("TENDERLY_USER")
        if self.tenderly_project is None:
            self.tenderly_project = os.getenv("TENDERLY_PROJECT")
        if self.tenderly_access_key is None:
            self.tenderly_access_key = os.getenv("TENDERLY_ACCESS_KEY")


class APIUrls:
    """API endpoint URLs."""

    DUNE = "https://api.dune.com/api/v1"
    TENDERLY = "https://api.tenderly.co/api/v1"
    TENDERLY_DASHBOARD = "https://dashboard.tenderly.co"


class Settings:
    """Main settings class."""

    def __init__(self):
        self.rpc = RPCSettings()
        self.api = APISettings()
        self.api_urls = APIUrls()
        self.private_key = os.getenv("PRIVATE_KEY")
        self.data_dir = os.getenv("PARQUET_DATA_DIR", "data")


# Global settings instance
settings = Settings()
