"""History Sleuth - historical EVM data through logs, state and indexers."""

from .config import settings, Settings
from .locator import BlockLocation, find_block_by_timestamp, locate_block
from .rpc import RPCClient
from .events import EventLogFetcher
from .state import HistoricalStateReader
from .simulation import SimulationRequest, TenderlyClient
from .indexing import DuneClient, QueryParameter, SubgraphClient
from .lending import supply_to_aave
from .export import data_path, save_records

__version__ = "0.0.1"

__all__ = [
    # Configuration
    "settings",
    "Settings",
    # Block lookup
    "BlockLocation",
    "find_block_by_timestamp",
    "locate_block",
    # Chain access
    "RPCClient",
    "EventLogFetcher",
    "HistoricalStateReader",
    # API clients
    "SimulationRequest",
    "TenderlyClient",
    "DuneClient",
    "QueryParameter",
    "SubgraphClient",
    # Lending
    "supply_to_aave",
    # Export
    "data_path",
    "save_records",
]
