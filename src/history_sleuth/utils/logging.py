"""Logging setup for scripts."""

import logging
import os
from typing import Optional


def setup_logging(level: Optional[str] = None):
    """Configure the root logger; LOGLEVEL from the environment wins over the default."""
    level = (level or os.environ.get("LOGLEVEL", "INFO")).upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # web3 and urllib3 are chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("web3").setLevel(logging.WARNING)
