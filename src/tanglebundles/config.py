"""
tanglebundles/config.py

Configuration constants and data classes for tanglebundles.
"""

from dataclasses import dataclass
import os


# Default node endpoint (local IRI node, HTTP API port)
DEFAULT_NODE_URL = "http://localhost:14265"

# Value sent in the X-IOTA-API-Version header
API_VERSION = "1"

# Request timeout in seconds
REQUEST_TIMEOUT = 30.0

# Transaction layout
TRANSACTION_TRYTES_LENGTH = 2673
HASH_TRYTES_LENGTH = 81
ADDRESS_CHECKSUM_LENGTH = 9

# Environment overrides
ENV_NODE_URL = "TANGLEBUNDLES_NODE_URL"
ENV_TIMEOUT = "TANGLEBUNDLES_TIMEOUT"


@dataclass
class NodeConfig:
    """Connection settings for a ledger node."""
    url: str = DEFAULT_NODE_URL
    api_version: str = API_VERSION
    timeout: float = REQUEST_TIMEOUT

    @classmethod
    def from_env(cls) -> "NodeConfig":
        """Build a config from TANGLEBUNDLES_* environment variables."""
        url = os.environ.get(ENV_NODE_URL) or DEFAULT_NODE_URL
        timeout = os.environ.get(ENV_TIMEOUT)
        return cls(
            url=url,
            timeout=float(timeout) if timeout else REQUEST_TIMEOUT,
        )
