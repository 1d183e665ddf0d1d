"""
tanglebundles/node - Node client for transaction and inclusion lookups.
"""

from .client import NodeClient, create_client, remove_checksum
from .connection import NodeConnection

__all__ = [
    "NodeClient",
    "NodeConnection",
    "create_client",
    "remove_checksum",
]
