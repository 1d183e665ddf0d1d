"""
tanglebundles - Bundle reconstruction for Tangle ledger nodes.

Turns the flat, unordered transaction records a node returns into
ordered bundles, optionally annotated with their confirmation state.

Usage:
    from tanglebundles import NodeClient, create_get_bundles_from_addresses

    async with NodeClient() as client:
        bundles_from_addresses = create_get_bundles_from_addresses(client)
        bundles = await bundles_from_addresses(addresses, inclusion_states=True)

Local transforms can be used on their own:
    from tanglebundles import group_transactions_into_bundles, sort_by_timestamp

    bundles = sort_by_timestamp(group_transactions_into_bundles(transactions))
"""

from .api import BundleFinder, Provider, create_get_bundles_from_addresses
from .bundles import (
    add_persistence,
    get_bundle,
    group_transactions_into_bundles,
    sort_by_timestamp,
    zip_persistence,
)
from .config import NodeConfig, DEFAULT_NODE_URL
from .errors import (
    TangleBundlesError,
    NodeError,
    InvalidTransactionError,
    InclusionStateMismatchError,
)
from .models import Bundle, Transaction, as_transaction_object, as_transaction_objects
from .node import NodeClient, NodeConnection, create_client

__version__ = "1.0.0"
__all__ = [
    # Orchestration
    "BundleFinder",
    "Provider",
    "create_get_bundles_from_addresses",
    # Local transforms
    "group_transactions_into_bundles",
    "get_bundle",
    "add_persistence",
    "zip_persistence",
    "sort_by_timestamp",
    # Models
    "Bundle",
    "Transaction",
    "as_transaction_object",
    "as_transaction_objects",
    # Node
    "NodeClient",
    "NodeConnection",
    "create_client",
    # Config
    "NodeConfig",
    "DEFAULT_NODE_URL",
    # Errors
    "TangleBundlesError",
    "NodeError",
    "InvalidTransactionError",
    "InclusionStateMismatchError",
]
