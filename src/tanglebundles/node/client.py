"""
tanglebundles/node/client.py

Node client providing the lookups bundle assembly depends on.

Provides methods for:
- Transaction hash lookups by address or bundle hash
- Raw transaction trytes retrieval and decoding
- Inclusion (confirmation) state queries against the latest milestone
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..config import ADDRESS_CHECKSUM_LENGTH, HASH_TRYTES_LENGTH, NodeConfig
from ..errors import NodeError
from ..models import Transaction, as_transaction_objects
from .connection import NodeConnection

logger = logging.getLogger("tanglebundles.node.client")


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================

def remove_checksum(address: str) -> str:
    """Strip the 9-tryte checksum from a 90-tryte address."""
    if len(address) == HASH_TRYTES_LENGTH + ADDRESS_CHECKSUM_LENGTH:
        return address[:HASH_TRYTES_LENGTH]
    return address


# ============================================================================
# NODE CLIENT
# ============================================================================

class NodeClient:
    """
    Async client for a node's HTTP API.

    Satisfies the Provider interface used by BundleFinder.

    Example:
        async with NodeClient(NodeConfig(url="https://node.example:443")) as client:
            txs = await client.find_transaction_objects(addresses=["ADDR..."])
            states = await client.get_latest_inclusion([tx.hash for tx in txs])
    """

    def __init__(
        self,
        config: Optional[NodeConfig] = None,
        connection: Optional[NodeConnection] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Node settings. Uses NodeConfig() defaults if None.
            connection: Pre-built connection, mostly for tests
        """
        self.config = config or NodeConfig()
        self._connection = connection or NodeConnection(
            url=self.config.url,
            api_version=self.config.api_version,
            timeout=self.config.timeout,
        )

    async def _call(self, command: str, **params: Any) -> Dict[str, Any]:
        return await self._connection.send(command, **params)

    # ========================================================================
    # PUBLIC API
    # ========================================================================

    async def find_transactions(
        self,
        addresses: Optional[Sequence[str]] = None,
        bundles: Optional[Sequence[str]] = None,
    ) -> List[str]:
        """
        Find transaction hashes matching addresses or bundle hashes.

        Exactly one of addresses or bundles must be given.

        Returns:
            Matching transaction hashes
        """
        params = _single_criterion(addresses, bundles)
        if "addresses" in params:
            params["addresses"] = [remove_checksum(a) for a in params["addresses"]]

        result = await self._call("findTransactions", **params)
        hashes = result.get("hashes")
        if not isinstance(hashes, list):
            raise NodeError(f"findTransactions returned no hashes: {result}")
        return hashes

    async def get_trytes(self, hashes: Sequence[str]) -> List[str]:
        """Get raw transaction trytes, in the order of the given hashes."""
        result = await self._call("getTrytes", hashes=list(hashes))
        trytes = result.get("trytes")
        if not isinstance(trytes, list):
            raise NodeError(f"getTrytes returned no trytes: {result}")
        return trytes

    async def find_transaction_objects(
        self,
        addresses: Optional[Sequence[str]] = None,
        bundles: Optional[Sequence[str]] = None,
    ) -> List[Transaction]:
        """
        Find transactions matching addresses or bundle hashes.

        Returns:
            Decoded Transaction objects
        """
        hashes = await self.find_transactions(addresses=addresses, bundles=bundles)
        if not hashes:
            return []

        trytes = await self.get_trytes(hashes)
        transactions = as_transaction_objects(hashes, trytes)
        logger.debug(f"Fetched {len(transactions)} transactions")
        return transactions

    async def get_node_info(self) -> Dict[str, Any]:
        """Get node status, including the latest solid milestone."""
        return await self._call("getNodeInfo")

    async def get_inclusion_states(
        self,
        hashes: Sequence[str],
        tips: Sequence[str],
    ) -> List[bool]:
        """
        Get inclusion states of transactions as seen from the given tips.

        Returns:
            One boolean per hash, in request order
        """
        result = await self._call(
            "getInclusionStates",
            transactions=list(hashes),
            tips=list(tips),
        )
        states = result.get("states")
        if not isinstance(states, list):
            raise NodeError(f"getInclusionStates returned no states: {result}")
        return states

    async def get_latest_inclusion(self, hashes: Sequence[str]) -> List[bool]:
        """Get inclusion states against the latest solid milestone."""
        info = await self.get_node_info()
        milestone = info.get("latestSolidSubtangleMilestone")
        if not milestone:
            raise NodeError("Node info has no latestSolidSubtangleMilestone")
        return await self.get_inclusion_states(hashes, [milestone])

    async def close(self) -> None:
        """Close the underlying connection."""
        await self._connection.close()

    # ========================================================================
    # CONTEXT MANAGER
    # ========================================================================

    async def __aenter__(self) -> "NodeClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def _single_criterion(
    addresses: Optional[Sequence[str]],
    bundles: Optional[Sequence[str]],
) -> Dict[str, List[str]]:
    if (addresses is None) == (bundles is None):
        raise ValueError("Exactly one of addresses or bundles must be given")
    if addresses is not None:
        return {"addresses": list(addresses)}
    return {"bundles": list(bundles)}


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

def create_client(config: Optional[NodeConfig] = None) -> NodeClient:
    """
    Create a node client, reading settings from the environment if no
    config is given.
    """
    return NodeClient(config or NodeConfig.from_env())
