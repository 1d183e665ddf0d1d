"""
tanglebundles/api.py

Fetches the bundles associated with a set of addresses.

Pipeline:
    1. Look up transactions referencing the addresses
    2. Look up every transaction of the bundles whose tails were found
    3. Group transactions into bundles
    4. Optionally attach inclusion states
    5. Sort bundles by attachment timestamp

The address lookup only returns transactions that touch the addresses,
which is usually a subset of each bundle. That is why the bundles are
fetched again by bundle hash before assembly.

Usage:
    from tanglebundles import NodeClient, create_get_bundles_from_addresses

    async with NodeClient() as client:
        bundles_from_addresses = create_get_bundles_from_addresses(client)
        bundles = await bundles_from_addresses(["ADDRESS..."], True)
"""

import asyncio
import logging
from typing import Callable, List, Optional, Protocol, Sequence, Union

from .bundles import add_persistence, group_transactions_into_bundles, sort_by_timestamp
from .models import Bundle, Transaction

logger = logging.getLogger("tanglebundles.api")

# Error-first callback: callback(error, bundles)
Callback = Callable[[Optional[BaseException], Optional[List[Bundle]]], None]


class Provider(Protocol):
    """Lookups BundleFinder needs from a node. NodeClient implements these."""

    async def find_transaction_objects(
        self,
        addresses: Optional[Sequence[str]] = None,
        bundles: Optional[Sequence[str]] = None,
    ) -> List[Transaction]:
        ...

    async def get_latest_inclusion(self, hashes: Sequence[str]) -> List[bool]:
        ...


class BundleFinder:
    """
    Runs the address-to-bundles pipeline against a provider.

    Each call works on its own data; a finder can serve concurrent calls.
    """

    def __init__(self, provider: Provider):
        self.provider = provider

    async def find(
        self,
        addresses: Sequence[str],
        inclusion_states: bool = False,
    ) -> List[Bundle]:
        """
        Get the bundles associated with the given addresses.

        Args:
            addresses: Addresses to look up
            inclusion_states: Attach persistence to every transaction

        Returns:
            Bundles sorted by tail attachment timestamp

        Raises:
            Whatever the provider raises, unchanged
        """
        transactions = await self.provider.find_transaction_objects(addresses=list(addresses))

        bundle_hashes = list(dict.fromkeys(tx.bundle for tx in transactions if tx.is_tail))
        if not bundle_hashes:
            logger.info(f"No bundles found for {len(addresses)} addresses")
            return []

        transactions = await self.provider.find_transaction_objects(bundles=bundle_hashes)
        transactions = _unique_by_hash(transactions)

        bundles = group_transactions_into_bundles(transactions)

        if inclusion_states:
            bundles = await add_persistence(self.provider.get_latest_inclusion, bundles)

        logger.info(
            f"Assembled {len(bundles)} bundles from {len(transactions)} transactions "
            f"for {len(addresses)} addresses"
        )
        return sort_by_timestamp(bundles)


def _unique_by_hash(transactions: Sequence[Transaction]) -> List[Transaction]:
    """Drop repeated transaction hashes, keeping the first occurrence."""
    seen = set()
    unique = []
    for tx in transactions:
        if tx.hash not in seen:
            seen.add(tx.hash)
            unique.append(tx)
    return unique


def _as_callback(callback: Callback) -> Callable[[asyncio.Future], None]:
    def deliver(future: asyncio.Future) -> None:
        if future.cancelled():
            callback(asyncio.CancelledError(), None)
        elif future.exception() is not None:
            callback(future.exception(), None)
        else:
            callback(None, future.result())
    return deliver


def create_get_bundles_from_addresses(provider: Provider):
    """
    Create a bundles_from_addresses function bound to a provider.

    The returned function must be called from a running event loop. It
    schedules the lookup and returns its future. If a callback is given
    (as the third argument, or as the second in place of
    inclusion_states) it is called error-first once the future settles.
    """
    finder = BundleFinder(provider)

    def bundles_from_addresses(
        addresses: Sequence[str],
        inclusion_states: Union[bool, Callback] = False,
        callback: Optional[Callback] = None,
    ) -> "asyncio.Future[List[Bundle]]":
        if callable(inclusion_states):
            callback = inclusion_states
            inclusion_states = False

        loop = asyncio.get_running_loop()
        future = loop.create_task(finder.find(addresses, bool(inclusion_states)))
        if callback is not None:
            future.add_done_callback(_as_callback(callback))
        return future

    return bundles_from_addresses
