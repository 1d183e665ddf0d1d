"""
tanglebundles/bundles/persistence.py

Attaches confirmation state to assembled bundles.

Bundles are atomic, so a single inclusion lookup per bundle (on its tail)
decides the state of every transaction in it.
"""

import logging
from typing import Awaitable, Callable, List, Sequence, Tuple, TypeVar

from ..errors import InclusionStateMismatchError
from ..models import Bundle

logger = logging.getLogger("tanglebundles.bundles.persistence")

A = TypeVar("A")
B = TypeVar("B")

GetLatestInclusion = Callable[[List[str]], Awaitable[List[bool]]]


def zip2(as_: Sequence[A], bs: Sequence[B]) -> List[Tuple[A, B]]:
    """
    Pair two sequences element by element.

    Raises:
        InclusionStateMismatchError: If the sequences differ in length
    """
    if len(as_) != len(bs):
        raise InclusionStateMismatchError(
            f"Cannot pair {len(as_)} bundles with {len(bs)} inclusion states"
        )
    return list(zip(as_, bs))


def zip_persistence(bundles: Sequence[Bundle], states: Sequence[bool]) -> List[Bundle]:
    """Give every transaction of bundles[i] the persistence value states[i]."""
    return [
        [transaction.with_persistence(state) for transaction in bundle]
        for bundle, state in zip2(bundles, states)
    ]


async def add_persistence(
    get_latest_inclusion: GetLatestInclusion,
    bundles: Sequence[Bundle],
) -> List[Bundle]:
    """
    Look up inclusion states for bundles and attach them.

    Args:
        get_latest_inclusion: Coroutine function mapping tail hashes to
            inclusion states, in request order
        bundles: Assembled bundles

    Returns:
        New bundles whose transactions carry persistence
    """
    hashes = [bundle[0].hash for bundle in bundles]
    states = await get_latest_inclusion(hashes)
    logger.debug(f"Got {len(states)} inclusion states for {len(hashes)} bundles")
    return zip_persistence(bundles, states)
