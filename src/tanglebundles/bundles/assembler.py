"""
tanglebundles/bundles/assembler.py

Rebuilds bundles from a flat list of transactions by walking the trunk
chain from each tail.
"""

import logging
from typing import List, Optional, Sequence

from ..models import Bundle, Transaction

logger = logging.getLogger("tanglebundles.bundles.assembler")


def group_transactions_into_bundles(transactions: Sequence[Transaction]) -> List[Bundle]:
    """
    Group transactions into bundles.

    One bundle is built for every tail transaction (current_index == 0),
    in the order the tails appear in the input.

    Args:
        transactions: Transactions of one or more bundles, in any order

    Returns:
        List of bundles, each ordered by current_index
    """
    return [
        get_bundle(transactions, transaction)
        for transaction in transactions
        if transaction.is_tail
    ]


def get_bundle(transactions: Sequence[Transaction], tail: Transaction) -> Bundle:
    """
    Collect the transactions of a bundle starting from its tail.

    Follows trunk references while the current transaction is not the
    last in its bundle. If the next transaction is missing from the
    input, the bundle is returned as collected so far. When several
    transactions qualify as the next one, the first in input order wins.

    Args:
        transactions: Transactions to search
        tail: Starting transaction of the bundle

    Returns:
        The bundle's transactions, possibly truncated
    """
    bundle = [tail]
    current = tail

    while current.current_index != current.last_index:
        next_transaction = _find_next(transactions, current)
        if next_transaction is None:
            logger.debug(
                f"Bundle {tail.bundle} truncated at index {current.current_index} "
                f"of {current.last_index}"
            )
            break
        bundle.append(next_transaction)
        current = next_transaction

    return bundle


def _find_next(transactions: Sequence[Transaction], current: Transaction) -> Optional[Transaction]:
    for candidate in transactions:
        if (
            candidate.hash == current.trunk_transaction
            and candidate.bundle == current.bundle
            and candidate.current_index == current.current_index + 1
        ):
            return candidate
    return None
