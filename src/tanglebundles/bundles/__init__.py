"""
tanglebundles/bundles - Local bundle transforms.

Assembly, persistence enrichment and ordering of bundles. These operate
on transactions already fetched from a node and never perform I/O
themselves (add_persistence awaits the lookup it is given).
"""

from .assembler import group_transactions_into_bundles, get_bundle
from .persistence import add_persistence, zip_persistence, zip2
from .ordering import sort_by_timestamp

__all__ = [
    "group_transactions_into_bundles",
    "get_bundle",
    "add_persistence",
    "zip_persistence",
    "zip2",
    "sort_by_timestamp",
]
