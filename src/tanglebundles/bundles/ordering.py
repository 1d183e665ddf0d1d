"""
tanglebundles/bundles/ordering.py
"""

from typing import List, Sequence

from ..models import Bundle


def sort_by_timestamp(bundles: Sequence[Bundle]) -> List[Bundle]:
    """Return bundles sorted by their tail's attachment timestamp (stable)."""
    return sorted(bundles, key=lambda bundle: bundle[0].attachment_timestamp)
