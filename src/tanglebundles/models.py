"""
tanglebundles/models.py

Transaction records as returned by a node, and the trytes decoder used
to turn raw getTrytes output into them.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence

from .config import HASH_TRYTES_LENGTH, TRANSACTION_TRYTES_LENGTH
from .errors import InvalidTransactionError


TRYTE_ALPHABET = "9ABCDEFGHIJKLMNOPQRSTUVWXYZ"

# Field offsets inside the 2673-tryte transaction string
SIGNATURE_MESSAGE_FRAGMENT = slice(0, 2187)
ADDRESS = slice(2187, 2268)
VALUE = slice(2268, 2279)
VALUE_PADDING = slice(2279, 2295)
OBSOLETE_TAG = slice(2295, 2322)
TIMESTAMP = slice(2322, 2331)
CURRENT_INDEX = slice(2331, 2340)
LAST_INDEX = slice(2340, 2349)
BUNDLE = slice(2349, 2430)
TRUNK_TRANSACTION = slice(2430, 2511)
BRANCH_TRANSACTION = slice(2511, 2592)
TAG = slice(2592, 2619)
ATTACHMENT_TIMESTAMP = slice(2619, 2628)
ATTACHMENT_TIMESTAMP_LOWER_BOUND = slice(2628, 2637)
ATTACHMENT_TIMESTAMP_UPPER_BOUND = slice(2637, 2646)
NONCE = slice(2646, 2673)


@dataclass(frozen=True)
class Transaction:
    """A single transaction record."""
    hash: str
    bundle: str
    trunk_transaction: str
    branch_transaction: str
    current_index: int
    last_index: int
    attachment_timestamp: int
    address: str = ""
    value: int = 0
    obsolete_tag: str = ""
    timestamp: int = 0
    tag: str = ""
    signature_message_fragment: str = ""
    attachment_timestamp_lower_bound: int = 0
    attachment_timestamp_upper_bound: int = 0
    nonce: str = ""
    persistence: Optional[bool] = None  # Set by enrichment only

    @property
    def is_tail(self) -> bool:
        """Whether this is the starting transaction of its bundle."""
        return self.current_index == 0

    def with_persistence(self, state: bool) -> "Transaction":
        """Return a copy carrying the given confirmation state."""
        return replace(self, persistence=state)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "hash": self.hash,
            "signatureMessageFragment": self.signature_message_fragment,
            "address": self.address,
            "value": self.value,
            "obsoleteTag": self.obsolete_tag,
            "timestamp": self.timestamp,
            "currentIndex": self.current_index,
            "lastIndex": self.last_index,
            "bundle": self.bundle,
            "trunkTransaction": self.trunk_transaction,
            "branchTransaction": self.branch_transaction,
            "tag": self.tag,
            "attachmentTimestamp": self.attachment_timestamp,
            "attachmentTimestampLowerBound": self.attachment_timestamp_lower_bound,
            "attachmentTimestampUpperBound": self.attachment_timestamp_upper_bound,
            "nonce": self.nonce,
        }
        if self.persistence is not None:
            data["persistence"] = self.persistence
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        return cls(
            hash=data["hash"],
            bundle=data["bundle"],
            trunk_transaction=data["trunkTransaction"],
            branch_transaction=data.get("branchTransaction", ""),
            current_index=data["currentIndex"],
            last_index=data["lastIndex"],
            attachment_timestamp=data.get("attachmentTimestamp", 0),
            address=data.get("address", ""),
            value=data.get("value", 0),
            obsolete_tag=data.get("obsoleteTag", ""),
            timestamp=data.get("timestamp", 0),
            tag=data.get("tag", ""),
            signature_message_fragment=data.get("signatureMessageFragment", ""),
            attachment_timestamp_lower_bound=data.get("attachmentTimestampLowerBound", 0),
            attachment_timestamp_upper_bound=data.get("attachmentTimestampUpperBound", 0),
            nonce=data.get("nonce", ""),
            persistence=data.get("persistence"),
        )


# A bundle is its transactions ordered by current_index
Bundle = List[Transaction]


# ============================================================================
# TRYTES DECODING
# ============================================================================

def is_trytes(value: str, length: Optional[int] = None) -> bool:
    """Check that value only holds tryte characters (and has the given length)."""
    if not isinstance(value, str):
        return False
    if length is not None and len(value) != length:
        return False
    return all(c in TRYTE_ALPHABET for c in value)


def trytes_to_int(trytes: str) -> int:
    """
    Decode little-endian balanced-ternary trytes to an integer.

    Each tryte is worth -13..13 ('9' is zero, 'A'..'M' are 1..13,
    'N'..'Z' are -13..-1).
    """
    result = 0
    for tryte in reversed(trytes):
        digit = TRYTE_ALPHABET.index(tryte)
        if digit > 13:
            digit -= 27
        result = result * 27 + digit
    return result


def as_transaction_object(trytes: str, hash: str) -> Transaction:
    """
    Decode transaction trytes into a Transaction.

    Args:
        trytes: 2673 trytes as returned by getTrytes
        hash: The transaction hash the trytes were requested for

    Returns:
        Decoded Transaction

    Raises:
        InvalidTransactionError: If the trytes or hash are malformed
    """
    if not is_trytes(trytes, TRANSACTION_TRYTES_LENGTH):
        raise InvalidTransactionError(f"Invalid transaction trytes for {hash}")
    if not is_trytes(hash, HASH_TRYTES_LENGTH):
        raise InvalidTransactionError(f"Invalid transaction hash: {hash}")
    if set(trytes[VALUE_PADDING]) != {"9"}:
        raise InvalidTransactionError(f"Value field overflow in transaction {hash}")

    return Transaction(
        hash=hash,
        signature_message_fragment=trytes[SIGNATURE_MESSAGE_FRAGMENT],
        address=trytes[ADDRESS],
        value=trytes_to_int(trytes[VALUE]),
        obsolete_tag=trytes[OBSOLETE_TAG],
        timestamp=trytes_to_int(trytes[TIMESTAMP]),
        current_index=trytes_to_int(trytes[CURRENT_INDEX]),
        last_index=trytes_to_int(trytes[LAST_INDEX]),
        bundle=trytes[BUNDLE],
        trunk_transaction=trytes[TRUNK_TRANSACTION],
        branch_transaction=trytes[BRANCH_TRANSACTION],
        tag=trytes[TAG],
        attachment_timestamp=trytes_to_int(trytes[ATTACHMENT_TIMESTAMP]),
        attachment_timestamp_lower_bound=trytes_to_int(trytes[ATTACHMENT_TIMESTAMP_LOWER_BOUND]),
        attachment_timestamp_upper_bound=trytes_to_int(trytes[ATTACHMENT_TIMESTAMP_UPPER_BOUND]),
        nonce=trytes[NONCE],
    )


def as_transaction_objects(hashes: Sequence[str], trytes: Sequence[str]) -> List[Transaction]:
    """Decode getTrytes output, pairing each entry with its requested hash."""
    if len(hashes) != len(trytes):
        raise InvalidTransactionError(
            f"Got {len(trytes)} trytes for {len(hashes)} requested hashes"
        )
    return [as_transaction_object(t, h) for h, t in zip(hashes, trytes)]
