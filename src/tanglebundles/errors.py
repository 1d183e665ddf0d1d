"""
tanglebundles/errors.py

Exception hierarchy for tanglebundles.
"""


class TangleBundlesError(Exception):
    """Base exception for tanglebundles."""
    pass


class NodeError(TangleBundlesError):
    """Exception raised when a node request fails."""
    pass


class InvalidTransactionError(TangleBundlesError, ValueError):
    """Transaction trytes could not be decoded."""
    pass


class InclusionStateMismatchError(TangleBundlesError, ValueError):
    """
    Inclusion states do not line up with the requested hashes.

    The node answers getInclusionStates positionally, one state per
    requested hash. A response of a different length cannot be paired
    with its bundles.
    """
    pass
