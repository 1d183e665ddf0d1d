"""
tanglebundles/tests/test_api.py

Tests for BundleFinder and the bundles_from_addresses entry point.
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, Mock

from tanglebundles import (
    BundleFinder,
    InclusionStateMismatchError,
    NodeError,
    create_get_bundles_from_addresses,
)

from test_bundles import make_bundle, make_tx


# ============================================================================
# TEST DATA
# ============================================================================

class FakeProvider:
    """In-memory provider answering lookups from a fixed transaction set."""

    def __init__(self, transactions, by_address, states=None):
        self.transactions = transactions
        self.by_address = by_address
        self.states = states or {}
        self.calls = []

    async def find_transaction_objects(self, addresses=None, bundles=None):
        self.calls.append(("find", addresses, bundles))
        if addresses is not None:
            return [tx for a in addresses for tx in self.by_address.get(a, [])]
        return [tx for tx in self.transactions if tx.bundle in bundles]

    async def get_latest_inclusion(self, hashes):
        self.calls.append(("inclusion", hashes))
        return [self.states.get(h, False) for h in hashes]


LATE = make_bundle("LATE", 3, timestamp=300)
EARLY = make_bundle("EARLY", 2, timestamp=100)
UNRELATED = make_bundle("UNRELATED", 2, timestamp=50)


@pytest.fixture
def provider():
    # The address lookup only sees part of each bundle
    return FakeProvider(
        transactions=LATE[::-1] + EARLY + UNRELATED,
        by_address={
            "ADDR1": [LATE[0], LATE[2], EARLY[0]],
            "ADDR2": [EARLY[0], EARLY[1]],
        },
        states={"LATE-0": True},
    )


# ============================================================================
# BUNDLE FINDER TESTS
# ============================================================================

class TestBundleFinder:
    """Tests for BundleFinder.find."""

    @pytest.mark.asyncio
    async def test_two_phase_lookup(self, provider):
        """Test bundles are fetched in full by bundle hash."""
        bundles = await BundleFinder(provider).find(["ADDR1"])

        assert bundles == [EARLY, LATE]
        assert provider.calls == [
            ("find", ["ADDR1"], None),
            ("find", None, ["LATE", "EARLY"]),
        ]

    @pytest.mark.asyncio
    async def test_bundle_hashes_deduplicated(self, provider):
        """Test a tail seen for several addresses is queried once."""
        await BundleFinder(provider).find(["ADDR1", "ADDR2"])
        assert provider.calls[1] == ("find", None, ["LATE", "EARLY"])

    @pytest.mark.asyncio
    async def test_without_inclusion_states(self, provider):
        """Test persistence is left unset by default."""
        bundles = await BundleFinder(provider).find(["ADDR1"])

        assert all(tx.persistence is None for bundle in bundles for tx in bundle)
        assert not any(call[0] == "inclusion" for call in provider.calls)

    @pytest.mark.asyncio
    async def test_with_inclusion_states(self, provider):
        """Test each bundle gets its tail's inclusion state."""
        bundles = await BundleFinder(provider).find(["ADDR1"], inclusion_states=True)

        assert [bundle[0].bundle for bundle in bundles] == ["EARLY", "LATE"]
        assert all(tx.persistence is False for tx in bundles[0])
        assert all(tx.persistence is True for tx in bundles[1])
        assert provider.calls[-1] == ("inclusion", ["LATE-0", "EARLY-0"])

    @pytest.mark.asyncio
    async def test_no_tails_found(self, provider):
        """Test addresses without tails skip the bundle lookup."""
        provider.by_address["ADDR3"] = [LATE[1]]

        assert await BundleFinder(provider).find(["ADDR3"], inclusion_states=True) == []
        assert provider.calls == [("find", ["ADDR3"], None)]

    @pytest.mark.asyncio
    async def test_duplicate_transactions_dropped(self):
        """Test repeated records of a hash do not change assembly."""
        tail = make_tx("h0", "B", 0, 1, "h1")
        stale = make_tx("h1", "B", 1, 1, "x", timestamp=1)
        fresh = make_tx("h1", "B", 1, 1, "y", timestamp=2)
        provider = Mock()
        provider.find_transaction_objects = AsyncMock(
            side_effect=[[tail], [tail, stale, tail, fresh]]
        )

        bundles = await BundleFinder(provider).find(["ADDR"])

        assert bundles == [[tail, stale]]

    @pytest.mark.asyncio
    async def test_truncated_bundle_returned(self):
        """Test incomplete bundles are returned as far as they go."""
        bundle = make_bundle("B", 4)
        provider = FakeProvider(
            transactions=bundle[:2] + bundle[3:],
            by_address={"ADDR": [bundle[0]]},
        )

        assert await BundleFinder(provider).find(["ADDR"]) == [bundle[:2]]

    @pytest.mark.asyncio
    async def test_lookup_error_propagates(self, provider):
        """Test provider errors are raised unchanged."""
        error = NodeError("node down")
        provider.find_transaction_objects = AsyncMock(side_effect=error)

        with pytest.raises(NodeError) as exc_info:
            await BundleFinder(provider).find(["ADDR1"])
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_inclusion_mismatch_fails(self, provider):
        """Test a short inclusion response fails the whole call."""
        provider.get_latest_inclusion = AsyncMock(return_value=[True])

        with pytest.raises(InclusionStateMismatchError):
            await BundleFinder(provider).find(["ADDR1"], inclusion_states=True)


# ============================================================================
# BUNDLES FROM ADDRESSES TESTS
# ============================================================================

class TestBundlesFromAddresses:
    """Tests for the future and callback calling conventions."""

    @pytest.mark.asyncio
    async def test_returns_future(self, provider):
        """Test the result is delivered through an awaitable future."""
        bundles_from_addresses = create_get_bundles_from_addresses(provider)

        future = bundles_from_addresses(["ADDR1"])

        assert isinstance(future, asyncio.Future)
        assert await future == [EARLY, LATE]

    @pytest.mark.asyncio
    async def test_inclusion_states_flag(self, provider):
        """Test the inclusion flag is passed through."""
        bundles_from_addresses = create_get_bundles_from_addresses(provider)

        bundles = await bundles_from_addresses(["ADDR1"], True)

        assert bundles[1][0].persistence is True

    @pytest.mark.asyncio
    async def test_callback(self, provider):
        """Test an error-first callback receives the result."""
        bundles_from_addresses = create_get_bundles_from_addresses(provider)
        callback = Mock()

        result = await bundles_from_addresses(["ADDR1"], True, callback)
        await asyncio.sleep(0)

        callback.assert_called_once_with(None, result)
        assert result[1][0].persistence is True

    @pytest.mark.asyncio
    async def test_callback_as_second_argument(self, provider):
        """Test a callable in place of inclusion_states is the callback."""
        bundles_from_addresses = create_get_bundles_from_addresses(provider)
        callback = Mock()

        result = await bundles_from_addresses(["ADDR1"], callback)
        await asyncio.sleep(0)

        callback.assert_called_once_with(None, result)
        assert result[0][0].persistence is None

    @pytest.mark.asyncio
    async def test_callback_error(self, provider):
        """Test errors reach the callback first-argument."""
        error = NodeError("node down")
        provider.find_transaction_objects = AsyncMock(side_effect=error)
        bundles_from_addresses = create_get_bundles_from_addresses(provider)
        done = asyncio.Event()
        received = []

        def callback(err, bundles):
            received.append((err, bundles))
            done.set()

        bundles_from_addresses(["ADDR1"], False, callback)
        await asyncio.wait_for(done.wait(), timeout=1)

        assert received == [(error, None)]

    @pytest.mark.asyncio
    async def test_callback_on_cancel(self, provider):
        """Test cancellation is reported to the callback."""
        started = asyncio.Event()

        async def hang(addresses=None, bundles=None):
            started.set()
            await asyncio.sleep(10)

        provider.find_transaction_objects = hang
        bundles_from_addresses = create_get_bundles_from_addresses(provider)
        callback = Mock()

        future = bundles_from_addresses(["ADDR1"], callback=callback)
        await started.wait()
        future.cancel()
        with pytest.raises(asyncio.CancelledError):
            await future
        await asyncio.sleep(0)

        err, bundles = callback.call_args[0]
        assert isinstance(err, asyncio.CancelledError)
        assert bundles is None

    def test_requires_running_loop(self, provider):
        """Test calling outside an event loop fails."""
        bundles_from_addresses = create_get_bundles_from_addresses(provider)
        with pytest.raises(RuntimeError):
            bundles_from_addresses(["ADDR1"])
