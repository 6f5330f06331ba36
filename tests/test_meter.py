"""
Tests for the MoodMeter aggregation component.

These tests drive the meter through its states against a real MoodStore,
covering rendering, empty sessions, failures and resubscription.
"""

import asyncio

from moodmeter.meter import MeterState, MoodMeter
from moodmeter.store import MoodStore


class TestMoodMeter:
    """Test suite for MoodMeter state handling."""

    def setup_method(self):
        """Set up a fresh store and meter for each test."""
        self.store = MoodStore()
        self.meter = MoodMeter(self.store)

    async def test_starts_idle(self):
        assert self.meter.state is MeterState.IDLE
        assert self.meter.subscription is None

    async def test_renders_session_grid(self):
        """Test the Happy/Happy/Calm session renders normalized opacities."""
        await self.store.add("abc123", "Happy")
        await self.store.add("abc123", "Happy")
        await self.store.add("abc123", "Calm")
        await self.store.add("other", "Sad")

        view = await self.meter.open("abc123")
        assert view.state is MeterState.LOADING

        views = self.meter.views()
        view = await anext(views)

        assert view.state is MeterState.RENDERING
        assert view.message is None
        grid = view.grid
        assert grid.total == 3
        assert grid.opacity("Happy") == 1.0
        assert grid.opacity("Calm") == 0.5
        assert grid.opacity("Sad") == 0.1

        await views.aclose()
        await self.meter.close()

    async def test_empty_session_shows_no_data(self):
        await self.meter.open("xyz")
        view = await self.meter.first_view()

        assert view.state is MeterState.NO_DATA
        assert view.message == "No mood data found for this session."
        assert view.grid is None

        await self.meter.close()

    async def test_keeps_listening_after_empty_snapshot(self):
        """Test that late entries for an empty session still render."""
        await self.meter.open("xyz")
        views = self.meter.views()

        first = await anext(views)
        assert first.state is MeterState.NO_DATA

        await self.store.add("xyz", "Tired")
        second = await asyncio.wait_for(anext(views), timeout=1.0)

        assert second.state is MeterState.RENDERING
        assert second.grid.frequency("Tired") == 1

        await views.aclose()
        await self.meter.close()

    async def test_missing_session_never_subscribes(self):
        view = await self.meter.open(None)

        assert view.state is MeterState.INVALID_SESSION
        assert view.message == "Invalid or missing session ID."
        assert self.store.subscriptions == []

        assert await self.meter.first_view() == view

    async def test_route_not_ready_waits(self):
        view = await self.meter.open(None, route_ready=False)

        assert view.state is MeterState.AWAITING_ROUTE
        assert view.message is None
        assert self.store.subscriptions == []

    async def test_transport_error_shows_cause(self):
        await self.store.add("abc123", "Happy")
        await self.meter.open("abc123")
        views = self.meter.views()
        await anext(views)

        await self.store.fail(ConnectionError("network-lost"))
        view = await asyncio.wait_for(anext(views), timeout=1.0)

        assert view.state is MeterState.ERROR
        assert view.grid is None
        assert "network-lost" in view.message
        assert view.message.startswith("An error occurred while fetching mood data.")

        # A failure ends the stream
        assert [v async for v in views] == []
        await self.meter.close()

    async def test_resubscribe_drops_previous_session(self):
        """Test that switching sessions never shows the old session's entries."""
        await self.store.add("first", "Happy")
        await self.store.add("second", "Calm")

        await self.meter.open("first")
        old = self.meter.subscription
        first_view = await self.meter.first_view()
        assert first_view.grid.frequency("Happy") == 1

        await self.meter.open("second")
        assert old.closed
        assert self.meter.subscription is not old
        assert self.store.subscriptions == [self.meter.subscription]

        view = await self.meter.first_view()
        assert view.session_id == "second"
        assert view.grid.frequency("Happy") == 0
        assert view.grid.frequency("Calm") == 1

        # Updates from the detached handle are discarded
        assert self.meter.apply_snapshot(old, await self.store.query("first")) is None
        assert self.meter.apply_error(old, ConnectionError("late")) is None
        assert self.meter.view.session_id == "second"

        await self.meter.close()

    async def test_reopening_same_session_keeps_subscription(self):
        await self.meter.open("abc123")
        subscription = self.meter.subscription

        await self.meter.open("abc123")
        assert self.meter.subscription is subscription

        await self.meter.close()

    async def test_close_releases_subscription(self):
        await self.meter.open("abc123")
        subscription = self.meter.subscription

        await self.meter.close()

        assert subscription.closed
        assert self.store.subscriptions == []
        assert self.meter.state is MeterState.IDLE
