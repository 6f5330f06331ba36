"""
The mood meter: a live view of one session's emotion grid.

A MoodMeter resolves a session from route parameters, owns the single live
subscription for it, and turns every delivered snapshot or failure into a
MeterView that can be rendered as JSON, SSE or HTML.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import aclosing
from enum import Enum

from pydantic import BaseModel

from .errors import NO_DATA_MESSAGE, SubscriptionError
from .grid import EmotionGrid, build_grid
from .models import MoodEntry
from .session import ResolutionStatus, resolve_session
from .store import MoodStore, Subscription

logger = logging.getLogger(__name__)


class MeterState(str, Enum):
    IDLE = "idle"
    AWAITING_ROUTE = "awaiting_route"
    INVALID_SESSION = "invalid_session"
    SUBSCRIBING = "subscribing"
    LOADING = "loading"
    RENDERING = "rendering"
    NO_DATA = "no_data"
    ERROR = "error"


LOADING_MESSAGE = "Loading mood data..."


class MeterView(BaseModel):
    """What the meter currently shows: a grid or a message, never both."""

    state: MeterState
    session_id: str | None = None
    message: str | None = None
    grid: EmotionGrid | None = None

    @property
    def is_message(self) -> bool:
        return self.grid is None


class MoodMeter:
    """
    Aggregation component bound to one store.

    The meter holds at most one subscription. Opening a new session detaches
    the previous subscription first, and updates coming from any handle other
    than the current one are discarded.
    """

    def __init__(self, store: MoodStore) -> None:
        self._store = store
        self._subscription: Subscription | None = None
        self.view = MeterView(state=MeterState.IDLE)

    @property
    def state(self) -> MeterState:
        return self.view.state

    @property
    def subscription(self) -> Subscription | None:
        return self._subscription

    async def open(
        self, session_param: str | None, route_ready: bool = True
    ) -> MeterView:
        """
        Resolve the session and start listening for its entries.

        Args:
            session_param: Raw ``sessionID`` route parameter
            route_ready: Whether routing information is available yet

        Returns:
            The view after resolution (awaiting route, invalid session or
            loading)
        """
        resolution = resolve_session(session_param, route_ready)
        current = self._subscription
        if (
            resolution.ok
            and current is not None
            and not current.closed
            and current.session_id == resolution.session_id
        ):
            return self.view

        await self.close()

        if resolution.status is ResolutionStatus.PENDING:
            self.view = MeterView(state=MeterState.AWAITING_ROUTE)
            return self.view

        if resolution.status is ResolutionStatus.INVALID:
            self.view = MeterView(
                state=MeterState.INVALID_SESSION, message=resolution.message
            )
            return self.view

        session_id = resolution.session_id
        self.view = MeterView(state=MeterState.SUBSCRIBING, session_id=session_id)
        self._subscription = await self._store.subscribe(session_id)
        self.view = MeterView(
            state=MeterState.LOADING, session_id=session_id, message=LOADING_MESSAGE
        )
        return self.view

    def apply_snapshot(
        self, subscription: Subscription, entries: list[MoodEntry]
    ) -> MeterView | None:
        """
        Render a snapshot delivered by ``subscription``.

        Returns:
            The new view, or None when the snapshot came from a stale handle
        """
        if not self._is_current(subscription):
            logger.debug("Discarding snapshot from stale %r", subscription)
            return None

        session_id = subscription.session_id
        matching = [e for e in entries if e.session_id == session_id]
        if not matching:
            self.view = MeterView(
                state=MeterState.NO_DATA, session_id=session_id, message=NO_DATA_MESSAGE
            )
        else:
            self.view = MeterView(
                state=MeterState.RENDERING,
                session_id=session_id,
                grid=build_grid(matching),
            )
        return self.view

    def apply_error(
        self, subscription: Subscription, error: BaseException
    ) -> MeterView | None:
        """Render a subscription failure, unless it came from a stale handle."""
        if not self._is_current(subscription):
            return None

        if not isinstance(error, SubscriptionError):
            error = SubscriptionError(error)

        logger.error("Error fetching mood data: %s", error.cause)
        self.view = MeterView(
            state=MeterState.ERROR,
            session_id=subscription.session_id,
            message=str(error),
        )
        return self.view

    async def views(self) -> AsyncGenerator[MeterView, None]:
        """
        Yield a view for every snapshot or failure of the current subscription.

        Empty snapshots yield a no-data view and listening continues, so late
        entries for the session are picked up. A failure yields an error view
        and ends the iteration. Without a live subscription the current view
        is yielded once.
        """
        subscription = self._subscription
        if subscription is None or subscription.closed:
            yield self.view
            return

        try:
            async with aclosing(subscription.snapshots()) as snapshots:
                async for entries in snapshots:
                    view = self.apply_snapshot(subscription, entries)
                    if view is None:
                        return
                    yield view
        except SubscriptionError as e:
            view = self.apply_error(subscription, e)
            if view is not None:
                yield view

    async def first_view(self) -> MeterView:
        """Return the view for the first delivered snapshot only."""
        async with aclosing(self.views()) as views:
            async for view in views:
                return view
        return self.view

    async def close(self) -> None:
        """Detach the current subscription and reset to idle."""
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            await self._store.unsubscribe(subscription)
        self.view = MeterView(state=MeterState.IDLE)

    def _is_current(self, subscription: Subscription) -> bool:
        return subscription is self._subscription and not subscription.closed
