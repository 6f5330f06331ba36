"""
Mood entry storage for the Mood Meter service.

This module provides an in-memory "moods" collection that supports equality
queries on ``sessionID`` and live, push-based subscriptions to those queries.
The design allows for easy replacement with a hosted realtime database.
"""

import asyncio
import logging
import time
import uuid
from collections import Counter
from collections.abc import AsyncGenerator, Mapping
from contextlib import asynccontextmanager
from typing import Any

from pydantic import ValidationError

from .errors import SubscriptionClosedError, SubscriptionError
from .models import MoodEntry

logger = logging.getLogger(__name__)

FILTER_FIELD = "sessionID"


class Subscription:
    """
    Handle for one live query against the store.

    A handle is owned by a single consumer. Iterate :meth:`snapshots` to
    receive the current result set and every later one; detach it with
    :meth:`MoodStore.unsubscribe`.
    """

    def __init__(self, store: "MoodStore", session_id: str) -> None:
        self.id = uuid.uuid4().hex
        self.session_id = session_id
        self._store = store
        self._closed = False
        self._error: BaseException | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<Subscription {self.id[:8]} {FILTER_FIELD}={self.session_id!r} {state}>"

    async def snapshots(self) -> AsyncGenerator[list[MoodEntry], None]:
        """
        Yield the entries matching this subscription's filter.

        The current snapshot is yielded immediately, then a fresh one after
        every insertion for the session. Superseded snapshots are skipped when
        the consumer is slower than the writers.

        Raises:
            SubscriptionClosedError: If the handle was already detached
            SubscriptionError: If the store reported a failure for this handle
        """
        if self._closed:
            raise SubscriptionClosedError(f"{self!r} is already closed")

        store = self._store
        condition = store._condition

        async with condition:
            self._raise_if_failed()
            last_seen_version = store._versions[self.session_id]
            snapshot = store._select(self.session_id)
        yield snapshot

        while True:
            async with condition:
                await condition.wait_for(
                    lambda: self._closed
                    or self._error is not None
                    or store._versions[self.session_id] > last_seen_version
                )
                if self._closed:
                    return
                self._raise_if_failed()

                last_seen_version = store._versions[self.session_id]
                snapshot = store._select(self.session_id)
            yield snapshot

    def _raise_if_failed(self) -> None:
        if self._error is not None:
            raise SubscriptionError(self._error)


class MoodStore:
    """
    In-memory mood entry collection with live query subscriptions.

    Writers bump a per-session version counter and notify an asyncio
    condition; each subscription re-runs its query when the version of its
    session moves.
    """

    def __init__(self, collection: str = "moods") -> None:
        self.collection = collection
        self._entries: dict[str, MoodEntry] = {}
        self._versions: Counter[str] = Counter()
        self._subscriptions: dict[str, Subscription] = {}
        self._condition = asyncio.Condition()

    @property
    def subscriptions(self) -> list[Subscription]:
        """Currently attached subscription handles."""
        return list(self._subscriptions.values())

    async def add(self, session_id: str, mood: str) -> MoodEntry:
        """
        Store a new mood entry and notify subscribers of its session.

        Args:
            session_id: Session the entry belongs to
            mood: Emotion label

        Returns:
            The stored MoodEntry with its assigned id and timestamp
        """
        async with self._condition:
            entry = MoodEntry(
                id=uuid.uuid4().hex,
                session_id=session_id,
                mood=mood,
                timestamp=time.time(),
            )
            self._entries[entry.id] = entry
            self._versions[session_id] += 1

            self._condition.notify_all()

            logger.debug("Stored %s entry %s for %s", mood, entry.id, session_id)
            return entry

    async def load(self, records: Mapping[str, Mapping[str, Any]]) -> int:
        """
        Import raw records keyed by id, as exported from a realtime database.

        Records that do not validate as MoodEntry are skipped.

        Returns:
            The number of records imported
        """
        imported = 0
        async with self._condition:
            for key, record in records.items():
                try:
                    entry = MoodEntry.model_validate({**record, "id": key})
                except (ValidationError, TypeError) as e:
                    logger.warning("Skipping malformed mood record %s: %s", key, e)
                    continue

                self._entries[entry.id] = entry
                self._versions[entry.session_id] += 1
                imported += 1

            self._condition.notify_all()

        return imported

    async def query(self, session_id: str) -> list[MoodEntry]:
        """Return a one-shot snapshot of the entries for a session."""
        async with self._condition:
            return self._select(session_id)

    async def subscribe(self, session_id: str) -> Subscription:
        """Open a live query for all entries whose sessionID equals session_id."""
        async with self._condition:
            subscription = Subscription(self, session_id)
            self._subscriptions[subscription.id] = subscription

        logger.info("Opened %r on %s", subscription, self.collection)
        return subscription

    async def unsubscribe(self, subscription: Subscription) -> None:
        """Detach a subscription and end its snapshot iteration."""
        async with self._condition:
            if subscription._closed:
                return
            subscription._closed = True
            self._subscriptions.pop(subscription.id, None)

            self._condition.notify_all()

        logger.info("Closed %r", subscription)

    async def fail(self, error: BaseException, session_id: str | None = None) -> int:
        """
        Deliver a transport failure to live subscriptions.

        Args:
            error: The underlying failure reason
            session_id: Only fail subscriptions for this session when given

        Returns:
            The number of subscriptions that received the failure
        """
        async with self._condition:
            failed = 0
            for subscription in self._subscriptions.values():
                if session_id is None or subscription.session_id == session_id:
                    subscription._error = error
                    failed += 1

            self._condition.notify_all()

        logger.warning("Delivered failure %r to %d subscription(s)", error, failed)
        return failed

    async def close(self) -> None:
        """Detach every live subscription."""
        for subscription in self.subscriptions:
            await self.unsubscribe(subscription)

    @asynccontextmanager
    async def stream(
        self, session_id: str
    ) -> AsyncGenerator[AsyncGenerator[list[MoodEntry], None], None]:
        """
        Stream snapshots for a session, detaching the subscription on exit.

        Yields:
            An async generator of entry snapshots
        """
        subscription = await self.subscribe(session_id)
        try:
            yield subscription.snapshots()
        finally:
            await self.unsubscribe(subscription)

    def _select(self, session_id: str) -> list[MoodEntry]:
        return [e for e in self._entries.values() if e.session_id == session_id]
