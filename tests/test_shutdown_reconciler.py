import asyncio
import threading
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from models.events import EnteredEvent
from services.errors import StorageError
from services.session_store import SessionStore
from services.session_tracker import SessionTracker
from services.shutdown_reconciler import ShutdownReconciler
from tests.helpers import T0


@pytest.mark.asyncio
async def test_reconcile_closes_open_sessions_at_now(store, clock):
    tracker = SessionTracker(store, clock=clock)
    await tracker.handle_event(EnteredEvent(user_id="u1", guild_id="g1", channel_id="c1"))
    clock.advance(600)
    reconciler = ShutdownReconciler(store, tracker, clock=clock)

    assert await reconciler.reconcile() == 1

    [session] = store.find_by_scope("g1")
    assert session.start_time == T0
    assert session.end_time == T0 + timedelta(seconds=600)
    assert not tracker.accepting
    assert reconciler.done


@pytest.mark.asyncio
async def test_second_reconcile_modifies_nothing(store, clock):
    tracker = SessionTracker(store, clock=clock)
    store.create("u1", "g1", "c1", T0)
    clock.advance(60)
    reconciler = ShutdownReconciler(store, tracker, clock=clock)
    await reconciler.reconcile()

    clock.advance(60)
    assert await reconciler.reconcile() == 0

    [session] = store.find_by_scope("g1")
    assert session.end_time == T0 + timedelta(seconds=60)


@pytest.mark.asyncio
async def test_events_after_reconcile_are_ignored(store, clock):
    tracker = SessionTracker(store, clock=clock)
    reconciler = ShutdownReconciler(store, tracker, clock=clock)
    await reconciler.reconcile()

    await tracker.handle_event(EnteredEvent(user_id="u1", guild_id="g1", channel_id="c1"))

    assert store.count_open() == 0


@pytest.mark.asyncio
async def test_storage_failure_does_not_block_shutdown(caplog):
    store = MagicMock(spec=SessionStore)
    store.close_all_open.side_effect = StorageError("database is locked")
    tracker = SessionTracker(store)
    reconciler = ShutdownReconciler(store, tracker)

    assert await reconciler.reconcile() == 0

    assert "database is locked" in caplog.text
    store.close_all_open.assert_called_once()
    assert await reconciler.reconcile() == 0
    store.close_all_open.assert_called_once()


@pytest.mark.asyncio
async def test_entered_in_flight_during_reconcile_leaves_nothing_open(store, clock):
    gate = threading.Event()
    reached = threading.Event()
    original_find = store.find_open_by_user

    def slow_find(user_id):
        reached.set()
        gate.wait(timeout=5)
        return original_find(user_id)

    store.find_open_by_user = slow_find
    tracker = SessionTracker(store, clock=clock)
    reconciler = ShutdownReconciler(store, tracker, clock=clock)

    handler = asyncio.create_task(
        tracker.handle_event(EnteredEvent(user_id="u1", guild_id="g1", channel_id="c1"))
    )
    while not reached.is_set():
        await asyncio.sleep(0.01)
    reconciling = asyncio.create_task(reconciler.reconcile())
    await asyncio.sleep(0.05)
    gate.set()
    await asyncio.gather(handler, reconciling)

    assert store.count_open() == 0
    assert store.find_by_scope("g1") == []
    assert tracker.stats["sessions_opened"] == 0


@pytest.mark.asyncio
async def test_reconcile_gives_up_waiting_after_drain_timeout(store, clock):
    gate = threading.Event()
    reached = threading.Event()
    original_find = store.find_open_by_user

    def stuck_find(user_id):
        reached.set()
        gate.wait(timeout=5)
        return original_find(user_id)

    store.find_open_by_user = stuck_find
    store.create("u2", "g1", "c1", T0)
    tracker = SessionTracker(store, clock=clock, drain_timeout=0.05)
    reconciler = ShutdownReconciler(store, tracker, clock=clock)

    handler = asyncio.create_task(
        tracker.handle_event(EnteredEvent(user_id="u1", guild_id="g1", channel_id="c1"))
    )
    while not reached.is_set():
        await asyncio.sleep(0.01)

    assert await reconciler.reconcile() == 1

    gate.set()
    await handler
    assert store.count_open() == 0
