# tests/test_store.py

from __future__ import annotations

import asyncio
import logging

import pytest

from task_tracker.errors import NetworkFailure, RemoteRejected, TaskNotFound
from task_tracker.models import FilterSet, SortKey, TaskPatch
from task_tracker.sorting import sort_tasks
from task_tracker.store import TaskStore

from .fakes import FakeGateway, FakeIdentity, make_task


def ids(tasks):
    return [t.id for t in tasks]


def abc_tasks():
    return [
        make_task("A", "alpha", priority="high", completed=False, category="Work", created_minutes=1),
        make_task("B", "bravo", priority="low", completed=True, category="Home", created_minutes=2),
        make_task("C", "charlie", priority="medium", completed=False, category="Work", created_minutes=3),
    ]


async def loaded_store(tasks=None, **gateway_kwargs):
    gateway = FakeGateway(abc_tasks() if tasks is None else tasks, **gateway_kwargs)
    identity = FakeIdentity()
    store = TaskStore(gateway, identity)
    await store.refresh()
    return store, gateway, identity


class TestRefresh:
    @pytest.mark.asyncio
    async def test_populates_all_and_visible(self):
        store, gateway, _ = await loaded_store()
        assert ids(store.all_tasks()) == ["A", "B", "C"]
        assert store.visible_tasks() == store.all_tasks()
        assert gateway.calls == [("list",)]

    @pytest.mark.asyncio
    async def test_without_identity_clears_and_skips_gateway(self):
        store, gateway, identity = await loaded_store()
        identity.current_user = None
        await store.refresh()
        assert store.all_tasks() == ()
        assert store.visible_tasks() == ()
        assert gateway.calls == [("list",)]

    @pytest.mark.asyncio
    async def test_is_loading_while_fetch_in_flight(self):
        gateway = FakeGateway(abc_tasks())
        gateway.gate = asyncio.Event()
        store = TaskStore(gateway, FakeIdentity())
        assert store.is_loading() is False

        pending = asyncio.create_task(store.refresh())
        await asyncio.sleep(0)
        assert store.is_loading() is True

        gateway.gate.set()
        await pending
        assert store.is_loading() is False
        assert len(store.all_tasks()) == 3

    @pytest.mark.asyncio
    async def test_fetch_finishing_after_logout_is_discarded(self):
        gateway = FakeGateway(abc_tasks())
        gateway.gate = asyncio.Event()
        identity = FakeIdentity()
        store = TaskStore(gateway, identity)
        seen = []
        store.subscribe(seen.append)

        pending = asyncio.create_task(store.refresh())
        await asyncio.sleep(0)
        await identity.change(None)

        gateway.gate.set()
        await pending
        assert store.all_tasks() == ()
        assert store.visible_tasks() == ()
        assert store.is_loading() is False
        assert seen == [()]

    @pytest.mark.asyncio
    async def test_start_loads_for_signed_in_identity(self):
        gateway = FakeGateway(abc_tasks())
        store = TaskStore(gateway, FakeIdentity("alice"))
        assert gateway.calls == []

        await store.start()
        assert ids(store.all_tasks()) == ["A", "B", "C"]
        assert gateway.calls == [("list",)]

    @pytest.mark.asyncio
    async def test_failure_propagates_and_keeps_state(self):
        store, gateway, _ = await loaded_store()
        gateway.fail_with = NetworkFailure("Failed to fetch tasks: unreachable")
        with pytest.raises(NetworkFailure):
            await store.refresh()
        assert ids(store.all_tasks()) == ["A", "B", "C"]
        assert store.is_loading() is False

    @pytest.mark.asyncio
    async def test_filters_and_sort_survive_refresh(self):
        store, gateway, _ = await loaded_store()
        store.apply_filter({"category": "Work"})
        store.apply_sort("title")
        gateway.tasks.append(make_task("D", "able", category="Work"))
        await store.refresh()
        assert ids(store.visible_tasks()) == ["D", "A", "C"]
        assert store.active_filters() == FilterSet(category="Work")
        assert store.active_sort() is SortKey.TITLE


class TestIdentityChanges:
    @pytest.mark.asyncio
    async def test_logout_clears_and_login_fetches(self):
        store, gateway, identity = await loaded_store()

        await identity.change(None)
        assert store.all_tasks() == ()

        await identity.change("bob")
        assert ids(store.all_tasks()) == ["A", "B", "C"]
        assert gateway.calls.count(("list",)) == 2

    @pytest.mark.asyncio
    async def test_refresh_failure_after_login_is_logged(self, caplog):
        gateway = FakeGateway(abc_tasks())
        identity = FakeIdentity(user=None)
        store = TaskStore(gateway, identity)
        gateway.fail_with = RemoteRejected("Not authorized, token failed", 401)

        with caplog.at_level(logging.WARNING, logger="task_tracker.store"):
            await identity.change("alice")

        assert store.all_tasks() == ()
        assert "Not authorized, token failed" in caplog.text

    @pytest.mark.asyncio
    async def test_close_stops_following_identity(self):
        store, gateway, identity = await loaded_store()
        store.close()
        await identity.change(None)
        assert len(store.all_tasks()) == 3


class TestMutations:
    @pytest.mark.asyncio
    async def test_create_appends_and_respects_view(self):
        store, _, _ = await loaded_store(next_id=9)
        store.apply_filter({"completed": False})
        store.apply_sort("priority")

        created = await store.create_task({"title": "X", "priority": "low", "completed": False})

        assert created.id == "9"
        assert store.get_task("9") == created
        assert ids(store.all_tasks()) == ["A", "B", "C", "9"]
        assert ids(store.visible_tasks()) == ["A", "C", "9"]

    @pytest.mark.asyncio
    async def test_create_failure_leaves_state_unchanged(self):
        store, gateway, _ = await loaded_store()
        before_all, before_visible = store.all_tasks(), store.visible_tasks()
        gateway.fail_with = RemoteRejected("Title is required", 400)

        with pytest.raises(RemoteRejected) as excinfo:
            await store.create_task({"title": "X"})

        assert excinfo.value.message == "Title is required"
        assert store.all_tasks() == before_all
        assert store.visible_tasks() == before_visible

    @pytest.mark.asyncio
    async def test_update_replaces_by_id_and_resorts(self):
        store, _, _ = await loaded_store()
        store.apply_sort("priority")
        assert ids(store.visible_tasks()) == ["A", "C", "B"]

        updated = await store.update_task("B", {"priority": "high", "title": "bravo!"})

        assert updated.title == "bravo!"
        assert ids(store.all_tasks()) == ["A", "B", "C"]
        assert store.get_task("B").priority == "high"
        assert ids(store.visible_tasks()) == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_update_moves_task_out_of_filter(self):
        store, _, _ = await loaded_store()
        store.apply_filter({"completed": False})
        await store.update_task("A", TaskPatch(completed=True))
        assert ids(store.visible_tasks()) == ["C"]

    @pytest.mark.asyncio
    async def test_update_unknown_id_defers_to_gateway(self):
        store, gateway, _ = await loaded_store()
        with pytest.raises(RemoteRejected):
            await store.update_task("missing", {"title": "nope"})
        assert gateway.calls[-1][:2] == ("update", "missing")
        assert ids(store.all_tasks()) == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_delete_removes_task(self):
        store, _, _ = await loaded_store()
        await store.delete_task("B")
        assert ids(store.all_tasks()) == ["A", "C"]
        assert ids(store.visible_tasks()) == ["A", "C"]

    @pytest.mark.asyncio
    async def test_delete_unknown_id_still_calls_gateway(self):
        store, gateway, _ = await loaded_store()
        before = store.all_tasks()
        await store.delete_task("zzz")
        assert gateway.calls[-1] == ("delete", "zzz")
        assert store.all_tasks() == before

    @pytest.mark.asyncio
    async def test_delete_failure_leaves_state_unchanged(self):
        store, gateway, _ = await loaded_store()
        gateway.fail_with = NetworkFailure("Failed to delete task: timeout")
        with pytest.raises(NetworkFailure):
            await store.delete_task("A")
        assert ids(store.all_tasks()) == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_create_then_delete_restores_state(self):
        store, _, _ = await loaded_store()
        store.apply_sort("title")
        before_all, before_visible = store.all_tasks(), store.visible_tasks()

        created = await store.create_task({"title": "temp"})
        await store.delete_task(created.id)

        assert store.all_tasks() == before_all
        assert store.visible_tasks() == before_visible

    @pytest.mark.asyncio
    async def test_toggle_completed(self):
        store, gateway, _ = await loaded_store()
        toggled = await store.toggle_completed("B")
        assert toggled.completed is False
        assert gateway.calls[-1] == ("update", "B", TaskPatch(completed=False))

    @pytest.mark.asyncio
    async def test_toggle_completed_unknown_id(self):
        store, gateway, _ = await loaded_store()
        with pytest.raises(TaskNotFound):
            await store.toggle_completed("missing")
        assert gateway.calls == [("list",)]


class TestFilterAndSort:
    @pytest.mark.asyncio
    async def test_filter_then_sort(self):
        store, _, _ = await loaded_store()
        store.apply_filter({"completed": False})
        store.apply_sort("priority")
        assert ids(store.visible_tasks()) == ["A", "C"]

    @pytest.mark.asyncio
    async def test_apply_filter_is_idempotent(self):
        store, _, _ = await loaded_store()
        store.apply_filter({"category": "Work"})
        first = store.visible_tasks()
        store.apply_filter({"category": "Work"})
        assert store.visible_tasks() == first

    @pytest.mark.asyncio
    async def test_apply_filter_replaces_previous_filters(self):
        store, _, _ = await loaded_store()
        store.apply_filter({"category": "Work"})
        store.apply_filter({"priority": "low"})
        assert ids(store.visible_tasks()) == ["B"]

    @pytest.mark.asyncio
    async def test_clear_filters_keeps_sort(self):
        store, _, _ = await loaded_store()
        store.apply_filter({"priority": "high"})
        store.apply_sort("title")
        store.clear_filters()

        assert store.active_filters() == FilterSet()
        assert store.active_filters().is_empty()
        assert store.active_sort() is SortKey.TITLE
        assert list(store.visible_tasks()) == sort_tasks(store.all_tasks(), "title")

    @pytest.mark.asyncio
    async def test_unrecognized_sort_key_resets_to_none(self):
        store, _, _ = await loaded_store()
        store.apply_sort("createdAt")
        assert ids(store.visible_tasks()) == ["C", "B", "A"]
        store.apply_sort("colour")
        assert store.active_sort() is None
        assert ids(store.visible_tasks()) == ["A", "B", "C"]


class TestSubscribers:
    @pytest.mark.asyncio
    async def test_subscribers_receive_fresh_snapshots(self):
        store, _, _ = await loaded_store()
        seen = []
        unsubscribe = store.subscribe(seen.append)

        store.apply_filter({"completed": True})
        snapshot = store.visible_tasks()
        store.clear_filters()

        assert [ids(s) for s in seen] == [["B"], ["A", "B", "C"]]
        assert ids(snapshot) == ["B"]
        assert isinstance(snapshot, tuple)

        unsubscribe()
        store.apply_sort("title")
        assert len(seen) == 2

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_break_store(self, caplog):
        store, _, _ = await loaded_store()

        def broken(_visible):
            raise RuntimeError("render failed")

        store.subscribe(broken)
        with caplog.at_level(logging.ERROR, logger="task_tracker.store"):
            store.apply_filter({"completed": True})
        assert ids(store.visible_tasks()) == ["B"]
        assert "subscriber raised" in caplog.text
