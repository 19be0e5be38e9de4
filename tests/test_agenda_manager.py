"""Tests for the membership toggle state machine."""

import asyncio

import pytest

from summit.agenda_manager import (
    ADDED_NOTICE,
    AGENDA_FETCH_FAILED_NOTICE,
    REMOVED_NOTICE,
    TOGGLE_FAILED_NOTICE,
    AgendaManager,
    ToggleOutcome,
)
from summit.models import Membership, Severity


@pytest.fixture
def manager(repository, user, notifications):
    return AgendaManager(repository, user, notifications.append)


def run(coro):
    return asyncio.run(coro)


class TestAdd:
    def test_successful_add(self, manager, repository, notifications):
        assert run(manager.add("1")) is ToggleOutcome.ADDED
        assert manager.selected_ids == {"1"}
        assert ("user-1", "1") in repository.memberships
        assert notifications == [ADDED_NOTICE]

    def test_failed_add_leaves_set_unchanged(self, manager, repository, notifications):
        repository.fail_create = True
        assert run(manager.toggle("1")) is ToggleOutcome.FAILED
        assert manager.selected_ids == set()
        assert notifications == [TOGGLE_FAILED_NOTICE]
        assert notifications[0].severity is Severity.ERROR
        assert not manager.is_pending("1")

    def test_add_when_present_makes_no_request(self, manager, repository):
        run(manager.add("1"))
        repository.calls.clear()
        assert run(manager.add("1")) is ToggleOutcome.UNCHANGED
        assert repository.calls == []

    def test_conflict_is_reported_as_failure(self, manager, repository, notifications):
        repository.memberships[("user-1", "1")] = Membership("user-1", "1")
        assert run(manager.add("1")) is ToggleOutcome.FAILED
        assert not manager.is_selected("1")
        assert notifications == [TOGGLE_FAILED_NOTICE]


class TestRemove:
    def test_add_then_remove_round_trip(self, manager, repository, notifications):
        before = manager.selected_ids
        run(manager.toggle("1"))
        assert run(manager.toggle("1")) is ToggleOutcome.REMOVED
        assert manager.selected_ids == before
        assert repository.memberships == {}
        assert notifications == [ADDED_NOTICE, REMOVED_NOTICE]

    def test_failed_remove_keeps_id(self, manager, repository, notifications):
        run(manager.add("1"))
        repository.fail_delete = True
        assert run(manager.remove("1")) is ToggleOutcome.FAILED
        assert manager.is_selected("1")
        assert notifications[-1] == TOGGLE_FAILED_NOTICE

    def test_remove_when_absent_makes_no_request(self, manager, repository):
        assert run(manager.remove("1")) is ToggleOutcome.UNCHANGED
        assert repository.calls == []


class TestSingleFlight:
    def test_second_toggle_for_same_id_is_rejected(self, manager, repository):
        async def scenario():
            repository.gate = asyncio.Event()
            first = asyncio.create_task(manager.toggle("1"))
            await asyncio.sleep(0)
            assert manager.is_pending("1")
            second = await manager.toggle("1")
            repository.gate.set()
            return await first, second

        first, second = run(scenario())
        assert first is ToggleOutcome.ADDED
        assert second is ToggleOutcome.BUSY
        creates = [c for c in repository.calls if c[0] == "create_membership"]
        assert len(creates) == 1
        assert not manager.is_pending("1")

    def test_different_ids_are_independent(self, manager, repository):
        async def scenario():
            repository.gate = asyncio.Event()
            tasks = [asyncio.create_task(manager.toggle(i)) for i in ("1", "2")]
            await asyncio.sleep(0)
            assert manager.is_pending("1") and manager.is_pending("2")
            repository.gate.set()
            return await asyncio.gather(*tasks)

        assert run(scenario()) == [ToggleOutcome.ADDED, ToggleOutcome.ADDED]
        assert manager.selected_ids == {"1", "2"}

    def test_set_not_mutated_before_confirmation(self, manager, repository):
        async def scenario():
            repository.gate = asyncio.Event()
            task = asyncio.create_task(manager.add("1"))
            await asyncio.sleep(0)
            during = manager.is_selected("1")
            repository.gate.set()
            await task
            return during

        assert run(scenario()) is False
        assert manager.is_selected("1")

    def test_in_flight_released_after_failure(self, manager, repository):
        repository.fail_create = True
        run(manager.add("1"))
        repository.fail_create = False
        assert run(manager.add("1")) is ToggleOutcome.ADDED


class TestUnauthenticated:
    def test_operations_are_skipped(self, repository, notifications):
        manager = AgendaManager(repository, None, notifications.append)
        assert run(manager.load_memberships()) is False
        assert run(manager.toggle("1")) is ToggleOutcome.SKIPPED
        assert run(manager.remove("1")) is ToggleOutcome.SKIPPED
        assert repository.calls == []
        assert notifications == []


class TestLoadMemberships:
    def test_loads_existing_memberships(self, manager, repository):
        repository.memberships[("user-1", "2")] = Membership("user-1", "2", "2024-10-01")
        repository.memberships[("other", "1")] = Membership("other", "1", "2024-10-01")
        assert run(manager.load_memberships()) is True
        assert manager.selected_ids == {"2"}

    def test_fetch_failure_notifies_and_empties(self, manager, repository, notifications):
        run(manager.add("1"))
        repository.fail_list = True
        assert run(manager.load_memberships()) is False
        assert manager.selected_ids == set()
        assert notifications[-1] == AGENDA_FETCH_FAILED_NOTICE

    def test_agenda_entries_follow_memberships(self, manager, scenario_attractions):
        run(manager.add("1"))
        run(manager.add("2"))
        entries = manager.agenda_entries(scenario_attractions)
        assert sorted(e.id for e in entries) == ["1", "2"]
        assert all(e.added_at for e in entries)

    def test_add_confirmed_during_fetch_survives_stale_snapshot(self, manager, repository):
        async def scenario():
            repository.list_gate = asyncio.Event()
            load = asyncio.create_task(manager.load_memberships())
            await asyncio.sleep(0)
            # the listing was taken before the insert landed
            assert await manager.add("2") is ToggleOutcome.ADDED
            repository.list_gate.set()
            assert await load is True
            return manager.selected_ids

        assert run(scenario()) == {"2"}
        assert ("user-1", "2") in repository.memberships

    def test_remove_confirmed_during_fetch_survives_stale_snapshot(self, manager, repository):
        repository.memberships[("user-1", "1")] = Membership("user-1", "1", "2024-10-01")
        run(manager.load_memberships())

        async def scenario():
            repository.list_gate = asyncio.Event()
            load = asyncio.create_task(manager.load_memberships())
            await asyncio.sleep(0)
            assert await manager.remove("1") is ToggleOutcome.REMOVED
            repository.list_gate.set()
            await load
            return manager.selected_ids

        assert run(scenario()) == set()
        assert repository.memberships == {}

    def test_toggle_after_stale_fetch_does_not_conflict(self, manager, repository, notifications):
        async def scenario():
            repository.list_gate = asyncio.Event()
            load = asyncio.create_task(manager.load_memberships())
            await asyncio.sleep(0)
            await manager.add("1")
            repository.list_gate.set()
            await load
            repository.list_gate = None
            return await manager.toggle("1")

        assert run(scenario()) is ToggleOutcome.REMOVED
        assert TOGGLE_FAILED_NOTICE not in notifications
