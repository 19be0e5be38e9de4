"""Shared fixtures: attraction factory and an in-memory repository."""

import asyncio

import pytest

from summit.errors import ConflictError, RepositoryError
from summit.models import Attraction, Membership, UserContext


class FakeRepository:
    """In-memory attraction repository with switchable failures."""

    def __init__(self, attractions=None):
        self.attractions = list(attractions or [])
        self.memberships: dict[tuple[str, str], Membership] = {}
        self.calls: list[tuple] = []
        self.fail_list = False
        self.fail_create = False
        self.fail_delete = False
        self.gate: asyncio.Event | None = None
        self.list_gate: asyncio.Event | None = None

    async def _wait(self):
        if self.gate is not None:
            await self.gate.wait()

    async def list_attractions(self):
        self.calls.append(("list_attractions",))
        if self.fail_list:
            raise RepositoryError("boom")
        return sorted(self.attractions, key=lambda a: (a.event_date, a.start_time))

    async def list_memberships(self, user_id):
        self.calls.append(("list_memberships", user_id))
        if self.fail_list:
            raise RepositoryError("boom")
        snapshot = [m for (uid, _), m in self.memberships.items() if uid == user_id]
        if self.list_gate is not None:
            await self.list_gate.wait()
        return snapshot

    async def create_membership(self, user_id, attraction_id):
        self.calls.append(("create_membership", user_id, attraction_id))
        await self._wait()
        if self.fail_create:
            raise RepositoryError("create failed")
        if (user_id, attraction_id) in self.memberships:
            raise ConflictError("duplicate")
        self.memberships[(user_id, attraction_id)] = Membership(user_id, attraction_id, "2024-10-01T00:00:00")

    async def delete_membership(self, user_id, attraction_id):
        self.calls.append(("delete_membership", user_id, attraction_id))
        await self._wait()
        if self.fail_delete:
            raise RepositoryError("delete failed")
        self.memberships.pop((user_id, attraction_id), None)


@pytest.fixture
def make_attraction():
    """Factory for creating attractions."""
    def _make(
        id: str,
        title: str = "Talk",
        event_date: str = "2024-10-10",
        start_time: str = "09:00:00",
        end_time: str = "10:00:00",
        type: str = "palestra",
        speaker: str = "",
        description: str = "",
        location: str = "",
    ) -> Attraction:
        return Attraction(
            id=id,
            title=title,
            description=description,
            speaker=speaker,
            location=location,
            type=type,
            event_date=event_date,
            start_time=start_time,
            end_time=end_time,
        )
    return _make


@pytest.fixture
def scenario_attractions(make_attraction):
    return [
        make_attraction("1", title="Intro AI", start_time="09:00:00", type="palestra"),
        make_attraction("2", title="Rust 101", start_time="08:00:00", type="workshop"),
    ]


@pytest.fixture
def user():
    return UserContext(user_id="user-1", email="ana@example.com", full_name="Ana")


@pytest.fixture
def repository(scenario_attractions):
    return FakeRepository(scenario_attractions)


@pytest.fixture
def notifications():
    return []
