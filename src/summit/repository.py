"""Attraction repository interface."""

from typing import Protocol

from summit.models import Attraction, Membership


class AttractionRepository(Protocol):
    """Interface for the store holding attractions and agenda memberships.

    Every method raises ``RepositoryError`` on failure.
    """

    async def list_attractions(self) -> list[Attraction]:
        """All attractions ordered by event_date, then start_time."""
        ...

    async def list_memberships(self, user_id: str) -> list[Membership]:
        """Memberships of a user, most recently added first."""
        ...

    async def create_membership(self, user_id: str, attraction_id: str) -> None:
        """Add an attraction to a user's agenda. Raises ConflictError if present."""
        ...

    async def delete_membership(self, user_id: str, attraction_id: str) -> None:
        """Remove an attraction from a user's agenda. Absent pairs are not an error."""
        ...
