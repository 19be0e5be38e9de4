import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from summit.errors import ErrorKind, RepositoryError
from summit.models import AgendaEntry, Attraction, Membership, Notification, Severity, UserContext
from summit.repository import AttractionRepository
from summit.views import build_agenda

logger = logging.getLogger(__name__)

Notifier = Callable[[Notification], None]

ADDED_NOTICE = Notification(
    "Adicionado à agenda",
    "A atração foi adicionada à sua agenda pessoal!",
)
REMOVED_NOTICE = Notification(
    "Removido da agenda",
    "A atração foi removida da sua agenda pessoal.",
)
TOGGLE_FAILED_NOTICE = Notification(
    "Erro ao atualizar agenda",
    "Não foi possível atualizar sua agenda. Tente novamente.",
    Severity.ERROR,
)
AGENDA_FETCH_FAILED_NOTICE = Notification(
    "Erro ao carregar agenda",
    "Não foi possível carregar sua agenda pessoal.",
    Severity.ERROR,
)


class ToggleOutcome(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"
    FAILED = "failed"
    BUSY = "busy"
    SKIPPED = "skipped"


class AgendaManager:
    """Tracks the current user's agenda and adds/removes attractions.

    The local membership set only changes after the repository confirms a
    write, and at most one request per attraction id is in flight.
    """

    def __init__(
        self,
        repository: AttractionRepository,
        user: UserContext | None,
        notify: Notifier,
    ):
        self.repository = repository
        self.user = user
        self._notify = notify
        self._memberships: dict[str, Membership] = {}
        self._in_flight: set[str] = set()
        # writes confirmed while a membership fetch is outstanding
        self._journals: list[dict[str, Membership | None]] = []

    async def load_memberships(self) -> bool:
        """Fetch the user's memberships. Returns False if the fetch failed."""
        if self.user is None:
            logger.debug("%s: no user, membership fetch skipped", ErrorKind.UNAUTHENTICATED.value)
            return False
        journal: dict[str, Membership | None] = {}
        self._journals.append(journal)
        try:
            memberships = await self.repository.list_memberships(self.user.user_id)
        except RepositoryError:
            logger.warning("%s: could not fetch memberships", ErrorKind.FETCH.value, exc_info=True)
            memberships = None
        finally:
            self._journals.remove(journal)

        fresh: dict[str, Membership] = {}
        for membership in memberships or []:
            fresh.setdefault(membership.attraction_id, membership)
        # the snapshot may predate toggles confirmed while it was in transit
        for attraction_id, membership in journal.items():
            if membership is None:
                fresh.pop(attraction_id, None)
            else:
                fresh[attraction_id] = membership
        self._memberships = fresh

        if memberships is None:
            self._notify(AGENDA_FETCH_FAILED_NOTICE)
            return False
        return True

    def _commit(self, attraction_id: str, membership: Membership | None):
        if membership is None:
            self._memberships.pop(attraction_id, None)
        else:
            self._memberships[attraction_id] = membership
        for journal in self._journals:
            journal[attraction_id] = membership

    async def add(self, attraction_id: str) -> ToggleOutcome:
        """Add an attraction to the agenda."""
        if self.user is None:
            return ToggleOutcome.SKIPPED
        if attraction_id in self._in_flight:
            return ToggleOutcome.BUSY
        if attraction_id in self._memberships:
            return ToggleOutcome.UNCHANGED

        self._in_flight.add(attraction_id)
        try:
            await self.repository.create_membership(self.user.user_id, attraction_id)
        except RepositoryError:
            logger.warning(
                "%s: could not add attraction %s", ErrorKind.TOGGLE.value, attraction_id,
                exc_info=True,
            )
            self._notify(TOGGLE_FAILED_NOTICE)
            return ToggleOutcome.FAILED
        finally:
            self._in_flight.discard(attraction_id)

        self._commit(attraction_id, Membership(
            user_id=self.user.user_id,
            attraction_id=attraction_id,
            added_at=datetime.now(timezone.utc).isoformat(),
        ))
        self._notify(ADDED_NOTICE)
        return ToggleOutcome.ADDED

    async def remove(self, attraction_id: str) -> ToggleOutcome:
        """Remove an attraction from the agenda."""
        if self.user is None:
            return ToggleOutcome.SKIPPED
        if attraction_id in self._in_flight:
            return ToggleOutcome.BUSY
        if attraction_id not in self._memberships:
            return ToggleOutcome.UNCHANGED

        self._in_flight.add(attraction_id)
        try:
            await self.repository.delete_membership(self.user.user_id, attraction_id)
        except RepositoryError:
            logger.warning(
                "%s: could not remove attraction %s", ErrorKind.TOGGLE.value, attraction_id,
                exc_info=True,
            )
            self._notify(TOGGLE_FAILED_NOTICE)
            return ToggleOutcome.FAILED
        finally:
            self._in_flight.discard(attraction_id)

        self._commit(attraction_id, None)
        self._notify(REMOVED_NOTICE)
        return ToggleOutcome.REMOVED

    async def toggle(self, attraction_id: str) -> ToggleOutcome:
        """Add the attraction if absent, remove it if present."""
        if attraction_id in self._memberships:
            return await self.remove(attraction_id)
        return await self.add(attraction_id)

    def is_selected(self, attraction_id: str) -> bool:
        return attraction_id in self._memberships

    def is_pending(self, attraction_id: str) -> bool:
        return attraction_id in self._in_flight

    @property
    def selected_ids(self) -> set[str]:
        return set(self._memberships)

    def agenda_entries(self, attractions: list[Attraction]) -> list[AgendaEntry]:
        """The user's memberships joined with the given attractions."""
        return build_agenda(attractions, self._memberships.values())
