import json
import logging
from collections import Counter
from pathlib import Path

from summit.agenda_manager import Notifier
from summit.errors import ErrorKind, RepositoryError
from summit.models import Attraction, Notification, Severity
from summit.repository import AttractionRepository

logger = logging.getLogger(__name__)

ATTRACTIONS_FETCH_FAILED_NOTICE = Notification(
    "Erro ao carregar atrações",
    "Não foi possível carregar as atrações do evento.",
    Severity.ERROR,
)


def load_attractions_from_json(json_path: Path) -> list[Attraction]:
    """Load attractions from a JSON snapshot of the form {"attractions": [...]}."""
    with open(json_path, encoding="utf-8") as f:
        data = json.load(f)
    records = data.get("attractions", []) if isinstance(data, dict) else data
    attractions = []
    for record in records:
        try:
            attractions.append(Attraction.from_record(record))
        except (KeyError, TypeError, AttributeError) as exc:
            logger.warning("Skipping malformed attraction record %r: %s", record, exc)
    return attractions


class AttractionLoader:
    """Fetches and holds the attraction catalogue."""

    def __init__(self, repository: AttractionRepository, notify: Notifier):
        self.repository = repository
        self._notify = notify
        self._attractions: list[Attraction] = []
        self.loading = False

    async def load_attractions(self) -> list[Attraction]:
        """Fetch all attractions. An empty list is kept on failure."""
        self.loading = True
        try:
            self._attractions = await self.repository.list_attractions()
        except RepositoryError:
            logger.warning("%s: could not fetch attractions", ErrorKind.FETCH.value, exc_info=True)
            self._attractions = []
            self._notify(ATTRACTIONS_FETCH_FAILED_NOTICE)
        finally:
            self.loading = False
        return list(self._attractions)

    @property
    def attractions(self) -> list[Attraction]:
        return list(self._attractions)

    def get(self, attraction_id: str) -> Attraction | None:
        for attraction in self._attractions:
            if attraction.id == attraction_id:
                return attraction
        return None

    def type_counts(self) -> dict[str, int]:
        """Number of attractions per type, in first-seen order."""
        return dict(Counter(a.type for a in self._attractions))

    def attraction_count(self) -> int:
        return len(self._attractions)
