import logging

from summit.config import Settings
from summit.db import AgendaDB
from summit.models import UserContext
from summit.repository import AttractionRepository
from summit.rest import RestRepository

logger = logging.getLogger(__name__)


def build_repository(settings: Settings, user: UserContext | None = None) -> AttractionRepository:
    """Pick the repository adapter matching the configured backend."""
    if settings.backend == "rest":
        logger.info("Using managed backend at %s", settings.supabase_url)
        return RestRepository.from_settings(settings, user)
    logger.info("Using local database %s", settings.db_path)
    return AgendaDB(settings.db_path)


async def close_repository(repository: AttractionRepository) -> None:
    if isinstance(repository, RestRepository):
        await repository.aclose()
    elif isinstance(repository, AgendaDB):
        repository.close()
