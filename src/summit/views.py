import logging
from datetime import date
from typing import Iterable

from summit.models import (
    AgendaEntry,
    Attraction,
    Membership,
    KNOWN_TYPES,
    FALLBACK_TYPE_STYLE,
)

logger = logging.getLogger(__name__)

ALL_TYPES = "all"

TYPE_FILTERS = [ALL_TYPES, *KNOWN_TYPES]

TYPE_FILTER_LABELS = {
    ALL_TYPES: "Todos os tipos",
    "palestra": "Palestras",
    "workshop": "Workshops",
    "estande": "Estandes",
    "networking": "Networking",
}

WEEKDAYS = [
    "segunda-feira",
    "terça-feira",
    "quarta-feira",
    "quinta-feira",
    "sexta-feira",
    "sábado",
    "domingo",
]

WEEKDAYS_SHORT = ["seg", "ter", "qua", "qui", "sex", "sáb", "dom"]

MONTHS = [
    "janeiro",
    "fevereiro",
    "março",
    "abril",
    "maio",
    "junho",
    "julho",
    "agosto",
    "setembro",
    "outubro",
    "novembro",
    "dezembro",
]


def browse_filter(
    attractions: Iterable[Attraction],
    search: str = "",
    type_filter: str = ALL_TYPES,
) -> list[Attraction]:
    """Filter attractions by free-text search and type.

    The search matches title, speaker or description, case-insensitively.
    Input order is preserved.
    """
    query = search.lower()

    def matches(attraction: Attraction) -> bool:
        if type_filter != ALL_TYPES and attraction.type != type_filter:
            return False
        if not query:
            return True
        return (
            query in attraction.title.lower()
            or query in attraction.speaker.lower()
            or query in attraction.description.lower()
        )

    return [a for a in attractions if matches(a)]


def build_agenda(
    attractions: Iterable[Attraction], memberships: Iterable[Membership]
) -> list[AgendaEntry]:
    """Join memberships to their attractions.

    Memberships pointing at an unknown attraction are dropped, and only the
    first membership seen for a given attraction is kept.
    """
    by_id = {a.id: a for a in attractions}
    entries: list[AgendaEntry] = []
    seen: set[str] = set()
    for membership in memberships:
        attraction = by_id.get(membership.attraction_id)
        if attraction is None:
            logger.debug("Membership for unknown attraction %r skipped", membership.attraction_id)
            continue
        if attraction.id in seen:
            continue
        seen.add(attraction.id)
        entries.append(AgendaEntry(attraction=attraction, added_at=membership.added_at))
    return entries


def sort_agenda(entries: Iterable[AgendaEntry]) -> list[AgendaEntry]:
    """Sort entries by date then start time (ISO strings sort chronologically)."""
    return sorted(entries, key=lambda e: (e.event_date, e.start_time))


def group_by_date(entries: Iterable[AgendaEntry]) -> dict[str, list[AgendaEntry]]:
    """Partition sorted entries by event_date, keeping first-occurrence order."""
    groups: dict[str, list[AgendaEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.event_date, []).append(entry)
    return groups


def agenda_view(entries: Iterable[AgendaEntry]) -> dict[str, list[AgendaEntry]]:
    """The date-grouped, time-sorted agenda."""
    return group_by_date(sort_agenda(entries))


def type_label(attraction_type: str) -> str:
    """Human-readable label for a type; unknown types show their raw value."""
    known = KNOWN_TYPES.get(attraction_type)
    return known.label if known else attraction_type


def type_style(attraction_type: str) -> str:
    """Rich style for a type badge."""
    known = KNOWN_TYPES.get(attraction_type)
    return known.style if known else FALLBACK_TYPE_STYLE


def format_time(time_str: str) -> str:
    """Trim an HH:MM:SS time to HH:MM."""
    return time_str[:5]


def format_time_range(start: str, end: str, separator: str = " - ") -> str:
    """Format a start/end time pair into a display string."""
    if end:
        return f"{format_time(start)}{separator}{format_time(end)}"
    return format_time(start)


def _parse_date(date_str: str) -> date | None:
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        logger.warning("Unrecognized date format: %r", date_str)
        return None


def format_date_short(date_str: str) -> str:
    """Short card date like 'qui, 10/10'."""
    parsed = _parse_date(date_str)
    if parsed is None:
        return date_str
    return f"{WEEKDAYS_SHORT[parsed.weekday()]}, {parsed.day:02d}/{parsed.month:02d}"


def format_date_header(date_str: str) -> str:
    """Long agenda header like 'quinta-feira, 10 de outubro de 2024'."""
    parsed = _parse_date(date_str)
    if parsed is None:
        return date_str
    weekday = WEEKDAYS[parsed.weekday()]
    month = MONTHS[parsed.month - 1]
    return f"{weekday}, {parsed.day:02d} de {month} de {parsed.year}"


def attraction_count_label(count: int) -> str:
    noun = "atração programada" if count == 1 else "atrações programadas"
    return f"{count} {noun}"
