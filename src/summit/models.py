from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Attraction:
    """A scheduled event item: talk, workshop, booth or networking slot."""

    id: str
    title: str
    description: str = ""
    speaker: str = ""
    location: str = ""
    type: str = ""
    event_date: str = ""  # YYYY-MM-DD
    start_time: str = ""  # HH:MM:SS
    end_time: str = ""

    @classmethod
    def from_record(cls, record: dict) -> "Attraction":
        """Build an Attraction from a repository row or JSON object."""
        return cls(
            id=str(record["id"]),
            title=record.get("title") or "",
            description=record.get("description") or "",
            speaker=record.get("speaker") or "",
            location=record.get("location") or "",
            type=record.get("type") or "",
            event_date=record.get("event_date") or "",
            start_time=record.get("start_time") or "",
            end_time=record.get("end_time") or "",
        )

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "speaker": self.speaker,
            "location": self.location,
            "type": self.type,
            "event_date": self.event_date,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }


@dataclass(frozen=True)
class Membership:
    """Link between a user and an attraction in their personal agenda."""

    user_id: str
    attraction_id: str
    added_at: str = ""


@dataclass(frozen=True)
class AgendaEntry:
    """An attraction joined with the time it was added to the agenda."""

    attraction: Attraction
    added_at: str = ""

    @property
    def id(self) -> str:
        return self.attraction.id

    @property
    def event_date(self) -> str:
        return self.attraction.event_date

    @property
    def start_time(self) -> str:
        return self.attraction.start_time

    @property
    def end_time(self) -> str:
        return self.attraction.end_time

    @property
    def title(self) -> str:
        return self.attraction.title


@dataclass(frozen=True)
class AttractionType:
    """Display metadata for an attraction type."""

    value: str
    label: str
    style: str


KNOWN_TYPES = {
    "palestra": AttractionType("palestra", "Palestra", "bold white on dark_violet"),
    "workshop": AttractionType("workshop", "Workshop", "bold white on dark_cyan"),
    "estande": AttractionType("estande", "Estande", "bold black on gold3"),
    "networking": AttractionType("networking", "Networking", "black on grey70"),
}

FALLBACK_TYPE_STYLE = "white on grey37"


@dataclass
class UserContext:
    """The signed-in user, as supplied by the auth collaborator."""

    user_id: str
    email: str = ""
    full_name: str = ""
    access_token: str = ""

    @property
    def display_name(self) -> str:
        return self.full_name or self.email or self.user_id


class Severity(str, Enum):
    INFORMATION = "information"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A user-facing message: title, body and severity."""

    title: str
    message: str
    severity: Severity = Severity.INFORMATION
