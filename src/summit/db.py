import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from summit.errors import ConflictError, RepositoryError
from summit.models import Attraction, Membership

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS attractions (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT DEFAULT '',
    speaker TEXT DEFAULT '',
    location TEXT DEFAULT '',
    type TEXT DEFAULT '',
    event_date TEXT DEFAULT '',
    start_time TEXT DEFAULT '',
    end_time TEXT DEFAULT ''
);

CREATE TABLE IF NOT EXISTS user_attractions (
    user_id TEXT NOT NULL,
    attraction_id TEXT NOT NULL,
    added_at TEXT NOT NULL,
    PRIMARY KEY (user_id, attraction_id),
    FOREIGN KEY (attraction_id) REFERENCES attractions(id) ON DELETE CASCADE
);
"""


class AgendaDB:
    """SQLite store for attractions and agenda memberships.

    Implements the attraction repository interface for offline use.
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        if str(db_path) != ":memory:":
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(str(self.db_path))
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.conn.execute("PRAGMA foreign_keys=ON")
        self._init_schema()

    def _init_schema(self):
        self.conn.executescript(SCHEMA)
        self.conn.commit()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self.conn.close()

    def commit(self):
        self.conn.commit()

    def upsert_attraction(self, attraction: Attraction):
        """Insert or update an attraction."""
        self.conn.execute(
            """INSERT INTO attractions (id, title, description, speaker, location, type,
                 event_date, start_time, end_time)
               VALUES (:id, :title, :description, :speaker, :location, :type,
                 :event_date, :start_time, :end_time)
               ON CONFLICT(id) DO UPDATE SET
                 title=excluded.title, description=excluded.description,
                 speaker=excluded.speaker, location=excluded.location, type=excluded.type,
                 event_date=excluded.event_date, start_time=excluded.start_time,
                 end_time=excluded.end_time""",
            attraction.to_record(),
        )

    def clear_attractions(self):
        """Delete all attractions (and, by cascade, their memberships)."""
        self.conn.execute("DELETE FROM attractions")
        self.conn.commit()

    def attraction_count(self) -> int:
        row = self.conn.execute("SELECT COUNT(*) as cnt FROM attractions").fetchone()
        return row["cnt"]

    async def list_attractions(self) -> list[Attraction]:
        try:
            rows = self.conn.execute(
                "SELECT * FROM attractions ORDER BY event_date, start_time"
            ).fetchall()
        except sqlite3.Error as exc:
            raise RepositoryError(f"Could not list attractions: {exc}") from exc
        return [Attraction.from_record(dict(row)) for row in rows]

    async def list_memberships(self, user_id: str) -> list[Membership]:
        try:
            rows = self.conn.execute(
                """SELECT user_id, attraction_id, added_at FROM user_attractions
                   WHERE user_id = ? ORDER BY added_at DESC""",
                (user_id,),
            ).fetchall()
        except sqlite3.Error as exc:
            raise RepositoryError(f"Could not list memberships: {exc}") from exc
        return [
            Membership(
                user_id=row["user_id"],
                attraction_id=row["attraction_id"],
                added_at=row["added_at"],
            )
            for row in rows
        ]

    async def create_membership(self, user_id: str, attraction_id: str) -> None:
        added_at = datetime.now(timezone.utc).isoformat()
        try:
            self.conn.execute(
                "INSERT INTO user_attractions (user_id, attraction_id, added_at) VALUES (?, ?, ?)",
                (user_id, attraction_id, added_at),
            )
            self.conn.commit()
        except sqlite3.IntegrityError as exc:
            self.conn.rollback()
            if "UNIQUE" in str(exc) or "PRIMARY KEY" in str(exc):
                raise ConflictError(
                    f"Attraction {attraction_id} already in agenda of {user_id}"
                ) from exc
            raise RepositoryError(f"Could not add attraction {attraction_id}: {exc}") from exc
        except sqlite3.Error as exc:
            self.conn.rollback()
            raise RepositoryError(f"Could not add attraction {attraction_id}: {exc}") from exc

    async def delete_membership(self, user_id: str, attraction_id: str) -> None:
        try:
            cursor = self.conn.execute(
                "DELETE FROM user_attractions WHERE user_id = ? AND attraction_id = ?",
                (user_id, attraction_id),
            )
            self.conn.commit()
        except sqlite3.Error as exc:
            self.conn.rollback()
            raise RepositoryError(f"Could not remove attraction {attraction_id}: {exc}") from exc
        if cursor.rowcount == 0:
            logger.debug("Membership %s/%s already absent", user_id, attraction_id)
