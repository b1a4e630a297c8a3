"""In-memory SQLite collection database."""

import logging
import sqlite3

from .errors import AssetMissing, EngineFailure
from .models import CardRow, NoteRow

logger = logging.getLogger(__name__)

INSERT_NOTE_SQL = """
INSERT INTO notes (id, guid, mid, mod, usn, tags, flds, sfld, csum, flags, data)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

INSERT_CARD_SQL = """
INSERT INTO cards (
    id, nid, did, ord, mod, usn, type, queue,
    due, ivl, factor, reps, lapses, left,
    odue, odid, flags, data
)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""


def _require_serialization() -> None:
    if not hasattr(sqlite3.Connection, "serialize"):
        raise AssetMissing(
            f"sqlite3 {sqlite3.sqlite_version} in this interpreter cannot serialize databases"
        )


class CollectionDatabase:
    """
    An empty in-memory collection driven as schema, then rows, then export.

    Rows can only be inserted after the schema script ran, and the script
    runs exactly once.
    """

    def __init__(self):
        _require_serialization()
        self._conn = sqlite3.connect(":memory:")
        self._schema_loaded = False
        self.notes_inserted = 0
        self.cards_inserted = 0

    def __enter__(self) -> "CollectionDatabase":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def run_script(self, script: str) -> None:
        """Execute the schema and seed script."""
        if self._schema_loaded:
            raise EngineFailure("Schema script already executed on this database")
        try:
            self._conn.executescript(script)
        except (sqlite3.Error, UnicodeEncodeError) as e:
            raise EngineFailure(f"Schema script failed: {e}") from e
        self._schema_loaded = True

    def _insert(self, sql: str, params: tuple) -> None:
        if not self._schema_loaded:
            raise EngineFailure("Cannot insert rows before the schema script ran")
        try:
            self._conn.execute(sql, params)
        except (sqlite3.Error, OverflowError, UnicodeEncodeError) as e:
            raise EngineFailure(f"Insert failed: {e}") from e

    def insert_note(self, note: NoteRow) -> None:
        self._insert(INSERT_NOTE_SQL, note.as_params())
        self.notes_inserted += 1

    def insert_card(self, card: CardRow) -> None:
        self._insert(INSERT_CARD_SQL, card.as_params())
        self.cards_inserted += 1

    def export_bytes(self) -> bytes:
        """Serialize the whole database image."""
        try:
            self._conn.commit()
            data = self._conn.serialize()
        except sqlite3.Error as e:
            raise EngineFailure(f"Could not serialize database: {e}") from e
        logger.debug(
            f"Serialized collection: {self.notes_inserted} notes, "
            f"{self.cards_inserted} cards, {len(data)} bytes"
        )
        return bytes(data)

    def close(self) -> None:
        self._conn.close()


def open_collection(data: bytes) -> sqlite3.Connection:
    """Load a serialized collection image into a fresh in-memory connection."""
    _require_serialization()
    conn = sqlite3.connect(":memory:")
    try:
        conn.deserialize(data)
        conn.execute("PRAGMA schema_version").fetchone()
    except sqlite3.Error as e:
        conn.close()
        raise EngineFailure(f"Not a valid collection image: {e}") from e
    return conn
