"""Read exported packages back, for inspection and verification."""

import io
import json
import sqlite3
import zipfile
from dataclasses import dataclass, field

from ..database import open_collection
from ..errors import EngineFailure, PackagingFailure
from .package_writer import COLLECTION_ENTRY


@dataclass
class PackageSummary:
    """What an exported package contains."""

    entries: list[str]
    note_count: int = 0
    card_count: int = 0
    deck_ids: list[int] = field(default_factory=list)
    deck_names: list[str] = field(default_factory=list)
    model_ids: list[int] = field(default_factory=list)


def read_collection_entry(apkg_bytes: bytes) -> tuple[list[str], bytes]:
    """
    Pull the collection image out of a package.

    Returns:
        (entry names, collection bytes) tuple
    """
    try:
        with zipfile.ZipFile(io.BytesIO(apkg_bytes)) as zf:
            return zf.namelist(), zf.read(COLLECTION_ENTRY)
    except (zipfile.BadZipFile, KeyError) as e:
        raise PackagingFailure(f"Not a valid package: {e}") from e


def summarize_package(apkg_bytes: bytes) -> PackageSummary:
    """Open a package and count what it holds."""
    entries, collection = read_collection_entry(apkg_bytes)
    conn = open_collection(collection)
    try:
        note_count = conn.execute("SELECT count(*) FROM notes").fetchone()[0]
        card_count = conn.execute("SELECT count(*) FROM cards").fetchone()[0]
        col = conn.execute("SELECT models, decks FROM col").fetchone()
    except sqlite3.Error as e:
        raise EngineFailure(f"Collection is missing expected tables: {e}") from e
    finally:
        conn.close()

    if col is None:
        raise EngineFailure("Collection has no col row")
    models_json, decks_json = col
    decks = json.loads(decks_json)
    return PackageSummary(
        entries=entries,
        note_count=note_count,
        card_count=card_count,
        deck_ids=[d["id"] for d in decks.values()],
        deck_names=[d["name"] for d in decks.values()],
        model_ids=[int(k) for k in json.loads(models_json)],
    )
