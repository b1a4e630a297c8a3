"""Tests for archive packaging."""

import io
import zipfile

import pytest

from cards_to_anki.database import open_collection
from cards_to_anki.errors import EngineFailure, PackagingFailure
from cards_to_anki.exporter import COLLECTION_ENTRY, ApkgExporter, PackageWriter, summarize_package
from cards_to_anki.exporter.reader import read_collection_entry


class TestPackageWriter:
    """Test the single-entry archive."""

    def test_single_collection_entry(self):
        archive = PackageWriter().pack(b"database bytes")

        with zipfile.ZipFile(io.BytesIO(archive)) as zf:
            infos = zf.infolist()
            assert [info.filename for info in infos] == ["collection.anki2"]
            assert infos[0].compress_type == zipfile.ZIP_STORED
            assert zf.read(COLLECTION_ENTRY) == b"database bytes"

    @pytest.mark.asyncio
    async def test_apack_matches_pack(self):
        writer = PackageWriter()
        archive = await writer.apack(b"database bytes")

        entries, data = read_collection_entry(archive)
        assert entries == [COLLECTION_ENTRY]
        assert data == b"database bytes"


class TestReadCollectionEntry:
    """Test reading packages back."""

    def test_not_a_zip(self):
        with pytest.raises(PackagingFailure):
            read_collection_entry(b"plain bytes")

    def test_missing_collection(self):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as zf:
            zf.writestr("media", "{}")
        with pytest.raises(PackagingFailure):
            read_collection_entry(buffer.getvalue())


def test_pack_write_error(monkeypatch):
    """Archive write errors surface as PackagingFailure."""

    def failing_writestr(self, *args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(zipfile.ZipFile, "writestr", failing_writestr)
    with pytest.raises(PackagingFailure):
        PackageWriter().pack(b"database bytes")


def test_summary_of_collection_without_col_row():
    """A collection whose col table is empty is reported, not unpacked."""
    archive = ApkgExporter().generate([{"id": 1, "name": "Deck A"}], [])
    _, collection = read_collection_entry(archive)

    conn = open_collection(collection)
    try:
        conn.execute("DELETE FROM col")
        conn.commit()
        emptied = conn.serialize()
    finally:
        conn.close()

    with pytest.raises(EngineFailure):
        summarize_package(PackageWriter().pack(emptied))
