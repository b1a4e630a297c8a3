"""Wrap a serialized collection in an .apkg archive."""

import asyncio
import io
import logging
import zipfile

from ..errors import PackagingFailure

logger = logging.getLogger(__name__)

# Anki looks for this entry name when importing a package
COLLECTION_ENTRY = "collection.anki2"


class PackageWriter:
    """Builds the archive: a single uncompressed collection entry, no media manifest."""

    def __init__(self, entry_name: str = COLLECTION_ENTRY):
        self.entry_name = entry_name

    def pack(self, database_bytes: bytes) -> bytes:
        """
        Wrap database bytes in a zip archive.

        Args:
            database_bytes: Serialized collection image

        Returns:
            The archive as bytes
        """
        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, "w", zipfile.ZIP_STORED) as zf:
                zf.writestr(self.entry_name, database_bytes)
        except (OSError, ValueError, zipfile.LargeZipFile) as e:
            raise PackagingFailure(f"Could not write package: {e}") from e

        archive = buffer.getvalue()
        logger.debug(f"Packed {len(database_bytes)} byte collection into {len(archive)} byte archive")
        return archive

    async def apack(self, database_bytes: bytes) -> bytes:
        """Same as pack(), finalized in a worker thread."""
        return await asyncio.to_thread(self.pack, database_bytes)
