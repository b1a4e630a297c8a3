"""Identifier allocation and sort-field checksums for one export run."""

import hashlib
import time
from typing import Optional

from .models import NoteType


def compute_csum(sort_field: str) -> int:
    """
    Compute the checksum Anki stores alongside a note's sort field.

    First 8 hex digits of the SHA-1 of the UTF-8 text, read as an unsigned
    integer. Anki uses it for duplicate detection only; collisions are fine.
    """
    digest = hashlib.sha1(sort_field.encode("utf-8")).hexdigest()
    return int(digest[:8], 16)


def now_ms() -> int:
    return int(time.time() * 1000)


def model_ids_for(timestamp_ms: int) -> dict[str, int]:
    """Note type ids for an export started at timestamp_ms."""
    return {
        NoteType.BASIC.value: timestamp_ms,
        NoteType.CLOZE.value: timestamp_ms + 1,
    }


class IdentityAllocator:
    """
    Hands out note and card ids for a single export.

    Note ids start at the seed (epoch milliseconds) and card ids at ten times
    the seed, so every card id is larger than every note id of the same run.
    Never share an instance between exports.
    """

    def __init__(self, seed_ms: Optional[int] = None):
        """
        Initialize the allocator.

        Args:
            seed_ms: Start timestamp in epoch milliseconds (default: now)
        """
        self.seed_ms = now_ms() if seed_ms is None else seed_ms
        self._next_note_id = self.seed_ms
        self._next_card_id = self.seed_ms * 10

    def next_note_id(self) -> int:
        note_id = self._next_note_id
        self._next_note_id += 1
        return note_id

    def next_card_id(self) -> int:
        card_id = self._next_card_id
        self._next_card_id += 1
        return card_id

    def model_ids(self) -> dict[str, int]:
        """Note type ids for this run, derived from the same seed."""
        return model_ids_for(self.seed_ms)
