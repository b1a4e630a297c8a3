"""Exceptions raised while building an Anki package.

Every failure aborts the whole export; no partial archive is ever returned.
"""

from typing import Optional


class ExportError(Exception):
    """Base exception for package export errors."""


class AssetMissing(ExportError):
    """Raised when the schema text or the embedded database runtime is unavailable."""


class TemplateMalformed(ExportError):
    """Raised when the schema text lacks one of its substitution points."""

    def __init__(self, placeholder: str):
        self.placeholder = placeholder
        super().__init__(f"Schema template is missing placeholder {placeholder}")


class UnknownNoteType(ExportError):
    """Raised when a card declares a note type other than basic or cloze."""

    def __init__(self, note_type: Optional[str]):
        self.note_type = note_type
        super().__init__(f"Unsupported note type: {note_type!r} (expected 'basic' or 'cloze')")


class UnknownDeck(ExportError):
    """Raised when a card points at a deck id that was not supplied."""

    def __init__(self, deck_id: int):
        self.deck_id = deck_id
        super().__init__(f"Card references unknown deck id {deck_id}")


class EngineFailure(ExportError):
    """Raised when the embedded database rejects the schema or a row."""


class PackagingFailure(ExportError):
    """Raised when the archive cannot be written."""
