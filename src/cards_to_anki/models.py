"""Data models for the deck-to-package export pipeline."""

import json
from dataclasses import astuple, dataclass
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator, model_validator

# Separates field values inside a note's flds column
FIELD_SEPARATOR = "\x1f"

# SQLite INTEGER range
SQLITE_INT_MIN = -(2**63)
SQLITE_INT_MAX = 2**63 - 1

DEFAULT_QUESTION_FORMAT = "{{Front}}"
DEFAULT_ANSWER_FORMAT = '{{FrontSide}}\n\n<hr id="answer">\n\n{{Back}}'
DEFAULT_CSS = """.card {
    font-family: arial;
    font-size: 20px;
    text-align: center;
    color: black;
    background-color: white;
}"""


def check_utf8(value: str) -> str:
    """Reject text that cannot be stored as UTF-8, such as lone surrogates."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ValueError(f"text is not valid UTF-8: {e.reason}") from e
    return value


Utf8Str = Annotated[str, AfterValidator(check_utf8)]


class NoteType(str, Enum):
    """The note types every package ships with."""

    BASIC = "basic"
    CLOZE = "cloze"


class Deck(BaseModel):
    """A named deck supplied by the caller."""

    id: int = Field(
        ge=SQLITE_INT_MIN, le=SQLITE_INT_MAX, description="Deck id, unique within one export"
    )
    name: Utf8Str = Field(description="Display name, '::' nests decks in Anki")


class CardInput(BaseModel):
    """A single card to export, in the caller's input shape."""

    model_config = ConfigDict(populate_by_name=True)

    deck_id: int = Field(
        alias="deckId",
        ge=SQLITE_INT_MIN,
        le=SQLITE_INT_MAX,
        description="Id of the deck this card goes into",
    )
    note_type: Optional[Utf8Str] = Field(
        default=None, alias="noteType", description="'basic' (default) or 'cloze'"
    )

    # Content - for basic notes
    front: Optional[Utf8Str] = Field(default=None)
    back: Optional[Utf8Str] = Field(default=None)

    # Content - for cloze notes
    text: Optional[Utf8Str] = Field(default=None, description="Cloze text with {{c1::...}} markup")

    tags: list[Utf8Str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_content(self) -> "CardInput":
        note_type = self.effective_note_type
        if note_type == NoteType.BASIC.value and (self.front is None or self.back is None):
            raise ValueError("basic cards need both 'front' and 'back'")
        if note_type == NoteType.CLOZE.value and self.text is None:
            raise ValueError("cloze cards need 'text'")
        return self

    @field_validator("tags")
    @classmethod
    def check_tags(cls, tags: list[str]) -> list[str]:
        for tag in tags:
            if not tag or any(c.isspace() for c in tag):
                raise ValueError(f"invalid tag {tag!r}: tags must be non-empty and contain no whitespace")
        return tags

    @property
    def effective_note_type(self) -> str:
        return self.note_type or NoteType.BASIC.value


class ExportRequest(BaseModel):
    """Everything one export call needs: the decks and the cards to place in them."""

    decks: list[Deck] = Field(default_factory=list)
    cards: list[CardInput] = Field(default_factory=list)

    @field_validator("decks")
    @classmethod
    def check_unique_deck_ids(cls, decks: list[Deck]) -> list[Deck]:
        seen: set[int] = set()
        for deck in decks:
            if deck.id in seen:
                raise ValueError(f"duplicate deck id {deck.id}")
            seen.add(deck.id)
        return decks

    @classmethod
    def from_json(cls, source: str | Path) -> "ExportRequest":
        """
        Load a request from a JSON document.

        Args:
            source: Path to a JSON file, or the JSON text itself

        Returns:
            Validated ExportRequest
        """
        if isinstance(source, Path):
            return cls.model_validate(json.loads(source.read_text(encoding="utf-8")))
        return cls.model_validate_json(source)


class ExportOptions(BaseModel):
    """Rendering options applied to the generated note types."""

    question_format: Utf8Str = Field(
        default=DEFAULT_QUESTION_FORMAT, description="Front template of the Basic note type"
    )
    answer_format: Utf8Str = Field(
        default=DEFAULT_ANSWER_FORMAT, description="Back template of the Basic note type"
    )
    css: Utf8Str = Field(default=DEFAULT_CSS, description="Styling shared by both note types")


@dataclass(frozen=True)
class NoteRow:
    """One row of the notes table, in column order."""

    id: int
    guid: str
    mid: int
    mod: int
    usn: int
    tags: str
    flds: str
    sfld: str
    csum: int
    flags: int
    data: str

    def as_params(self) -> tuple:
        return astuple(self)


@dataclass(frozen=True)
class FreshCardDefaults:
    """Scheduling state of a card that was just added and never reviewed."""

    ord: int = 0
    usn: int = 0
    type: int = 0
    queue: int = 0
    due: int = 0
    ivl: int = 0
    factor: int = 0
    reps: int = 0
    lapses: int = 0
    left: int = 0
    odue: int = 0
    odid: int = 0
    flags: int = 0
    data: str = ""


FRESH_CARD_DEFAULTS = FreshCardDefaults()


@dataclass(frozen=True)
class CardRow:
    """One row of the cards table, in column order."""

    id: int
    nid: int
    did: int
    ord: int
    mod: int
    usn: int
    type: int
    queue: int
    due: int
    ivl: int
    factor: int
    reps: int
    lapses: int
    left: int
    odue: int
    odid: int
    flags: int
    data: str

    @classmethod
    def fresh(cls, card_id: int, note_id: int, deck_id: int, mod: int) -> "CardRow":
        """Build a card row carrying FRESH_CARD_DEFAULTS for all scheduling columns."""
        d = FRESH_CARD_DEFAULTS
        return cls(
            id=card_id,
            nid=note_id,
            did=deck_id,
            ord=d.ord,
            mod=mod,
            usn=d.usn,
            type=d.type,
            queue=d.queue,
            due=d.due,
            ivl=d.ivl,
            factor=d.factor,
            reps=d.reps,
            lapses=d.lapses,
            left=d.left,
            odue=d.odue,
            odid=d.odid,
            flags=d.flags,
            data=d.data,
        )

    def as_params(self) -> tuple:
        return astuple(self)
