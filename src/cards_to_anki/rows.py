"""Convert input cards into notes/cards table rows."""

import uuid

from .errors import UnknownNoteType
from .ids import IdentityAllocator, compute_csum
from .models import FIELD_SEPARATOR, CardInput, CardRow, NoteRow, NoteType


def format_tags(tags: list[str]) -> str:
    """Render tags the way Anki stores them: space separated, padded with spaces."""
    if not tags:
        return ""
    return f" {' '.join(tags)} "


def note_fields(card: CardInput) -> tuple[str, str]:
    """
    Derive the field string and sort field of a card's note.

    Returns:
        (flds, sfld) tuple
    """
    note_type = card.effective_note_type
    if note_type == NoteType.CLOZE.value:
        return card.text, card.text
    if note_type == NoteType.BASIC.value:
        return f"{card.front}{FIELD_SEPARATOR}{card.back}", card.front
    raise UnknownNoteType(card.note_type)


def build_rows(
    card: CardInput,
    model_ids: dict[str, int],
    allocator: IdentityAllocator,
    mod_time: int,
) -> tuple[NoteRow, CardRow]:
    """
    Build the note row and its single card row for one input card.

    Args:
        card: Validated input card
        model_ids: Note type ids keyed by "basic"/"cloze"
        allocator: This export's id allocator
        mod_time: Modification time in epoch seconds

    Returns:
        (NoteRow, CardRow) tuple
    """
    flds, sfld = note_fields(card)
    model_id = model_ids.get(card.effective_note_type)
    if model_id is None:
        raise UnknownNoteType(card.note_type)

    note = NoteRow(
        id=allocator.next_note_id(),
        guid=uuid.uuid4().hex,
        mid=model_id,
        mod=mod_time,
        usn=0,
        tags=format_tags(card.tags),
        flds=flds,
        sfld=sfld,
        csum=compute_csum(sfld),
        flags=0,
        data="",
    )
    card_row = CardRow.fresh(
        card_id=allocator.next_card_id(),
        note_id=note.id,
        deck_id=card.deck_id,
        mod=mod_time,
    )
    return note, card_row
