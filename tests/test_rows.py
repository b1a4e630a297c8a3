"""Tests for note and card row building."""

import re

import pytest

from cards_to_anki.errors import UnknownNoteType
from cards_to_anki.ids import IdentityAllocator, compute_csum
from cards_to_anki.models import CardInput
from cards_to_anki.rows import build_rows, format_tags, note_fields

SEED = 1_700_000_000_000
MODEL_IDS = {"basic": SEED, "cloze": SEED + 1}
MOD_TIME = SEED // 1000


def create_test_card(**kwargs) -> CardInput:
    """Helper to create test cards."""
    values = {"deck_id": 1, "front": "Q", "back": "A"}
    values.update(kwargs)
    return CardInput(**values)


class TestNoteFields:
    """Test field encoding."""

    def test_basic_fields(self):
        flds, sfld = note_fields(create_test_card())
        assert flds == "Q\u001fA"
        assert sfld == "Q"

    def test_cloze_fields(self):
        text = "The sky is {{c1::blue}}."
        flds, sfld = note_fields(create_test_card(note_type="cloze", text=text))
        assert flds == sfld == text

    def test_unknown_type(self):
        with pytest.raises(UnknownNoteType) as exc_info:
            note_fields(create_test_card(note_type="unsupported"))
        assert exc_info.value.note_type == "unsupported"


class TestBuildRows:
    """Test full row construction."""

    def test_basic_rows(self):
        allocator = IdentityAllocator(SEED)
        note, card = build_rows(create_test_card(front="2+2", back="4"), MODEL_IDS, allocator, MOD_TIME)

        assert note.id == SEED
        assert note.mid == SEED
        assert note.flds == "2+2\u001f4"
        assert note.sfld == "2+2"
        assert note.csum == compute_csum("2+2")
        assert note.mod == MOD_TIME
        assert note.tags == ""

        assert card.id == SEED * 10
        assert card.nid == note.id
        assert card.did == 1
        assert (card.type, card.queue, card.due) == (0, 0, 0)

    def test_cloze_rows_use_cloze_model(self):
        allocator = IdentityAllocator(SEED)
        card = create_test_card(note_type="cloze", text="{{c1::Paris}} is in France")
        note, _ = build_rows(card, MODEL_IDS, allocator, MOD_TIME)
        assert note.mid == SEED + 1

    def test_guid_is_hex_and_unique(self):
        allocator = IdentityAllocator(SEED)
        guids = {
            build_rows(create_test_card(), MODEL_IDS, allocator, MOD_TIME)[0].guid
            for _ in range(50)
        }
        assert len(guids) == 50
        assert all(re.fullmatch(r"[0-9a-f]{32}", guid) for guid in guids)

    def test_checksum_independent_of_note_id(self):
        a, _ = build_rows(create_test_card(), MODEL_IDS, IdentityAllocator(SEED), MOD_TIME)
        b, _ = build_rows(create_test_card(), MODEL_IDS, IdentityAllocator(SEED + 99), MOD_TIME)
        assert a.id != b.id
        assert a.csum == b.csum

    def test_unknown_type_allocates_nothing(self):
        allocator = IdentityAllocator(SEED)
        with pytest.raises(UnknownNoteType):
            build_rows(create_test_card(note_type="image"), MODEL_IDS, allocator, MOD_TIME)
        assert allocator.next_note_id() == SEED
        assert allocator.next_card_id() == SEED * 10

    def test_tags(self):
        note, _ = build_rows(
            create_test_card(tags=["geo", "capitals"]), MODEL_IDS, IdentityAllocator(SEED), MOD_TIME
        )
        assert note.tags == " geo capitals "


def test_format_tags_empty():
    assert format_tags([]) == ""
