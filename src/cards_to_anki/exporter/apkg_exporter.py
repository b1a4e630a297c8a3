"""Export decks and cards to Anki .apkg format."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from ..database import CollectionDatabase
from ..errors import UnknownDeck
from ..ids import IdentityAllocator, now_ms
from ..models import CardInput, Deck, ExportOptions, ExportRequest, NoteType
from ..rows import build_rows
from ..schema import SchemaTemplate
from .package_writer import PackageWriter

logger = logging.getLogger(__name__)

DeckLike = Deck | dict[str, Any]
CardLike = CardInput | dict[str, Any]


class ApkgExporter:
    """
    Build a complete .apkg archive from decks and cards.

    Every call produces a fresh collection with its own id allocator and
    database, so one exporter can serve concurrent calls.
    """

    def __init__(
        self,
        options: Optional[ExportOptions] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        """
        Initialize the exporter.

        Args:
            options: Note type rendering options
            clock: Returns epoch milliseconds; seeds ids for each export
        """
        self.options = options or ExportOptions()
        self.clock = clock or now_ms
        self.template = SchemaTemplate(self.options)
        self.writer = PackageWriter()

    @staticmethod
    def _request(decks: Iterable[DeckLike], cards: Iterable[CardLike]) -> ExportRequest:
        return ExportRequest.model_validate({"decks": list(decks), "cards": list(cards)})

    def _build_collection(self, request: ExportRequest) -> bytes:
        """Run schema, insert every note and card in input order, serialize."""
        allocator = IdentityAllocator(self.clock())
        first_type = request.cards[0].effective_note_type if request.cards else NoteType.BASIC.value
        schema = self.template.build(first_type, request.decks, allocator.seed_ms)
        model_ids = allocator.model_ids()

        deck_ids = {deck.id for deck in request.decks}
        mod_time = allocator.seed_ms // 1000

        with CollectionDatabase() as db:
            db.run_script(schema.script)
            for card in request.cards:
                if card.deck_id not in deck_ids:
                    raise UnknownDeck(card.deck_id)
                note_row, card_row = build_rows(card, model_ids, allocator, mod_time)
                db.insert_note(note_row)
                db.insert_card(card_row)
            logger.info(f"Built collection with {len(request.cards)} cards in {len(deck_ids)} decks")
            return db.export_bytes()

    def generate(self, decks: Iterable[DeckLike], cards: Iterable[CardLike]) -> bytes:
        """
        Generate a package.

        Args:
            decks: Decks to create; the first becomes the current deck
            cards: Cards to add, processed in order

        Returns:
            The .apkg archive as bytes
        """
        request = self._request(decks, cards)
        return self.writer.pack(self._build_collection(request))

    async def agenerate(self, decks: Iterable[DeckLike], cards: Iterable[CardLike]) -> bytes:
        """Async version of generate(); database and archive work run off the event loop."""
        request = self._request(decks, cards)
        collection = await asyncio.to_thread(self._build_collection, request)
        return await self.writer.apack(collection)

    def export(
        self,
        decks: Iterable[DeckLike],
        cards: Iterable[CardLike],
        output_path: str | Path,
    ) -> Path:
        """
        Export the package to an .apkg file.

        Args:
            decks: Decks to create
            cards: Cards to add
            output_path: Path for the output file

        Returns:
            Path to the created file
        """
        data = self.generate(decks, cards)
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(data)
        return output_path


async def generate_apkg(
    decks: Iterable[DeckLike],
    cards: Iterable[CardLike],
    options: Optional[ExportOptions] = None,
) -> bytes:
    """Build an .apkg archive with a one-off exporter."""
    return await ApkgExporter(options).agenerate(decks, cards)
