"""Collection schema script builder.

Fills the four JSON blobs Anki keeps in its ``col`` row (collection config,
note types, decks and deck options) into the bundled schema text.
"""

import json
import logging
import re
import time
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from typing import Iterable, Optional

from ..errors import AssetMissing, TemplateMalformed
from ..ids import model_ids_for
from ..models import Deck, ExportOptions, NoteType

logger = logging.getLogger(__name__)

SCHEMA_RESOURCE = "template.sql"

CONF_PLACEHOLDER = "{{conf}}"
MODELS_PLACEHOLDER = "{{models}}"
DECKS_PLACEHOLDER = "{{decks}}"
DCONF_PLACEHOLDER = "{{dconf}}"

LATEX_PRE = r"""\documentclass[12pt]{article}
\special{papersize=3in,5in}
\usepackage[utf8]{inputenc}
\usepackage{amssymb,amsmath}
\pagestyle{empty}
\setlength{\parindent}{0in}
\begin{document}
"""
LATEX_POST = r"\end{document}"


@lru_cache(maxsize=1)
def load_schema_text() -> str:
    """Read the bundled schema text. Cached for the life of the process."""
    try:
        return resources.files(__package__).joinpath(SCHEMA_RESOURCE).read_text(encoding="utf-8")
    except OSError as e:
        raise AssetMissing(f"Cannot read schema template {SCHEMA_RESOURCE}: {e}") from e


def _sql_literal_json(value) -> str:
    """JSON-encode a blob for use inside a single-quoted SQL literal."""
    return json.dumps(value, ensure_ascii=False).replace("'", "''")


def _field(name: str, ord: int) -> dict:
    return {
        "name": name,
        "media": [],
        "sticky": False,
        "rtl": False,
        "ord": ord,
        "font": "Arial",
        "size": 20,
    }


def _template(name: str, qfmt: str, afmt: str) -> dict:
    return {
        "name": name,
        "ord": 0,
        "qfmt": qfmt,
        "bafmt": "",
        "afmt": afmt,
        "bqfmt": "",
        "did": None,
        "sortf": 0,
    }


@dataclass(frozen=True)
class SchemaBuild:
    """A ready-to-run schema script plus the note type ids it declares."""

    script: str
    model_ids: dict[str, int]


class SchemaTemplate:
    """Builds the schema and seed script for one export."""

    def __init__(self, options: Optional[ExportOptions] = None, schema_text: Optional[str] = None):
        """
        Initialize the template.

        Args:
            options: Rendering options for the note types
            schema_text: Override the bundled schema text (mainly for tests)
        """
        self.options = options or ExportOptions()
        self._schema_text = schema_text

    @property
    def schema_text(self) -> str:
        if self._schema_text is None:
            self._schema_text = load_schema_text()
        return self._schema_text

    def build(
        self,
        note_type: Optional[str],
        decks: Iterable[Deck],
        timestamp_ms: Optional[int] = None,
    ) -> SchemaBuild:
        """
        Build the schema script for a set of decks.

        Args:
            note_type: Note type of the first card; picks the current model
            decks: Decks to declare, the first one becomes the current deck
            timestamp_ms: Epoch milliseconds the note type ids derive from

        Returns:
            SchemaBuild with the filled script and {"basic": id, "cloze": id}
        """
        decks = list(decks)
        deck_ids = sorted(deck.id for deck in decks)
        timestamp_ms = int(time.time() * 1000) if timestamp_ms is None else timestamp_ms
        now = timestamp_ms // 1000

        model_ids = model_ids_for(timestamp_ms)
        basic_id = model_ids[NoteType.BASIC.value]
        cloze_id = model_ids[NoteType.CLOZE.value]
        active_model_id = cloze_id if note_type == NoteType.CLOZE.value else basic_id
        first_deck_id = decks[0].id if decks else None

        # Ascending id order; the current deck stays the first input deck
        by_id = {deck.id: deck for deck in decks}
        decks_obj = {str(i): self._deck(by_id[i]) for i in deck_ids}
        dconf_obj = {str(i): self._deck_options(by_id[i], now) for i in deck_ids}
        conf = self._collection_conf(deck_ids, first_deck_id, active_model_id)
        models = {
            str(basic_id): self._basic_model(basic_id, first_deck_id, now),
            str(cloze_id): self._cloze_model(cloze_id, first_deck_id, now),
        }

        blobs = {
            CONF_PLACEHOLDER: conf,
            MODELS_PLACEHOLDER: models,
            DECKS_PLACEHOLDER: decks_obj,
            DCONF_PLACEHOLDER: dconf_obj,
        }
        script = self._fill(self.schema_text, blobs)

        logger.debug(f"Built schema script for {len(decks)} decks (models {basic_id}, {cloze_id})")
        return SchemaBuild(script=script, model_ids=model_ids)

    @staticmethod
    def _fill(text: str, blobs: dict) -> str:
        for placeholder in blobs:
            if text.count(placeholder) != 1:
                raise TemplateMalformed(placeholder)
        # One pass, so JSON that happens to contain a placeholder is left alone
        pattern = re.compile("|".join(re.escape(p) for p in blobs))
        return pattern.sub(lambda m: _sql_literal_json(blobs[m.group(0)]), text)

    @staticmethod
    def _collection_conf(deck_ids: list[int], cur_deck: Optional[int], cur_model: int) -> dict:
        return {
            "nextPos": 1,
            "estTimes": True,
            "activeDecks": deck_ids,
            "sortType": "noteFld",
            "timeLim": 0,
            "sortBackwards": False,
            "addToCur": True,
            "curDeck": cur_deck,
            "newBury": True,
            "newSpread": 0,
            "dueCounts": True,
            "curModel": cur_model,
            "collapseTime": 1200,
        }

    @staticmethod
    def _deck(deck: Deck) -> dict:
        return {
            "id": deck.id,
            "name": deck.name,
            "usn": 0,
            "collapsed": False,
            "newToday": [0, 0],
            "revToday": [0, 0],
            "lrnToday": [0, 0],
            "timeToday": [0, 0],
            "dyn": 0,
            "extendNew": 10,
            "extendRev": 50,
            "conf": 1,
        }

    @staticmethod
    def _deck_options(deck: Deck, now: int) -> dict:
        return {
            "name": deck.name,
            "replayq": True,
            "lapse": {
                "leechFails": 8,
                "minInt": 1,
                "delays": [10],
                "leechAction": 0,
                "mult": 0,
            },
            "rev": {
                "perDay": 100,
                "fuzz": 0.05,
                "ivlFct": 1,
                "maxIvl": 36500,
                "ease4": 1.3,
                "bury": True,
                "minSpace": 1,
            },
            "new": {
                "perDay": 20,
                "delays": [1, 10],
                "separate": True,
                "ints": [1, 4, 7],
                "initialFactor": 2500,
                "bury": True,
                "order": 1,
            },
            "maxTaken": 60,
            "usn": 0,
            "timer": 0,
            "id": deck.id,
            "mod": now,
            "autoplay": True,
        }

    def _basic_model(self, model_id: int, deck_id: Optional[int], now: int) -> dict:
        return {
            "id": model_id,
            "name": "Basic",
            "type": 0,
            "did": deck_id,
            "usn": -1,
            "mod": now,
            "vers": [],
            "tags": ["basic"],
            "req": [[0, "all", [0]]],
            "sortf": 0,
            "flds": [_field("Front", 0), _field("Back", 1)],
            "tmpls": [
                _template("Card 1", self.options.question_format, self.options.answer_format)
            ],
            "css": self.options.css,
            "latexPre": LATEX_PRE,
            "latexPost": LATEX_POST,
        }

    def _cloze_model(self, model_id: int, deck_id: Optional[int], now: int) -> dict:
        return {
            "id": model_id,
            "name": "Cloze",
            "type": 1,
            "did": deck_id,
            "usn": -1,
            "mod": now,
            "vers": [],
            "tags": ["cloze"],
            "req": [[2, "all", [0]]],
            "sortf": 0,
            "flds": [_field("Text", 0)],
            "tmpls": [_template("Cloze", "{{cloze:Text}}", "{{cloze:Text}}")],
            "css": self.options.css,
            "latexPre": LATEX_PRE,
            "latexPost": LATEX_POST,
        }
