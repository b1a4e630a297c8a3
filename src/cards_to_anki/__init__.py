"""Cards to Anki - Build importable .apkg packages from deck and card data."""

__version__ = "0.1.0"

from .errors import (
    AssetMissing,
    EngineFailure,
    ExportError,
    PackagingFailure,
    TemplateMalformed,
    UnknownDeck,
    UnknownNoteType,
)
from .exporter import ApkgExporter, PackageWriter, generate_apkg, summarize_package
from .ids import IdentityAllocator, compute_csum
from .models import CardInput, Deck, ExportOptions, ExportRequest, NoteType
from .schema import SchemaTemplate

__all__ = [
    # Exporter
    "ApkgExporter",
    "generate_apkg",
    "PackageWriter",
    "summarize_package",
    # Building blocks
    "SchemaTemplate",
    "IdentityAllocator",
    "compute_csum",
    # Models
    "CardInput",
    "Deck",
    "ExportOptions",
    "ExportRequest",
    "NoteType",
    # Errors
    "ExportError",
    "AssetMissing",
    "TemplateMalformed",
    "UnknownNoteType",
    "UnknownDeck",
    "EngineFailure",
    "PackagingFailure",
]
