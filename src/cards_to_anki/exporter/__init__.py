"""Anki package export functionality."""

from .apkg_exporter import ApkgExporter, generate_apkg
from .package_writer import COLLECTION_ENTRY, PackageWriter
from .reader import PackageSummary, summarize_package

__all__ = [
    "ApkgExporter",
    "generate_apkg",
    "PackageWriter",
    "COLLECTION_ENTRY",
    "PackageSummary",
    "summarize_package",
]
