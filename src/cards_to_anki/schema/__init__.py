"""Collection schema template."""

from .template import SchemaBuild, SchemaTemplate, load_schema_text

__all__ = ["SchemaBuild", "SchemaTemplate", "load_schema_text"]
