"""
app/mappers package marker.
"""

from app.mappers.column_mapper import CANONICAL_FIELDS, DEFAULT_FIELD_ALIASES, ColumnMapper, FieldMap

__all__ = [
    "CANONICAL_FIELDS",
    "DEFAULT_FIELD_ALIASES",
    "ColumnMapper",
    "FieldMap",
]
