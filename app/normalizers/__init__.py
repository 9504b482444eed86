"""
app/normalizers package marker.
"""

from app.normalizers.row_normalizer import TIMESTAMP_FORMATS, NormalizedRow, RowNormalizer

__all__ = [
    "NormalizedRow",
    "RowNormalizer",
    "TIMESTAMP_FORMATS",
]
