"""
app/services/file_reader.py

Tabular upload parsing (CSV and Excel) into raw row mappings.

CSV cells are read as strings exactly as written: blank cells become
``""`` and blank lines are skipped. Excel cells keep their typed values
from the first sheet, with empty cells as ``None``.
"""

from __future__ import annotations

import io
import logging
from pathlib import PurePath
from typing import Any

import pandas as pd

from app.failure_codes import EMPTY_DATASET, PARSE_ERROR, UNSUPPORTED_FILE_TYPE

logger = logging.getLogger(__name__)

CSV_CONTENT_TYPES = frozenset({"text/csv", "application/csv"})
EXCEL_CONTENT_TYPES = frozenset(
    {
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    }
)
CSV_EXTENSIONS = frozenset({".csv"})
EXCEL_EXTENSIONS = frozenset({".xls", ".xlsx"})


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class IngestionError(ValueError):
    """
    Base class for upload failures; carries a failure code.
    """

    code: str = PARSE_ERROR

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class UnsupportedFileTypeError(IngestionError):
    """
    Raised when the upload is neither CSV nor Excel.
    """

    code = UNSUPPORTED_FILE_TYPE


class TabularParseError(IngestionError):
    """
    Raised when the parser rejects the file contents.
    """

    code = PARSE_ERROR


class EmptyDatasetError(IngestionError):
    """
    Raised when a file parses cleanly but holds no data rows.
    """

    code = EMPTY_DATASET


# ---------------------------------------------------------------------------
# Reader
# ---------------------------------------------------------------------------


def detect_file_kind(*, filename: str | None, content_type: str | None) -> str:
    """
    Return ``"csv"`` or ``"excel"`` from the declared content type,
    falling back to the file extension.

    Raises:
        UnsupportedFileTypeError: If neither identifies a supported format.
    """
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if media_type in CSV_CONTENT_TYPES:
        return "csv"
    if media_type in EXCEL_CONTENT_TYPES:
        return "excel"

    suffix = PurePath(filename or "").suffix.lower()
    if suffix in CSV_EXTENSIONS:
        return "csv"
    if suffix in EXCEL_EXTENSIONS:
        return "excel"

    raise UnsupportedFileTypeError(
        f"Unsupported file type (filename={filename!r}, content_type={content_type!r}). "
        "Please upload a CSV or Excel file."
    )


def read_tabular_file(
    content: bytes,
    *,
    filename: str | None = None,
    content_type: str | None = None,
) -> list[dict[str, Any]]:
    """
    Parse an uploaded CSV or Excel file into a list of rows.

    Args:
        content:      Raw file bytes.
        filename:     Original file name, used when the content type is vague.
        content_type: Declared media type.

    Returns:
        One dict per data row keyed by the header labels. A file with a
        header but no data rows yields an empty list.

    Raises:
        UnsupportedFileTypeError: Neither CSV nor Excel.
        TabularParseError:        The parser rejected the contents.
    """
    kind = detect_file_kind(filename=filename, content_type=content_type)

    try:
        if kind == "csv":
            frame = _read_csv(content)
        else:
            frame = _read_excel(content)
    except pd.errors.EmptyDataError:
        logger.info("Uploaded file %r contains no data", filename)
        return []
    except Exception as exc:  # noqa: BLE001
        # read_excel surfaces engine-specific errors (BadZipFile, XLRDError)
        raise TabularParseError(f"Could not parse {kind} file {filename!r}: {exc}") from exc

    frame.columns = [str(column) for column in frame.columns]
    rows = frame.to_dict(orient="records")
    logger.info(
        "Parsed %s upload filename=%r rows=%d columns=%d",
        kind,
        filename,
        len(rows),
        len(frame.columns),
    )
    return rows


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _read_csv(content: bytes) -> pd.DataFrame:
    return pd.read_csv(
        io.BytesIO(content),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        encoding="utf-8-sig",
    )


def _read_excel(content: bytes) -> pd.DataFrame:
    frame = pd.read_excel(io.BytesIO(content), sheet_name=0)
    # object dtype first so None survives in numeric columns
    return frame.astype(object).where(pd.notna(frame), None)
