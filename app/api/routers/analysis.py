"""
app/api/routers/analysis.py

Upload analysis endpoints.

POST /analyze
    Multipart file upload (CSV / XLS / XLSX) -> AnalysisResponse.

POST /analyze/export

Query parameters
----------------
dataset       : "users" | "personas" | "stories" | "metrics" | "insights"  (default: "users")
output_format : "csv" | "json"                                          (default: "csv")
seed          : optional random seed for reproducible synthetic values

Responses
---------
CSV  → StreamingResponse, Content-Type: text/csv
       Content-Disposition: attachment; filename=<dataset>_export.csv
JSON → JSONResponse, Content-Type: application/json
       Body: {"dataset": str, "rows": int, "fields": list[str], "data": list[dict]}

Failed analyses map to 400 (unsupported type, parse error) or 422 (no
data rows). All transformation logic lives in the services.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import Iterator

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, status
from fastapi.responses import JSONResponse, StreamingResponse

from app.api.dependencies import get_tabular_upload
from app.config import get_upload_settings
from app.domain.user_activity import AnalysisSession
from app.failure_codes import EMPTY_INPUT_FAILURES
from app.schemas.analysis import AnalysisResponse
from app.services.analysis_service import AnalysisService, get_analysis_service
from app.services.report_export_service import (
    VALID_DATASETS,
    ExportResult,
    ReportExportService,
    get_report_export_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analysis"])

_VALID_FORMATS = frozenset({"csv", "json"})

_FAILURE_MESSAGES: dict[str, str] = {
    "unsupported_file_type": "Unsupported file type. Please upload a CSV or Excel file.",
    "parse_error": "The uploaded file could not be parsed.",
    "empty_dataset": "The uploaded file contains no data rows.",
}


# ---------------------------------------------------------------------------
# Helpers (no business logic)
# ---------------------------------------------------------------------------


def _read_upload(file: UploadFile) -> bytes:
    max_bytes = get_upload_settings().max_upload_bytes
    try:
        content = file.file.read(max_bytes + 1)
    finally:
        file.file.close()

    if len(content) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Uploaded file exceeds the {max_bytes}-byte limit.",
        )
    return content


def _analyze(file: UploadFile, service: AnalysisService, seed: int | None) -> AnalysisSession:
    session = service.process_file(
        _read_upload(file),
        filename=file.filename,
        content_type=file.content_type,
        seed=seed,
    )
    if session.succeeded:
        return session

    code = session.failure_code or "parse_error"
    raise HTTPException(
        status_code=(
            status.HTTP_422_UNPROCESSABLE_ENTITY
            if code in EMPTY_INPUT_FAILURES
            else status.HTTP_400_BAD_REQUEST
        ),
        detail={"code": code, "message": _FAILURE_MESSAGES.get(code, code)},
    )


def _to_csv_streaming(result: ExportResult, filename: str) -> StreamingResponse:
    """Stream *result* as a UTF-8 CSV file download."""

    def _generate() -> Iterator[str]:
        buf = io.StringIO()
        writer = csv.DictWriter(
            buf,
            fieldnames=result.fields,
            extrasaction="ignore",
            restval="",
            lineterminator="\r\n",
        )
        writer.writeheader()
        yield buf.getvalue()

        for row in result.rows:
            buf.seek(0)
            buf.truncate(0)
            writer.writerow({k: ("" if v is None else v) for k, v in row.items()})
            yield buf.getvalue()

    return StreamingResponse(
        content=_generate(),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Row-Count": str(len(result.rows)),
        },
    )


def _to_json_response(result: ExportResult, dataset: str) -> JSONResponse:
    return JSONResponse(
        content={
            "dataset": dataset,
            "rows": len(result.rows),
            "fields": result.fields,
            "data": result.rows,
        }
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/analyze", response_model=AnalysisResponse)
def analyze_upload(
    file: UploadFile = Depends(get_tabular_upload),
    seed: int | None = Query(default=None, description="Optional random seed for synthetic values."),
    service: AnalysisService = Depends(get_analysis_service),
) -> AnalysisResponse:
    """
    Analyse one activity file into users, personas, stories, metrics, and insights.
    """

    session = _analyze(file, service, seed)
    logger.info(
        "Analysis served filename=%r users=%d personas=%d",
        file.filename,
        len(session.users),
        len(session.personas),
    )
    return AnalysisResponse.from_session(
        session,
        include_users=get_upload_settings().include_users_in_response,
    )


@router.post("/analyze/export", response_model=None, summary="Analyse an upload and export one dataset")
def analyze_and_export(
    file: UploadFile = Depends(get_tabular_upload),
    dataset: str = Query(
        default="users",
        description='Dataset to export: "users", "personas", "stories", "metrics", or "insights".',
    ),
    output_format: str = Query(
        default="csv",
        description='Output format: "csv" (file download) or "json".',
    ),
    seed: int | None = Query(default=None, description="Optional random seed for synthetic values."),
    service: AnalysisService = Depends(get_analysis_service),
    exporter: ReportExportService = Depends(get_report_export_service),
) -> StreamingResponse | JSONResponse:
    """
    Analyse an upload and return one dataset as a flat table.
    """
    if dataset not in VALID_DATASETS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid dataset {dataset!r}. Must be one of: {list(VALID_DATASETS)}.",
        )
    if output_format not in _VALID_FORMATS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid format {output_format!r}. Must be one of: {sorted(_VALID_FORMATS)}.",
        )

    session = _analyze(file, service, seed)
    result = exporter.export(session, dataset=dataset)

    logger.info(
        "Analysis export dataset=%r format=%r rows=%d",
        dataset,
        output_format,
        len(result.rows),
    )

    if output_format == "csv":
        return _to_csv_streaming(result, f"{dataset}_export.csv")
    return _to_json_response(result, dataset)
