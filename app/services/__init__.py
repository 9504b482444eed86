"""
app/services package marker.
"""

from app.services.analysis_service import AnalysisService, get_analysis_service
from app.services.file_reader import (
    EmptyDatasetError,
    IngestionError,
    TabularParseError,
    UnsupportedFileTypeError,
    read_tabular_file,
)
from app.services.report_export_service import (
    ExportResult,
    ReportExportService,
    get_report_export_service,
)

__all__ = [
    "AnalysisService",
    "get_analysis_service",
    "EmptyDatasetError",
    "IngestionError",
    "TabularParseError",
    "UnsupportedFileTypeError",
    "read_tabular_file",
    "ExportResult",
    "ReportExportService",
    "get_report_export_service",
]
