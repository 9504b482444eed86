"""
app/schemas package marker.
"""

from app.schemas.analysis import (
    AnalysisResponse,
    ChurnMetricResponse,
    HealthResponse,
    InsightResponse,
    PersonaResponse,
    PersonaUserResponse,
    UserRecordResponse,
    UserStoryResponse,
)

__all__ = [
    "AnalysisResponse",
    "ChurnMetricResponse",
    "HealthResponse",
    "InsightResponse",
    "PersonaResponse",
    "PersonaUserResponse",
    "UserRecordResponse",
    "UserStoryResponse",
]
