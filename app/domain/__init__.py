"""
app/domain package marker.
"""

from app.domain.user_activity import (
    SEGMENT_ORDER,
    AnalysisSession,
    ChurnMetric,
    Insight,
    InsightCategory,
    InsightImpact,
    Persona,
    PersonaUser,
    RawRow,
    StoryPriority,
    UserRecord,
    UserSegment,
    UserStory,
)

__all__ = [
    "AnalysisSession",
    "ChurnMetric",
    "Insight",
    "InsightCategory",
    "InsightImpact",
    "Persona",
    "PersonaUser",
    "RawRow",
    "SEGMENT_ORDER",
    "StoryPriority",
    "UserRecord",
    "UserSegment",
    "UserStory",
]
