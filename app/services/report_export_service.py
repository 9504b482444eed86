"""
app/services/report_export_service.py

Flat tabular export of one analysis session.

Supports five datasets, each flattened for tabular consumption:

    users     — scored user records
    personas  — personas (member users reduced to a count and id list)
    stories   — user stories
    metrics   — metric cards
    insights  — insights

List fields (pain points, goals, acceptance criteria, member ids) are
joined with ``" | "`` so every cell is a scalar. Column names use the
same camelCase keys as the API response.

No transformation logic lives in the router.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Iterable

from app.domain.user_activity import (
    AnalysisSession,
    ChurnMetric,
    Insight,
    Persona,
    UserRecord,
    UserStory,
)

LIST_SEPARATOR = " | "

VALID_DATASETS: tuple[str, ...] = ("users", "personas", "stories", "metrics", "insights")


# ---------------------------------------------------------------------------
# Export result container
# ---------------------------------------------------------------------------


@dataclass
class ExportResult:
    """
    Flat tabular data ready for CSV or JSON serialisation.

    Attributes
    ----------
    rows:   Flat dict per row; all values are JSON-safe scalars or strings.
    fields: Ordered column names; deterministic across calls for the same dataset.
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    fields: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Flattening helpers
# ---------------------------------------------------------------------------


def _scalar(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def _joined(values: Iterable[str]) -> str:
    return LIST_SEPARATOR.join(values)


def _collect_fields(rows: list[dict[str, Any]]) -> list[str]:
    """
    Union all keys across rows while preserving first-seen insertion order.
    Guarantees a deterministic, stable column list for CSV headers.
    """
    seen: dict[str, None] = {}
    for row in rows:
        for k in row:
            seen.setdefault(k, None)
    return list(seen)


def _user_row(user: UserRecord) -> dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "lastLogin": user.last_login,
        "registeredDate": user.registered_date,
        "userSegment": _scalar(user.user_segment),
        "churnRisk": user.churn_risk,
        "activityScore": user.activity_score,
    }


def _persona_row(persona: Persona) -> dict[str, Any]:
    return {
        "id": persona.id,
        "name": persona.name,
        "segment": _scalar(persona.segment),
        "description": persona.description,
        "painPoints": _joined(persona.pain_points),
        "goals": _joined(persona.goals),
        "churnRisk": persona.churn_risk,
        "userCount": len(persona.users),
        "userIds": _joined(user.id for user in persona.users),
    }


def _story_row(story: UserStory) -> dict[str, Any]:
    return {
        "id": story.id,
        "personaId": story.persona_id,
        "title": story.title,
        "description": story.description,
        "priority": _scalar(story.priority),
        "acceptanceCriteria": _joined(story.acceptance_criteria),
    }


def _metric_row(metric: ChurnMetric) -> dict[str, Any]:
    return {
        "id": metric.id,
        "title": metric.title,
        "value": metric.value,
        "change": metric.change,
        "isPositive": metric.is_positive,
        "description": metric.description,
    }


def _insight_row(insight: Insight) -> dict[str, Any]:
    return {
        "id": insight.id,
        "title": insight.title,
        "description": insight.description,
        "impact": _scalar(insight.impact),
        "recommendation": insight.recommendation,
        "category": _scalar(insight.category),
    }


_ROW_BUILDERS: dict[str, tuple[Callable[[AnalysisSession], Iterable[Any]], Callable[[Any], dict[str, Any]]]] = {
    "users": (AnalysisSession.get_processed_user_data, _user_row),
    "personas": (AnalysisSession.get_generated_personas, _persona_row),
    "stories": (AnalysisSession.get_generated_stories, _story_row),
    "metrics": (AnalysisSession.get_generated_metrics, _metric_row),
    "insights": (AnalysisSession.get_generated_insights, _insight_row),
}


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ReportExportService:
    """
    Flatten one session dataset for report or spreadsheet consumption.

    Read-only: the session is never modified.
    """

    def export(self, session: AnalysisSession, *, dataset: str = "users") -> ExportResult:
        """
        Flatten *dataset* from *session* into an :class:`ExportResult`.

        Raises
        ------
        ValueError: If *dataset* is not one of ``VALID_DATASETS``.
        """
        if dataset not in _ROW_BUILDERS:
            raise ValueError(
                f"Unknown dataset {dataset!r}. Must be one of: {list(VALID_DATASETS)}."
            )

        getter, to_row = _ROW_BUILDERS[dataset]
        rows = [to_row(item) for item in getter(session)]
        return ExportResult(rows=rows, fields=_collect_fields(rows))


@lru_cache(maxsize=1)
def get_report_export_service() -> ReportExportService:
    return ReportExportService()
