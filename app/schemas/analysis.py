"""
app/schemas/analysis.py

Response schemas for the analysis endpoints.

Field names serialise as camelCase (``lastLogin``, ``churnRisk``,
``painPoints``) to match the dashboard contract.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.domain.user_activity import (
    AnalysisSession,
    ChurnMetric,
    Insight,
    InsightCategory,
    InsightImpact,
    Persona,
    PersonaUser,
    StoryPriority,
    UserRecord,
    UserSegment,
    UserStory,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserRecordResponse(_CamelModel):
    id: str
    name: str
    email: str
    last_login: str
    registered_date: str
    user_segment: UserSegment
    churn_risk: float = Field(..., ge=0.0, le=1.0)
    activity_score: float

    @classmethod
    def from_domain(cls, user: UserRecord) -> "UserRecordResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            last_login=user.last_login,
            registered_date=user.registered_date,
            user_segment=user.user_segment,
            churn_risk=user.churn_risk,
            activity_score=user.activity_score,
        )


class PersonaUserResponse(_CamelModel):
    id: str
    name: str
    email: str
    last_login: str
    churn_risk: float = Field(..., ge=0.0, le=1.0)

    @classmethod
    def from_domain(cls, user: PersonaUser) -> "PersonaUserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            last_login=user.last_login,
            churn_risk=user.churn_risk,
        )


class PersonaResponse(_CamelModel):
    id: str
    name: str
    segment: UserSegment
    description: str
    pain_points: list[str]
    goals: list[str]
    churn_risk: float = Field(..., ge=0.0, le=1.0)
    users: list[PersonaUserResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, persona: Persona) -> "PersonaResponse":
        return cls(
            id=persona.id,
            name=persona.name,
            segment=persona.segment,
            description=persona.description,
            pain_points=list(persona.pain_points),
            goals=list(persona.goals),
            churn_risk=persona.churn_risk,
            users=[PersonaUserResponse.from_domain(user) for user in persona.users],
        )


class UserStoryResponse(_CamelModel):
    id: str
    persona_id: str
    title: str
    description: str
    priority: StoryPriority
    acceptance_criteria: list[str]

    @classmethod
    def from_domain(cls, story: UserStory) -> "UserStoryResponse":
        return cls(
            id=story.id,
            persona_id=story.persona_id,
            title=story.title,
            description=story.description,
            priority=story.priority,
            acceptance_criteria=list(story.acceptance_criteria),
        )


class ChurnMetricResponse(_CamelModel):
    id: str
    title: str
    value: float
    change: float
    is_positive: bool
    description: str

    @classmethod
    def from_domain(cls, metric: ChurnMetric) -> "ChurnMetricResponse":
        return cls(
            id=metric.id,
            title=metric.title,
            value=metric.value,
            change=metric.change,
            is_positive=metric.is_positive,
            description=metric.description,
        )


class InsightResponse(_CamelModel):
    id: str
    title: str
    description: str
    impact: InsightImpact
    recommendation: str
    category: InsightCategory

    @classmethod
    def from_domain(cls, insight: Insight) -> "InsightResponse":
        return cls(
            id=insight.id,
            title=insight.title,
            description=insight.description,
            impact=insight.impact,
            recommendation=insight.recommendation,
            category=insight.category,
        )


class AnalysisResponse(_CamelModel):
    """
    API response model for one analysed upload.
    """

    generated_at: datetime
    field_map: dict[str, str] = Field(default_factory=dict)
    users: list[UserRecordResponse] = Field(default_factory=list)
    personas: list[PersonaResponse] = Field(default_factory=list)
    stories: list[UserStoryResponse] = Field(default_factory=list)
    metrics: list[ChurnMetricResponse] = Field(default_factory=list)
    insights: list[InsightResponse] = Field(default_factory=list)

    @classmethod
    def from_session(cls, session: AnalysisSession, *, include_users: bool = True) -> "AnalysisResponse":
        return cls(
            generated_at=session.generated_at,
            field_map=dict(session.field_map),
            users=[UserRecordResponse.from_domain(user) for user in session.users] if include_users else [],
            personas=[PersonaResponse.from_domain(persona) for persona in session.personas],
            stories=[UserStoryResponse.from_domain(story) for story in session.stories],
            metrics=[ChurnMetricResponse.from_domain(metric) for metric in session.metrics],
            insights=[InsightResponse.from_domain(insight) for insight in session.insights],
        )


class HealthResponse(_CamelModel):
    status: str
    text_generation_backend: str
