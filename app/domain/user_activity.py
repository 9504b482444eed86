"""
app/domain/user_activity.py

Domain models produced by the churn persona pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

RawRow = Mapping[str, Any]


class UserSegment(str, Enum):
    POWER = "power"
    ATRISK = "atrisk"
    OCCASIONAL = "occasional"


class StoryPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class InsightImpact(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class InsightCategory(str, Enum):
    ONBOARDING = "onboarding"
    ENGAGEMENT = "engagement"
    SUPPORT = "support"
    PRODUCT = "product"


# Fixed iteration order used wherever segments are enumerated.
SEGMENT_ORDER: tuple[UserSegment, ...] = (
    UserSegment.POWER,
    UserSegment.ATRISK,
    UserSegment.OCCASIONAL,
)


@dataclass(frozen=True)
class UserRecord:
    """
    Canonical, scored user record built from one uploaded row.
    """

    id: str
    name: str
    email: str
    last_login: str
    registered_date: str
    user_segment: UserSegment
    churn_risk: float
    activity_score: float

    def to_persona_user(self) -> "PersonaUser":
        return PersonaUser(
            id=self.id,
            name=self.name,
            email=self.email,
            last_login=self.last_login,
            churn_risk=self.churn_risk,
        )


@dataclass(frozen=True)
class PersonaUser:
    """
    Lightweight user projection attached to a persona.
    """

    id: str
    name: str
    email: str
    last_login: str
    churn_risk: float


@dataclass(frozen=True)
class Persona:
    id: str
    name: str
    segment: UserSegment
    description: str
    pain_points: tuple[str, ...]
    goals: tuple[str, ...]
    churn_risk: float
    users: tuple[PersonaUser, ...] = ()


@dataclass(frozen=True)
class UserStory:
    id: str
    persona_id: str
    title: str
    description: str
    priority: StoryPriority
    acceptance_criteria: tuple[str, ...]


@dataclass(frozen=True)
class ChurnMetric:
    """
    One aggregate metric card.

    ``change`` is cosmetic jitter; there is no stored history behind it.
    """

    id: str
    title: str
    value: float
    change: float
    is_positive: bool
    description: str


@dataclass(frozen=True)
class Insight:
    id: str
    title: str
    description: str
    impact: InsightImpact
    recommendation: str
    category: InsightCategory


@dataclass(frozen=True)
class AnalysisSession:
    """
    Caller-owned result of one processed upload.

    Replaces any process-wide state: every upload yields a fresh session
    and nothing is merged across sessions. A failed session carries a
    ``failure_code`` and no derived data.
    """

    succeeded: bool
    users: tuple[UserRecord, ...] = ()
    personas: tuple[Persona, ...] = ()
    stories: tuple[UserStory, ...] = ()
    metrics: tuple[ChurnMetric, ...] = ()
    insights: tuple[Insight, ...] = ()
    field_map: dict[str, str] = field(default_factory=dict)
    failure_code: str | None = None
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def failed(cls, failure_code: str) -> "AnalysisSession":
        return cls(succeeded=False, failure_code=failure_code)

    def get_processed_user_data(self) -> list[UserRecord]:
        return list(self.users)

    def get_generated_personas(self) -> list[Persona]:
        return list(self.personas)

    def get_generated_stories(self) -> list[UserStory]:
        return list(self.stories)

    def get_generated_metrics(self) -> list[ChurnMetric]:
        return list(self.metrics)

    def get_generated_insights(self) -> list[Insight]:
        return list(self.insights)

    def has_generated_data(self) -> bool:
        return len(self.users) > 0
