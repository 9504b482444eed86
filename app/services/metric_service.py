"""
app/services/metric_service.py

Aggregate churn metric cards computed from scored users.

Formulas
--------
At-Risk Users   = count of users with churn_risk > 0.7
Churn Rate      = (At-Risk Users / total users * 100) / 10
Avg. Engagement = mean activity_score
Retention Rate  = 100 - Churn Rate

``change`` values are cosmetic jitter drawn from the injected random
source; there is no period-over-period history behind them.
"""

from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass
from typing import Callable, Sequence

import numpy as np

from app.domain.user_activity import ChurnMetric, UserRecord
from app.logging_utils import log_event
from segmentation.segmenter import ATRISK_THRESHOLD

logger = logging.getLogger(__name__)

CHURN_RATE_SCALE = 10.0


# ---------------------------------------------------------------------------
# Intermediate figures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChurnFigures:
    """
    Deterministic aggregates behind the metric cards.
    """

    total_users: int
    at_risk_users: int
    at_risk_percentage: float
    avg_engagement: float
    churn_rate: float
    retention_rate: float


def compute_churn_figures(users: Sequence[UserRecord]) -> ChurnFigures:
    """
    Compute the aggregates for a non-empty user set.

    Raises:
        ValueError: If ``users`` is empty.
    """
    if not users:
        raise ValueError("At least one user is required to compute churn figures.")

    risks = np.array([user.churn_risk for user in users], dtype=float)
    activity = np.array([user.activity_score for user in users], dtype=float)

    total_users = len(users)
    at_risk_users = int(np.count_nonzero(risks > ATRISK_THRESHOLD))
    at_risk_percentage = at_risk_users / total_users * 100.0
    churn_rate = at_risk_percentage / CHURN_RATE_SCALE

    return ChurnFigures(
        total_users=total_users,
        at_risk_users=at_risk_users,
        at_risk_percentage=at_risk_percentage,
        avg_engagement=float(activity.mean()),
        churn_rate=churn_rate,
        retention_rate=100.0 - churn_rate,
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class MetricService:
    """
    Produces the four metric cards in fixed order: Churn Rate, At-Risk
    Users, Avg. Engagement, Retention Rate. An empty user set yields no
    metrics.
    """

    def __init__(
        self,
        *,
        rng: random.Random | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))

    def build_metrics(self, users: Sequence[UserRecord]) -> list[ChurnMetric]:
        if not users:
            logger.warning("No user data available for metrics generation")
            return []

        figures = compute_churn_figures(users)
        log_event(
            logger,
            logging.INFO,
            "churn_figures",
            total_users=figures.total_users,
            at_risk_users=figures.at_risk_users,
            at_risk_percentage=round(figures.at_risk_percentage, 2),
            avg_engagement=round(figures.avg_engagement, 2),
            churn_rate=round(figures.churn_rate, 2),
        )

        return [
            ChurnMetric(
                id=self._id_factory(),
                title="Churn Rate",
                value=figures.churn_rate,
                change=-0.5 + self._rng.random(),
                is_positive=False,
                description="Monthly user churn based on current data",
            ),
            ChurnMetric(
                id=self._id_factory(),
                title="At-Risk Users",
                value=float(figures.at_risk_users),
                change=float(-5 + round(self._rng.random() * 10)),
                is_positive=False,
                description="Users flagged with >70% probability of churning",
            ),
            ChurnMetric(
                id=self._id_factory(),
                title="Avg. Engagement",
                value=figures.avg_engagement,
                change=round(self._rng.random() * 5, 1),
                is_positive=True,
                description="Average activity score per user",
            ),
            ChurnMetric(
                id=self._id_factory(),
                title="Retention Rate",
                value=figures.retention_rate,
                change=round(self._rng.random() * 3, 1),
                is_positive=True,
                description="Percentage of users retained based on current data",
            ),
        ]
