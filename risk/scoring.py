"""
risk/scoring.py

Churn risk model implementing BaseRiskModel.
Computes a weighted, normalized per-user churn risk from activity,
login recency, and account age.
"""

from datetime import datetime

from risk.base import BaseRiskModel
from risk.normalizer import RiskNormalizer

_SECONDS_PER_DAY: float = 24 * 60 * 60


def days_between(earlier: datetime, later: datetime) -> float:
    """Return the fractional number of days from ``earlier`` to ``later``.

    Negative when ``earlier`` is actually in the future.
    """
    return (later - earlier).total_seconds() / _SECONDS_PER_DAY


class ChurnRiskModel(BaseRiskModel):
    """Weighted churn risk model for a single user.

    Combines three independently normalized risk factors into a score
    on a 0–1 scale. All weights must sum to 1.0.
    """

    # Scoring weights; must sum to 1.0
    ACTIVITY_WEIGHT: float = 0.5
    RECENCY_WEIGHT: float = 0.3
    ACCOUNT_AGE_WEIGHT: float = 0.2

    # Activity scores are expected on a 0–10 scale.
    MAX_ACTIVITY_SCORE: float = 10.0
    # Recency risk saturates after this many days without a login.
    RECENCY_SATURATION_DAYS: float = 30.0
    # Accounts at least this old contribute no age risk.
    ACCOUNT_AGE_HORIZON_DAYS: float = 180.0

    def __init__(self) -> None:
        """Initialize the model with a shared RiskNormalizer instance."""
        self._normalizer = RiskNormalizer()

    def compute(self, inputs: dict) -> float:
        """Compute a churn risk score from resolved input signals.

        Signal directionality:
            - activity_score: lower values → higher risk
            - days_since_last_login: more days → higher risk (caps at 30)
            - account_age_days: newer accounts → higher risk (zero at 180+)

        Args:
            inputs: Dictionary with the following required keys:
                - activity_score (float): Nominally in [0, 10].
                - days_since_last_login (float)
                - account_age_days (float)

        Returns:
            A float in [0.0, 1.0]. Higher values indicate a greater
            likelihood of churn.

        Raises:
            KeyError: If a required key is missing.
        """
        n = self._normalizer

        activity_score = float(inputs["activity_score"])
        days_since_last_login = float(inputs["days_since_last_login"])
        account_age_days = float(inputs["account_age_days"])

        # Not clamped: activity is expected to be pre-normalized to ~0–10.
        activity_risk = n.inverse_ratio(activity_score, self.MAX_ACTIVITY_SCORE)
        recency_risk = n.saturating_ratio(days_since_last_login, self.RECENCY_SATURATION_DAYS)
        age_risk = n.decaying_ratio(account_age_days, self.ACCOUNT_AGE_HORIZON_DAYS)

        weighted_sum = (
            activity_risk * self.ACTIVITY_WEIGHT
            + recency_risk * self.RECENCY_WEIGHT
            + age_risk * self.ACCOUNT_AGE_WEIGHT
        )

        # Guards the [0, 1] invariant against weight changes and
        # out-of-range activity scores.
        return n.clamp(weighted_sum, 0.0, 1.0)

    def score_user(
        self,
        *,
        activity_score: float,
        last_login: datetime,
        registered_date: datetime,
        now: datetime,
    ) -> float:
        """Score one user from resolved activity and timestamps.

        Pure function of its arguments; identical inputs always yield the
        same score.

        Args:
            activity_score: Normalized activity score.
            last_login: Timezone-aware last login timestamp.
            registered_date: Timezone-aware registration timestamp.
            now: Reference "current" time.

        Returns:
            Churn risk in [0.0, 1.0].
        """
        return self.compute(
            {
                "activity_score": activity_score,
                "days_since_last_login": days_between(last_login, now),
                "account_age_days": days_between(registered_date, now),
            }
        )
