"""
Threshold-based churn segmentation.

Maps a churn risk score to exactly one behavioral segment. No ML,
no hysteresis: re-scoring reclassifies immediately.
"""

from app.domain.user_activity import UserSegment


# ------------------------------------------------------------------
# Segment thresholds
# ------------------------------------------------------------------

ATRISK_THRESHOLD: float = 0.7  # strictly above → atrisk
POWER_THRESHOLD: float = 0.3  # strictly below → power


def classify_segment(churn_risk: float) -> UserSegment:
    """
    Return the segment for a churn risk score.

    Both boundaries are strict, so 0.3 and 0.7 themselves fall into
    ``occasional``.

    Args:
        churn_risk: Score in [0, 1].

    Returns:
        ``UserSegment.ATRISK``, ``UserSegment.POWER``, or
        ``UserSegment.OCCASIONAL``.
    """
    if churn_risk > ATRISK_THRESHOLD:
        return UserSegment.ATRISK
    if churn_risk < POWER_THRESHOLD:
        return UserSegment.POWER
    return UserSegment.OCCASIONAL
