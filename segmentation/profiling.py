"""
Segment profiling module.

Groups scored users by segment and computes per-segment aggregate
statistics. No text generation or persona logic here.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Sequence

import numpy as np

from app.domain.user_activity import SEGMENT_ORDER, UserRecord, UserSegment


@dataclass(frozen=True)
class SegmentProfile:
    """
    Aggregate view of one non-empty segment.

    ``members`` is ordered by descending churn risk.
    """

    segment: UserSegment
    members: tuple[UserRecord, ...]
    avg_churn_risk: float
    avg_activity_score: float

    @property
    def size(self) -> int:
        return len(self.members)


class SegmentProfiler:
    """
    Summarises segments by computing mean values of the scored fields.

    Responsibilities:
        - Partition users into the fixed segments.
        - Order each segment's members by descending churn risk.
        - Compute per-segment averages.

    Not responsible for:
        - Scoring or segment assignment (done upstream).
        - Persona text, naming, or splitting.
    """

    def profile_segments(self, users: Sequence[UserRecord]) -> Dict[UserSegment, SegmentProfile]:
        """
        Build a profile for every non-empty segment.

        Args:
            users: Scored user records in any order.

        Returns:
            Dict keyed by segment in the fixed ``SEGMENT_ORDER``; empty
            segments are absent.
        """
        buckets: dict[UserSegment, List[UserRecord]] = defaultdict(list)
        for user in users:
            buckets[user.user_segment].append(user)

        profiles: Dict[UserSegment, SegmentProfile] = {}
        for segment in SEGMENT_ORDER:
            members = buckets.get(segment)
            if not members:
                continue
            ordered = tuple(sorted(members, key=lambda user: user.churn_risk, reverse=True))
            profiles[segment] = SegmentProfile(
                segment=segment,
                members=ordered,
                avg_churn_risk=self.mean([user.churn_risk for user in ordered]),
                avg_activity_score=self.mean([user.activity_score for user in ordered]),
            )
        return profiles

    @staticmethod
    def mean(values: Sequence[float]) -> float:
        """
        Compute the arithmetic mean of a list of floats.

        Returns 0.0 for an empty list.
        """
        if not values:
            return 0.0
        return float(np.mean(values))
