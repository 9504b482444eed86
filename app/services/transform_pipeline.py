"""
app/services/transform_pipeline.py

Row-level transform: raw sheet rows -> scored, segmented user records.

    1. ColumnMapper.build_field_map()   — once, from the first row
    2. RowNormalizer.normalize()        — per row, synthesizing gaps
    3. ChurnRiskModel.score_user()      — per row
    4. classify_segment()               — per row

The output is ordered by descending churn risk. Per-row defects never
raise; only an empty input is reported, as an empty result.
"""

from __future__ import annotations

import logging
import random
from collections import Counter
from datetime import datetime, timezone
from typing import Callable, Sequence

from app.domain.user_activity import SEGMENT_ORDER, RawRow, UserRecord
from app.logging_utils import log_event
from app.mappers.column_mapper import ColumnMapper, FieldMap
from app.normalizers.row_normalizer import RowNormalizer
from risk.scoring import ChurnRiskModel
from segmentation.segmenter import classify_segment

logger = logging.getLogger(__name__)


class UserActivityPipeline:
    """
    Transforms uploaded activity rows into scored user records.
    """

    def __init__(
        self,
        *,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
        mapper: ColumnMapper | None = None,
        risk_model: ChurnRiskModel | None = None,
    ) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._mapper = mapper or ColumnMapper()
        self._normalizer = RowNormalizer(
            rng=rng,
            clock=self._clock,
            id_factory=id_factory,
            mapper=self._mapper,
        )
        self._risk_model = risk_model or ChurnRiskModel()

    def transform(
        self,
        rows: Sequence[RawRow],
        *,
        now: datetime | None = None,
    ) -> tuple[list[UserRecord], FieldMap]:
        """
        Score and segment every row.

        Args:
            rows: Raw rows keyed by the sheet's column labels.
            now:  Reference time shared by every row; defaults to the clock.

        Returns:
            ``(users, field_map)`` with users sorted by descending churn risk.
            Empty input yields ``([], <empty field map>)``.
        """
        if not rows:
            logger.warning("No rows to transform")
            return [], self._mapper.build_field_map(None)

        reference_time = now or self._clock()
        if reference_time.tzinfo is None:
            reference_time = reference_time.replace(tzinfo=timezone.utc)

        field_map = self._mapper.build_field_map(rows[0])
        log_event(
            logger,
            logging.INFO,
            "field_mapping_resolved",
            mapped=field_map.canonical_to_source,
            unmapped=list(field_map.unmapped_fields),
            source_headers=list(field_map.source_headers),
        )

        users: list[UserRecord] = []
        for index, raw_row in enumerate(rows):
            normalized = self._normalizer.normalize(
                raw_row=raw_row,
                index=index,
                field_map=field_map,
                now=reference_time,
            )
            churn_risk = self._risk_model.score_user(
                activity_score=normalized.activity_score,
                last_login=normalized.last_login,
                registered_date=normalized.registered_date,
                now=reference_time,
            )
            users.append(
                normalized.to_user_record(
                    churn_risk=churn_risk,
                    segment=classify_segment(churn_risk),
                )
            )

        # sorted() is stable, so equal risks keep upload order.
        users = sorted(users, key=lambda user: user.churn_risk, reverse=True)

        counts = Counter(user.user_segment for user in users)
        log_event(
            logger,
            logging.INFO,
            "users_transformed",
            total=len(users),
            **{segment.value: counts.get(segment, 0) for segment in SEGMENT_ORDER},
        )
        return users, field_map
