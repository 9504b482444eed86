"""
app/normalizers/row_normalizer.py

Normalization of one raw activity row into resolved user fields.

Per-row defects never raise: missing columns, blank cells, unparseable
dates, and non-numeric scores are replaced by synthetic values drawn
from the injected random source.
"""

from __future__ import annotations

import logging
import math
import random
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Mapping

import pandas as pd

from app.domain.user_activity import UserRecord, UserSegment
from app.mappers.column_mapper import ColumnMapper, FieldMap

logger = logging.getLogger(__name__)

TIMESTAMP_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
)

# Scores above the nominal 0–10 range are assumed to be on a 0–100 scale.
_MAX_ACTIVITY_SCORE = 10.0
_PERCENT_SCALE = 10.0 / 100.0

_SYNTHETIC_ACTIVITY_MIN = 1.0
_SYNTHETIC_ACTIVITY_SPAN = 9.0
_SYNTHETIC_LAST_LOGIN_DAYS = 30.0
_SYNTHETIC_REGISTERED_DAYS = 365.0


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_user_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class NormalizedRow:
    """
    One row with every canonical field resolved, before scoring.
    """

    id: str
    name: str
    email: str
    last_login: datetime
    registered_date: datetime
    activity_score: float

    def to_user_record(self, *, churn_risk: float, segment: UserSegment) -> UserRecord:
        return UserRecord(
            id=self.id,
            name=self.name,
            email=self.email,
            last_login=self.last_login.isoformat(),
            registered_date=self.registered_date.isoformat(),
            user_segment=segment,
            churn_risk=churn_risk,
            activity_score=self.activity_score,
        )


class RowNormalizer:
    """
    Resolves canonical user fields for one raw row.

    Deterministic given a seeded ``rng``, a fixed ``clock``, and a
    deterministic ``id_factory``; the synthetic fallbacks are the only
    source of randomness.
    """

    def __init__(
        self,
        *,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
        mapper: ColumnMapper | None = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._clock = clock or _utc_now
        self._id_factory = id_factory or _new_user_id
        self._mapper = mapper or ColumnMapper()

    def normalize(
        self,
        *,
        raw_row: Mapping[str, Any],
        index: int,
        field_map: FieldMap,
        now: datetime | None = None,
    ) -> NormalizedRow:
        """
        Resolve one row into canonical fields.

        Args:
            raw_row:   Source row keyed by the sheet's column labels.
            index:     Zero-based position of the row in the upload.
            field_map: Mapping built once from the first row of the upload.
            now:       Reference time for synthetic dates; defaults to the clock.
        """

        reference_time = self._ensure_aware(now or self._clock())
        mapped = self._mapper.map_row(raw_row=raw_row, field_map=field_map)
        ordinal = index + 1

        user_id = self._text_or_none(mapped.get("id")) or self._id_factory()
        name = self._text_or_none(mapped.get("name")) or f"User {ordinal}"
        email = self._text_or_none(mapped.get("email")) or f"user{ordinal}@example.com"

        activity_score = self._resolve_activity_score(mapped.get("activityScore"), ordinal)
        last_login = self._resolve_timestamp(
            mapped.get("lastLogin"),
            reference_time=reference_time,
            max_offset_days=_SYNTHETIC_LAST_LOGIN_DAYS,
        )
        registered_date = self._resolve_timestamp(
            mapped.get("registeredDate"),
            reference_time=reference_time,
            max_offset_days=_SYNTHETIC_REGISTERED_DAYS,
        )

        return NormalizedRow(
            id=user_id,
            name=name,
            email=email,
            last_login=last_login,
            registered_date=registered_date,
            activity_score=activity_score,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _resolve_activity_score(self, value: Any, ordinal: int) -> float:
        parsed = self.parse_number(value)
        if parsed is None:
            logger.debug("Row %d: activity score missing or non-numeric; synthesizing", ordinal)
            return _SYNTHETIC_ACTIVITY_MIN + self._rng.random() * _SYNTHETIC_ACTIVITY_SPAN
        if parsed > _MAX_ACTIVITY_SCORE:
            return parsed * _PERCENT_SCALE
        return parsed

    def _resolve_timestamp(
        self,
        value: Any,
        *,
        reference_time: datetime,
        max_offset_days: float,
    ) -> datetime:
        parsed = self.parse_timestamp(value)
        if parsed is not None:
            return parsed
        offset = timedelta(days=self._rng.random() * max_offset_days)
        return reference_time - offset

    @classmethod
    def parse_number(cls, value: Any) -> float | None:
        """
        Parse a finite number from a cell; blank and non-numeric cells yield None.
        """

        if cls._is_blank(value) or isinstance(value, bool):
            return None
        try:
            parsed = float(str(value).strip()) if isinstance(value, str) else float(value)
        except (TypeError, ValueError, OverflowError):
            return None
        if not math.isfinite(parsed):
            return None
        return parsed

    @classmethod
    def parse_timestamp(cls, value: Any) -> datetime | None:
        """
        Parse a timezone-aware timestamp from a cell, or return None.

        Naive values are interpreted as UTC.
        """

        if cls._is_blank(value):
            return None
        if isinstance(value, datetime):
            return cls._ensure_aware(value)
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
        if not isinstance(value, str):
            return None

        raw = value.strip()
        normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
        try:
            return cls._ensure_aware(datetime.fromisoformat(normalized))
        except ValueError:
            pass

        for fmt in TIMESTAMP_FORMATS:
            try:
                return datetime.strptime(raw, fmt).replace(tzinfo=timezone.utc)
            except ValueError:
                continue

        # Free-form spellings such as "Jan 5, 2024" or RFC 2822 headers.
        try:
            parsed = pd.to_datetime(raw, utc=True)
        except (TypeError, ValueError, OverflowError):
            return None
        if pd.isna(parsed):
            return None
        return parsed.to_pydatetime()

    @staticmethod
    def _ensure_aware(value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @classmethod
    def _text_or_none(cls, value: Any) -> str | None:
        if cls._is_blank(value) or value is False or value == 0:
            return None
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value).strip()

    @staticmethod
    def _is_blank(value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, float) and math.isnan(value):
            return True
        try:
            # pandas NaT / numpy NaN compare unequal to themselves
            if value != value:
                return True
        except (TypeError, ValueError):
            return False
        return isinstance(value, str) and value.strip() == ""
