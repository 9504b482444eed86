"""
app/mappers/column_mapper.py

Column mapping from arbitrary activity-sheet headers to canonical user fields.

Matching is exact and case-sensitive against a fixed alias list per field.
Variants such as ``"ID"`` and ``"id"`` are enumerated explicitly instead of
normalizing headers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

CANONICAL_FIELDS: tuple[str, ...] = (
    "id",
    "name",
    "email",
    "lastLogin",
    "registeredDate",
    "activityScore",
)

# Candidates are tried in order; the first one present in the sample row wins.
DEFAULT_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("id", "user_id", "userid", "user id", "ID"),
    "name": ("name", "user_name", "username", "user name", "fullname", "full_name", "full name"),
    "email": ("email", "user_email", "useremail", "user email", "mail"),
    "lastLogin": ("last_login", "lastlogin", "last login", "last_seen", "lastseen", "last seen"),
    "registeredDate": (
        "registered_date",
        "registereddate",
        "registered date",
        "signup_date",
        "signupdate",
        "signup date",
        "created_at",
        "createdat",
        "created at",
    ),
    "activityScore": (
        "activity_score",
        "activityscore",
        "activity score",
        "engagement_score",
        "engagementscore",
        "engagement score",
    ),
}


@dataclass(frozen=True)
class FieldMap:
    """
    Resolved mapping between canonical field names and source column labels.

    A canonical field missing from ``canonical_to_source`` is always
    synthesized downstream, for every row of the upload.
    """

    canonical_to_source: dict[str, str]
    source_headers: tuple[str, ...]

    def source_for(self, canonical_field: str) -> str | None:
        return self.canonical_to_source.get(canonical_field)

    @property
    def unmapped_fields(self) -> tuple[str, ...]:
        return tuple(
            field for field in CANONICAL_FIELDS if field not in self.canonical_to_source
        )


class ColumnMapper:
    """
    Maps incoming sheet columns to canonical user fields.
    """

    def __init__(self, aliases: Mapping[str, Sequence[str]] | None = None) -> None:
        alias_map = aliases or DEFAULT_FIELD_ALIASES
        self._aliases: dict[str, tuple[str, ...]] = {
            canonical: tuple(values)
            for canonical, values in alias_map.items()
        }

    def build_field_map(self, sample_row: Mapping[str, Any] | None) -> FieldMap:
        """
        Resolve the canonical-to-source mapping from one sample row.

        A label matches when it is present as a key in the row, even if its
        value is blank.
        """

        row = sample_row or {}
        mapping: dict[str, str] = {}
        for canonical_field in CANONICAL_FIELDS:
            for candidate in self._aliases.get(canonical_field, ()):
                if candidate in row:
                    mapping[canonical_field] = candidate
                    break

        return FieldMap(
            canonical_to_source=mapping,
            source_headers=tuple(str(key) for key in row.keys()),
        )

    def map_row(
        self,
        *,
        raw_row: Mapping[str, Any],
        field_map: FieldMap,
    ) -> dict[str, Any]:
        """
        Convert a source row into canonical raw fields.

        Unmapped fields are absent from the result.
        """

        mapped: dict[str, Any] = {}
        for canonical_field in CANONICAL_FIELDS:
            source_column = field_map.source_for(canonical_field)
            if source_column is not None:
                mapped[canonical_field] = raw_row.get(source_column)
        return mapped
