"""
app/validators/user_record_parser.py

Positional parsing and validation of one raw user_data CSV row.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date

from app.domain.user_record import RawRow, RowRejection, UserRecord

# Positional layout of an upload row; column 0 carries a source-side id that
# is discarded because identity is assigned by the database.
COLUMNS: tuple[str, ...] = (
    "id",
    "first_name",
    "last_name",
    "email",
    "age",
    "gender",
    "department",
    "company",
    "salary",
    "date_joined",
    "is_active",
)
EXPECTED_FIELD_COUNT = len(COLUMNS)
IDENTIFYING_COLUMNS: tuple[str, ...] = ("first_name", "last_name", "email")

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+\Z")
_DECIMAL_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?\Z")
_BOOLEAN_TRUE = "true"


@dataclass(frozen=True)
class _FieldError:
    column: str
    message: str
    value: str | None


class UserRecordParser:
    """
    Turns a RawRow into a UserRecord, or a RowRejection describing why not.

    Numeric fields use ASCII base-10 parsing only, with no surrounding
    whitespace; a failure rejects the whole row instead of defaulting.
    ``is_active`` is lenient: anything other than the exact token ``"true"``
    is False.
    """

    def parse(self, raw_row: RawRow) -> UserRecord | RowRejection:
        fields = raw_row.fields
        if len(fields) < EXPECTED_FIELD_COUNT:
            return RowRejection(
                row_number=raw_row.row_number,
                message=(
                    f"Expected {EXPECTED_FIELD_COUNT} fields, got {len(fields)}."
                ),
                raw=fields,
            )

        values = dict(zip(COLUMNS, fields))
        errors: list[_FieldError] = []

        first_name = self._parse_identifying(values, "first_name", errors)
        last_name = self._parse_identifying(values, "last_name", errors)
        email = self._parse_identifying(values, "email", errors)
        age = self._parse_int(values, "age", errors)
        salary = self._parse_float(values, "salary", errors)
        date_joined = self._parse_date(values, "date_joined", errors)

        if errors:
            first = errors[0]
            return RowRejection(
                row_number=raw_row.row_number,
                column=first.column,
                message="; ".join(error.message for error in errors),
                value=first.value,
                raw=fields,
            )

        return UserRecord(
            first_name=first_name,
            last_name=last_name,
            email=email,
            age=age,
            gender=values["gender"].strip(),
            department=values["department"].strip(),
            company=values["company"].strip(),
            salary=salary,
            date_joined=date_joined,
            is_active=self.parse_bool(values["is_active"]),
        )

    @staticmethod
    def parse_bool(value: str) -> bool:
        return value == _BOOLEAN_TRUE

    def _parse_identifying(
        self,
        values: dict[str, str],
        column: str,
        errors: list[_FieldError],
    ) -> str:
        value = values[column].strip()
        if not value:
            errors.append(_FieldError(column, f"{column} is required.", values[column]))
        return value

    def _parse_int(
        self,
        values: dict[str, str],
        column: str,
        errors: list[_FieldError],
    ) -> int:
        raw = values[column]
        if not _INTEGER_PATTERN.match(raw):
            errors.append(_FieldError(column, f"{column} must be an integer.", values[column]))
            return 0
        return int(raw, 10)

    def _parse_float(
        self,
        values: dict[str, str],
        column: str,
        errors: list[_FieldError],
    ) -> float:
        raw = values[column]
        if not _DECIMAL_PATTERN.match(raw):
            errors.append(_FieldError(column, f"{column} must be a number.", values[column]))
            return 0.0
        parsed = float(raw)
        if not math.isfinite(parsed):
            errors.append(_FieldError(column, f"{column} is out of range.", values[column]))
            return 0.0
        return parsed

    def _parse_date(
        self,
        values: dict[str, str],
        column: str,
        errors: list[_FieldError],
    ) -> date:
        raw = values[column].strip()
        try:
            return date.fromisoformat(raw)
        except ValueError:
            errors.append(
                _FieldError(column, f"{column} must be a YYYY-MM-DD date.", values[column])
            )
            return date.min
