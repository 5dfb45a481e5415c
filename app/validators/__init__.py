"""
app/validators package marker.
"""

from app.validators.user_record_parser import COLUMNS, EXPECTED_FIELD_COUNT, UserRecordParser

__all__ = [
    "COLUMNS",
    "EXPECTED_FIELD_COUNT",
    "UserRecordParser",
]
