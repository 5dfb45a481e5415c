"""
app/schemas package marker.
"""

from app.schemas.csv_ingestion import CSVIngestionSummaryResponse, CSVValidationErrorResponse
from app.schemas.user_record import UserRecordResponse

__all__ = [
    "CSVIngestionSummaryResponse",
    "CSVValidationErrorResponse",
    "UserRecordResponse",
]
