"""
app/schemas/csv_ingestion.py

Response schemas for CSV ingestion endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class CSVValidationErrorResponse(BaseModel):
    """
    API response model for one rejected row.
    """

    row_number: int = Field(..., ge=1)
    message: str
    column: str | None = None
    value: str | None = None


class CSVIngestionSummaryResponse(BaseModel):
    """
    API response model for a finished CSV upload.

    Partial success (some rows rejected or some chunks failed) is still a
    successful upload; the counts carry the detail.
    """

    message: str
    status: str
    rows_read: int = Field(..., ge=0)
    rows_rejected: int = Field(..., ge=0)
    rows_inserted: int = Field(..., ge=0)
    rows_failed: int = Field(..., ge=0)
    chunks_processed: int = Field(..., ge=0)
    chunks_failed: int = Field(..., ge=0)
    validation_errors: list[CSVValidationErrorResponse] = Field(default_factory=list)
