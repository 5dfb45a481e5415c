"""
app/api/routers/csv_ingestion.py

CSV bulk upload endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status

from app.api.dependencies import get_csv_upload, get_user_data_store
from app.domain.user_record import IngestionResult
from app.repositories.user_data_store import UserDataStore
from app.schemas.csv_ingestion import CSVIngestionSummaryResponse, CSVValidationErrorResponse
from app.services.csv_ingestion_service import (
    CSVIngestionService,
    IngestionAbortedError,
    get_csv_ingestion_service,
)

router = APIRouter(tags=["ingestion"])

SUCCESS_MESSAGE = "CSV file processed successfully and data stored in database."


@router.post("/upload-csv", response_model=CSVIngestionSummaryResponse)
def upload_csv(
    file: UploadFile = Depends(get_csv_upload),
    store: UserDataStore = Depends(get_user_data_store),
    ingestion_service: CSVIngestionService = Depends(get_csv_ingestion_service),
) -> CSVIngestionSummaryResponse:
    """
    Stream one CSV file into user_data.

    Rows already written stay written when the stream turns out to be
    unreadable part-way; the 400 response reports how far ingestion got.
    """

    try:
        result = ingestion_service.ingest_csv(upload_file=file, store=store)
    except IngestionAbortedError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": "Failed to read CSV file.",
                "error": str(exc),
                **_counts(exc.result),
            },
        ) from exc
    finally:
        file.file.close()

    return CSVIngestionSummaryResponse(
        message=SUCCESS_MESSAGE,
        **_counts(result),
        validation_errors=[
            CSVValidationErrorResponse(
                row_number=error.row_number,
                column=error.column,
                message=error.message,
                value=error.value,
            )
            for error in result.validation_errors
        ],
    )


def _counts(result: IngestionResult) -> dict[str, object]:
    return {
        "status": result.status,
        "rows_read": result.rows_read,
        "rows_rejected": result.rows_rejected,
        "rows_inserted": result.rows_inserted,
        "rows_failed": result.rows_failed,
        "chunks_processed": result.chunks_processed,
        "chunks_failed": result.chunks_failed,
    }
