"""
app/api/routers/records.py

Paginated read access to user_data.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import RecordsAPISettings, get_records_api_settings
from app.repositories.user_data_repository import UserDataRepository
from app.schemas.user_record import UserRecordResponse
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["records"])


@router.get("/records", response_model=list[UserRecordResponse])
def list_records(
    page: str = Query(default="1", description="1-based page number"),
    size: str | None = Query(default=None, description="Page size"),
    db: Session = Depends(get_db),
    settings: RecordsAPISettings = Depends(get_records_api_settings),
) -> list[UserRecordResponse]:
    """
    Return one page of user records ordered by id.
    """

    page_number = _parse_positive_int(page)
    if page_number is None:
        logger.error("Invalid page number page=%r", page)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid page number",
        )

    page_size = _parse_positive_int(size) if size is not None else settings.default_page_size
    if page_size is None:
        logger.error("Invalid size number size=%r", size)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid size number",
        )
    page_size = min(page_size, settings.max_page_size)

    try:
        rows = UserDataRepository(db).list_page(
            offset=(page_number - 1) * page_size,
            limit=page_size,
        )
    except SQLAlchemyError as exc:
        logger.error("Failed to fetch records error=%s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch records",
        ) from exc

    logger.info("Records fetched successfully records_count=%d", len(rows))
    return [UserRecordResponse.model_validate(row) for row in rows]


def _parse_positive_int(raw: str) -> int | None:
    value = raw.strip()
    if not value.isascii() or not value.isdigit():
        return None
    parsed = int(value)
    return parsed if parsed >= 1 else None
