"""
app/domain package marker.
"""

from app.domain.user_record import (
    Chunk,
    ChunkOutcome,
    IngestionResult,
    IngestionState,
    RawRow,
    RowRejection,
    UserRecord,
)

__all__ = [
    "Chunk",
    "ChunkOutcome",
    "IngestionResult",
    "IngestionState",
    "RawRow",
    "RowRejection",
    "UserRecord",
]
