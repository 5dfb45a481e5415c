"""
app/services package marker.
"""

from app.services.batch_writer import BatchWriter
from app.services.chunk_reader import CSVChunkReader, EndOfStream, StreamReadError
from app.services.csv_ingestion_service import (
    CSVIngestionService,
    IngestionAbortedError,
    IngestionCoordinator,
    get_csv_ingestion_service,
)
from app.services.log_analysis_service import (
    LogAnalysisError,
    LogAnalysisService,
    get_log_analysis_service,
)
from app.services.worker_pool import BoundedWorkerPool

__all__ = [
    "BatchWriter",
    "BoundedWorkerPool",
    "CSVChunkReader",
    "CSVIngestionService",
    "EndOfStream",
    "IngestionAbortedError",
    "IngestionCoordinator",
    "LogAnalysisError",
    "LogAnalysisService",
    "StreamReadError",
    "get_csv_ingestion_service",
    "get_log_analysis_service",
]
