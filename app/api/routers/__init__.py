"""
app/api/routers package marker.
"""

from app.api.routers.csv_ingestion import router as csv_ingestion_router
from app.api.routers.logs import router as logs_router
from app.api.routers.records import router as records_router

__all__ = [
    "csv_ingestion_router",
    "logs_router",
    "records_router",
]
