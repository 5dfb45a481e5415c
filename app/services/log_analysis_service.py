"""
app/services/log_analysis_service.py

Counts log lines by severity in the service's own log file.
"""

from __future__ import annotations

import logging
from pathlib import Path

from app.config import get_logging_settings

logger = logging.getLogger(__name__)

# Checked in order; a line counts once, for the first level it mentions.
SEVERITY_LEVELS: tuple[str, ...] = ("INFO", "ERROR", "DEBUG")


class LogAnalysisError(RuntimeError):
    """
    Raised when the log file cannot be found or read.
    """


class LogAnalysisService:
    def __init__(self, *, log_file_path: str | Path) -> None:
        self._path = Path(log_file_path)

    @property
    def log_file_path(self) -> Path:
        return self._path

    def analyze(self) -> dict[str, int]:
        """
        Stream the log file line by line and count severities, case-insensitively.
        """

        counts = {level: 0 for level in SEVERITY_LEVELS}
        if not self._path.is_file():
            logger.error("Log file does not exist path=%s", self._path)
            raise LogAnalysisError(f"log file does not exist: {self._path}")

        try:
            with self._path.open("r", encoding="utf-8", errors="replace") as handle:
                for line in handle:
                    upper = line.upper()
                    for level in SEVERITY_LEVELS:
                        if level in upper:
                            counts[level] += 1
                            break
        except OSError as exc:
            logger.error("Failed to read log file path=%s error=%s", self._path, exc)
            raise LogAnalysisError(f"failed to read log file: {exc}") from exc

        logger.info("Log analysis completed counts=%s", counts)
        return counts


def get_log_analysis_service() -> LogAnalysisService:
    return LogAnalysisService(log_file_path=get_logging_settings().file_path)
