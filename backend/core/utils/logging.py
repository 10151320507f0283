"""
Structured logging utility for the application
"""
import logging
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class StructuredLogger:
    """
    Structured logger that outputs JSON formatted logs
    """

    def __init__(self, name: str = "kindkandles", service: str = "kindkandles-api"):
        self.service = service
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(logging.INFO)
            handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            ))
            self.logger.addHandler(handler)

    def _create_log_entry(
        self,
        level: str,
        message: str,
        endpoint: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        exception: Optional[BaseException] = None
    ) -> Dict[str, Any]:
        """
        Create a structured log entry
        """
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level.upper(),
            "message": message,
            "service": self.service,
        }

        if endpoint:
            log_entry["endpoint"] = endpoint

        if metadata:
            log_entry["metadata"] = metadata

        if exception:
            log_entry["exception"] = {
                "type": type(exception).__name__,
                "message": str(exception),
            }

        return log_entry

    def _emit(self, level: int, entry: Dict[str, Any]):
        self.logger.log(level, json.dumps(entry, default=str))

    def info(
        self,
        message: str,
        endpoint: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ):
        """Log info message"""
        self._emit(logging.INFO, self._create_log_entry("info", message, endpoint, metadata))

    def warning(
        self,
        message: str,
        endpoint: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        exception: Optional[BaseException] = None
    ):
        """Log warning message"""
        self._emit(
            logging.WARNING,
            self._create_log_entry("warning", message, endpoint, metadata, exception),
        )

    def error(
        self,
        message: str,
        endpoint: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        exception: Optional[BaseException] = None
    ):
        """Log error message"""
        self._emit(
            logging.ERROR,
            self._create_log_entry("error", message, endpoint, metadata, exception),
        )


# Create global logger instance
structured_logger = StructuredLogger()
