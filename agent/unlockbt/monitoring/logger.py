# agent/unlockbt/monitoring/logger.py
"""
Structured logging — one JSON object per line on stdout.
"""
import os
import sys
import json
import logging
from datetime import datetime, timezone
from typing import Dict


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


class StructuredLogger:
    """JSON structured logger with backtest/fetch helpers."""

    def __init__(self, name: str, level: str = "INFO"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))

        # Don't stack handlers when the same name is requested twice
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(JsonFormatter())
            self.logger.addHandler(handler)
        self.logger.propagate = False

    def _log(self, level: str, message: str, **kwargs):
        log_data = {
            "timestamp": _utc_now(),
            "level": level,
            "logger": self.logger.name,
            "message": message,
            **kwargs
        }

        getattr(self.logger, level.lower())(json.dumps(log_data, default=str))

    def info(self, message: str, **kwargs):
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log("ERROR", message, **kwargs)

    def debug(self, message: str, **kwargs):
        self._log("DEBUG", message, **kwargs)

    def backtest(self, token: str, trades: int, win_rate: float, avg_roi: float, **kwargs):
        """One line per completed backtest run."""
        self._log("INFO", f"BACKTEST: {token}",
                  token=token,
                  trades=trades,
                  win_rate=win_rate,
                  avg_roi=avg_roi,
                  **kwargs)

    def fetch(self, status: str, **kwargs):
        """Remote unlock fetch outcome; failures go out as WARNING."""
        level = "WARNING" if status == "failed" else "INFO"
        self._log(level, f"FETCH: {status}", status=status, **kwargs)


class JsonFormatter(logging.Formatter):
    """Pass JSON messages through, wrap plain ones."""

    def format(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()
        try:
            json.loads(msg)
            return msg
        except (json.JSONDecodeError, ValueError):
            log_data = {
                "timestamp": _utc_now(),
                "level": record.levelname,
                "message": msg,
                "logger": record.name,
            }
            if record.exc_info:
                log_data["exception"] = self.formatException(record.exc_info)

            return json.dumps(log_data)


_LOGGER_CACHE: Dict[str, StructuredLogger] = {}

def get_logger(name: str = "unlockbt") -> StructuredLogger:
    """Logger singleton per name"""
    if name not in _LOGGER_CACHE:
        level = os.getenv("LOG_LEVEL", "INFO")
        _LOGGER_CACHE[name] = StructuredLogger(name, level)
    return _LOGGER_CACHE[name]
