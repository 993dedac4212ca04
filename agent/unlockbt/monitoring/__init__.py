# agent/unlockbt/monitoring/__init__.py
"""
Monitoring — structured JSON logging
"""
from .logger import get_logger, StructuredLogger, JsonFormatter

__all__ = [
    "get_logger",
    "StructuredLogger",
    "JsonFormatter",
]
