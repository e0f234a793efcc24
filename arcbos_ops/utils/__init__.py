"""Utility helpers for arcbos_ops."""

from .records import as_records, unwrap_records
from .logging_config import setup_logging

__all__ = ["as_records", "unwrap_records", "setup_logging"]
