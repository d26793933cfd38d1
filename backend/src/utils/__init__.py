"""Utility functions for the feedback collector."""

from .datetime_format import (
    format_display_date,
    format_display_time,
    normalize_date_text,
    normalize_time_text,
)
from .environment import EnvironmentInfo, StorageSettings, classify
from .retry import RetryPolicy

__all__ = [
    "format_display_date",
    "format_display_time",
    "normalize_date_text",
    "normalize_time_text",
    "EnvironmentInfo",
    "StorageSettings",
    "classify",
    "RetryPolicy",
]
