"""Data models for the feedback collector."""

from .feedback import (
    FeedbackRecord,
    FeedbackSubmission,
    RepairReport,
    SaveOutcome,
    StorageResult,
)

__all__ = [
    "FeedbackSubmission",
    "FeedbackRecord",
    "StorageResult",
    "SaveOutcome",
    "RepairReport",
]
