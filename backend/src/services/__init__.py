"""Services for the feedback collector backend."""

from .csv_storage import CsvFeedbackStorage
from .excel_storage import ExcelFeedbackStorage
from .feedback_service import FeedbackService
from .json_storage import JsonFeedbackStorage
from .storage_backend import FeedbackStorageError, StorageBackend

__all__ = [
    "FeedbackService",
    "StorageBackend",
    "FeedbackStorageError",
    "ExcelFeedbackStorage",
    "JsonFeedbackStorage",
    "CsvFeedbackStorage",
]
