"""Feedback persistence across several storage backends."""

import logging
from datetime import datetime

from models.feedback import (
    FeedbackRecord,
    FeedbackSubmission,
    RepairReport,
    SaveOutcome,
    StorageResult,
)
from services.csv_storage import CsvFeedbackStorage
from services.excel_storage import ExcelFeedbackStorage
from services.json_storage import JsonFeedbackStorage
from services.record_normalizer import capture_instant, normalize
from services.storage_backend import FeedbackStorageError, StorageBackend
from utils.environment import StorageSettings
from utils.retry import RetryPolicy

logger = logging.getLogger(__name__)


class FeedbackService:
    """Saves each submission to every viable backend and reads it back.

    Backends are tried in list order. Ones that need a persistent
    filesystem are skipped when running on a hosting platform. A failure in
    one backend never stops the others; the save succeeds when at least
    one backend stored the record.
    """

    def __init__(self, backends: list[StorageBackend], hosting: bool = False):
        """Initialize the feedback service.

        Args:
            backends: Storage backends in priority order
            hosting: True when the filesystem is ephemeral
        """
        self.backends = list(backends)
        self.hosting = hosting

    @classmethod
    def from_settings(
        cls, settings: StorageSettings, retry_policy: RetryPolicy | None = None
    ) -> "FeedbackService":
        """Build the standard Excel -> JSON -> CSV service for the given paths."""
        return cls(
            backends=[
                ExcelFeedbackStorage(settings.excel_path, retry_policy=retry_policy),
                JsonFeedbackStorage(settings.json_path),
                CsvFeedbackStorage(settings.csv_path),
            ],
            hosting=settings.hosting,
        )

    @property
    def viable_backends(self) -> list[StorageBackend]:
        """Backends that may be used in the current environment."""
        if not self.hosting:
            return list(self.backends)
        return [b for b in self.backends if not b.requires_persistent_storage]

    def get_backend(self, name: str) -> StorageBackend | None:
        for backend in self.backends:
            if backend.name.lower() == name.lower():
                return backend
        return None

    def build_records(
        self,
        submission: FeedbackSubmission,
        captured_at: datetime | None = None,
    ) -> dict[str, FeedbackRecord]:
        """Normalize the submission once per list separator in use.

        All records share the same capture instant.
        """
        captured_at = captured_at or capture_instant()
        records: dict[str, FeedbackRecord] = {}
        for backend in self.viable_backends:
            separator = backend.list_separator
            if separator not in records:
                records[separator] = normalize(
                    submission, captured_at=captured_at, list_separator=separator
                )
        return records

    def save(
        self,
        submission: FeedbackSubmission,
        captured_at: datetime | None = None,
    ) -> SaveOutcome:
        """Write a submission to every viable backend.

        Returns:
            SaveOutcome listing the backends that stored the record and the
            per-backend results
        """
        records = self.build_records(submission, captured_at)
        details: list[StorageResult] = []

        if self.hosting:
            skipped = [
                b.name for b in self.backends if b.requires_persistent_storage
            ]
            if skipped:
                logger.info(f"Hosting environment, skipping {', '.join(skipped)}")

        for backend in self.viable_backends:
            record = records[backend.list_separator]
            try:
                message = backend.append(record)
                details.append(
                    StorageResult(backend=backend.name, success=True, message=message)
                )
                logger.info(f"{backend.name} save succeeded")
            except Exception as e:
                logger.error(f"{backend.name} save failed: {e}")
                details.append(
                    StorageResult(backend=backend.name, success=False, message=str(e))
                )

        storage_methods = [result.backend for result in details if result.success]
        outcome = SaveOutcome(
            success=bool(storage_methods),
            storage_methods=storage_methods,
            details=details,
        )
        if outcome.success:
            logger.info(f"Feedback saved via {', '.join(storage_methods)}")
        else:
            logger.error("Feedback could not be saved to any backend")
        return outcome

    def load_all(self) -> tuple[list[dict[str, str]], str]:
        """Read feedback from the first viable backend that has data on disk.

        Returns:
            (rows, source backend name); ``([], "none")`` if nothing could
            be read
        """
        for backend in self.viable_backends:
            if not backend.exists():
                continue
            try:
                rows = backend.load()
            except Exception as e:
                logger.warning(f"Could not read feedback from {backend.name}: {e}")
                continue
            logger.info(f"Loaded {len(rows)} feedback rows from {backend.name}")
            return rows, backend.name
        return [], "none"

    def repair_excel(self) -> RepairReport:
        """Run the destructive de-duplication pass on the Excel workbook.

        Raises:
            FeedbackStorageError: If no Excel backend is configured, the
                environment is hosted, or the repair itself fails
        """
        backend = self.get_backend(ExcelFeedbackStorage.name)
        if not isinstance(backend, ExcelFeedbackStorage):
            raise FeedbackStorageError("No Excel backend configured")
        if self.hosting:
            raise FeedbackStorageError(
                "Excel repair is not available in a hosting environment"
            )
        return backend.repair()

    def storage_status(self) -> dict[str, bool]:
        """Which backend files currently exist, keyed by lowercase backend name."""
        return {backend.name.lower(): backend.exists() for backend in self.backends}
