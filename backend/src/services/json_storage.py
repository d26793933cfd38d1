"""JSON array feedback store."""

import json
import logging
from pathlib import Path
from typing import Any

from models.feedback import FeedbackRecord
from services.storage_backend import FeedbackStorageError, StorageBackend
from utils.constants import RAW_TIMESTAMP_KEY
from utils.datetime_format import normalize_date_text, normalize_time_text

logger = logging.getLogger(__name__)


class JsonFeedbackStorage(StorageBackend):
    """Feedback store backed by a single pretty-printed JSON array.

    Every append reads the whole array, adds one entry and rewrites the file.
    """

    name = "JSON"

    def __init__(self, json_path: Path):
        """Initialize the JSON store.

        Args:
            json_path: File holding the JSON array
        """
        self.json_path = Path(json_path)

    @property
    def path(self) -> Path:
        return self.json_path

    def _read_entries(self) -> list[dict[str, Any]]:
        """Read the stored array, treating a missing or corrupt file as empty."""
        if not self.json_path.exists():
            return []
        try:
            with self.json_path.open("r", encoding="utf-8") as handle:
                content = handle.read()
        except OSError as e:
            raise FeedbackStorageError(
                f"Failed to read JSON file '{self.json_path}': {e}"
            ) from e

        if not content.strip():
            return []
        try:
            entries = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning(
                f"JSON file {self.json_path} is not valid JSON ({e}), starting fresh"
            )
            return []
        if not isinstance(entries, list):
            logger.warning(
                f"JSON file {self.json_path} does not hold an array, starting fresh"
            )
            return []
        return entries

    def append(self, record: FeedbackRecord) -> str:
        entries = self._read_entries()

        entry = record.as_dict()
        entry[RAW_TIMESTAMP_KEY] = record.raw_timestamp
        entries.append(entry)

        try:
            self.json_path.parent.mkdir(parents=True, exist_ok=True)
            with self.json_path.open("w", encoding="utf-8") as handle:
                json.dump(entries, handle, indent=2, ensure_ascii=False)
        except (OSError, TypeError) as e:
            raise FeedbackStorageError(
                f"Failed to write JSON file '{self.json_path}': {e}"
            ) from e

        logger.info(
            f"Feedback appended to JSON file {self.json_path} ({len(entries)} entries)"
        )
        return "Data saved to JSON file"

    def load(self) -> list[dict[str, str]]:
        if self.json_path.exists():
            # Corrupt content raises here, unlike _read_entries
            try:
                content = self.json_path.read_text(encoding="utf-8")
                entries = json.loads(content) if content.strip() else []
            except (OSError, json.JSONDecodeError) as e:
                raise FeedbackStorageError(
                    f"Failed to read JSON file '{self.json_path}': {e}"
                ) from e
            if not isinstance(entries, list):
                raise FeedbackStorageError(
                    f"JSON file '{self.json_path}' does not hold an array"
                )
        else:
            entries = []

        data = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            row = {key: "" if value is None else value for key, value in entry.items()}
            if isinstance(row.get("Submission Date"), str):
                row["Submission Date"] = normalize_date_text(row["Submission Date"])
            if isinstance(row.get("Submission Time"), str):
                row["Submission Time"] = normalize_time_text(row["Submission Time"])
            data.append(row)
        return data
