"""Append-only CSV feedback store."""

import csv
import logging
from pathlib import Path

from models.feedback import FeedbackRecord
from services.storage_backend import FeedbackStorageError, StorageBackend
from utils.constants import CSV_LIST_SEPARATOR, FEEDBACK_HEADERS
from utils.datetime_format import normalize_date_text, normalize_time_text

logger = logging.getLogger(__name__)


def escape_csv_field(value: str) -> str:
    """Quote a field only if it contains a comma, a double quote or a line break."""
    value = "" if value is None else str(value)
    if any(char in value for char in (",", '"', "\n", "\r")):
        return '"' + value.replace('"', '""') + '"'
    return value


def format_csv_line(values: list[str]) -> str:
    return ",".join(escape_csv_field(value) for value in values) + "\n"


class CsvFeedbackStorage(StorageBackend):
    """Feedback store backed by one CSV file with a header line."""

    name = "CSV"
    list_separator = CSV_LIST_SEPARATOR

    def __init__(self, csv_path: Path):
        """Initialize the CSV store.

        Args:
            csv_path: File to append to; created with a header on first write
        """
        self.csv_path = Path(csv_path)

    @property
    def path(self) -> Path:
        return self.csv_path

    def append(self, record: FeedbackRecord) -> str:
        try:
            self.csv_path.parent.mkdir(parents=True, exist_ok=True)
            write_header = not self.csv_path.exists()
            with self.csv_path.open("a", encoding="utf-8", newline="") as handle:
                if write_header:
                    logger.info(f"Creating CSV file at {self.csv_path}")
                    handle.write(",".join(FEEDBACK_HEADERS) + "\n")
                handle.write(format_csv_line(record.as_row()))
        except OSError as e:
            raise FeedbackStorageError(
                f"Failed to append feedback to CSV file '{self.csv_path}': {e}"
            ) from e

        logger.info(f"Feedback appended to CSV file {self.csv_path}")
        return "Data saved to CSV file"

    def load(self) -> list[dict[str, str]]:
        if not self.csv_path.exists():
            return []
        try:
            with self.csv_path.open("r", encoding="utf-8", newline="") as handle:
                reader = csv.reader(handle)
                rows = list(reader)
        except (OSError, csv.Error) as e:
            raise FeedbackStorageError(
                f"Failed to read CSV file '{self.csv_path}': {e}"
            ) from e

        if not rows:
            return []

        headers = rows[0]
        data = []
        for values in rows[1:]:
            if not any(value.strip() for value in values):
                continue
            row = {
                header: values[index] if index < len(values) else ""
                for index, header in enumerate(headers)
            }
            if "Submission Date" in row:
                row["Submission Date"] = normalize_date_text(row["Submission Date"])
            if "Submission Time" in row:
                row["Submission Time"] = normalize_time_text(row["Submission Time"])
            data.append(row)
        return data
