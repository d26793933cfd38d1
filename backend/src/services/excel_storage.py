"""Excel workbook feedback store.

The workbook holds a single ``Feedback Data`` sheet with a styled header
row. Each append also tidies rows written by older versions of the form
(date and time display formats, header text) before adding the new row and
saving with a bounded retry, since the file is often held open in Excel on
the machine collecting feedback.
"""

import logging
from datetime import date, datetime, time, timedelta
from pathlib import Path

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from models.feedback import FeedbackRecord, RepairReport
from services.record_normalizer import parse_captured_at
from services.storage_backend import FeedbackStorageError, StorageBackend
from utils.constants import (
    COLUMN_WIDTH_PADDING,
    DEFAULT_COLUMN_WIDTHS,
    EXCEL_DATE_FORMAT,
    EXCEL_TIME_FORMAT,
    FEEDBACK_HEADERS,
    HEADER_FILL_COLOR,
    HEADER_FONT_COLOR,
    MIN_COLUMN_WIDTH,
    SHEET_NAME,
)
from utils.datetime_format import (
    date_display_text,
    normalize_date_value,
    normalize_time_value,
    time_display_text,
)
from utils.retry import RetryPolicy

logger = logging.getLogger(__name__)

DATE_COLUMN = 1
TIME_COLUMN = 2
FIELD_COUNT = len(FEEDBACK_HEADERS)


def _round_to_second(value):
    """Drop sub-second noise left by Excel's floating point serial dates.

    Rows are written with whole seconds, so this only absorbs float error.
    """
    if isinstance(value, datetime) and value.microsecond:
        return (value + timedelta(microseconds=500_000)).replace(microsecond=0)
    return value


def _cell_display_text(column: int, value) -> str:
    """Text shown for a cell, used for widths, read-back and de-duplication."""
    value = _round_to_second(value)
    if column == DATE_COLUMN:
        return date_display_text(value)
    if column == TIME_COLUMN:
        return time_display_text(value)
    if value is None:
        return ""
    return str(value)


def _write_headers(worksheet: Worksheet) -> None:
    """Write the styled header row and the default column widths."""
    for column, header in enumerate(FEEDBACK_HEADERS, start=1):
        cell = worksheet.cell(row=1, column=column, value=header)
        cell.font = Font(bold=True, color=HEADER_FONT_COLOR)
        cell.fill = PatternFill(fill_type="solid", fgColor=HEADER_FILL_COLOR)
    for column, width in enumerate(DEFAULT_COLUMN_WIDTHS, start=1):
        worksheet.column_dimensions[get_column_letter(column)].width = width


def _write_cell(worksheet: Worksheet, row: int, column: int, value) -> None:
    """Store a cell value, applying the display format to temporal values."""
    cell = worksheet.cell(row=row, column=column, value=value)
    if isinstance(value, (datetime, date, time)):
        cell.number_format = (
            EXCEL_DATE_FORMAT if column == DATE_COLUMN else EXCEL_TIME_FORMAT
        )


class ExcelFeedbackStorage(StorageBackend):
    """Feedback store backed by an ``.xlsx`` workbook."""

    name = "Excel"
    requires_persistent_storage = True

    def __init__(self, excel_path: Path, retry_policy: RetryPolicy | None = None):
        """Initialize the Excel store.

        Args:
            excel_path: Workbook file; created with headers when missing
            retry_policy: Policy for the final save (3 attempts, 1s apart
                by default)
        """
        self.excel_path = Path(excel_path)
        self.retry_policy = retry_policy or RetryPolicy()

    @property
    def path(self) -> Path:
        return self.excel_path

    # MARK: - Workbook lifecycle

    def ensure_file(self) -> bool:
        """Create the workbook with its header row if it does not exist.

        Returns:
            True if a new file was created
        """
        if self.excel_path.exists():
            return False

        logger.info(f"Creating new Excel file at {self.excel_path}")
        workbook = Workbook()
        worksheet = workbook.active
        worksheet.title = SHEET_NAME
        _write_headers(worksheet)
        try:
            self.excel_path.parent.mkdir(parents=True, exist_ok=True)
            workbook.save(self.excel_path)
        except OSError as e:
            raise FeedbackStorageError(
                f"Failed to create Excel file '{self.excel_path}': {e}"
            ) from e
        return True

    def is_locked(self) -> bool:
        """Check whether the file can be opened for writing without truncation."""
        try:
            with self.excel_path.open("r+b"):
                pass
        except OSError:
            return True
        return False

    def _load_worksheet(self):
        """Load the workbook and return it with the feedback sheet.

        Recreates the sheet when missing and rewrites any header cell whose
        text drifted from the expected header.
        """
        try:
            workbook = load_workbook(self.excel_path)
        except Exception as e:
            raise FeedbackStorageError(
                f"Failed to read Excel file '{self.excel_path}': {e}"
            ) from e

        if SHEET_NAME in workbook.sheetnames:
            worksheet = workbook[SHEET_NAME]
        else:
            logger.warning(f"Worksheet '{SHEET_NAME}' not found, creating it")
            worksheet = workbook.create_sheet(SHEET_NAME)
            _write_headers(worksheet)

        for column, header in enumerate(FEEDBACK_HEADERS, start=1):
            cell = worksheet.cell(row=1, column=column)
            if cell.value != header:
                logger.info(f"Fixing header in column {column}: {cell.value!r} -> {header!r}")
                cell.value = header

        return workbook, worksheet

    def _save(self, workbook: Workbook, locked: bool = False) -> None:
        try:
            self.retry_policy.run(
                lambda: workbook.save(self.excel_path), description="Excel write"
            )
        except Exception as e:
            message = f"Error saving data: {e}"
            if locked:
                message += " (File may be locked by Excel - close Excel and try again)"
            raise FeedbackStorageError(message) from e

    # MARK: - Row maintenance

    @staticmethod
    def normalize_existing_rows(worksheet: Worksheet) -> int:
        """Rewrite legacy date/time strings in every data row.

        Returns:
            Number of cells changed
        """
        changed = 0
        for row in range(2, worksheet.max_row + 1):
            date_cell = worksheet.cell(row=row, column=DATE_COLUMN)
            time_cell = worksheet.cell(row=row, column=TIME_COLUMN)

            new_date = normalize_date_value(date_cell.value)
            if date_cell.value is not None and new_date != date_cell.value:
                date_cell.value = new_date
                changed += 1

            new_time = normalize_time_value(time_cell.value)
            if time_cell.value is not None and new_time != time_cell.value:
                time_cell.value = new_time
                changed += 1
        return changed

    @staticmethod
    def autofit_columns(worksheet: Worksheet) -> None:
        """Widen each column to its longest value plus padding (minimum 12)."""
        for column in range(1, max(worksheet.max_column, FIELD_COUNT) + 1):
            longest = 0
            for row in range(1, worksheet.max_row + 1):
                value = worksheet.cell(row=row, column=column).value
                text = value if row == 1 else _cell_display_text(column, value)
                longest = max(longest, len(str(text or "")))
            worksheet.column_dimensions[get_column_letter(column)].width = max(
                longest + COLUMN_WIDTH_PADDING, MIN_COLUMN_WIDTH
            )

    # MARK: - Backend interface

    def append(self, record: FeedbackRecord) -> str:
        logger.info(f"Appending feedback to Excel file {self.excel_path}")
        self.ensure_file()

        locked = self.is_locked()
        if locked:
            logger.warning(
                "Excel file appears to be locked by another application; "
                "the update may not be saved"
            )

        workbook, worksheet = self._load_worksheet()
        changed = self.normalize_existing_rows(worksheet)
        if changed:
            logger.info(f"Normalized {changed} legacy date/time cells")

        row_values = record.as_row()
        worksheet.append(row_values)
        row_number = worksheet.max_row

        captured_at = parse_captured_at(record)
        if captured_at is not None:
            naive = captured_at.replace(tzinfo=None, microsecond=0)
            _write_cell(worksheet, row_number, DATE_COLUMN, naive)
            _write_cell(worksheet, row_number, TIME_COLUMN, naive)

        self.autofit_columns(worksheet)
        self._save(workbook, locked=locked)

        logger.info(f"Data written to row {row_number}: {row_values}")
        if locked:
            logger.warning(
                "File was locked during write; close Excel if updates don't appear"
            )
        return "Data saved to Excel file"

    def load(self) -> list[dict[str, str]]:
        if not self.excel_path.exists():
            return []
        try:
            workbook = load_workbook(self.excel_path)
        except Exception as e:
            raise FeedbackStorageError(
                f"Failed to read Excel file '{self.excel_path}': {e}"
            ) from e
        if SHEET_NAME not in workbook.sheetnames:
            return []
        worksheet = workbook[SHEET_NAME]

        headers = [
            str(cell.value) if cell.value is not None else ""
            for cell in worksheet[1]
        ]
        data = []
        for values in worksheet.iter_rows(min_row=2, values_only=True):
            if all(value is None or str(value).strip() == "" for value in values):
                continue
            row = {}
            for column, header in enumerate(headers, start=1):
                if not header:
                    continue
                value = values[column - 1] if column <= len(values) else None
                row[header] = _cell_display_text(column, value)
            data.append(row)
        return data

    def repair(self) -> RepairReport:
        """Remove blank and duplicate rows and rewrite the sheet from scratch.

        Rows are keyed on the display text of their first eight cells; the
        first occurrence of each key is kept. Dates and times are normalized
        the same way as on append. The sheet is replaced in place, with no
        backup of the previous contents.

        Raises:
            FeedbackStorageError: If the workbook is missing or cannot be saved
        """
        if not self.excel_path.exists():
            raise FeedbackStorageError(f"Excel file '{self.excel_path}' does not exist")

        workbook, worksheet = self._load_worksheet()

        seen: set[str] = set()
        unique_rows = []
        rows_before = 0
        duplicates = 0
        blanks = 0
        for values in worksheet.iter_rows(
            min_row=2, max_col=FIELD_COUNT, values_only=True
        ):
            rows_before += 1
            values = list(values) + [None] * (FIELD_COUNT - len(values))
            values[0] = normalize_date_value(values[0])
            values[1] = normalize_time_value(values[1])

            key = "|".join(
                _cell_display_text(column, value)
                for column, value in enumerate(values, start=1)
            )
            if not key.replace("|", "").strip():
                blanks += 1
                continue
            if key in seen:
                duplicates += 1
                continue
            seen.add(key)
            unique_rows.append(values)

        index = workbook.sheetnames.index(SHEET_NAME)
        workbook.remove(worksheet)
        worksheet = workbook.create_sheet(SHEET_NAME, index)
        _write_headers(worksheet)
        for row_number, values in enumerate(unique_rows, start=2):
            for column, value in enumerate(values, start=1):
                _write_cell(
                    worksheet, row_number, column, "" if value is None else value
                )
        workbook.active = index

        self.autofit_columns(worksheet)
        self._save(workbook)

        report = RepairReport(
            rows_before=rows_before,
            rows_after=len(unique_rows),
            duplicates_removed=duplicates,
            blank_rows_removed=blanks,
        )
        logger.info(
            f"Excel repair complete: {report.rows_before} rows -> {report.rows_after} "
            f"({duplicates} duplicates, {blanks} blank rows removed)"
        )
        return report
