"""Shared constants for the feedback collector backend."""

# Column order is identical across the workbook, the JSON file and the CSV file.
FEEDBACK_HEADERS: list[str] = [
    "Submission Date",
    "Submission Time",
    "Liked Most",
    "Planning to Buy",
    "Jewel Types",
    "Experience Rating",
    "Name",
    "WhatsApp Number",
]

# Extra key written only by the JSON store
RAW_TIMESTAMP_KEY = "Timestamp"

EXCEL_FILE_NAME = "feedback_data.xlsx"
JSON_FILE_NAME = "feedback_data.json"
CSV_FILE_NAME = "feedback_data.csv"

SHEET_NAME = "Feedback Data"

# Separators used when flattening multi-select answers
DEFAULT_LIST_SEPARATOR = ", "
CSV_LIST_SEPARATOR = "; "

# Excel display formats for the temporal cells
EXCEL_DATE_FORMAT = "d/m/yyyy"
EXCEL_TIME_FORMAT = "hh:mm:ss am/pm"

# Header styling and starting widths (one per column in FEEDBACK_HEADERS)
HEADER_FILL_COLOR = "FFE6E6E6"
HEADER_FONT_COLOR = "FF000000"
DEFAULT_COLUMN_WIDTHS: list[int] = [15, 15, 20, 15, 20, 12, 20, 18]
MIN_COLUMN_WIDTH = 12
COLUMN_WIDTH_PADDING = 2

# Spreadsheet write retry
EXCEL_WRITE_MAX_ATTEMPTS = 3
EXCEL_WRITE_RETRY_DELAY_SECONDS = 1.0
