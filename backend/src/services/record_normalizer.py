"""Turn a feedback submission into the canonical storage record."""

from datetime import UTC, datetime
from typing import Any, Mapping

from models.feedback import FeedbackRecord, FeedbackSubmission
from utils.constants import DEFAULT_LIST_SEPARATOR
from utils.datetime_format import format_display_date, format_display_time


def capture_instant() -> datetime:
    """Current wall-clock instant as a timezone-aware local datetime."""
    return datetime.now().astimezone()


def normalize(
    payload: FeedbackSubmission | Mapping[str, Any],
    captured_at: datetime | None = None,
    list_separator: str = DEFAULT_LIST_SEPARATOR,
) -> FeedbackRecord:
    """Build a FeedbackRecord from a submission.

    Args:
        payload: Validated submission or a raw field mapping
        captured_at: Submission instant; defaults to now. Date and time
            columns are both derived from this one value.
        list_separator: Joiner for multi-select answers

    Returns:
        FeedbackRecord with every field filled (``''`` when absent)
    """
    if not isinstance(payload, FeedbackSubmission):
        payload = FeedbackSubmission.model_validate(dict(payload))
    if captured_at is None:
        captured_at = capture_instant()
    elif captured_at.tzinfo is None:
        captured_at = captured_at.astimezone()

    return FeedbackRecord(
        submission_date=format_display_date(captured_at),
        submission_time=format_display_time(captured_at),
        liked_most=list_separator.join(payload.liked_most),
        planning_to_buy=payload.planning_to_buy,
        jewel_types=list_separator.join(payload.jewel_types),
        experience_rating=payload.experience_rating,
        name=payload.name,
        whatsapp=payload.whatsapp,
        raw_timestamp=captured_at.astimezone(UTC).isoformat().replace("+00:00", "Z"),
    )


def parse_captured_at(record: FeedbackRecord) -> datetime | None:
    """Recover the local capture instant from a record's raw timestamp."""
    if not record.raw_timestamp:
        return None
    try:
        instant = datetime.fromisoformat(record.raw_timestamp.replace("Z", "+00:00"))
    except ValueError:
        return None
    return instant.astimezone()
