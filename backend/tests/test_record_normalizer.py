"""Tests for the record normalizer."""

from datetime import UTC, datetime

from models.feedback import FeedbackSubmission
from services.record_normalizer import capture_instant, normalize, parse_captured_at
from utils.constants import CSV_LIST_SEPARATOR, FEEDBACK_HEADERS


class TestNormalize:
    """Test cases for normalize()."""

    def test_date_and_time_from_same_instant(self, sample_submission, captured_at):
        record = normalize(sample_submission, captured_at=captured_at)
        assert record.submission_date == "8/9/2024"
        assert record.submission_time == "1:05:07 pm"

    def test_lists_joined_with_default_separator(self, sample_submission, captured_at):
        record = normalize(sample_submission, captured_at=captured_at)
        assert record.liked_most == "Design, Collection"
        assert record.jewel_types == "Rings, Necklaces"

    def test_lists_joined_with_csv_separator(self, sample_submission, captured_at):
        record = normalize(
            sample_submission,
            captured_at=captured_at,
            list_separator=CSV_LIST_SEPARATOR,
        )
        assert record.liked_most == "Design; Collection"
        assert record.jewel_types == "Rings; Necklaces"

    def test_plain_fields_copied(self, sample_submission, captured_at):
        record = normalize(sample_submission, captured_at=captured_at)
        assert record.planning_to_buy == "Yes, next month"
        assert record.experience_rating == "5"
        assert record.name == "Asha"
        assert record.whatsapp == "+91 98765 43210"

    def test_raw_mapping_accepted(self, captured_at):
        record = normalize(
            {"liked_most": "Service", "name": None, "extra": "ignored"},
            captured_at=captured_at,
        )
        assert record.liked_most == "Service"
        assert record.name == ""

    def test_empty_payload_fills_every_field(self, captured_at):
        record = normalize({}, captured_at=captured_at)
        data = record.as_dict()
        assert set(data) == set(FEEDBACK_HEADERS)
        for header in FEEDBACK_HEADERS[2:]:
            assert data[header] == ""
        assert data["Submission Date"] == "8/9/2024"

    def test_raw_timestamp_is_utc_iso(self, sample_submission, captured_at):
        record = normalize(sample_submission, captured_at=captured_at)
        assert record.raw_timestamp.endswith("Z")
        parsed = datetime.fromisoformat(record.raw_timestamp.replace("Z", "+00:00"))
        assert parsed == captured_at.astimezone(UTC)

    def test_defaults_to_now(self):
        before = capture_instant()
        record = normalize(FeedbackSubmission())
        after = capture_instant()
        instant = parse_captured_at(record)
        assert before.replace(microsecond=0) <= instant <= after


class TestParseCapturedAt:
    """Test cases for parse_captured_at()."""

    def test_round_trips_capture_instant(self, sample_record, captured_at):
        assert parse_captured_at(sample_record) == captured_at

    def test_missing_timestamp(self, sample_record):
        record = sample_record.model_copy(update={"raw_timestamp": ""})
        assert parse_captured_at(record) is None

    def test_invalid_timestamp(self, sample_record):
        record = sample_record.model_copy(update={"raw_timestamp": "not-a-date"})
        assert parse_captured_at(record) is None
