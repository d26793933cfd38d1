"""Pytest configuration and shared fixtures."""

from datetime import datetime

import pytest

from models.feedback import FeedbackSubmission
from services.record_normalizer import normalize
from utils.environment import StorageSettings
from utils.retry import RetryPolicy


@pytest.fixture
def captured_at():
    """A fixed afternoon submission instant in local time."""
    return datetime(2024, 9, 8, 13, 5, 7).astimezone()


@pytest.fixture
def sample_submission():
    """Create a sample feedback submission for testing."""
    return FeedbackSubmission(
        liked_most=["Design", "Collection"],
        planning_to_buy="Yes, next month",
        jewel_types=["Rings", "Necklaces"],
        experience_rating="5",
        name="Asha",
        whatsapp="+91 98765 43210",
    )


@pytest.fixture
def sample_record(sample_submission, captured_at):
    """A normalized record using the default list separator."""
    return normalize(sample_submission, captured_at=captured_at)


@pytest.fixture
def storage_settings(tmp_path):
    """Local (non-hosted) storage settings rooted in a temp directory."""
    return StorageSettings(data_dir=tmp_path / "data")


@pytest.fixture
def hosted_settings(tmp_path):
    """Hosted storage settings rooted in a temp directory."""
    return StorageSettings(
        data_dir=tmp_path / "tmp-data",
        hosting=True,
        platform="render",
        environment="production",
    )


@pytest.fixture
def sleeps():
    """Collected pause durations requested by a retry policy."""
    return []


@pytest.fixture
def fast_retry(sleeps):
    """Retry policy that records pauses instead of sleeping."""
    return RetryPolicy(max_attempts=3, delay_seconds=1.0, sleep=sleeps.append)
