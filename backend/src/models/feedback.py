"""Feedback data models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils.constants import FEEDBACK_HEADERS


class FeedbackSubmission(BaseModel):
    """Incoming feedback form payload.

    Multi-select answers may arrive as a single string or a list; both are
    coerced to a list of strings. Every other answer is coerced to a string,
    with missing values becoming ``''``. Unknown fields are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    liked_most: list[str] = Field(default_factory=list)
    planning_to_buy: str = ""
    jewel_types: list[str] = Field(default_factory=list)
    experience_rating: str = ""
    name: str = ""
    whatsapp: str = ""

    @field_validator("liked_most", "jewel_types", mode="before")
    @classmethod
    def coerce_selection(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return [str(item) for item in value if item is not None]
        text = str(value)
        return [text] if text else []

    @field_validator(
        "planning_to_buy", "experience_rating", "name", "whatsapp", mode="before"
    )
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, (list, tuple)):
            return ", ".join(str(item) for item in value if item is not None)
        return str(value)


class FeedbackRecord(BaseModel):
    """Canonical flat feedback row.

    Field order matches the storage header order; ``model_dump(by_alias=True)``
    yields a dict keyed by the header labels.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    submission_date: str = Field("", alias="Submission Date")
    submission_time: str = Field("", alias="Submission Time")
    liked_most: str = Field("", alias="Liked Most")
    planning_to_buy: str = Field("", alias="Planning to Buy")
    jewel_types: str = Field("", alias="Jewel Types")
    experience_rating: str = Field("", alias="Experience Rating")
    name: str = Field("", alias="Name")
    whatsapp: str = Field("", alias="WhatsApp Number")
    raw_timestamp: str = Field("", alias="Timestamp", exclude=True)

    def as_row(self) -> list[str]:
        """Return the values in header order."""
        data = self.model_dump(by_alias=True)
        return [data[header] for header in FEEDBACK_HEADERS]

    def as_dict(self) -> dict[str, str]:
        """Return the values keyed by header label."""
        data = self.model_dump(by_alias=True)
        return {header: data[header] for header in FEEDBACK_HEADERS}


class StorageResult(BaseModel):
    """Outcome of writing one record to one backend."""

    backend: str
    success: bool
    message: str = ""


class SaveOutcome(BaseModel):
    """Aggregate outcome of saving one submission to every viable backend."""

    success: bool
    storage_methods: list[str] = Field(default_factory=list)
    details: list[StorageResult] = Field(default_factory=list)


class RepairReport(BaseModel):
    """Summary of a workbook repair run."""

    rows_before: int
    rows_after: int
    duplicates_removed: int = 0
    blank_rows_removed: int = 0
