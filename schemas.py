"""Request and response shapes shared by the storage backends and the API.

Field names are snake_case in Python and camelCase on the wire.
"""
import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from errors import ValidationError

TITLE_MAX_LENGTH = 50


class TaskCategory(str, Enum):
    PLUMBING = "plumbing"
    CARPENTRY = "carpentry"
    ELECTRICAL = "electrical"
    PAINTING = "painting"
    CLEANING = "cleaning"
    GARDENING = "gardening"
    GENERAL = "general"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def extract_title(text):
    """First sentence of ``text``, cut to 50 characters."""
    first = text.split(".")[0].strip() or text.strip()
    if len(first) > TITLE_MAX_LENGTH:
        return first[:TITLE_MAX_LENGTH] + "..."
    return first


def to_local_naive(value):
    """Timestamps are stored as naive server-local time."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        str_strip_whitespace=True,
    )


class InsertTask(ApiModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    category: TaskCategory
    priority: TaskPriority
    status: TaskStatus = Field(default=TaskStatus.PENDING, validate_default=True)
    due_date: Optional[datetime] = None
    ai_response: Optional[str] = None
    image_url: Optional[str] = None
    voice_transcript: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def derive_title(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        title = data.get("title")
        description = data.get("description")
        if (title is None or (isinstance(title, str) and not title.strip())) \
                and isinstance(description, str) and description.strip():
            data = dict(data, title=extract_title(description))
        return data

    @field_validator("due_date")
    @classmethod
    def localize_due_date(cls, v):
        return to_local_naive(v)


class TaskPatch(ApiModel):
    """The fields a client may change on an existing task.

    Anything else, including id, createdAt and completedAt, is rejected.
    """
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[TaskCategory] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = None
    ai_response: Optional[str] = None
    image_url: Optional[str] = None
    voice_transcript: Optional[str] = None

    @field_validator("title", "description", "category", "priority", "status", mode="before")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("field cannot be null")
        return v

    @field_validator("due_date")
    @classmethod
    def localize_due_date(cls, v):
        return to_local_naive(v)

    def changes(self):
        return self.model_dump(exclude_unset=True)


class InsertReminder(ApiModel):
    task_id: int
    reminder_time: datetime
    sent: bool = False
    type: str = Field(min_length=1)

    @field_validator("reminder_time")
    @classmethod
    def localize_reminder_time(cls, v):
        return to_local_naive(v)


class Task(ApiModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    category: str
    priority: str
    status: str
    due_date: Optional[datetime] = None
    ai_response: Optional[str] = None
    image_url: Optional[str] = None
    voice_transcript: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None


class Reminder(ApiModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    task_id: int
    reminder_time: datetime
    sent: bool
    type: str


class Stats(ApiModel):
    completed: int
    pending: int
    overdue: int
    progress_percent: int


class AssistRequest(ApiModel):
    description: Optional[str] = None
    category: Optional[str] = None
    task_id: Optional[int] = None

    @field_validator("description", "category", mode="before")
    @classmethod
    def must_be_text(cls, v):
        # Anything that is not a string counts as not given at all.
        return v if isinstance(v, str) else None


class EmailRequest(ApiModel):
    to: str = Field(min_length=1)
    subject: str = ""
    body: str = ""


def parse(model, data, message="Invalid data"):
    """Validate ``data`` against ``model`` or raise the API ValidationError."""
    try:
        return model.model_validate(data if data is not None else {})
    except PydanticValidationError as e:
        raise ValidationError(message, errors=json.loads(e.json(include_url=False)))


def dump(record):
    return record.model_dump(mode="json", by_alias=True)
