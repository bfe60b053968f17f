"""
Pydantic models for notices and applications.

A ``Notice`` is a babysitting job posted by a parent.  It embeds its
``Application`` records in application order, so one store document
holds everything the lifecycle rules need to look at.  The
descriptive fields (title, schedule, location, pay rate, age group)
are opaque to the lifecycle logic; they are only checked for presence
and shape when a notice is created.
"""

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class NoticeStatus(str, Enum):
    OPEN = "open"
    FILLED = "filled"
    # Part of the type but no operation moves a notice here yet.
    CLOSED = "closed"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class NoticeFields(BaseModel):
    """Notice payload as posted by a client.

    Every field is accepted as sent, present or not, so that
    ``lifecycle.validate_notice_fields`` reports all problems in one
    ``validation_error`` instead of the request failing at parse time.
    """

    title: Optional[Any] = Field(None, examples=["Saturday Evening Babysitting"])
    description: Optional[Any] = Field(None, examples=["Two kids, dinner and bedtime routine"])
    date: Optional[Any] = Field(None, examples=["2025-10-18"])
    time: Optional[Any] = Field(None, examples=["6:00 PM - 11:00 PM"])
    address: Optional[Any] = Field(None, examples=["123 Maple Street"])
    location: Optional[Any] = Field(None, examples=["Downtown"])
    pay_rate: Optional[Any] = Field(None, examples=[18])
    duration: Optional[Any] = Field(None, examples=["5 hours"])
    age_group: Optional[Any] = Field(None, examples=["5, 8"])


class NoticeCreate(BaseModel):
    """Validated notice fields.

    Blank strings and non‑positive pay rates are rejected by the
    lifecycle validation before this model is built.
    """

    title: str
    description: str
    date: str
    time: str
    address: str
    location: str
    pay_rate: float = Field(..., strict=True)
    duration: Optional[str] = None
    age_group: str


class Application(BaseModel):
    id: str
    student_id: str
    student_name: str = ""
    message: str = ""
    status: ApplicationStatus = ApplicationStatus.PENDING
    applied_at: datetime
    updated_at: Optional[datetime] = None


class Notice(BaseModel):
    id: str
    owner_id: str
    owner_name: str = ""
    title: str
    description: str
    date: str
    time: str
    address: str
    location: str
    pay_rate: float
    duration: str = "TBD"
    age_group: str
    status: NoticeStatus = NoticeStatus.OPEN
    selected_application_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    applications: List[Application] = Field(default_factory=list)

    def find_application(self, application_id: str) -> Optional[Application]:
        for application in self.applications:
            if application.id == application_id:
                return application
        return None

    def application_of(self, student_id: str) -> Optional[Application]:
        for application in self.applications:
            if application.student_id == student_id:
                return application
        return None


class NoticeSummary(BaseModel):
    """Read‑only view of a notice shown next to a student's application."""

    id: str
    title: str
    date: str
    time: str
    location: str
    pay_rate: float
    owner_name: str
    status: NoticeStatus


class StudentApplication(BaseModel):
    """One entry of a student's application history."""

    application: Application
    notice: NoticeSummary


class ApplicationCreate(BaseModel):
    message: str = Field("", examples=["Hi! I have three years of experience."])


class ApplicationStatusUpdate(BaseModel):
    # Plain string: unsupported targets are rejected by the lifecycle
    # rules after the ownership checks, not by request parsing.
    status: str = Field(..., examples=["accepted"])
