"""
Pydantic request models for the course API.

These validate body shape only; business rules (roles, enrollment state,
visibility) live in the services.
"""

from datetime import datetime
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from coursegate.models.enums import (
    EnrollmentStatus,
    MessageKind,
    SubmissionStatus,
    VisibilityTier,
)
from coursegate.models.values import EnrollQuestion, MessageAttachment


class CourseCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    summary: Optional[str] = Field(None, max_length=2000)
    coverUrl: Optional[str] = Field(None, max_length=2048)
    isPublished: bool = False
    tags: List[str] = Field(default_factory=list)
    enrollQuestions: Optional[List[EnrollQuestion]] = None


class CourseUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    summary: Optional[str] = Field(None, max_length=2000)
    coverUrl: Optional[str] = Field(None, max_length=2048)
    isPublished: Optional[bool] = None
    tags: Optional[List[str]] = None
    enrollQuestions: Optional[List[EnrollQuestion]] = None
    regenerateJoinCode: bool = False


class EnrollRequest(BaseModel):
    answers: Dict[str, Optional[str]] = Field(default_factory=dict)
    joinCode: Optional[str] = Field(None, max_length=32)


class JoinCodeRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=32)
    answers: Dict[str, Optional[str]] = Field(default_factory=dict)


class EnrollmentDecision(BaseModel):
    status: Optional[EnrollmentStatus] = None
    adminNote: Optional[str] = Field(None, max_length=2000)


class SessionCreate(BaseModel):
    startsAt: datetime
    endsAt: Optional[datetime] = None
    location: Optional[str] = Field(None, max_length=200)
    mode: Optional[str] = Field(None, max_length=64)
    note: Optional[str] = Field(None, max_length=2000)


class LessonCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    type: str = Field("TEXT", max_length=32)
    body: Optional[str] = None
    videoUrl: Optional[str] = Field(None, max_length=2048)
    attachmentUrl: Optional[str] = Field(None, max_length=2048)
    contentType: Optional[str] = Field(None, max_length=128)
    order: int = Field(1, ge=0)


class MaterialCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    coverUrl: Optional[str] = Field(None, max_length=2048)
    attachmentUrl: Optional[str] = Field(None, max_length=2048)
    contentUrl: Optional[str] = Field(None, max_length=2048)
    contentType: Optional[str] = Field(None, max_length=128)
    visibleTo: VisibilityTier = VisibilityTier.ENROLLED


class AssignmentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    dueAt: Optional[datetime] = None
    resources: List[str] = Field(default_factory=list)
    attachments: List[str] = Field(default_factory=list)


class AssignmentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    dueAt: Optional[datetime] = None
    clearDueAt: bool = False
    resources: Optional[List[str]] = None
    attachments: Optional[List[str]] = None


class SubmissionCreate(BaseModel):
    content: Optional[str] = Field(None, max_length=20000)
    attachmentUrl: Optional[str] = Field(None, max_length=2048)


class SubmissionReview(BaseModel):
    status: Optional[SubmissionStatus] = None
    grade: Optional[str] = Field(None, max_length=64)
    feedback: Optional[str] = Field(None, max_length=5000)


class MessageCreate(BaseModel):
    content: str = Field("", max_length=4000)
    visibility: VisibilityTier = VisibilityTier.ENROLLED
    attachments: List[MessageAttachment] = Field(default_factory=list)


class MessageDraft(BaseModel):
    """A message after the gate has approved and normalized it."""

    kind: MessageKind
    visibility: VisibilityTier
    content: str
    attachments: List[MessageAttachment]


class MessageFilter(BaseModel):
    """Which messages a reader may list, and in what order."""

    model_config = ConfigDict(frozen=True)

    kind: MessageKind
    visibilities: Tuple[VisibilityTier, ...]
    limit: int
    # Channel lists newest-first; chat is fetched newest-first then reversed
    chronological: bool


class MeetingLinkCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    url: str = Field(..., min_length=1, max_length=2048)
    note: Optional[str] = Field(None, max_length=2000)
