"""SQLAlchemy ORM models for persisted course entities.

Separate from the Pydantic request models in schemas.py; this layer manages
persistence concerns only. Relationships are resolved with explicit queries in
the repositories so nothing lazy-loads under the async session.
"""
from __future__ import annotations
from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy.orm import Mapped, mapped_column, declarative_base
from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from coursegate.models.enums import (
    EnrollmentStatus,
    SubmissionStatus,
    VisibilityTier,
)
from coursegate.models.types import JSONValue
from coursegate.models.values import (
    CourseTag,
    EnrollQuestion,
    MessageAttachment,
    questions_or_default,
)
from coursegate.utils.timeutils import isoformat, utcnow

Base = declarative_base()


class CourseRecord(Base):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    creator_id: Mapped[str] = mapped_column(String(64), index=True)
    title: Mapped[str] = mapped_column(String(200))
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cover_url: Mapped[Optional[str]] = mapped_column(
        String(2048), nullable=True
    )
    is_published: Mapped[bool] = mapped_column(Boolean, default=False)
    join_code: Mapped[str] = mapped_column(String(16), unique=True, index=True)
    tags: Mapped[List[CourseTag]] = mapped_column(
        JSONValue(List[CourseTag]), default=list
    )
    enroll_questions: Mapped[Optional[List[EnrollQuestion]]] = mapped_column(
        JSONValue(List[EnrollQuestion]), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    @property
    def questions(self) -> List[EnrollQuestion]:
        return questions_or_default(self.enroll_questions)

    def to_summary(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "summary": self.summary,
            "coverUrl": self.cover_url,
            "isPublished": self.is_published,
            "creatorId": self.creator_id,
            "tags": [t.model_dump() for t in self.tags or []],
            "createdAt": isoformat(self.created_at),
        }


class EnrollmentRecord(Base):
    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_enrollment_user_course"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), index=True
    )
    status: Mapped[str] = mapped_column(
        String(16), default=EnrollmentStatus.PENDING.value
    )
    joined_via_code: Mapped[bool] = mapped_column(Boolean, default=False)
    form_answers: Mapped[Dict[str, str]] = mapped_column(
        JSONValue(Dict[str, str]), default=dict
    )
    admin_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "courseId": self.course_id,
            "status": self.status,
            "joinedViaCode": self.joined_via_code,
            "formAnswers": dict(self.form_answers or {}),
            "adminNote": self.admin_note,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }


class EnrollmentTransitionRecord(Base):
    """Append-only log of enrollment status changes."""

    __tablename__ = "enrollment_transitions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    enrollment_id: Mapped[int] = mapped_column(
        ForeignKey("enrollments.id", ondelete="CASCADE"), index=True
    )
    from_status: Mapped[Optional[str]] = mapped_column(
        String(16), nullable=True
    )
    to_status: Mapped[str] = mapped_column(String(16))
    reason: Mapped[str] = mapped_column(String(16))
    actor_id: Mapped[str] = mapped_column(String(64))
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "enrollmentId": self.enrollment_id,
            "fromStatus": self.from_status,
            "toStatus": self.to_status,
            "reason": self.reason,
            "actorId": self.actor_id,
            "note": self.note,
            "createdAt": isoformat(self.created_at),
        }


class LessonRecord(Base):
    __tablename__ = "course_lessons"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), index=True
    )
    title: Mapped[str] = mapped_column(String(200))
    type: Mapped[str] = mapped_column(String(32), default="TEXT")
    body: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    video_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    attachment_url: Mapped[Optional[str]] = mapped_column(
        String(2048), nullable=True
    )
    content_type: Mapped[Optional[str]] = mapped_column(
        String(128), nullable=True
    )
    order_index: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type,
            "body": self.body,
            "videoUrl": self.video_url,
            "attachmentUrl": self.attachment_url,
            "contentType": self.content_type,
            "order": self.order_index,
        }


class SessionRecord(Base):
    """A scheduled class meeting (not a database session)."""

    __tablename__ = "course_sessions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), index=True
    )
    starts_at: Mapped[datetime] = mapped_column(DateTime)
    ends_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    mode: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "startsAt": isoformat(self.starts_at),
            "endsAt": isoformat(self.ends_at),
            "location": self.location,
            "mode": self.mode,
            "note": self.note,
        }


class MaterialRecord(Base):
    __tablename__ = "course_materials"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), index=True
    )
    uploader_id: Mapped[str] = mapped_column(String(64))
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cover_url: Mapped[Optional[str]] = mapped_column(
        String(2048), nullable=True
    )
    attachment_url: Mapped[Optional[str]] = mapped_column(
        String(2048), nullable=True
    )
    content_url: Mapped[Optional[str]] = mapped_column(
        String(2048), nullable=True
    )
    content_type: Mapped[Optional[str]] = mapped_column(
        String(128), nullable=True
    )
    visible_to: Mapped[str] = mapped_column(
        String(16), default=VisibilityTier.ENROLLED.value
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


class AssignmentRecord(Base):
    __tablename__ = "course_assignments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), index=True
    )
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    due_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    resources: Mapped[List[str]] = mapped_column(
        JSONValue(List[str]), default=list
    )
    attachments: Mapped[List[str]] = mapped_column(
        JSONValue(List[str]), default=list
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )


class SubmissionRecord(Base):
    __tablename__ = "course_submissions"
    __table_args__ = (
        UniqueConstraint(
            "assignment_id", "student_id", name="uq_submission_assignment_student"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    assignment_id: Mapped[int] = mapped_column(
        ForeignKey("course_assignments.id", ondelete="CASCADE"), index=True
    )
    student_id: Mapped[str] = mapped_column(String(64), index=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    attachment_url: Mapped[Optional[str]] = mapped_column(
        String(2048), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(32), default=SubmissionStatus.SUBMITTED.value
    )
    grade: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    feedback: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "assignmentId": self.assignment_id,
            "studentId": self.student_id,
            "status": self.status,
            "grade": self.grade,
            "feedback": self.feedback,
            "content": self.content,
            "attachmentUrl": self.attachment_url,
            "submittedAt": isoformat(self.submitted_at),
        }


class MessageRecord(Base):
    __tablename__ = "course_messages"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), index=True
    )
    author_id: Mapped[str] = mapped_column(String(64))
    kind: Mapped[str] = mapped_column(String(16), index=True)
    visibility: Mapped[str] = mapped_column(String(16))
    content: Mapped[str] = mapped_column(Text, default="")
    attachments: Mapped[List[MessageAttachment]] = mapped_column(
        JSONValue(List[MessageAttachment]), default=list
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, index=True
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "courseId": self.course_id,
            "authorId": self.author_id,
            "kind": self.kind,
            "visibility": self.visibility,
            "content": self.content,
            "attachments": [a.model_dump() for a in self.attachments or []],
            "createdAt": isoformat(self.created_at),
        }


class MeetingLinkRecord(Base):
    __tablename__ = "course_meeting_links"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), index=True
    )
    title: Mapped[str] = mapped_column(String(200))
    url: Mapped[str] = mapped_column(String(2048))
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "note": self.note,
            "createdAt": isoformat(self.created_at),
        }
