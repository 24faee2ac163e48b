"""Repository layer for Course persistence.

Provides an abstraction over direct SQLAlchemy session usage so that routers
and services remain thin and testable. Deleting a course removes every record
hanging off it here, in one transaction.
"""
from __future__ import annotations
import logging
from typing import List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from coursegate.models.persisted import (
    AssignmentRecord,
    CourseRecord,
    EnrollmentRecord,
    EnrollmentTransitionRecord,
    LessonRecord,
    MaterialRecord,
    MeetingLinkRecord,
    MessageRecord,
    SessionRecord,
    SubmissionRecord,
)
from coursegate.models.values import CourseTag, EnrollQuestion
from coursegate.utils.codes import generate_join_code, normalize_join_code

logger = logging.getLogger(__name__)

JOIN_CODE_ATTEMPTS = 10


class CourseNotFoundError(Exception):
    """Raised when a course record could not be located."""


class JoinCodeExhaustedError(Exception):
    """Raised when no free join code was found after several attempts."""


class CourseRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _code_taken(self, code: str) -> bool:
        result = await self.session.execute(
            select(CourseRecord.id).where(CourseRecord.join_code == code)
        )
        return result.scalar_one_or_none() is not None

    async def _fresh_code(self) -> str:
        for _ in range(JOIN_CODE_ATTEMPTS):
            code = generate_join_code()
            if not await self._code_taken(code):
                return code
        raise JoinCodeExhaustedError("Unable to allocate a join code")

    # CREATE -----------------------------------------------------------------
    async def create(
        self,
        creator_id: str,
        title: str,
        summary: Optional[str],
        cover_url: Optional[str],
        is_published: bool,
        tags: List[CourseTag],
        enroll_questions: Optional[List[EnrollQuestion]],
    ) -> CourseRecord:
        for _ in range(JOIN_CODE_ATTEMPTS):
            record = CourseRecord(
                creator_id=creator_id,
                title=title,
                summary=summary,
                cover_url=cover_url,
                is_published=is_published,
                join_code=await self._fresh_code(),
                tags=tags,
                enroll_questions=enroll_questions,
            )
            self.session.add(record)
            try:
                await self.session.commit()
            except IntegrityError:
                # Another writer claimed the same code between check and insert
                await self.session.rollback()
                continue
            await self.session.refresh(record)
            return record
        raise JoinCodeExhaustedError("Unable to allocate a join code")

    # READ -------------------------------------------------------------------
    async def list_published(self, tag: Optional[str] = None) -> List[CourseRecord]:
        result = await self.session.execute(
            select(CourseRecord)
            .where(CourseRecord.is_published.is_(True))
            .order_by(CourseRecord.created_at.desc(), CourseRecord.id.desc())
        )
        courses = list(result.scalars().all())
        if tag:
            courses = [
                c for c in courses if any(t.slug == tag for t in c.tags or [])
            ]
        return courses

    async def list_by_creator(self, creator_id: str) -> Sequence[CourseRecord]:
        result = await self.session.execute(
            select(CourseRecord)
            .where(CourseRecord.creator_id == creator_id)
            .order_by(CourseRecord.created_at.desc(), CourseRecord.id.desc())
        )
        return result.scalars().all()

    async def list_tags(self) -> List[CourseTag]:
        seen = {}
        for course in await self.list_published():
            for tag in course.tags or []:
                seen.setdefault(tag.slug, tag)
        return sorted(seen.values(), key=lambda t: t.slug)

    async def get(self, pk: int) -> CourseRecord:
        result = await self.session.execute(
            select(CourseRecord).where(CourseRecord.id == pk)
        )
        record = result.scalar_one_or_none()
        if not record:
            raise CourseNotFoundError
        return record

    async def get_by_join_code(self, code: str) -> CourseRecord:
        wanted = normalize_join_code(code)
        if not wanted:
            raise CourseNotFoundError
        result = await self.session.execute(
            select(CourseRecord).where(CourseRecord.join_code == wanted)
        )
        record = result.scalar_one_or_none()
        if not record:
            raise CourseNotFoundError
        return record

    # UPDATE -----------------------------------------------------------------
    async def update_record(
        self,
        course: CourseRecord,
        title: Optional[str] = None,
        summary: Optional[str] = None,
        cover_url: Optional[str] = None,
        is_published: Optional[bool] = None,
        tags: Optional[List[CourseTag]] = None,
        enroll_questions: Optional[List[EnrollQuestion]] = None,
    ) -> CourseRecord:
        if title is not None:
            course.title = title
        if summary is not None:
            course.summary = summary
        if cover_url is not None:
            course.cover_url = cover_url
        if is_published is not None:
            course.is_published = is_published
        if tags is not None:
            course.tags = tags
        if enroll_questions is not None:
            course.enroll_questions = enroll_questions
        await self.session.commit()
        await self.session.refresh(course)
        return course

    async def replace_join_code(self, course: CourseRecord) -> str:
        previous = course.join_code
        for _ in range(JOIN_CODE_ATTEMPTS):
            code = await self._fresh_code()
            if code == previous:
                continue
            course.join_code = code
            try:
                await self.session.commit()
            except IntegrityError:
                await self.session.rollback()
                continue
            await self.session.refresh(course)
            return code
        raise JoinCodeExhaustedError("Unable to allocate a join code")

    # DELETE -----------------------------------------------------------------
    async def delete_record(self, course: CourseRecord) -> None:
        course_id = course.id
        assignment_ids = select(AssignmentRecord.id).where(
            AssignmentRecord.course_id == course_id
        )
        enrollment_ids = select(EnrollmentRecord.id).where(
            EnrollmentRecord.course_id == course_id
        )
        await self.session.execute(
            delete(SubmissionRecord).where(
                SubmissionRecord.assignment_id.in_(assignment_ids)
            )
        )
        await self.session.execute(
            delete(EnrollmentTransitionRecord).where(
                EnrollmentTransitionRecord.enrollment_id.in_(enrollment_ids)
            )
        )
        for model in (
            AssignmentRecord,
            EnrollmentRecord,
            LessonRecord,
            MaterialRecord,
            MeetingLinkRecord,
            MessageRecord,
            SessionRecord,
        ):
            await self.session.execute(
                delete(model).where(model.course_id == course_id)
            )
        await self.session.delete(course)
        await self.session.commit()
        logger.info("Deleted course %s and its records", course_id)
