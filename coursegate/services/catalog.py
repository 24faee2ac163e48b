"""
Course catalog and content management.

Creating, editing and deleting courses and the records they are built from.
Everything except course creation and the public listings requires a manager
context.
"""
from __future__ import annotations
import logging
from typing import List, Optional, Type

from sqlalchemy.ext.asyncio import AsyncSession

from coursegate.models.enums import MANAGER_ELIGIBLE_ROLES
from coursegate.models.persisted import (
    AssignmentRecord,
    CourseRecord,
    LessonRecord,
    MaterialRecord,
    MeetingLinkRecord,
    SessionRecord,
)
from coursegate.models.schemas import (
    AssignmentCreate,
    AssignmentUpdate,
    CourseCreate,
    CourseUpdate,
    LessonCreate,
    MaterialCreate,
    MeetingLinkCreate,
    SessionCreate,
)
from coursegate.models.values import CourseTag, normalize_meeting_url, normalize_tags
from coursegate.repositories.content_repo import (
    ContentNotFoundError,
    CourseContentRepository,
)
from coursegate.repositories.course_repo import CourseRepository
from coursegate.repositories.enrollment_repo import EnrollmentRepository
from coursegate.services.access import (
    Principal,
    ViewerContext,
    require_manager,
    require_principal,
)
from coursegate.services.errors import (
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from coursegate.utils.timeutils import to_naive_utc

logger = logging.getLogger(__name__)


def _clean_list(values: List[str]) -> List[str]:
    return [v.strip() for v in values if v and v.strip()]


class CourseCatalog:
    def __init__(self, session: AsyncSession):
        self.courses = CourseRepository(session)
        self.content = CourseContentRepository(session)
        self.enrollments = EnrollmentRepository(session)

    # COURSES ----------------------------------------------------------------
    async def create_course(
        self, principal: Optional[Principal], payload: CourseCreate
    ) -> CourseRecord:
        principal = require_principal(principal)
        if principal.role not in MANAGER_ELIGIBLE_ROLES:
            raise ForbiddenError("Only tutors, creators and admins can create courses")
        course = await self.courses.create(
            creator_id=principal.id,
            title=payload.title.strip(),
            summary=payload.summary,
            cover_url=payload.coverUrl,
            is_published=payload.isPublished,
            tags=normalize_tags(payload.tags),
            enroll_questions=payload.enrollQuestions,
        )
        logger.info("Course %s created by %s", course.id, principal.id)
        return course

    async def update_course(
        self, ctx: ViewerContext, payload: CourseUpdate
    ) -> CourseRecord:
        require_manager(ctx)
        return await self.courses.update_record(
            ctx.course,
            title=payload.title.strip() if payload.title else None,
            summary=payload.summary,
            cover_url=payload.coverUrl,
            is_published=payload.isPublished,
            tags=normalize_tags(payload.tags) if payload.tags is not None else None,
            enroll_questions=payload.enrollQuestions,
        )

    async def delete_course(self, ctx: ViewerContext) -> None:
        require_manager(ctx)
        await self.courses.delete_record(ctx.course)

    async def list_published(self, tag: Optional[str] = None) -> List[CourseRecord]:
        return await self.courses.list_published(tag)

    async def list_mine(self, principal: Optional[Principal]) -> List[CourseRecord]:
        principal = require_principal(principal)
        return list(await self.courses.list_by_creator(principal.id))

    async def list_tags(self) -> List[CourseTag]:
        return await self.courses.list_tags()

    async def my_enrollments(self, principal: Optional[Principal]) -> List[dict]:
        principal = require_principal(principal)
        listing = []
        for row, course in await self.enrollments.list_for_user(principal.id):
            listing.append(
                {
                    "id": row.id,
                    "courseId": row.course_id,
                    "status": row.status,
                    "joinedViaCode": row.joined_via_code,
                    "createdAt": row.to_dict()["createdAt"],
                    "course": course.to_summary(),
                }
            )
        return listing

    # CONTENT ----------------------------------------------------------------
    async def add_session(self, ctx: ViewerContext, payload: SessionCreate) -> SessionRecord:
        require_manager(ctx)
        starts_at = to_naive_utc(payload.startsAt)
        ends_at = to_naive_utc(payload.endsAt) if payload.endsAt else None
        if ends_at is not None and ends_at <= starts_at:
            raise ValidationError("A session must end after it starts")
        return await self.content.add(
            SessionRecord(
                course_id=ctx.course.id,
                starts_at=starts_at,
                ends_at=ends_at,
                location=payload.location,
                mode=payload.mode,
                note=payload.note,
            )
        )

    async def add_lesson(self, ctx: ViewerContext, payload: LessonCreate) -> LessonRecord:
        require_manager(ctx)
        if not (payload.body or payload.videoUrl or payload.attachmentUrl):
            raise ValidationError("A lesson needs notes, a video or an attachment")
        return await self.content.add(
            LessonRecord(
                course_id=ctx.course.id,
                title=payload.title.strip(),
                type=payload.type,
                body=payload.body,
                video_url=payload.videoUrl,
                attachment_url=payload.attachmentUrl,
                content_type=payload.contentType,
                order_index=payload.order,
            )
        )

    async def add_material(
        self, ctx: ViewerContext, payload: MaterialCreate
    ) -> MaterialRecord:
        require_manager(ctx)
        return await self.content.add(
            MaterialRecord(
                course_id=ctx.course.id,
                uploader_id=ctx.principal.id,
                title=payload.title.strip(),
                description=payload.description,
                cover_url=payload.coverUrl,
                attachment_url=payload.attachmentUrl,
                content_url=payload.contentUrl or payload.attachmentUrl,
                content_type=payload.contentType,
                visible_to=payload.visibleTo.value,
            )
        )

    async def add_assignment(
        self, ctx: ViewerContext, payload: AssignmentCreate
    ) -> AssignmentRecord:
        require_manager(ctx)
        return await self.content.add(
            AssignmentRecord(
                course_id=ctx.course.id,
                title=payload.title.strip(),
                description=payload.description,
                due_at=to_naive_utc(payload.dueAt) if payload.dueAt else None,
                resources=_clean_list(payload.resources),
                attachments=_clean_list(payload.attachments),
            )
        )

    async def update_assignment(
        self, ctx: ViewerContext, assignment_id: int, payload: AssignmentUpdate
    ) -> AssignmentRecord:
        require_manager(ctx)
        assignment = await self._get(ctx, AssignmentRecord, assignment_id)
        if payload.title is not None:
            assignment.title = payload.title.strip()
        if payload.description is not None:
            assignment.description = payload.description
        if payload.clearDueAt:
            assignment.due_at = None
        elif payload.dueAt is not None:
            assignment.due_at = to_naive_utc(payload.dueAt)
        if payload.resources is not None:
            assignment.resources = _clean_list(payload.resources)
        if payload.attachments is not None:
            assignment.attachments = _clean_list(payload.attachments)
        return await self.content.save(assignment)

    async def add_meeting_link(
        self, ctx: ViewerContext, payload: MeetingLinkCreate
    ) -> MeetingLinkRecord:
        require_manager(ctx)
        url = normalize_meeting_url(payload.url)
        if not url:
            raise ValidationError("A meeting link needs a URL")
        return await self.content.add(
            MeetingLinkRecord(
                course_id=ctx.course.id,
                title=payload.title.strip(),
                url=url,
                note=payload.note,
            )
        )

    async def _get(self, ctx: ViewerContext, model: Type, pk: int):
        try:
            return await self.content.get(model, ctx.course.id, pk)
        except ContentNotFoundError:
            raise NotFoundError("Record not found in this course")

    async def remove(self, ctx: ViewerContext, model: Type, pk: int) -> None:
        require_manager(ctx)
        try:
            await self.content.remove(model, ctx.course.id, pk)
        except ContentNotFoundError:
            raise NotFoundError("Record not found in this course")
        logger.info(
            "Removed %s %s from course %s", model.__tablename__, pk, ctx.course.id
        )
