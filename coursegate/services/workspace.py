"""
Course workspace read model.

One payload with everything the course page needs for the current viewer:
metadata, schedule, materials resolved for the viewer's tier, assignments with
due-status, manager-only fields and, for viewers with access, recent
messages. ``GET /courses/{id}`` returns it and every mutating endpoint returns
a fresh copy so the client can re-render from a single source.
"""
from __future__ import annotations
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from coursegate.models.enums import MessageKind
from coursegate.models.persisted import AssignmentRecord, SubmissionRecord
from coursegate.repositories.content_repo import CourseContentRepository
from coursegate.repositories.enrollment_repo import EnrollmentRepository
from coursegate.repositories.message_repo import MessageRepository
from coursegate.repositories.submission_repo import SubmissionRepository
from coursegate.services.access import ViewerContext
from coursegate.services.assignments import (
    derive_status,
    past_due_for_course,
    past_due_for_viewer,
)
from coursegate.services.messaging import authorize_read
from coursegate.services.visibility import resolve_material
from coursegate.utils.timeutils import isoformat, utcnow


def calendar_url(course_id: int) -> str:
    return f"/api/v1/courses/{course_id}/calendar.ics"


def _assignment_base(assignment: AssignmentRecord, status: str) -> dict:
    return {
        "id": assignment.id,
        "title": assignment.title,
        "description": assignment.description,
        "dueAt": isoformat(assignment.due_at),
        "resources": list(assignment.resources or []),
        "attachments": list(assignment.attachments or []),
        "status": status,
    }


class CourseWorkspaceAssembler:
    def __init__(self, session: AsyncSession):
        self.content = CourseContentRepository(session)
        self.enrollments = EnrollmentRepository(session)
        self.submissions = SubmissionRepository(session)
        self.messages = MessageRepository(session)

    async def _assignments(
        self, ctx: ViewerContext, now: datetime
    ) -> tuple:
        assignments = list(await self.content.assignments(ctx.course.id))
        views: List[dict] = []
        summary = {"pastDueCourse": [], "pastDueViewer": []}

        if ctx.can_manage:
            grouped: Dict[int, List[SubmissionRecord]] = (
                await self.submissions.by_assignment(ctx.course.id)
            )
            for assignment in assignments:
                rows = grouped.get(assignment.id, [])
                view = _assignment_base(
                    assignment, derive_status(assignment, None, now)
                )
                view["stats"] = {"submissions": len(rows)}
                view["submissions"] = [s.to_dict() for s in rows]
                views.append(view)
            summary["pastDueCourse"] = past_due_for_course(assignments, grouped, now)
            return views, summary

        mine: Dict[int, SubmissionRecord] = {}
        if ctx.principal is not None:
            mine = await self.submissions.for_student(
                ctx.course.id, ctx.principal.id
            )
        for assignment in assignments:
            submission = mine.get(assignment.id)
            view = _assignment_base(
                assignment, derive_status(assignment, submission, now)
            )
            view["viewerSubmission"] = submission.to_dict() if submission else None
            views.append(view)
        if ctx.is_learner:
            summary["pastDueViewer"] = past_due_for_viewer(assignments, mine, now)
        return views, summary

    async def _recent_messages(self, ctx: ViewerContext) -> Optional[dict]:
        if ctx.principal is None or not ctx.has_access:
            return None
        result = {}
        for kind, key in ((MessageKind.CHANNEL, "channel"), (MessageKind.CHAT, "chat")):
            rows = await self.messages.list(ctx.course.id, authorize_read(ctx, kind))
            result[key] = [m.to_dict() for m in rows]
        return result

    async def assemble(
        self, ctx: ViewerContext, now: Optional[datetime] = None
    ) -> dict:
        now = now or utcnow()
        course = ctx.course
        lessons = await self.content.lessons(course.id)
        sessions = await self.content.sessions(course.id)
        materials = await self.content.materials(course.id)
        assignments, summary = await self._assignments(ctx, now)

        detail = course.to_summary()
        detail.update(
            {
                "lessons": [lesson.to_dict() for lesson in lessons],
                "sessions": [s.to_dict() for s in sessions],
                "materials": [resolve_material(m, ctx) for m in materials],
                "assignments": assignments,
                "enrollQuestions": [q.model_dump() for q in course.questions],
                "meetingLinks": [],
                "calendarDownloadUrl": None,
            }
        )
        if ctx.has_access:
            links = await self.content.meeting_links(course.id)
            detail["meetingLinks"] = [link.to_dict() for link in links]
            detail["calendarDownloadUrl"] = calendar_url(course.id)
        if ctx.can_manage:
            detail["joinCode"] = course.join_code

        roster = []
        if ctx.can_manage:
            roster = [
                e.to_dict() for e in await self.enrollments.list_for_course(course.id)
            ]

        return {
            "course": detail,
            "viewer": ctx.to_viewer_state(),
            "enrollments": roster,
            "assignmentSummary": summary,
            "messages": await self._recent_messages(ctx),
        }
