"""Learner submissions and manager review of assignment work."""
from __future__ import annotations
import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from coursegate.models.enums import SubmissionStatus
from coursegate.models.persisted import AssignmentRecord, SubmissionRecord
from coursegate.repositories.content_repo import (
    ContentNotFoundError,
    CourseContentRepository,
)
from coursegate.repositories.submission_repo import (
    SubmissionNotFoundError,
    SubmissionRepository,
)
from coursegate.services.access import (
    ViewerContext,
    require_manager,
    require_principal,
)
from coursegate.services.errors import (
    ForbiddenError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class SubmissionWorkflow:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.content = CourseContentRepository(session)
        self.submissions = SubmissionRepository(session)

    async def _assignment(
        self, ctx: ViewerContext, assignment_id: int
    ) -> AssignmentRecord:
        try:
            return await self.content.get(
                AssignmentRecord, ctx.course.id, assignment_id
            )
        except ContentNotFoundError:
            raise NotFoundError("Assignment not found")

    async def submit(
        self,
        ctx: ViewerContext,
        assignment_id: int,
        content: Optional[str],
        attachment_url: Optional[str],
    ) -> SubmissionRecord:
        """Create or replace the viewer's work for an assignment."""
        principal = require_principal(ctx.principal)
        if not principal.is_learner:
            raise ForbiddenError("Only students can submit work")
        if not ctx.enrollment_approved:
            raise ForbiddenError("Wait for approval before turning in assignments")
        assignment = await self._assignment(ctx, assignment_id)
        content = _clean(content)
        attachment_url = _clean(attachment_url)
        if content is None and attachment_url is None:
            raise ValidationError("Add a note or upload a file before submitting")
        record = await self.submissions.upsert(
            assignment.id, principal.id, content, attachment_url
        )
        # A lost insert race rolls the session back and expires the context
        await self.session.refresh(ctx.course)
        await self.session.refresh(ctx.enrollment)
        logger.info(
            "Submission %s saved for assignment %s by %s",
            record.id,
            assignment.id,
            principal.id,
        )
        return record

    async def list(
        self, ctx: ViewerContext, assignment_id: int
    ) -> List[SubmissionRecord]:
        require_manager(ctx)
        assignment = await self._assignment(ctx, assignment_id)
        return list(await self.submissions.list_for_assignment(assignment.id))

    async def review(
        self,
        ctx: ViewerContext,
        assignment_id: int,
        submission_id: int,
        status: Optional[SubmissionStatus] = None,
        grade: Optional[str] = None,
        feedback: Optional[str] = None,
    ) -> SubmissionRecord:
        require_manager(ctx)
        assignment = await self._assignment(ctx, assignment_id)
        if status is None and grade is None and feedback is None:
            raise ValidationError("Provide a status, grade or feedback")
        try:
            record = await self.submissions.get(assignment.id, submission_id)
        except SubmissionNotFoundError:
            raise NotFoundError("Submission not found")
        record = await self.submissions.review(
            record,
            status=status.value if status is not None else None,
            grade=grade,
            feedback=feedback,
        )
        logger.info(
            "Submission %s reviewed by %s (status %s)",
            record.id,
            ctx.principal.id,
            record.status,
        )
        return record
