"""
Enrollment lifecycle for courses.

Resolves who the viewer is relative to a course (``ViewerContext``) and owns
every change to an enrollment's status: learner submissions, the join-code
fast path and manager decisions. Manager decisions may move an enrollment
between any two states; each change is appended to the transition log.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from coursegate.models.enums import EnrollmentStatus, TransitionReason
from coursegate.models.persisted import (
    CourseRecord,
    EnrollmentRecord,
    EnrollmentTransitionRecord,
)
from coursegate.models.values import JOIN_CODE_DEFAULT_ANSWER, recognized_answers
from coursegate.repositories.course_repo import (
    CourseNotFoundError,
    CourseRepository,
)
from coursegate.repositories.enrollment_repo import (
    EnrollmentNotFoundError,
    EnrollmentRepository,
)
from coursegate.services.access import (
    Principal,
    ViewerContext,
    is_manager_for,
    require_manager,
    require_principal,
)
from coursegate.services.errors import (
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from coursegate.utils.codes import join_code_matches

logger = logging.getLogger(__name__)

CODE_APPROVED = "APPROVED"
CODE_INVALID = "INVALID"


@dataclass
class EnrollmentOutcome:
    context: ViewerContext
    enrollment: EnrollmentRecord
    code_status: Optional[str] = None


class EnrollmentLifecycle:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.courses = CourseRepository(session)
        self.enrollments = EnrollmentRepository(session)

    # ACCESS -----------------------------------------------------------------
    async def evaluate_access(
        self, course: CourseRecord, principal: Optional[Principal]
    ) -> ViewerContext:
        if principal is None:
            return ViewerContext(course=course)
        enrollment = await self.enrollments.find(principal.id, course.id)
        return ViewerContext(
            course=course,
            principal=principal,
            can_manage=is_manager_for(principal.role, course, principal.id),
            enrollment=enrollment,
        )

    async def resolve(
        self, course_id: int, principal: Optional[Principal]
    ) -> ViewerContext:
        """Load a course and the viewer's standing in it.

        Unpublished courses only exist for their managers.
        """
        try:
            course = await self.courses.get(course_id)
        except CourseNotFoundError:
            raise NotFoundError("Course not found")
        ctx = await self.evaluate_access(course, principal)
        if not course.is_published and not ctx.can_manage:
            raise NotFoundError("Course not found")
        return ctx

    # LEARNER TRANSITIONS ----------------------------------------------------
    def _require_learner(self, ctx: ViewerContext) -> Principal:
        principal = require_principal(ctx.principal)
        if not ctx.course.is_published:
            raise NotFoundError("Course not found")
        if not principal.is_learner:
            raise ForbiddenError("Switch to a student account to enroll")
        return principal

    async def _approve_via_code(
        self, ctx: ViewerContext, answers: Dict[str, str]
    ) -> EnrollmentRecord:
        principal = ctx.principal
        first_question = ctx.course.questions[0].id
        enrollment = await self.enrollments.upsert(
            principal.id,
            ctx.course.id,
            answers,
            reason=TransitionReason.JOIN_CODE.value,
            force_status=EnrollmentStatus.APPROVED.value,
            via_code=True,
            default_answers={first_question: JOIN_CODE_DEFAULT_ANSWER},
        )
        # A lost insert race rolls the session back and expires the course
        await self.session.refresh(ctx.course)
        logger.info(
            "User %s joined course %s with its code", principal.id, ctx.course.id
        )
        return enrollment

    async def submit_enrollment(
        self,
        ctx: ViewerContext,
        answers: Optional[Dict[str, Optional[str]]] = None,
        join_code: Optional[str] = None,
    ) -> EnrollmentOutcome:
        """Apply to a course, or join it outright with the right code.

        A matching code approves immediately. Otherwise the recognized answers
        are stored; a new enrollment starts PENDING and an existing one keeps
        its status.
        """
        principal = self._require_learner(ctx)
        cleaned = recognized_answers(answers, ctx.course.questions)
        code_status = None
        if join_code is not None and join_code.strip():
            if join_code_matches(join_code, ctx.course.join_code):
                code_status = CODE_APPROVED
            else:
                code_status = CODE_INVALID

        if code_status == CODE_APPROVED:
            enrollment = await self._approve_via_code(ctx, cleaned)
        else:
            if not cleaned:
                raise ValidationError("Answer the enrollment questions to apply")
            enrollment = await self.enrollments.upsert(
                principal.id,
                ctx.course.id,
                cleaned,
                reason=TransitionReason.SUBMITTED.value,
            )
            await self.session.refresh(ctx.course)
            logger.info(
                "User %s applied to course %s (status %s)",
                principal.id,
                ctx.course.id,
                enrollment.status,
            )
        ctx.enrollment = enrollment
        return EnrollmentOutcome(ctx, enrollment, code_status)

    async def submit_by_join_code_only(
        self,
        principal: Optional[Principal],
        code: str,
        answers: Optional[Dict[str, Optional[str]]] = None,
    ) -> EnrollmentOutcome:
        principal = require_principal(principal)
        try:
            course = await self.courses.get_by_join_code(code)
        except CourseNotFoundError:
            raise NotFoundError("No course matches that code")
        ctx = await self.evaluate_access(course, principal)
        self._require_learner(ctx)
        cleaned = recognized_answers(answers, course.questions)
        enrollment = await self._approve_via_code(ctx, cleaned)
        ctx.enrollment = enrollment
        return EnrollmentOutcome(ctx, enrollment, CODE_APPROVED)

    # MANAGER TRANSITIONS ----------------------------------------------------
    async def _get_enrollment(
        self, ctx: ViewerContext, enrollment_id: int
    ) -> EnrollmentRecord:
        try:
            return await self.enrollments.get(ctx.course.id, enrollment_id)
        except EnrollmentNotFoundError:
            raise NotFoundError("Enrollment not found")

    async def decide(
        self,
        ctx: ViewerContext,
        enrollment_id: int,
        status: Optional[EnrollmentStatus] = None,
        admin_note: Optional[str] = None,
    ) -> EnrollmentRecord:
        """Set an enrollment's status and/or note; any state may follow any other."""
        require_manager(ctx)
        enrollment = await self._get_enrollment(ctx, enrollment_id)
        if status is None and admin_note is None:
            raise ValidationError("Provide a status or an admin note")
        enrollment = await self.enrollments.set_decision(
            enrollment,
            actor_id=ctx.principal.id,
            reason=TransitionReason.MANAGER.value,
            status=status.value if status is not None else None,
            admin_note=admin_note,
        )
        logger.info(
            "Manager %s set enrollment %s to %s",
            ctx.principal.id,
            enrollment.id,
            enrollment.status,
        )
        if ctx.enrollment is not None and ctx.enrollment.id == enrollment.id:
            ctx.enrollment = enrollment
        return enrollment

    async def regenerate_join_code(self, ctx: ViewerContext) -> str:
        require_manager(ctx)
        code = await self.courses.replace_join_code(ctx.course)
        logger.info("Join code regenerated for course %s", ctx.course.id)
        return code

    async def roster(self, ctx: ViewerContext) -> List[EnrollmentRecord]:
        require_manager(ctx)
        return list(await self.enrollments.list_for_course(ctx.course.id))

    async def history(
        self, ctx: ViewerContext, enrollment_id: int
    ) -> List[EnrollmentTransitionRecord]:
        require_manager(ctx)
        enrollment = await self._get_enrollment(ctx, enrollment_id)
        return await self.enrollments.history(enrollment.id)
