"""Principal and viewer-context types plus the manager capability predicate."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from coursegate.models.enums import (
    ELEVATED_ROLES,
    LEARNER_ROLES,
    MANAGER_ELIGIBLE_ROLES,
    EnrollmentStatus,
    Role,
)
from coursegate.models.persisted import CourseRecord, EnrollmentRecord
from coursegate.services.errors import ForbiddenError, UnauthorizedError


@dataclass(frozen=True)
class Principal:
    """A caller already verified by the upstream gateway."""

    id: str
    role: Role

    @property
    def is_learner(self) -> bool:
        return self.role in LEARNER_ROLES


def is_manager_for(
    role: Optional[Role], course: CourseRecord, principal_id: Optional[str]
) -> bool:
    """True for elevated roles, or the course creator in a manager-eligible role."""
    if role is None or principal_id is None:
        return False
    if role in ELEVATED_ROLES:
        return True
    return role in MANAGER_ELIGIBLE_ROLES and course.creator_id == principal_id


@dataclass
class ViewerContext:
    course: CourseRecord
    principal: Optional[Principal] = None
    can_manage: bool = False
    enrollment: Optional[EnrollmentRecord] = None

    @property
    def enrollment_approved(self) -> bool:
        return (
            self.enrollment is not None
            and self.enrollment.status == EnrollmentStatus.APPROVED.value
        )

    @property
    def has_access(self) -> bool:
        """Managers and approved enrollees share the gated course features."""
        return self.can_manage or self.enrollment_approved

    @property
    def is_learner(self) -> bool:
        return self.principal is not None and self.principal.is_learner

    def to_viewer_state(self) -> dict:
        enrollment = self.enrollment
        return {
            "canManage": self.can_manage,
            "isEnrolled": self.enrollment_approved,
            "enrollmentStatus": enrollment.status if enrollment else None,
            "formAnswers": dict(enrollment.form_answers or {})
            if enrollment
            else None,
            "calendarUnlocked": self.has_access,
        }


def require_principal(principal: Optional[Principal]) -> Principal:
    if principal is None:
        raise UnauthorizedError("Sign in to continue")
    return principal


def require_manager(ctx: ViewerContext) -> None:
    require_principal(ctx.principal)
    if not ctx.can_manage:
        raise ForbiddenError("Only course managers can do that")


def require_access(ctx: ViewerContext) -> None:
    require_principal(ctx.principal)
    if not ctx.has_access:
        raise ForbiddenError("Enroll in this course to continue")
