"""Enumerations shared by the ORM, the services and the API layer."""

from enum import Enum


class Role(str, Enum):
    STUDENT = "STUDENT"
    TUTOR = "TUTOR"
    CREATOR = "CREATOR"
    RECRUITER = "RECRUITER"
    ADMIN = "ADMIN"


# Roles that manage a course they created
MANAGER_ELIGIBLE_ROLES = frozenset({Role.TUTOR, Role.CREATOR, Role.ADMIN})
# Roles that manage every course
ELEVATED_ROLES = frozenset({Role.ADMIN})
LEARNER_ROLES = frozenset({Role.STUDENT})


class EnrollmentStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class TransitionReason(str, Enum):
    SUBMITTED = "SUBMITTED"
    JOIN_CODE = "JOIN_CODE"
    MANAGER = "MANAGER"


class VisibilityTier(str, Enum):
    PUBLIC = "PUBLIC"
    ENROLLED = "ENROLLED"
    STAFF = "STAFF"


class MessageKind(str, Enum):
    CHANNEL = "CHANNEL"
    CHAT = "CHAT"


class SubmissionStatus(str, Enum):
    SUBMITTED = "SUBMITTED"
    REVIEWED = "REVIEWED"
    NEEDS_REVISION = "NEEDS_REVISION"
    GRADED = "GRADED"
    DONE = "DONE"


# Submissions in these states no longer count as outstanding work
SETTLED_SUBMISSION_STATUSES = frozenset(
    {SubmissionStatus.GRADED.value, SubmissionStatus.DONE.value}
)


class DueStatus(str, Enum):
    OPEN = "OPEN"
    DUE_SOON = "DUE_SOON"
    PAST_DUE = "PAST_DUE"
