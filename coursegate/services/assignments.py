"""
Assignment due-status derivation and past-due summaries.

Everything here is pure: callers pass in the records and the reference time.
"""

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from coursegate.models.enums import DueStatus, SETTLED_SUBMISSION_STATUSES
from coursegate.models.persisted import AssignmentRecord, SubmissionRecord
from coursegate.utils.settings import settings
from coursegate.utils.timeutils import isoformat


def derive_status(
    assignment: AssignmentRecord,
    viewer_submission: Optional[SubmissionRecord],
    now: datetime,
) -> str:
    """Due-status of an assignment for one viewer.

    A submission's own status always wins over the date-derived label.
    """
    if viewer_submission is not None:
        return viewer_submission.status
    due_at = assignment.due_at
    if due_at is None:
        return DueStatus.OPEN.value
    if due_at < now:
        return DueStatus.PAST_DUE.value
    if due_at - now <= timedelta(hours=settings.due_soon_hours):
        return DueStatus.DUE_SOON.value
    return DueStatus.OPEN.value


def _is_past_due(assignment: AssignmentRecord, now: datetime) -> bool:
    return assignment.due_at is not None and assignment.due_at < now


def past_due_for_course(
    assignments: Iterable[AssignmentRecord],
    submissions: Dict[int, List[SubmissionRecord]],
    now: datetime,
) -> List[dict]:
    """Staff digest: past-due assignments with their unsettled submissions."""
    digest = []
    for assignment in assignments:
        if not _is_past_due(assignment, now):
            continue
        rows = submissions.get(assignment.id, [])
        outstanding = sum(
            1 for s in rows if s.status not in SETTLED_SUBMISSION_STATUSES
        )
        digest.append(
            {
                "assignmentId": assignment.id,
                "title": assignment.title,
                "dueAt": isoformat(assignment.due_at),
                "submissions": len(rows),
                "outstanding": outstanding,
            }
        )
    return digest


def past_due_for_viewer(
    assignments: Iterable[AssignmentRecord],
    viewer_submissions: Dict[int, SubmissionRecord],
    now: datetime,
) -> List[dict]:
    """Learner digest: past-due assignments the viewer never submitted."""
    return [
        {
            "assignmentId": assignment.id,
            "title": assignment.title,
            "dueAt": isoformat(assignment.due_at),
        }
        for assignment in assignments
        if _is_past_due(assignment, now) and assignment.id not in viewer_submissions
    ]
