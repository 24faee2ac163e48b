"""Assignment submissions: learner upserts and manager review."""
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends

from coursegate.dependencies import (
    get_assembler,
    get_lifecycle,
    get_principal,
    get_submissions,
)
from coursegate.models.schemas import SubmissionCreate, SubmissionReview
from coursegate.services.access import Principal
from coursegate.services.enrollment import EnrollmentLifecycle
from coursegate.services.submissions import SubmissionWorkflow
from coursegate.services.workspace import CourseWorkspaceAssembler

router = APIRouter(
    prefix="/courses/{course_id}/assignments/{assignment_id}/submissions",
    tags=["Submissions"],
)


@router.post("")
async def submit_work(
    course_id: int,
    assignment_id: int,
    payload: SubmissionCreate,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    workflow: SubmissionWorkflow = Depends(get_submissions),
    assembler: CourseWorkspaceAssembler = Depends(get_assembler),
):
    ctx = await lifecycle.resolve(course_id, principal)
    record = await workflow.submit(
        ctx, assignment_id, payload.content, payload.attachmentUrl
    )
    return {
        "success": True,
        "message": "Submission saved",
        "submission": record.to_dict(),
        **await assembler.assemble(ctx),
    }


@router.get("")
async def list_submissions(
    course_id: int,
    assignment_id: int,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    workflow: SubmissionWorkflow = Depends(get_submissions),
):
    ctx = await lifecycle.resolve(course_id, principal)
    rows = await workflow.list(ctx, assignment_id)
    return {"success": True, "list": [r.to_dict() for r in rows]}


@router.patch("/{submission_id}")
async def review_submission(
    course_id: int,
    assignment_id: int,
    submission_id: int,
    payload: SubmissionReview,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    workflow: SubmissionWorkflow = Depends(get_submissions),
):
    ctx = await lifecycle.resolve(course_id, principal)
    record = await workflow.review(
        ctx,
        assignment_id,
        submission_id,
        status=payload.status,
        grade=payload.grade,
        feedback=payload.feedback,
    )
    return {
        "success": True,
        "message": "Submission reviewed",
        "submission": record.to_dict(),
    }
