"""Enrollment endpoints: applying, joining by code and manager decisions."""
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends

from coursegate.dependencies import get_assembler, get_lifecycle, get_principal
from coursegate.models.schemas import EnrollmentDecision, EnrollRequest, JoinCodeRequest
from coursegate.services.access import Principal
from coursegate.services.enrollment import (
    CODE_APPROVED,
    CODE_INVALID,
    EnrollmentLifecycle,
    EnrollmentOutcome,
)
from coursegate.services.workspace import CourseWorkspaceAssembler

router = APIRouter(prefix="/courses", tags=["Enrollments"])


def _outcome_message(outcome: EnrollmentOutcome) -> str:
    if outcome.code_status == CODE_APPROVED:
        return "Join code accepted. You're enrolled."
    if outcome.code_status == CODE_INVALID:
        return "That join code didn't match. Your application was saved."
    return "Application submitted"


async def _outcome_response(
    outcome: EnrollmentOutcome, assembler: CourseWorkspaceAssembler
) -> dict:
    workspace = await assembler.assemble(outcome.context)
    return {
        "success": True,
        "message": _outcome_message(outcome),
        "enrollment": outcome.enrollment.to_dict(),
        "codeStatus": outcome.code_status,
        **workspace,
    }


@router.post("/join-code")
async def join_by_code(
    payload: JoinCodeRequest,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    assembler: CourseWorkspaceAssembler = Depends(get_assembler),
):
    outcome = await lifecycle.submit_by_join_code_only(
        principal, payload.code, payload.answers
    )
    return await _outcome_response(outcome, assembler)


@router.post("/{course_id}/enroll")
async def enroll(
    course_id: int,
    payload: EnrollRequest,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    assembler: CourseWorkspaceAssembler = Depends(get_assembler),
):
    ctx = await lifecycle.resolve(course_id, principal)
    outcome = await lifecycle.submit_enrollment(ctx, payload.answers, payload.joinCode)
    return await _outcome_response(outcome, assembler)


@router.get("/{course_id}/enrollments")
async def list_enrollments(
    course_id: int,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
):
    ctx = await lifecycle.resolve(course_id, principal)
    roster = await lifecycle.roster(ctx)
    return {"success": True, "list": [e.to_dict() for e in roster]}


@router.patch("/{course_id}/enrollments/{enrollment_id}")
async def decide_enrollment(
    course_id: int,
    enrollment_id: int,
    payload: EnrollmentDecision,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    assembler: CourseWorkspaceAssembler = Depends(get_assembler),
):
    ctx = await lifecycle.resolve(course_id, principal)
    enrollment = await lifecycle.decide(
        ctx, enrollment_id, status=payload.status, admin_note=payload.adminNote
    )
    workspace = await assembler.assemble(ctx)
    return {
        "success": True,
        "message": "Enrollment updated",
        "enrollment": enrollment.to_dict(),
        **workspace,
    }


@router.get("/{course_id}/enrollments/{enrollment_id}/history")
async def enrollment_history(
    course_id: int,
    enrollment_id: int,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
):
    ctx = await lifecycle.resolve(course_id, principal)
    rows = await lifecycle.history(ctx, enrollment_id)
    return {"success": True, "list": [r.to_dict() for r in rows]}
