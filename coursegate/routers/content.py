"""
Course content router

Manager-only endpoints for the schedule, lessons, materials, assignments and
meeting links of a course. Every write answers with the refreshed workspace.
"""
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends

from coursegate.dependencies import (
    get_assembler,
    get_catalog,
    get_lifecycle,
    get_principal,
)
from coursegate.models.persisted import (
    AssignmentRecord,
    LessonRecord,
    MaterialRecord,
    MeetingLinkRecord,
    SessionRecord,
)
from coursegate.models.schemas import (
    AssignmentCreate,
    AssignmentUpdate,
    LessonCreate,
    MaterialCreate,
    MeetingLinkCreate,
    SessionCreate,
)
from coursegate.services.access import Principal, ViewerContext
from coursegate.services.catalog import CourseCatalog
from coursegate.services.enrollment import EnrollmentLifecycle
from coursegate.services.workspace import CourseWorkspaceAssembler

router = APIRouter(prefix="/courses/{course_id}", tags=["Course content"])


async def _workspace(
    assembler: CourseWorkspaceAssembler, ctx: ViewerContext, message: str
) -> dict:
    return {"success": True, "message": message, **await assembler.assemble(ctx)}


# Sessions -----------------------------------------------------------------


@router.post("/sessions")
async def add_session(
    course_id: int,
    payload: SessionCreate,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    catalog: CourseCatalog = Depends(get_catalog),
    assembler: CourseWorkspaceAssembler = Depends(get_assembler),
):
    ctx = await lifecycle.resolve(course_id, principal)
    await catalog.add_session(ctx, payload)
    return await _workspace(assembler, ctx, "Session scheduled")


@router.delete("/sessions/{session_id}")
async def remove_session(
    course_id: int,
    session_id: int,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    catalog: CourseCatalog = Depends(get_catalog),
    assembler: CourseWorkspaceAssembler = Depends(get_assembler),
):
    ctx = await lifecycle.resolve(course_id, principal)
    await catalog.remove(ctx, SessionRecord, session_id)
    return await _workspace(assembler, ctx, "Session removed")


# Lessons ------------------------------------------------------------------


@router.post("/lessons")
async def add_lesson(
    course_id: int,
    payload: LessonCreate,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    catalog: CourseCatalog = Depends(get_catalog),
    assembler: CourseWorkspaceAssembler = Depends(get_assembler),
):
    ctx = await lifecycle.resolve(course_id, principal)
    await catalog.add_lesson(ctx, payload)
    return await _workspace(assembler, ctx, "Lesson added")


@router.delete("/lessons/{lesson_id}")
async def remove_lesson(
    course_id: int,
    lesson_id: int,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    catalog: CourseCatalog = Depends(get_catalog),
    assembler: CourseWorkspaceAssembler = Depends(get_assembler),
):
    ctx = await lifecycle.resolve(course_id, principal)
    await catalog.remove(ctx, LessonRecord, lesson_id)
    return await _workspace(assembler, ctx, "Lesson removed")


# Materials ----------------------------------------------------------------


@router.post("/materials")
async def add_material(
    course_id: int,
    payload: MaterialCreate,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    catalog: CourseCatalog = Depends(get_catalog),
    assembler: CourseWorkspaceAssembler = Depends(get_assembler),
):
    ctx = await lifecycle.resolve(course_id, principal)
    await catalog.add_material(ctx, payload)
    return await _workspace(assembler, ctx, "Material added")


@router.delete("/materials/{material_id}")
async def remove_material(
    course_id: int,
    material_id: int,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    catalog: CourseCatalog = Depends(get_catalog),
    assembler: CourseWorkspaceAssembler = Depends(get_assembler),
):
    ctx = await lifecycle.resolve(course_id, principal)
    await catalog.remove(ctx, MaterialRecord, material_id)
    return await _workspace(assembler, ctx, "Material removed")


# Assignments --------------------------------------------------------------


@router.post("/assignments")
async def add_assignment(
    course_id: int,
    payload: AssignmentCreate,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    catalog: CourseCatalog = Depends(get_catalog),
    assembler: CourseWorkspaceAssembler = Depends(get_assembler),
):
    ctx = await lifecycle.resolve(course_id, principal)
    await catalog.add_assignment(ctx, payload)
    return await _workspace(assembler, ctx, "Assignment created")


@router.patch("/assignments/{assignment_id}")
async def update_assignment(
    course_id: int,
    assignment_id: int,
    payload: AssignmentUpdate,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    catalog: CourseCatalog = Depends(get_catalog),
    assembler: CourseWorkspaceAssembler = Depends(get_assembler),
):
    ctx = await lifecycle.resolve(course_id, principal)
    await catalog.update_assignment(ctx, assignment_id, payload)
    return await _workspace(assembler, ctx, "Assignment updated")


@router.delete("/assignments/{assignment_id}")
async def remove_assignment(
    course_id: int,
    assignment_id: int,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    catalog: CourseCatalog = Depends(get_catalog),
    assembler: CourseWorkspaceAssembler = Depends(get_assembler),
):
    ctx = await lifecycle.resolve(course_id, principal)
    await catalog.remove(ctx, AssignmentRecord, assignment_id)
    return await _workspace(assembler, ctx, "Assignment removed")


# Meeting links ------------------------------------------------------------


@router.post("/meeting-links")
async def add_meeting_link(
    course_id: int,
    payload: MeetingLinkCreate,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    catalog: CourseCatalog = Depends(get_catalog),
    assembler: CourseWorkspaceAssembler = Depends(get_assembler),
):
    ctx = await lifecycle.resolve(course_id, principal)
    await catalog.add_meeting_link(ctx, payload)
    return await _workspace(assembler, ctx, "Meeting link added")


@router.delete("/meeting-links/{link_id}")
async def remove_meeting_link(
    course_id: int,
    link_id: int,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    catalog: CourseCatalog = Depends(get_catalog),
    assembler: CourseWorkspaceAssembler = Depends(get_assembler),
):
    ctx = await lifecycle.resolve(course_id, principal)
    await catalog.remove(ctx, MeetingLinkRecord, link_id)
    return await _workspace(assembler, ctx, "Meeting link removed")
