"""Courses router: catalog listings, the course workspace and course edits."""
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends

from coursegate.dependencies import (
    get_assembler,
    get_catalog,
    get_lifecycle,
    get_principal,
)
from coursegate.models.schemas import CourseCreate, CourseUpdate
from coursegate.services.access import Principal
from coursegate.services.catalog import CourseCatalog
from coursegate.services.enrollment import EnrollmentLifecycle
from coursegate.services.workspace import CourseWorkspaceAssembler

router = APIRouter(prefix="/courses", tags=["Courses"])


# Routes -------------------------------------------------------------------
# Fixed paths are declared before /{course_id} so they are matched first.


@router.post("")
async def create_course(
    payload: CourseCreate,
    principal: Optional[Principal] = Depends(get_principal),
    catalog: CourseCatalog = Depends(get_catalog),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    assembler: CourseWorkspaceAssembler = Depends(get_assembler),
):
    course = await catalog.create_course(principal, payload)
    ctx = await lifecycle.evaluate_access(course, principal)
    workspace = await assembler.assemble(ctx)
    return {"success": True, "message": "Course created", **workspace}


@router.get("")
async def list_courses(
    tag: Optional[str] = None, catalog: CourseCatalog = Depends(get_catalog)
):
    courses = await catalog.list_published(tag)
    return {"success": True, "list": [c.to_summary() for c in courses]}


@router.get("/mine")
async def list_my_courses(
    principal: Optional[Principal] = Depends(get_principal),
    catalog: CourseCatalog = Depends(get_catalog),
):
    courses = await catalog.list_mine(principal)
    return {"success": True, "list": [c.to_summary() for c in courses]}


@router.get("/tags")
async def list_tags(catalog: CourseCatalog = Depends(get_catalog)):
    tags = await catalog.list_tags()
    return {"success": True, "tags": [t.model_dump() for t in tags]}


@router.get("/enrollments/mine")
async def list_my_enrollments(
    principal: Optional[Principal] = Depends(get_principal),
    catalog: CourseCatalog = Depends(get_catalog),
):
    return {"success": True, "list": await catalog.my_enrollments(principal)}


@router.get("/{course_id}")
async def get_course(
    course_id: int,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    assembler: CourseWorkspaceAssembler = Depends(get_assembler),
):
    ctx = await lifecycle.resolve(course_id, principal)
    return {"success": True, **await assembler.assemble(ctx)}


@router.patch("/{course_id}")
async def update_course(
    course_id: int,
    payload: CourseUpdate,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    catalog: CourseCatalog = Depends(get_catalog),
    assembler: CourseWorkspaceAssembler = Depends(get_assembler),
):
    ctx = await lifecycle.resolve(course_id, principal)
    await catalog.update_course(ctx, payload)
    message = "Course updated"
    if payload.regenerateJoinCode:
        await lifecycle.regenerate_join_code(ctx)
        message = "Join code refreshed"
    return {"success": True, "message": message, **await assembler.assemble(ctx)}


@router.delete("/{course_id}")
async def delete_course(
    course_id: int,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    catalog: CourseCatalog = Depends(get_catalog),
):
    ctx = await lifecycle.resolve(course_id, principal)
    await catalog.delete_course(ctx)
    return {"success": True, "message": "Course deleted"}
