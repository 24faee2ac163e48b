"""
Calendar Router

Serves a course schedule as an ICS attachment to managers and approved
enrollees.
"""
from __future__ import annotations
import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from coursegate.dependencies import get_content, get_lifecycle, get_principal
from coursegate.repositories.content_repo import CourseContentRepository
from coursegate.services.access import Principal, require_access
from coursegate.services.calendar import build_calendar
from coursegate.services.enrollment import EnrollmentLifecycle
from coursegate.services.errors import NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/courses/{course_id}", tags=["Calendar"])


def _calendar_filename(title: str, course_id: int) -> str:
    slug = re.sub(r"[^A-Za-z0-9]+", "-", title or "").strip("-").lower()
    return f"{slug or 'course'}-{course_id}.ics"


@router.get("/calendar.ics", summary="Download course schedule")
async def download_calendar(
    course_id: int,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    content: CourseContentRepository = Depends(get_content),
):
    """
    Export the course sessions as ``text/calendar``.

    401 for anonymous callers, 403 without access, 404 when no session has a
    usable start time.
    """
    ctx = await lifecycle.resolve(course_id, principal)
    require_access(ctx)
    sessions = await content.sessions(ctx.course.id)
    body = build_calendar(ctx.course, sessions)
    if body is None:
        raise NotFoundError("No scheduled sessions to export")

    logger.info("Calendar exported for course %s by %s", course_id, principal.id)
    filename = _calendar_filename(ctx.course.title, ctx.course.id)
    return Response(
        content=body,
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
