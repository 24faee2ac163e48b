"""FastAPI dependencies shared by the routers."""
from __future__ import annotations
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from coursegate.db.config import get_session
from coursegate.models.enums import Role
from coursegate.repositories.content_repo import CourseContentRepository
from coursegate.repositories.message_repo import MessageRepository
from coursegate.services.access import Principal
from coursegate.services.catalog import CourseCatalog
from coursegate.services.enrollment import EnrollmentLifecycle
from coursegate.services.errors import ValidationError
from coursegate.services.submissions import SubmissionWorkflow
from coursegate.services.workspace import CourseWorkspaceAssembler


async def get_principal(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Optional[Principal]:
    """Principal forwarded by the authenticating gateway, if any.

    Identity is verified upstream; requests without a user id are anonymous.
    """
    if not x_user_id or not x_user_id.strip():
        return None
    try:
        role = Role((x_user_role or "").strip().upper())
    except ValueError:
        raise ValidationError("Unknown user role")
    return Principal(id=x_user_id.strip(), role=role)


async def get_lifecycle(
    session: AsyncSession = Depends(get_session),
) -> EnrollmentLifecycle:
    return EnrollmentLifecycle(session)


async def get_catalog(
    session: AsyncSession = Depends(get_session),
) -> CourseCatalog:
    return CourseCatalog(session)


async def get_assembler(
    session: AsyncSession = Depends(get_session),
) -> CourseWorkspaceAssembler:
    return CourseWorkspaceAssembler(session)


async def get_submissions(
    session: AsyncSession = Depends(get_session),
) -> SubmissionWorkflow:
    return SubmissionWorkflow(session)


async def get_messages(
    session: AsyncSession = Depends(get_session),
) -> MessageRepository:
    return MessageRepository(session)


async def get_content(
    session: AsyncSession = Depends(get_session),
) -> CourseContentRepository:
    return CourseContentRepository(session)
