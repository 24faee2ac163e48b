"""Course channel and chat messages."""
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends

from coursegate.dependencies import get_lifecycle, get_messages, get_principal
from coursegate.models.enums import MessageKind
from coursegate.models.schemas import MessageCreate
from coursegate.repositories.message_repo import MessageRepository
from coursegate.services.access import Principal, ViewerContext
from coursegate.services.enrollment import EnrollmentLifecycle
from coursegate.services.messaging import authorize_read, authorize_write

router = APIRouter(prefix="/courses/{course_id}", tags=["Messages"])


async def _list(
    ctx: ViewerContext, kind: MessageKind, messages: MessageRepository
) -> dict:
    rows = await messages.list(ctx.course.id, authorize_read(ctx, kind))
    return {"success": True, "list": [m.to_dict() for m in rows]}


async def _post(
    ctx: ViewerContext,
    kind: MessageKind,
    payload: MessageCreate,
    messages: MessageRepository,
) -> dict:
    draft = authorize_write(ctx, kind, payload)
    record = await messages.create(ctx.course.id, ctx.principal.id, draft)
    return {"success": True, "message": record.to_dict()}


@router.get("/messages")
async def list_channel(
    course_id: int,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    messages: MessageRepository = Depends(get_messages),
):
    ctx = await lifecycle.resolve(course_id, principal)
    return await _list(ctx, MessageKind.CHANNEL, messages)


@router.post("/messages")
async def post_channel(
    course_id: int,
    payload: MessageCreate,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    messages: MessageRepository = Depends(get_messages),
):
    ctx = await lifecycle.resolve(course_id, principal)
    return await _post(ctx, MessageKind.CHANNEL, payload, messages)


@router.get("/chat")
async def list_chat(
    course_id: int,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    messages: MessageRepository = Depends(get_messages),
):
    ctx = await lifecycle.resolve(course_id, principal)
    return await _list(ctx, MessageKind.CHAT, messages)


@router.post("/chat")
async def post_chat(
    course_id: int,
    payload: MessageCreate,
    principal: Optional[Principal] = Depends(get_principal),
    lifecycle: EnrollmentLifecycle = Depends(get_lifecycle),
    messages: MessageRepository = Depends(get_messages),
):
    ctx = await lifecycle.resolve(course_id, principal)
    return await _post(ctx, MessageKind.CHAT, payload, messages)
