"""
Messaging gate for course channel and chat messages.

Decides who may read or write which kind of message and normalizes drafts
before they reach storage. Free text arrives already moderated upstream.
"""

from typing import List

from coursegate.models.enums import MessageKind, VisibilityTier
from coursegate.models.schemas import MessageCreate, MessageDraft, MessageFilter
from coursegate.models.values import MessageAttachment
from coursegate.services.access import ViewerContext, require_access
from coursegate.services.errors import ValidationError
from coursegate.utils.settings import MAX_MESSAGE_ATTACHMENTS, settings


def clamp_visibility(
    kind: MessageKind, requested: VisibilityTier, can_manage: bool
) -> VisibilityTier:
    """Visibility a message is actually stored with.

    Chat is always ENROLLED. Channel posts may be STAFF-only, but only when a
    manager writes them; anything else collapses to ENROLLED.
    """
    if kind == MessageKind.CHAT:
        return VisibilityTier.ENROLLED
    if requested == VisibilityTier.STAFF and can_manage:
        return VisibilityTier.STAFF
    return VisibilityTier.ENROLLED


def authorize_read(ctx: ViewerContext, kind: MessageKind) -> MessageFilter:
    require_access(ctx)
    if ctx.can_manage:
        visibilities = (VisibilityTier.ENROLLED, VisibilityTier.STAFF)
    else:
        visibilities = (VisibilityTier.ENROLLED,)
    if kind == MessageKind.CHAT:
        return MessageFilter(
            kind=kind,
            visibilities=visibilities,
            limit=settings.chat_message_limit,
            chronological=True,
        )
    return MessageFilter(
        kind=kind,
        visibilities=visibilities,
        limit=settings.channel_message_limit,
        chronological=False,
    )


def _clean_attachments(
    attachments: List[MessageAttachment],
) -> List[MessageAttachment]:
    cleaned = []
    for item in attachments:
        url = item.url.strip()
        if not url:
            continue
        name = item.name.strip() if item.name else None
        cleaned.append(MessageAttachment(url=url, name=name or None))
    return cleaned[:MAX_MESSAGE_ATTACHMENTS]


def authorize_write(
    ctx: ViewerContext, kind: MessageKind, payload: MessageCreate
) -> MessageDraft:
    require_access(ctx)
    content = (payload.content or "").strip()
    attachments = _clean_attachments(payload.attachments)
    if not content and not attachments:
        raise ValidationError("Write a message or attach a file")
    return MessageDraft(
        kind=kind,
        visibility=clamp_visibility(kind, payload.visibility, ctx.can_manage),
        content=content,
        attachments=attachments,
    )
