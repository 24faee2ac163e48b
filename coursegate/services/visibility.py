"""Visibility tiers for course materials."""

from coursegate.models.enums import VisibilityTier
from coursegate.models.persisted import MaterialRecord
from coursegate.services.access import ViewerContext
from coursegate.utils.timeutils import isoformat


def is_visible(tier: str, can_manage: bool, enrollment_approved: bool) -> bool:
    if tier == VisibilityTier.PUBLIC.value or can_manage:
        return True
    return tier == VisibilityTier.ENROLLED.value and enrollment_approved


def resolve_material(material: MaterialRecord, ctx: ViewerContext) -> dict:
    """Serialize a material for this viewer.

    Locked materials keep their metadata so viewers can see that the content
    exists, but every field that would give access to it is nulled.
    """
    visible = is_visible(
        material.visible_to, ctx.can_manage, ctx.enrollment_approved
    )
    return {
        "id": material.id,
        "title": material.title,
        "description": material.description,
        "coverUrl": material.cover_url,
        "visibility": material.visible_to,
        "createdAt": isoformat(material.created_at),
        "uploaderId": material.uploader_id,
        "locked": not visible,
        "attachmentUrl": material.attachment_url if visible else None,
        "contentUrl": material.content_url if visible else None,
        "contentType": material.content_type if visible else None,
    }
