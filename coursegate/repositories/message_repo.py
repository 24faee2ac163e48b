"""Repository layer for course channel and chat messages."""
from __future__ import annotations
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from coursegate.models.persisted import MessageRecord
from coursegate.models.schemas import MessageDraft, MessageFilter


class MessageRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self, course_id: int, author_id: str, draft: MessageDraft
    ) -> MessageRecord:
        record = MessageRecord(
            course_id=course_id,
            author_id=author_id,
            kind=draft.kind.value,
            visibility=draft.visibility.value,
            content=draft.content,
            attachments=draft.attachments,
        )
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def list(self, course_id: int, flt: MessageFilter) -> List[MessageRecord]:
        """Most recent ``flt.limit`` messages, ordered for display."""
        result = await self.session.execute(
            select(MessageRecord)
            .where(
                MessageRecord.course_id == course_id,
                MessageRecord.kind == flt.kind.value,
                MessageRecord.visibility.in_([v.value for v in flt.visibilities]),
            )
            .order_by(MessageRecord.created_at.desc(), MessageRecord.id.desc())
            .limit(flt.limit)
        )
        rows = list(result.scalars().all())
        if flt.chronological:
            rows.reverse()
        return rows
