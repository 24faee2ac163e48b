"""Repository layer for the records a course is built from.

Lessons, sessions, materials, assignments and meeting links are created and
deleted by managers; their bodies are stored as given.
"""
from __future__ import annotations
from typing import Sequence, Type, TypeVar
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, select

from coursegate.models.persisted import (
    AssignmentRecord,
    LessonRecord,
    MaterialRecord,
    MeetingLinkRecord,
    SessionRecord,
    SubmissionRecord,
)

T = TypeVar("T")


class ContentNotFoundError(Exception):
    pass


class CourseContentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _list(self, model, course_id: int, *order_by):
        result = await self.session.execute(
            select(model).where(model.course_id == course_id).order_by(*order_by)
        )
        return result.scalars().all()

    async def get(self, model: Type[T], course_id: int, pk: int) -> T:
        result = await self.session.execute(
            select(model).where(model.id == pk, model.course_id == course_id)
        )
        record = result.scalar_one_or_none()
        if not record:
            raise ContentNotFoundError
        return record

    async def add(self, record: T) -> T:
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def save(self, record: T) -> T:
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def remove(self, model: Type[T], course_id: int, pk: int) -> None:
        record = await self.get(model, course_id, pk)
        if model is AssignmentRecord:
            await self.session.execute(
                delete(SubmissionRecord).where(
                    SubmissionRecord.assignment_id == pk
                )
            )
        await self.session.delete(record)
        await self.session.commit()

    # LISTS ------------------------------------------------------------------
    async def lessons(self, course_id: int) -> Sequence[LessonRecord]:
        return await self._list(
            LessonRecord, course_id, LessonRecord.order_index, LessonRecord.id
        )

    async def sessions(self, course_id: int) -> Sequence[SessionRecord]:
        return await self._list(
            SessionRecord, course_id, SessionRecord.starts_at, SessionRecord.id
        )

    async def materials(self, course_id: int) -> Sequence[MaterialRecord]:
        return await self._list(
            MaterialRecord,
            course_id,
            MaterialRecord.created_at.desc(),
            MaterialRecord.id.desc(),
        )

    async def assignments(self, course_id: int) -> Sequence[AssignmentRecord]:
        # Assignments without a deadline sort last
        return await self._list(
            AssignmentRecord,
            course_id,
            AssignmentRecord.due_at.is_(None),
            AssignmentRecord.due_at,
            AssignmentRecord.id,
        )

    async def meeting_links(self, course_id: int) -> Sequence[MeetingLinkRecord]:
        return await self._list(
            MeetingLinkRecord,
            course_id,
            MeetingLinkRecord.created_at.desc(),
            MeetingLinkRecord.id.desc(),
        )
